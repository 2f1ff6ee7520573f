import threading

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.annotations import service
from app.auth.identity import Identity
from app.db.session import Base
from app.models.annotation import Annotation
from app.models.article import Article

NOTES = [{"title": "n", "content": "c"}]


def _run_threads(target, count):
    errors = []

    def _wrapped(i):
        try:
            target(i)
        except Exception as e:  # surfaced through the assertion below
            errors.append(e)

    threads = [threading.Thread(target=_wrapped, args=(i,)) for i in range(count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert errors == []


def test_concurrent_creates_and_deletes_keep_numbering_gapless(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine, autoflush=False)
    identity = Identity(user_id="u1", username="writer")

    with Session() as db:
        article = Article(title="t", content="c", word_count=1, author_id="u1", author="writer")
        db.add(article)
        db.commit()
        article_id = article.id

    created: dict[int, list[str]] = {}

    def create_many(i):
        with Session() as db:
            created[i] = [
                service.create_annotation(db, article_id, identity, f"t{i}", 0, 1, NOTES).id
                for _ in range(8)
            ]

    _run_threads(create_many, 6)

    def delete_half(i):
        with Session() as db:
            for annotation_id in created[i][::2]:
                service.delete_annotation(db, annotation_id, identity)

    _run_threads(delete_half, 6)

    with Session() as db:
        numbers = sorted(
            n for (n,) in db.query(Annotation.annotation_number).filter(Annotation.article_id == article_id)
        )
    assert numbers == list(range(1, 6 * 4 + 1))
    engine.dispose()
