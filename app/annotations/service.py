import logging
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.annotations.locks import article_locks
from app.articles.service import get_article
from app.auth.identity import Identity
from app.errors import ForbiddenError, InternalError, NotFoundError, ValidationError
from app.models.annotation import Annotation
from app.models.article import Article
from app.utils.clock import utcnow

logger = logging.getLogger(__name__)


def _clean_notes(notes: Iterable) -> list[dict]:
    cleaned = []
    for note in notes or []:
        if isinstance(note, dict):
            title, content = note.get("title", ""), note.get("content", "")
        else:
            title, content = note.title, note.content
        title, content = (title or "").strip(), (content or "").strip()
        if not title and not content:
            raise ValidationError("笔记标题和内容不能同时为空")
        cleaned.append({"title": title, "content": content})
    if not cleaned:
        raise ValidationError("笔记不能为空")
    return cleaned


def _rollback_and_raise(db: Session, failure: str):
    db.rollback()
    logger.exception(failure)
    raise InternalError(failure)


def list_annotations(db: Session, article_id: str, viewer: Identity) -> list[tuple[Annotation, bool]]:
    """Annotations of an article in number order, paired with an ``is_owner`` flag.

    The viewer must be able to see the article itself.
    """
    get_article(db, article_id, viewer)
    rows = (
        db.query(Annotation)
        .filter(Annotation.article_id == article_id)
        .order_by(Annotation.annotation_number.asc())
        .all()
    )
    return [(a, viewer.owns(a.user_id)) for a in rows]


def create_annotation(
    db: Session,
    article_id: str,
    author: Identity,
    selected_text: str,
    start_offset: int,
    end_offset: int,
    notes: Iterable,
) -> Annotation:
    if not (selected_text or "").strip():
        raise ValidationError("选中的文本不能为空")
    if start_offset < 0 or end_offset < start_offset:
        raise ValidationError("选区位置无效")
    cleaned = _clean_notes(notes)
    get_article(db, article_id, author)

    with article_locks.hold(article_id):
        # the article may have been deleted while we waited
        if db.get(Article, article_id, populate_existing=True) is None:
            raise NotFoundError("文章不存在")
        current = (
            db.query(func.max(Annotation.annotation_number))
            .filter(Annotation.article_id == article_id)
            .scalar()
        )
        annotation = Annotation(
            article_id=article_id,
            user_id=author.user_id,
            username=author.username,
            annotation_number=(current or 0) + 1,
            selected_text=selected_text,
            start_offset=start_offset,
            end_offset=end_offset,
            notes=cleaned,
        )
        db.add(annotation)
        try:
            db.commit()
        except SQLAlchemyError:
            _rollback_and_raise(db, "保存批注失败")
    db.refresh(annotation)
    logger.info(
        "Annotation #%d on article %s created by %s",
        annotation.annotation_number, article_id, author.username,
    )
    return annotation


def _owned_annotation(db: Session, annotation_id: str, requester: Identity) -> Annotation:
    annotation = db.get(Annotation, annotation_id)
    if annotation is None:
        raise NotFoundError("批注不存在")
    if not requester.owns(annotation.user_id):
        raise ForbiddenError("只能修改自己的批注")
    return annotation


def update_annotation(db: Session, annotation_id: str, requester: Identity, notes: Iterable) -> Annotation:
    annotation = _owned_annotation(db, annotation_id, requester)
    annotation.notes = _clean_notes(notes)
    annotation.updated_at = utcnow()
    try:
        db.commit()
    except SQLAlchemyError:
        _rollback_and_raise(db, "更新批注失败")
    db.refresh(annotation)
    return annotation


def delete_annotation(db: Session, annotation_id: str, requester: Identity) -> int:
    """Delete an annotation and close the gap it leaves in the numbering.

    Returns how many annotations were renumbered.
    """
    annotation = _owned_annotation(db, annotation_id, requester)
    article_id = annotation.article_id

    with article_locks.hold(article_id):
        # re-read under the lock, a concurrent delete may have shifted it
        annotation = db.get(Annotation, annotation_id, populate_existing=True)
        if annotation is None:
            raise NotFoundError("批注不存在")
        number = annotation.annotation_number
        db.delete(annotation)
        db.flush()
        later = (
            db.query(Annotation)
            .filter(
                Annotation.article_id == article_id,
                Annotation.annotation_number > number,
            )
            .order_by(Annotation.annotation_number.asc())
            .all()
        )
        for other in later:
            other.annotation_number -= 1
        try:
            db.commit()
        except SQLAlchemyError:
            _rollback_and_raise(db, "删除批注失败")

    logger.info(
        "Annotation #%d on article %s deleted by %s, %d renumbered",
        number, article_id, requester.username, len(later),
    )
    return len(later)
