import logging
from pathlib import PurePath

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.annotations.locks import article_locks
from app.auth.identity import Identity
from app.errors import ForbiddenError, InternalError, NotFoundError, ValidationError
from app.models.annotation import Annotation
from app.models.article import Article

logger = logging.getLogger(__name__)

UPLOAD_EXTENSIONS = (".txt", ".md")


def count_words(content: str) -> int:
    return len(content.split())


def title_from_filename(filename: str) -> str:
    return PurePath(filename).stem


def _commit(db: Session, failure: str):
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(failure)
        raise InternalError(failure)


def list_articles(db: Session, viewer: Identity) -> list[Article]:
    """Public articles plus the viewer's own private ones, newest first."""
    q = db.query(Article)
    if viewer.is_authenticated:
        q = q.filter(or_(Article.is_private.is_(False), Article.author_id == viewer.user_id))
    else:
        q = q.filter(Article.is_private.is_(False))
    return q.order_by(Article.created_at.desc()).all()


def list_all_articles(db: Session) -> list[Article]:
    return db.query(Article).order_by(Article.created_at.desc()).all()


def create_article(
    db: Session,
    author: Identity,
    title: str,
    content: str,
    requested_private: bool = True,
) -> Article:
    title = (title or "").strip()
    content = (content or "").strip()
    if not title:
        raise ValidationError("标题不能为空")
    if not content:
        raise ValidationError("内容不能为空")

    article = Article(
        title=title,
        content=content,
        word_count=count_words(content),
        author_id=author.user_id,
        author=author.username,
        # only admins may publish directly
        is_private=True if not author.is_admin else bool(requested_private),
    )
    db.add(article)
    _commit(db, "保存文章失败")
    db.refresh(article)
    logger.info("Article %s created by %s (private=%s)", article.id, author.username, article.is_private)
    return article


def create_article_from_upload(
    db: Session,
    author: Identity,
    filename: str,
    text: str,
    title: str | None = None,
    requested_private: bool = True,
) -> Article:
    if not (title or "").strip():
        title = title_from_filename(filename)
    return create_article(db, author, title, text, requested_private)


def get_article(db: Session, article_id: str, viewer: Identity) -> Article:
    article = db.get(Article, article_id)
    if article is None:
        raise NotFoundError("文章不存在")
    if article.is_private and not viewer.owns(article.author_id):
        raise ForbiddenError("这是一篇私有文章")
    return article


def _owned_article(db: Session, article_id: str, requester: Identity) -> Article:
    article = db.get(Article, article_id)
    if article is None:
        raise NotFoundError("文章不存在")
    if not requester.owns(article.author_id):
        raise ForbiddenError("只有作者可以操作这篇文章")
    return article


def delete_article(db: Session, article_id: str, requester: Identity) -> None:
    article = _owned_article(db, article_id, requester)
    db.delete(article)
    _commit(db, "删除文章失败")
    logger.info("Article %s deleted by %s", article_id, requester.username)

    # the article is gone either way; orphaned annotations are only logged
    try:
        with article_locks.hold(article_id):
            removed = db.query(Annotation).filter(Annotation.article_id == article_id).delete()
            db.commit()
        logger.info("Removed %d annotations of article %s", removed, article_id)
    except SQLAlchemyError:
        db.rollback()
        logger.warning("Could not remove annotations of deleted article %s", article_id, exc_info=True)


def _publish(db: Session, article: Article, requester: Identity) -> Article:
    if not article.is_private:
        raise ValidationError("文章已经是公开的")
    article.is_private = False
    _commit(db, "发布文章失败")
    db.refresh(article)
    logger.info("Article %s published by %s", article.id, requester.username)
    return article


def publish_article(db: Session, article_id: str, requester: Identity) -> Article:
    return _publish(db, _owned_article(db, article_id, requester), requester)


def admin_publish_article(db: Session, article_id: str, admin: Identity) -> Article:
    article = db.get(Article, article_id)
    if article is None:
        raise NotFoundError("文章不存在")
    return _publish(db, article, admin)
