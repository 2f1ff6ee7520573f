import logging
import secrets
from datetime import timedelta

from jose import JWTError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.identity import ANONYMOUS, Identity
from app.config import settings
from app.errors import AuthError, InternalError, ValidationError
from app.models.login_session import LoginSession
from app.models.user import ROOT_USERNAME, User
from app.utils.clock import utcnow
from app.utils.security import (
    decode_session_token,
    encode_session_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def identity_of(user: User) -> Identity:
    return Identity(
        user_id=user.id,
        username=user.username,
        is_admin=bool(user.is_admin) or user.is_root,
    )


def register_user(db: Session, username: str, password: str) -> User:
    username = (username or "").strip()
    if not username:
        raise ValidationError("用户名不能为空")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"密码至少需要{MIN_PASSWORD_LENGTH}个字符")
    if db.query(User).filter(User.username == username).first():
        raise ValidationError("用户名已存在")

    user = User(
        username=username,
        password_hash=hash_password(password),
        is_admin=username == ROOT_USERNAME,
    )
    db.add(user)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        # lost a race against a concurrent registration of the same name
        if db.query(User).filter(User.username == username).first():
            raise ValidationError("用户名已存在")
        raise InternalError("注册失败")
    db.refresh(user)
    logger.info("Registered user %s (admin=%s)", user.username, user.is_admin)
    return user


def login_user(db: Session, username: str, password: str) -> User:
    user = db.query(User).filter(User.username == (username or "").strip()).first()
    # same error for unknown user and wrong password
    if not user or not verify_password(password or "", user.password_hash):
        logger.info("Failed login for %s", username)
        raise AuthError("用户名或密码错误")
    return user


def _purge_expired(db: Session, now) -> int:
    return (
        db.query(LoginSession)
        .filter(LoginSession.expires_at <= now)
        .delete(synchronize_session=False)
    )


def create_session(db: Session, identity: Identity) -> tuple[str, LoginSession]:
    """Persist a session for ``identity`` and return the cookie token for it."""
    now = utcnow()
    row = LoginSession(
        id=secrets.token_urlsafe(32),
        user_id=identity.user_id,
        username=identity.username,
        is_admin=identity.is_admin,
        created_at=now,
        expires_at=now + timedelta(hours=settings.session_ttl_hours),
    )
    db.add(row)
    try:
        purged = _purge_expired(db, now)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not store session for %s", identity.username)
        raise InternalError("登录失败")
    logger.info("Session opened for %s", identity.username)
    if purged:
        logger.info("Purged %d expired sessions", purged)
    return encode_session_token(row.id, row.user_id, row.expires_at), row


def session_id_from_token(token: str | None) -> str | None:
    if not token:
        return None
    try:
        payload = decode_session_token(token)
    except JWTError:
        return None
    sid = payload.get("sid")
    return sid if isinstance(sid, str) else None


def resolve_session(db: Session, token: str | None) -> Identity:
    """Identity bound to ``token``, or ``ANONYMOUS``. Never raises."""
    sid = session_id_from_token(token)
    if sid is None:
        return ANONYMOUS
    try:
        row = db.get(LoginSession, sid)
    except SQLAlchemyError:
        logger.exception("Session lookup failed")
        db.rollback()
        return ANONYMOUS
    if row is None:
        return ANONYMOUS
    if row.expires_at <= utcnow():
        try:
            db.delete(row)
            db.commit()
        except SQLAlchemyError:
            logger.exception("Could not remove expired session")
            db.rollback()
        return ANONYMOUS
    return Identity(user_id=row.user_id, username=row.username, is_admin=row.is_admin)


def destroy_session(db: Session, token: str | None) -> None:
    sid = session_id_from_token(token)
    if sid is None:
        return
    try:
        deleted = db.query(LoginSession).filter(LoginSession.id == sid).delete()
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not destroy session")
        raise InternalError("退出登录失败")
    if deleted:
        logger.info("Session closed")
