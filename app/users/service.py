import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.identity import Identity
from app.errors import ForbiddenError, InternalError, NotFoundError
from app.models.login_session import LoginSession
from app.models.user import User

logger = logging.getLogger(__name__)


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.asc()).all()


def set_admin_flag(db: Session, requester: Identity, user_id: str, is_admin: bool) -> User:
    """Grant or revoke admin rights. Root can never be demoted and nobody
    changes their own flag."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("用户不存在")
    if user.id == requester.user_id:
        raise ForbiddenError("不能修改自己的管理员权限")
    if user.is_root:
        raise ForbiddenError("不能修改 root 用户的管理员权限")

    user.is_admin = is_admin
    # live sessions carry the flag too
    db.query(LoginSession).filter(LoginSession.user_id == user.id).update(
        {LoginSession.is_admin: is_admin}, synchronize_session=False
    )
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not update admin flag of %s", user_id)
        raise InternalError("更新管理员权限失败")
    db.refresh(user)
    logger.info("%s set admin=%s on %s", requester.username, is_admin, user.username)
    return user
