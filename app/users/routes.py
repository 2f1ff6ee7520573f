from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.deps import get_db, require_admin
from app.auth.identity import Identity
from app.errors import ForbiddenError
from app.models.user import ROOT_USERNAME
from app.schemas.user import AdminFlagIn, UserOut
from app.users import service

router = APIRouter(prefix="/api/users", tags=["users"])


def require_root(identity: Identity = Depends(require_admin)) -> Identity:
    if identity.username != ROOT_USERNAME:
        raise ForbiddenError("只有 root 用户可以设置管理员")
    return identity


@router.get("", response_model=list[UserOut])
def get_all_users(db: Session = Depends(get_db), admin: Identity = Depends(require_admin)):
    return service.list_users(db)


@router.patch("/{user_id}/admin", response_model=UserOut)
def set_admin(
    user_id: str,
    body: AdminFlagIn,
    db: Session = Depends(get_db),
    root: Identity = Depends(require_root),
):
    return service.set_admin_flag(db, root, user_id, body.is_admin)
