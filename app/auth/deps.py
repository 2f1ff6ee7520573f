
from fastapi import Request, Depends
from sqlalchemy.orm import Session
from app.auth.identity import Identity
from app.auth.service import resolve_session
from app.config import settings
from app.db.session import SessionLocal
from app.errors import AuthRequiredError, ForbiddenError


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_session_token(request: Request) -> str | None:
    auth = request.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip()
    return request.cookies.get(settings.session_cookie_name)

def get_identity(request: Request, db: Session = Depends(get_db)) -> Identity:
    return resolve_session(db, get_session_token(request))

def require_auth(identity: Identity = Depends(get_identity)) -> Identity:
    if not identity.is_authenticated:
        raise AuthRequiredError()
    return identity

def require_admin(identity: Identity = Depends(require_auth)) -> Identity:
    if not identity.is_admin:
        raise ForbiddenError("需要管理员权限")
    return identity
