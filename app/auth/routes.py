
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session
from app.auth.deps import get_db, get_session_token, require_auth
from app.auth.identity import Identity
from app.auth.service import (
    create_session,
    destroy_session,
    identity_of,
    login_user,
    register_user,
)
from app.config import settings
from app.schemas.auth import IdentityOut, LoginIn, RegisterIn, RegisterOut

router = APIRouter(prefix="/api", tags=["auth"])

def set_session_cookie(response: Response, token: str):
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
        path="/",
        max_age=60 * 60 * settings.session_ttl_hours,
    )

def _identity_out(identity: Identity) -> IdentityOut:
    return IdentityOut(
        username=identity.username,
        user_id=identity.user_id,
        is_admin=identity.is_admin,
    )

@router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
def register(body: RegisterIn, response: Response, db: Session = Depends(get_db)):
    user = register_user(db, body.username, body.password)
    token, _ = create_session(db, identity_of(user))
    set_session_cookie(response, token)
    return RegisterOut(username=user.username, user_id=user.id)

@router.post("/login", response_model=IdentityOut)
def login(body: LoginIn, response: Response, db: Session = Depends(get_db)):
    identity = identity_of(login_user(db, body.username, body.password))
    token, _ = create_session(db, identity)
    set_session_cookie(response, token)
    return _identity_out(identity)

@router.post("/logout")
def logout(request: Request, response: Response, db: Session = Depends(get_db)):
    destroy_session(db, get_session_token(request))
    response.delete_cookie(settings.session_cookie_name, path="/")
    return {"ok": True}

@router.get("/current-user", response_model=IdentityOut)
def current_user(identity: Identity = Depends(require_auth)):
    return _identity_out(identity)
