
from passlib.context import CryptContext
from datetime import datetime
from jose import jwt
from app.config import settings

ALGORITHM = "HS256"

pwd_context = CryptContext(
    schemes=["bcrypt_sha256", "bcrypt"],
    deprecated="auto",
    bcrypt_sha256__rounds=settings.password_hash_rounds,
    bcrypt__rounds=settings.password_hash_rounds,
)

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)

def encode_session_token(session_id: str, user_id: str, expires_at: datetime) -> str:
    to_encode = {"sid": session_id, "sub": user_id, "exp": expires_at}
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)

def decode_session_token(token: str) -> dict:
    """Raises ``JWTError`` for tampered, malformed or expired tokens."""
    return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
