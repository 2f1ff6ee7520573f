
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from app.db.session import Base
from app.utils.clock import utcnow

class LoginSession(Base):
    __tablename__ = "sessions"
    id = Column(String(64), primary_key=True)
    user_id = Column(String(32), ForeignKey("users.id"), index=True, nullable=False)
    username = Column(String(64), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=False)
