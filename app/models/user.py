
from sqlalchemy import Column, String, Boolean, DateTime
from app.db.session import Base
from app.utils.clock import utcnow
from app.utils.ids import new_id

ROOT_USERNAME = "root"

class User(Base):
    __tablename__ = "users"
    id = Column(String(32), primary_key=True, default=new_id)
    username = Column(String(64), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    @property
    def is_root(self) -> bool:
        return self.username == ROOT_USERNAME
