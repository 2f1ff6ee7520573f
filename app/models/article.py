
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime
from app.db.session import Base
from app.utils.clock import utcnow
from app.utils.ids import new_id

class Article(Base):
    __tablename__ = "articles"
    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    word_count = Column(Integer, nullable=False, default=0)
    # author is referenced by id only, the username is a snapshot
    author_id = Column(String(32), index=True, nullable=False)
    author = Column(String(64), nullable=False)
    is_private = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
