
from sqlalchemy import Column, String, Text, Integer, DateTime, JSON
from app.db.session import Base
from app.utils.clock import utcnow
from app.utils.ids import new_id

class Annotation(Base):
    __tablename__ = "annotations"
    id = Column(String(32), primary_key=True, default=new_id)
    article_id = Column(String(32), index=True, nullable=False)
    user_id = Column(String(32), index=True, nullable=False)
    username = Column(String(64), nullable=False)
    annotation_number = Column(Integer, nullable=False)
    selected_text = Column(Text, nullable=False)
    start_offset = Column(Integer, nullable=False)
    end_offset = Column(Integer, nullable=False)
    notes = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)
