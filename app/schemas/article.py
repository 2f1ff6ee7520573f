from datetime import datetime
from app.schemas.base import CamelModel

class ArticleCreate(CamelModel):
    title: str = ""
    content: str = ""
    is_private: bool = True

class ArticleOut(CamelModel):
    id: str
    title: str
    content: str
    word_count: int
    author_id: str
    author: str
    is_private: bool
    created_at: datetime
