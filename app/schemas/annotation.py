from datetime import datetime
from app.schemas.base import CamelModel

class NoteItem(CamelModel):
    title: str = ""
    content: str = ""

class AnnotationCreate(CamelModel):
    selected_text: str = ""
    start_offset: int = 0
    end_offset: int = 0
    notes: list[NoteItem] = []

class AnnotationUpdate(CamelModel):
    notes: list[NoteItem] = []

class AnnotationOut(CamelModel):
    id: str
    article_id: str
    user_id: str
    username: str
    annotation_number: int
    selected_text: str
    start_offset: int
    end_offset: int
    notes: list[NoteItem]
    created_at: datetime
    updated_at: datetime
    is_owner: bool = False
