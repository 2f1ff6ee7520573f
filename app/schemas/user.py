from datetime import datetime
from app.schemas.base import CamelModel

class UserOut(CamelModel):
    id: str
    username: str
    is_admin: bool
    created_at: datetime

class AdminFlagIn(CamelModel):
    is_admin: bool
