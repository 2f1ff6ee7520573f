
from app.schemas.base import CamelModel

class RegisterIn(CamelModel):
    username: str = ""
    password: str = ""

class LoginIn(CamelModel):
    username: str = ""
    password: str = ""

class RegisterOut(CamelModel):
    username: str
    user_id: str

class IdentityOut(CamelModel):
    username: str
    user_id: str
    is_admin: bool
