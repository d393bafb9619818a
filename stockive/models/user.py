from typing import Optional
from sqlmodel import Field, SQLModel
from .base import TimestampMixin, new_id
import secrets

class User(TimestampMixin, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    username: str = Field(index=True, unique=True)
    email: str = Field(index=True, unique=True)
    hashed_password: str
    api_key: str = Field(default_factory=lambda: secrets.token_urlsafe(32), unique=True, index=True)
    is_active: bool = Field(default=True)
    is_admin: bool = Field(default=False)
    plan: str = Field(default="basic")  # basic, standard, other

class UserSignup(SQLModel):
    username: str
    email: str
    password: str
    plan: str = "basic"
    store_name: Optional[str] = None
