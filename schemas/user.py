from pydantic import BaseModel, ConfigDict, EmailStr
from datetime import datetime
from typing import List, Optional
from .role import RoleRead


class UserCreate(BaseModel):
    username: str
    email: EmailStr
    password: str


class UserRead(BaseModel):
    id: int
    username: str
    email: EmailStr
    is_active: bool = True
    created_at: Optional[datetime] = None
    roles: List[RoleRead] = []

    model_config = ConfigDict(from_attributes=True)


class UserLogin(BaseModel):
    username: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str
