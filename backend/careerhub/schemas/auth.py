from pydantic import BaseModel
from enum import Enum
from typing import Optional


class Role(str, Enum):
    ADMIN = "admin"
    COUNSELOR = "counselor"


class RequiredRole(str, Enum):
    ANY = "any"
    ADMIN = "admin"
    COUNSELOR = "counselor"


class Principal(BaseModel):
    """The signed-in identity. Never carries a password."""

    id: str
    name: str
    email: str
    role: Role
    avatar: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str
    role: Optional[Role] = None
    remember_me: bool = False


class LoginResponse(BaseModel):
    success: bool
    message: str
    user: Optional[Principal] = None
