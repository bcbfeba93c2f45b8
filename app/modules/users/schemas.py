import uuid
from datetime import datetime
from typing import Literal
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from app.modules.users.models import UserRole

class UserCreate(BaseModel):
    email: EmailStr
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1)
    avatar: str | None = None

class UserUpdate(BaseModel):
    email: EmailStr | None = None
    username: str | None = Field(default=None, min_length=1, max_length=64)
    password: str | None = Field(default=None, min_length=1)
    avatar: str | None = None

class UserFilter(BaseModel):
    search: str | None = None
    page: int = Field(default=0, ge=0)
    limit: int = Field(default=10, ge=1, le=100)
    sort: Literal["asc", "desc"] = "desc"
    role: UserRole | None = None

class UserPublic(BaseModel):
    """Projection embedded in team memberships."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    username: str
    avatar: str

class UserOut(UserPublic):
    role: UserRole
    created_at: datetime
    updated_at: datetime | None
