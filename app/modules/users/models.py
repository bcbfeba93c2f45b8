import enum
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Enum
from app.core.base import Base, TimestampedMixin

class UserRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"

class User(Base, TimestampedMixin):
    email: Mapped[str] = mapped_column(String(320), unique=True)
    username: Mapped[str] = mapped_column(String(64), unique=True)
    password: Mapped[str] = mapped_column(String(255))  # passlib hash, never serialized
    avatar: Mapped[str] = mapped_column(String(512), default="")
    role: Mapped[UserRole] = mapped_column(Enum(UserRole, native_enum=False, length=16), default=UserRole.USER)
