import enum
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Text, ForeignKey, Enum, TIMESTAMP, text
from app.core.base import Base, TimestampedMixin, _utcnow
from app.modules.users.models import User

class TeamRole(str, enum.Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"

class Team(Base, TimestampedMixin):
    name: Mapped[str] = mapped_column(String(120), unique=True)
    icon: Mapped[str | None] = mapped_column(String(512), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    members: Mapped[list["TeamMember"]] = relationship(
        back_populates="team", order_by="TeamMember.created_at", passive_deletes=True
    )

class TeamMember(Base):
    __tablename__ = "teammember"

    # composite identity: one row per (team, user)
    team_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("team.id", ondelete="CASCADE"), primary_key=True)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), primary_key=True)
    role: Mapped[TeamRole] = mapped_column(Enum(TeamRole, native_enum=False, length=16), default=TeamRole.MEMBER)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, server_default=text("CURRENT_TIMESTAMP")
    )

    team: Mapped[Team] = relationship(back_populates="members")
    user: Mapped[User] = relationship()
