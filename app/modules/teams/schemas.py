import uuid
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from app.modules.teams.models import TeamRole
from app.modules.users.schemas import UserPublic

class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    icon: str | None = None
    description: str | None = None
    member_ids: list[uuid.UUID] | None = Field(default=None, alias="memberIds")

    model_config = ConfigDict(populate_by_name=True)

class TeamUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    icon: str | None = None
    description: str | None = None

class TeamFilter(BaseModel):
    search: str | None = None
    page: int = Field(default=0, ge=0)
    limit: int = Field(default=10, ge=1, le=100)

class MemberAdd(BaseModel):
    user_id: uuid.UUID = Field(..., alias="userId")
    role: TeamRole = TeamRole.MEMBER

    model_config = ConfigDict(populate_by_name=True)

class MemberRoleUpdate(BaseModel):
    role: TeamRole

class TeamMemberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    team_id: uuid.UUID
    user_id: uuid.UUID
    role: TeamRole
    created_at: datetime
    user: UserPublic

class TeamOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    icon: str | None
    description: str | None
    created_at: datetime
    members: list[TeamMemberOut] = []
