import uuid
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from app.modules.tickets.models import TicketStatus

class TicketCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    status: TicketStatus | None = None
    team_id: uuid.UUID = Field(..., alias="teamId")

    model_config = ConfigDict(populate_by_name=True)

class TicketUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    status: TicketStatus | None = None

class TicketOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    description: str | None
    status: TicketStatus
    author_id: uuid.UUID
    team_id: uuid.UUID
    created_at: datetime
    updated_at: datetime | None
