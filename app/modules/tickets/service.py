import uuid
import logging
from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import Forbidden, NotFound
from app.modules.teams.models import TeamRole
from app.modules.teams.repository import TeamMemberRepository
from app.modules.tickets.models import Ticket, TicketStatus
from app.modules.tickets.repository import TicketRepository
from app.modules.tickets.schemas import TicketCreate, TicketUpdate

logger = logging.getLogger(__name__)

class TicketService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.tickets = TicketRepository(session)
        self.members = TeamMemberRepository(session)

    async def create_ticket(self, user_id: uuid.UUID, payload: TicketCreate) -> Ticket:
        if not await self.members.has_role(payload.team_id, user_id):
            raise Forbidden("You are not part of this team")
        obj = await self.tickets.create(
            title=payload.title,
            description=payload.description,
            status=payload.status or TicketStatus.OPEN,
            author_id=user_id,
            team_id=payload.team_id,
        )
        await self.session.commit()
        logger.info(f"Ticket {obj.id} created in team {obj.team_id} by {user_id}")
        return obj

    async def get_tickets(self, user_id: uuid.UUID, team_id: uuid.UUID | None = None) -> Sequence[Ticket]:
        allowed = await self.members.team_ids_for_user(user_id)
        if team_id is not None and team_id not in allowed:
            raise Forbidden("Cannot access tickets of this team")
        return await self.tickets.list_for_teams([team_id] if team_id is not None else allowed)

    async def get_ticket(self, user_id: uuid.UUID, ticket_id: uuid.UUID) -> Ticket:
        return await self._visible_ticket(user_id, ticket_id)

    async def update_ticket(self, user_id: uuid.UUID, ticket_id: uuid.UUID, payload: TicketUpdate) -> Ticket:
        ticket = await self._visible_ticket(user_id, ticket_id)
        await self.tickets.update_fields(ticket, **payload.model_dump(exclude_unset=True))
        await self.session.commit()
        return ticket

    async def delete_ticket(self, user_id: uuid.UUID, ticket_id: uuid.UUID) -> dict:
        ticket = await self.tickets.get(ticket_id)
        if not ticket:
            raise NotFound("Ticket not found")
        if not await self.members.has_role(ticket.team_id, user_id, TeamRole.ADMIN):
            raise Forbidden("Only team admin can delete tickets")
        await self.tickets.delete(ticket_id)
        await self.session.commit()
        logger.info(f"Ticket {ticket_id} deleted by {user_id}")
        return {"message": "Ticket deleted successfully"}

    async def _visible_ticket(self, user_id: uuid.UUID, ticket_id: uuid.UUID) -> Ticket:
        ticket = await self.tickets.get(ticket_id)
        if not ticket:
            raise NotFound("Ticket not found")
        if not await self.members.has_role(ticket.team_id, user_id):
            raise Forbidden("Not allowed")
        return ticket
