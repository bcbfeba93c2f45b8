import uuid
from typing import Sequence
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.tickets.models import Ticket

class TicketRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **data) -> Ticket:
        obj = Ticket(**data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, ticket_id: uuid.UUID) -> Ticket | None:
        res = await self.session.execute(select(Ticket).where(Ticket.id == ticket_id))
        return res.scalar_one_or_none()

    async def list_for_teams(self, team_ids: list[uuid.UUID]) -> Sequence[Ticket]:
        if not team_ids:
            return []
        q = select(Ticket).where(Ticket.team_id.in_(team_ids)).order_by(Ticket.created_at.desc())
        res = await self.session.execute(q)
        return res.scalars().all()

    async def update_fields(self, ticket: Ticket, **data) -> Ticket:
        for k, v in data.items():
            if v is None and k in ("title", "status"):
                continue
            setattr(ticket, k, v)
        await self.session.flush()
        return ticket

    async def delete(self, ticket_id: uuid.UUID) -> None:
        await self.session.execute(delete(Ticket).where(Ticket.id == ticket_id))

    async def delete_for_author(self, author_id: uuid.UUID) -> None:
        await self.session.execute(delete(Ticket).where(Ticket.author_id == author_id))
