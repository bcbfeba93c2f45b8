import uuid
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_session
from app.core.security import get_principal, Principal
from app.core.schemas import Message
from app.modules.tickets.schemas import TicketCreate, TicketUpdate, TicketOut
from app.modules.tickets.service import TicketService

router = APIRouter()

def svc(session: AsyncSession = Depends(get_session)) -> TicketService:
    return TicketService(session)

@router.post("", response_model=TicketOut, status_code=201)
async def create_ticket(
    payload: TicketCreate,
    principal: Principal = Depends(get_principal),
    service: TicketService = Depends(svc),
):
    return await service.create_ticket(principal.user_id, payload)

@router.get("", response_model=list[TicketOut])
async def list_tickets(
    team_id: uuid.UUID | None = None,
    principal: Principal = Depends(get_principal),
    service: TicketService = Depends(svc),
):
    return await service.get_tickets(principal.user_id, team_id)

@router.get("/{ticket_id}", response_model=TicketOut)
async def get_ticket(
    ticket_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    service: TicketService = Depends(svc),
):
    return await service.get_ticket(principal.user_id, ticket_id)

@router.patch("/{ticket_id}", response_model=TicketOut)
async def update_ticket(
    ticket_id: uuid.UUID,
    payload: TicketUpdate,
    principal: Principal = Depends(get_principal),
    service: TicketService = Depends(svc),
):
    return await service.update_ticket(principal.user_id, ticket_id, payload)

@router.delete("/{ticket_id}", response_model=Message)
async def delete_ticket(
    ticket_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    service: TicketService = Depends(svc),
):
    return await service.delete_ticket(principal.user_id, ticket_id)
