import uuid
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.db import get_session
from app.core.paging import Page
from app.core.schemas import Message
from app.core.security import get_principal, Principal
from app.modules.teams.guards import TeamContext, team_member_context, team_admin_context
from app.modules.teams.schemas import (
    TeamCreate, TeamUpdate, TeamFilter, TeamOut,
    MemberAdd, MemberRoleUpdate, TeamMemberOut
)
from app.modules.teams.service import TeamService

router = APIRouter()

def svc(session: AsyncSession = Depends(get_session)) -> TeamService:
    return TeamService(session)

# ---- Teams ----

@router.post("", response_model=TeamOut, status_code=201)
async def create_team(
    payload: TeamCreate,
    principal: Principal = Depends(get_principal),
    service: TeamService = Depends(svc),
):
    return await service.create(payload, principal.user_id)

@router.get("", response_model=Page[TeamOut])
async def list_teams(
    search: str | None = None,
    page: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    principal: Principal = Depends(get_principal),
    service: TeamService = Depends(svc),
):
    filters = TeamFilter(search=search, page=page, limit=limit)
    return await service.find_all(filters, principal.user_id)

@router.get("/{team_id}", response_model=TeamOut)
async def get_team(
    team_id: uuid.UUID,
    ctx: TeamContext = Depends(team_member_context),
    service: TeamService = Depends(svc),
):
    return await service.find_one(ctx.team.id)

@router.put("/{team_id}", response_model=TeamOut)
async def update_team(
    team_id: uuid.UUID,
    payload: TeamUpdate,
    ctx: TeamContext = Depends(team_admin_context),
    service: TeamService = Depends(svc),
):
    return await service.update(ctx.team.id, payload)

@router.delete("/{team_id}", response_model=Message)
async def delete_team(
    team_id: uuid.UUID,
    ctx: TeamContext = Depends(team_admin_context),
    service: TeamService = Depends(svc),
):
    return await service.delete(ctx.team.id)

# ---- Membership ----

@router.post("/{team_id}/members", response_model=TeamMemberOut, status_code=201)
async def add_member(
    team_id: uuid.UUID,
    payload: MemberAdd,
    ctx: TeamContext = Depends(team_admin_context),
    service: TeamService = Depends(svc),
):
    return await service.add_member(ctx.team.id, payload.user_id, payload.role)

@router.delete("/{team_id}/members/{user_id}", response_model=Message)
async def remove_member(
    team_id: uuid.UUID,
    user_id: uuid.UUID,
    ctx: TeamContext = Depends(team_admin_context),
    service: TeamService = Depends(svc),
):
    return await service.remove_member(ctx.team.id, user_id, ctx.membership.user_id)

@router.patch("/{team_id}/members/{user_id}/role", response_model=TeamMemberOut)
async def update_member_role(
    team_id: uuid.UUID,
    user_id: uuid.UUID,
    payload: MemberRoleUpdate,
    ctx: TeamContext = Depends(team_admin_context),
    service: TeamService = Depends(svc),
):
    return await service.update_member_role(ctx.team.id, user_id, payload.role)

@router.post("/{team_id}/leave", response_model=Message)
async def leave_team(
    team_id: uuid.UUID,
    ctx: TeamContext = Depends(team_member_context),
    service: TeamService = Depends(svc),
):
    return await service.leave(ctx.team.id, ctx.membership.user_id)
