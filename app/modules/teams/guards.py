"""Team authorization predicates.

Each predicate resolves the acting user's membership in a team and either
returns a ``TeamContext`` or raises a typed ``AppError``. Routers receive the
context through ``Depends(team_member_context)`` / ``Depends(team_admin_context)``
and pass it on explicitly.
"""
import uuid
import logging
from dataclasses import dataclass
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_session
from app.core.errors import Unauthenticated, Forbidden, NotFound, MissingParameter
from app.core.security import get_principal, Principal
from app.modules.teams.models import Team, TeamMember, TeamRole
from app.modules.teams.repository import TeamMemberRepository

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class TeamContext:
    membership: TeamMember
    team: Team

    @property
    def is_admin(self) -> bool:
        return self.membership.role == TeamRole.ADMIN

async def authorize_team_member(session: AsyncSession, principal: Principal | None, team_id: uuid.UUID | None) -> TeamContext:
    if principal is None or principal.user_id is None:
        raise Unauthenticated("User not authenticated")
    if team_id is None:
        raise MissingParameter("Team ID not provided")

    membership = await TeamMemberRepository(session).get_with_team(team_id, principal.user_id)
    if membership is None:
        raise NotFound("Team not found or user is not a member")
    return TeamContext(membership=membership, team=membership.team)

async def authorize_team_admin(session: AsyncSession, principal: Principal | None, team_id: uuid.UUID | None) -> TeamContext:
    ctx = await authorize_team_member(session, principal, team_id)
    if not ctx.is_admin:
        logger.info(f"User {principal.user_id} denied admin action on team {team_id}")
        raise Forbidden("Only team admins can perform this action")
    return ctx

# FastAPI dependencies for routes with a ``{team_id}`` path parameter

async def team_member_context(
    team_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(get_session),
) -> TeamContext:
    return await authorize_team_member(session, principal, team_id)

async def team_admin_context(
    team_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(get_session),
) -> TeamContext:
    return await authorize_team_admin(session, principal, team_id)
