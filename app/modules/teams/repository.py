import uuid
from typing import Sequence
from sqlalchemy import select, delete, update, func, or_, exists
from sqlalchemy.orm import aliased, selectinload
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.teams.models import Team, TeamMember, TeamRole
from app.modules.tickets.models import Ticket

def _hydrated():
    return selectinload(Team.members).selectinload(TeamMember.user)

def _other_admins(team_id: uuid.UUID, user_id: uuid.UUID):
    # ADMIN rows on the team other than the target row
    others = aliased(TeamMember)
    return (
        select(func.count())
        .select_from(others)
        .where(others.team_id == team_id, others.user_id != user_id, others.role == TeamRole.ADMIN)
        .scalar_subquery()
    )

class TeamRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **data) -> Team:
        obj = Team(**data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, team_id: uuid.UUID) -> Team | None:
        res = await self.session.execute(select(Team).where(Team.id == team_id))
        return res.scalar_one_or_none()

    async def get_hydrated(self, team_id: uuid.UUID) -> Team | None:
        q = (
            select(Team)
            .where(Team.id == team_id)
            .options(_hydrated())
            .execution_options(populate_existing=True)
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def lock(self, team_id: uuid.UUID) -> Team | None:
        """Row-lock the team so membership mutations on it are serialized."""
        res = await self.session.execute(select(Team).where(Team.id == team_id).with_for_update())
        return res.scalar_one_or_none()

    async def lock_many(self, team_ids: list[uuid.UUID]) -> Sequence[Team]:
        # fixed id order so concurrent callers take the locks in the same sequence
        if not team_ids:
            return []
        q = select(Team).where(Team.id.in_(team_ids)).order_by(Team.id).with_for_update()
        res = await self.session.execute(q)
        return res.scalars().all()

    async def list_for_member(self, user_id: uuid.UUID, *, search: str | None = None, limit: int = 10, offset: int = 0) -> tuple[Sequence[Team], int]:
        conditions = [
            exists().where(TeamMember.team_id == Team.id, TeamMember.user_id == user_id),
        ]
        if search:
            conditions.append(or_(
                Team.name.contains(search, autoescape=True),
                Team.description.contains(search, autoescape=True),
            ))
        q = (
            select(Team)
            .where(*conditions)
            .options(_hydrated())
            .order_by(Team.created_at.desc())
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        res = await self.session.execute(q)
        total = await self.session.scalar(select(func.count()).select_from(Team).where(*conditions))
        return res.scalars().all(), total or 0

    async def update_fields(self, team: Team, **data) -> Team:
        # an explicit None clears optional columns; name is never nulled
        for k, v in data.items():
            if v is None and k == "name":
                continue
            setattr(team, k, v)
        await self.session.flush()
        return team

    async def delete(self, team_id: uuid.UUID) -> None:
        await self.session.execute(delete(Ticket).where(Ticket.team_id == team_id))
        await self.session.execute(delete(TeamMember).where(TeamMember.team_id == team_id))
        await self.session.execute(delete(Team).where(Team.id == team_id))

class TeamMemberRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, team_id: uuid.UUID, user_id: uuid.UUID, role: TeamRole = TeamRole.MEMBER) -> TeamMember:
        obj = TeamMember(team_id=team_id, user_id=user_id, role=role)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, team_id: uuid.UUID, user_id: uuid.UUID) -> TeamMember | None:
        q = select(TeamMember).where(TeamMember.team_id == team_id, TeamMember.user_id == user_id)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def get_with_team(self, team_id: uuid.UUID, user_id: uuid.UUID) -> TeamMember | None:
        q = (
            select(TeamMember)
            .where(TeamMember.team_id == team_id, TeamMember.user_id == user_id)
            .options(selectinload(TeamMember.team))
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def get_hydrated(self, team_id: uuid.UUID, user_id: uuid.UUID) -> TeamMember | None:
        q = (
            select(TeamMember)
            .where(TeamMember.team_id == team_id, TeamMember.user_id == user_id)
            .options(selectinload(TeamMember.user))
            .execution_options(populate_existing=True)
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def team_ids_for_user(self, user_id: uuid.UUID) -> list[uuid.UUID]:
        res = await self.session.execute(select(TeamMember.team_id).where(TeamMember.user_id == user_id))
        return list(res.scalars().all())

    async def count_admins(self, team_id: uuid.UUID) -> int:
        q = select(func.count()).select_from(TeamMember).where(
            TeamMember.team_id == team_id, TeamMember.role == TeamRole.ADMIN
        )
        return (await self.session.scalar(q)) or 0

    async def has_role(self, team_id: uuid.UUID, user_id: uuid.UUID, role: TeamRole | None = None) -> bool:
        conditions = [TeamMember.team_id == team_id, TeamMember.user_id == user_id]
        if role:
            conditions.append(TeamMember.role == role)
        return bool(await self.session.scalar(select(exists().where(*conditions))))

    async def delete_keeping_admin(self, team_id: uuid.UUID, user_id: uuid.UUID) -> int:
        """Delete one membership unless it is the team's last ADMIN row. Returns rows deleted."""
        stmt = (
            delete(TeamMember)
            .where(
                TeamMember.team_id == team_id,
                TeamMember.user_id == user_id,
                or_(TeamMember.role != TeamRole.ADMIN, _other_admins(team_id, user_id) > 0),
            )
            .execution_options(synchronize_session=False)
        )
        res = await self.session.execute(stmt)
        return res.rowcount

    async def set_role_keeping_admin(self, team_id: uuid.UUID, user_id: uuid.UUID, role: TeamRole) -> int:
        """Change a member's role; a demotion only applies while another ADMIN remains."""
        conditions = [TeamMember.team_id == team_id, TeamMember.user_id == user_id]
        if role != TeamRole.ADMIN:
            conditions.append(or_(TeamMember.role != TeamRole.ADMIN, _other_admins(team_id, user_id) > 0))
        stmt = (
            update(TeamMember)
            .where(*conditions)
            .values(role=role)
            .execution_options(synchronize_session=False)
        )
        res = await self.session.execute(stmt)
        return res.rowcount

    async def sole_admin_team_ids(self, user_id: uuid.UUID) -> list[uuid.UUID]:
        """Teams where the user is the only ADMIN while other members remain."""
        others = aliased(TeamMember)
        other_admins = (
            select(func.count()).select_from(others)
            .where(others.team_id == TeamMember.team_id, others.user_id != user_id, others.role == TeamRole.ADMIN)
            .correlate(TeamMember)
            .scalar_subquery()
        )
        other_members = (
            select(func.count()).select_from(others)
            .where(others.team_id == TeamMember.team_id, others.user_id != user_id)
            .correlate(TeamMember)
            .scalar_subquery()
        )
        q = select(TeamMember.team_id).where(
            TeamMember.user_id == user_id,
            TeamMember.role == TeamRole.ADMIN,
            other_admins == 0,
            other_members > 0,
        )
        res = await self.session.execute(q)
        return list(res.scalars().all())

    async def solo_team_ids(self, user_id: uuid.UUID) -> list[uuid.UUID]:
        """Teams whose only member is the user."""
        others = aliased(TeamMember)
        other_members = (
            select(func.count()).select_from(others)
            .where(others.team_id == TeamMember.team_id, others.user_id != user_id)
            .correlate(TeamMember)
            .scalar_subquery()
        )
        q = select(TeamMember.team_id).where(TeamMember.user_id == user_id, other_members == 0)
        res = await self.session.execute(q)
        return list(res.scalars().all())
