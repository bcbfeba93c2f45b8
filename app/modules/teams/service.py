import uuid
import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import NotFound, Conflict, InvalidOperation
from app.core.paging import Page, offset_for, page_meta
from app.modules.teams.models import Team, TeamMember, TeamRole
from app.modules.teams.repository import TeamRepository, TeamMemberRepository
from app.modules.teams.schemas import TeamCreate, TeamUpdate, TeamFilter, TeamOut
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

class TeamService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.teams = TeamRepository(session)
        self.members = TeamMemberRepository(session)
        self.users = UserRepository(session)

    # ---- Teams ----
    async def create(self, payload: TeamCreate, creator_id: uuid.UUID) -> Team:
        if not await self.users.get(creator_id):
            raise NotFound("User not found")
        try:
            team = await self.teams.create(name=payload.name, icon=payload.icon, description=payload.description)
        except IntegrityError:
            await self.session.rollback()
            raise Conflict("Team name already exists")
        await self.members.create(team.id, creator_id, TeamRole.ADMIN)

        # best effort: unknown ids, duplicates and the creator are skipped
        wanted = [uid for uid in dict.fromkeys(payload.member_ids or []) if uid != creator_id]
        known = await self.users.existing_ids(wanted)
        for uid in wanted:
            if uid in known:
                await self.members.create(team.id, uid, TeamRole.MEMBER)

        await self.session.commit()
        logger.info(f"Team {team.id} '{team.name}' created by {creator_id} with {len(known) + 1} member(s)")
        return await self.find_one(team.id)

    async def find_all(self, filters: TeamFilter, user_id: uuid.UUID) -> Page[TeamOut]:
        teams, total = await self.teams.list_for_member(
            user_id,
            search=filters.search,
            limit=filters.limit,
            offset=offset_for(filters.page, filters.limit),
        )
        return Page[TeamOut](
            data=[TeamOut.model_validate(t) for t in teams],
            meta=page_meta(total, filters.page, filters.limit),
        )

    async def find_one(self, team_id: uuid.UUID) -> Team:
        team = await self.teams.get_hydrated(team_id)
        if not team:
            raise NotFound("Team not found")
        return team

    async def update(self, team_id: uuid.UUID, payload: TeamUpdate) -> Team:
        team = await self.teams.get(team_id)
        if not team:
            raise NotFound("Team not found")
        try:
            await self.teams.update_fields(team, **payload.model_dump(exclude_unset=True))
        except IntegrityError:
            await self.session.rollback()
            raise Conflict("Team name already exists")
        await self.session.commit()
        return await self.find_one(team_id)

    async def delete(self, team_id: uuid.UUID) -> dict:
        team = await self.teams.get(team_id)
        if not team:
            raise NotFound("Team not found")
        await self.teams.delete(team_id)
        await self.session.commit()
        logger.info(f"Team {team_id} deleted")
        return {"message": "Team deleted successfully"}

    # ---- Membership ----
    async def add_member(self, team_id: uuid.UUID, user_id: uuid.UUID, role: TeamRole = TeamRole.MEMBER) -> TeamMember:
        if not await self.teams.get(team_id):
            raise NotFound("Team not found")
        if not await self.users.get(user_id):
            raise NotFound("User not found")
        if await self.members.get(team_id, user_id):
            raise Conflict("User is already a member of this team")
        try:
            await self.members.create(team_id, user_id, role)
        except IntegrityError:
            await self.session.rollback()
            raise Conflict("User is already a member of this team")
        await self.session.commit()
        return await self.members.get_hydrated(team_id, user_id)

    async def remove_member(self, team_id: uuid.UUID, user_id: uuid.UUID, requesting_user_id: uuid.UUID) -> dict:
        await self._delete_membership(team_id, user_id, "User is not a member of this team",
                                      "Cannot remove the last admin. Promote another member to admin first.")
        logger.info(f"User {user_id} removed from team {team_id} by {requesting_user_id}")
        return {"message": "Member removed successfully"}

    async def update_member_role(self, team_id: uuid.UUID, user_id: uuid.UUID, role: TeamRole) -> TeamMember:
        if not await self.teams.lock(team_id):
            raise NotFound("Team not found")
        if not await self.members.get(team_id, user_id):
            raise NotFound("User is not a member of this team")
        changed = await self.members.set_role_keeping_admin(team_id, user_id, role)
        if not changed:
            logger.info(f"Refused demotion of last admin {user_id} on team {team_id}")
            raise InvalidOperation("Cannot demote the last admin. Promote another member to admin first.")
        await self.session.commit()
        return await self.members.get_hydrated(team_id, user_id)

    async def leave(self, team_id: uuid.UUID, user_id: uuid.UUID) -> dict:
        await self._delete_membership(team_id, user_id, "You are not a member of this team",
                                      "Cannot leave as the last admin. Promote another member to admin or delete the team.")
        logger.info(f"User {user_id} left team {team_id}")
        return {"message": "Successfully left the team"}

    async def _delete_membership(self, team_id: uuid.UUID, user_id: uuid.UUID, missing: str, last_admin: str) -> None:
        # the team row lock serializes concurrent removals/demotions on this team
        if not await self.teams.lock(team_id):
            raise NotFound("Team not found")
        member = await self.members.get(team_id, user_id)
        if not member:
            raise NotFound(missing)
        deleted = await self.members.delete_keeping_admin(team_id, user_id)
        if not deleted:
            logger.info(f"Refused removal of last admin {user_id} from team {team_id}")
            raise InvalidOperation(last_admin)
        self.session.expunge(member)
        await self.session.commit()

    # ---- Lookups ----
    async def is_team_admin(self, team_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        return await self.members.has_role(team_id, user_id, TeamRole.ADMIN)

    async def is_team_member(self, team_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        return await self.members.has_role(team_id, user_id)
