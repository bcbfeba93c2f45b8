import uuid
import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import NotFound, Conflict, Forbidden, InvalidOperation
from app.core.paging import Page, offset_for, page_meta
from app.core.security import hash_password
from app.modules.teams.repository import TeamRepository, TeamMemberRepository
from app.modules.tickets.repository import TicketRepository
from app.modules.users.models import User, UserRole
from app.modules.users.repository import UserRepository
from app.modules.users.schemas import UserCreate, UserUpdate, UserFilter, UserOut

logger = logging.getLogger(__name__)

LAST_ADMIN_MESSAGE = "User is the last admin of a team with other members. Promote another member to admin first."

class UserService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = UserRepository(session)
        self.teams = TeamRepository(session)
        self.members = TeamMemberRepository(session)
        self.tickets = TicketRepository(session)

    async def create(self, payload: UserCreate) -> User:
        try:
            obj = await self.repo.create(
                email=payload.email,
                username=payload.username,
                password=hash_password(payload.password),
                avatar=payload.avatar or "",
            )
        except IntegrityError:
            await self.session.rollback()
            raise Conflict("Email or username already in use")
        await self.session.commit()
        logger.info(f"User {obj.id} created")
        return obj

    async def find_all(self, filters: UserFilter) -> Page[UserOut]:
        users, total = await self.repo.list(
            search=filters.search,
            role=filters.role,
            sort=filters.sort,
            limit=filters.limit,
            offset=offset_for(filters.page, filters.limit),
        )
        return Page[UserOut](
            data=[UserOut.model_validate(u) for u in users],
            meta=page_meta(total, filters.page, filters.limit),
        )

    async def find_user_by_id(self, user_id: uuid.UUID) -> User:
        obj = await self.repo.get(user_id)
        if not obj:
            raise NotFound("User not found")
        return obj

    async def find_user_by_email(self, email: str) -> User:
        obj = await self.repo.get_by_email(email)
        if not obj:
            raise NotFound("User not found")
        return obj

    async def find_user_by_username(self, username: str) -> User:
        obj = await self.repo.get_by_username(username)
        if not obj:
            raise NotFound("User not found")
        return obj

    async def update_user(self, actor_id: uuid.UUID, user_id: uuid.UUID, payload: UserUpdate) -> User:
        await self._ensure_can_modify(actor_id, user_id)
        data = payload.model_dump(exclude_unset=True)
        if data.get("password"):
            data["password"] = hash_password(data["password"])
        try:
            obj = await self.repo.update_fields(user_id, **data)
        except IntegrityError:
            await self.session.rollback()
            raise Conflict("Email or username already in use")
        if not obj:
            raise NotFound("User not found")
        await self.session.commit()
        return obj

    async def delete_user(self, actor_id: uuid.UUID, user_id: uuid.UUID) -> dict:
        await self._ensure_can_modify(actor_id, user_id)
        if not await self.repo.get(user_id):
            raise NotFound("User not found")

        # same team row locks as remove/leave/demote, taken before any check
        team_ids = await self.members.team_ids_for_user(user_id)
        await self.teams.lock_many(team_ids)

        if await self.members.sole_admin_team_ids(user_id):
            raise InvalidOperation(LAST_ADMIN_MESSAGE)

        # teams left without members would be unreachable
        solo = await self.members.solo_team_ids(user_id)
        for team_id in solo:
            await self.teams.delete(team_id)

        for team_id in team_ids:
            if team_id in solo:
                continue
            if not await self.members.delete_keeping_admin(team_id, user_id):
                await self.session.rollback()
                logger.info(f"Refused deletion of user {user_id}, last admin of team {team_id}")
                raise InvalidOperation(LAST_ADMIN_MESSAGE)

        await self.tickets.delete_for_author(user_id)
        await self.repo.delete(user_id)
        await self.session.commit()
        logger.info(f"User {user_id} deleted by {actor_id}")
        return {"message": "User deleted successfully"}

    async def _ensure_can_modify(self, actor_id: uuid.UUID, user_id: uuid.UUID) -> None:
        if actor_id == user_id:
            return
        actor = await self.repo.get(actor_id)
        if not actor or actor.role != UserRole.ADMIN:
            raise Forbidden("You can only modify your own account")
