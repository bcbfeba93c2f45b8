import uuid
from typing import Sequence
from sqlalchemy import select, delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.users.models import User, UserRole

class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **data) -> User:
        obj = User(**data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, user_id: uuid.UUID) -> User | None:
        res = await self.session.execute(select(User).where(User.id == user_id))
        return res.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        res = await self.session.execute(select(User).where(User.email == email))
        return res.scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        res = await self.session.execute(select(User).where(User.username == username))
        return res.scalar_one_or_none()

    async def existing_ids(self, ids: list[uuid.UUID]) -> set[uuid.UUID]:
        if not ids:
            return set()
        res = await self.session.execute(select(User.id).where(User.id.in_(ids)))
        return set(res.scalars().all())

    async def list(self, *, search: str | None = None, role: UserRole | None = None, sort: str = "desc", limit: int = 10, offset: int = 0) -> tuple[Sequence[User], int]:
        conditions = []
        if search:
            conditions.append(or_(
                User.email.contains(search, autoescape=True),
                User.username.contains(search, autoescape=True),
            ))
        if role:
            conditions.append(User.role == role)
        order = User.created_at.asc() if sort == "asc" else User.created_at.desc()
        q = select(User).where(*conditions).order_by(order).limit(limit).offset(offset)
        res = await self.session.execute(q)
        total = await self.session.scalar(select(func.count()).select_from(User).where(*conditions))
        return res.scalars().all(), total or 0

    async def update_fields(self, user_id: uuid.UUID, **data) -> User | None:
        obj = await self.get(user_id)
        if not obj:
            return None
        for k, v in data.items():
            if v is not None:
                setattr(obj, k, v)
        await self.session.flush()
        return obj

    async def delete(self, user_id: uuid.UUID) -> bool:
        res = await self.session.execute(delete(User).where(User.id == user_id))
        return res.rowcount > 0
