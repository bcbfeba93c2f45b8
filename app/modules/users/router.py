import uuid
from typing import Literal
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.db import get_session
from app.core.paging import Page
from app.core.security import get_principal, Principal
from app.core.schemas import Message
from app.modules.users.models import UserRole
from app.modules.users.schemas import UserCreate, UserUpdate, UserFilter, UserOut
from app.modules.users.service import UserService

# every users route requires an authenticated caller
router = APIRouter(dependencies=[Depends(get_principal)])

def svc(session: AsyncSession = Depends(get_session)) -> UserService:
    return UserService(session)

@router.get("", response_model=Page[UserOut])
async def list_users(
    search: str | None = None,
    page: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    sort: Literal["asc", "desc"] = "desc",
    role: UserRole | None = None,
    service: UserService = Depends(svc),
):
    filters = UserFilter(search=search, page=page, limit=limit, sort=sort, role=role)
    return await service.find_all(filters)

@router.get("/by-email/{email}", response_model=UserOut)
async def get_user_by_email(email: str, service: UserService = Depends(svc)):
    return await service.find_user_by_email(email)

@router.get("/by-username/{username}", response_model=UserOut)
async def get_user_by_username(username: str, service: UserService = Depends(svc)):
    return await service.find_user_by_username(username)

@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: uuid.UUID, service: UserService = Depends(svc)):
    return await service.find_user_by_id(user_id)

@router.post("", response_model=UserOut, status_code=201)
async def create_user(payload: UserCreate, service: UserService = Depends(svc)):
    return await service.create(payload)

@router.put("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: uuid.UUID,
    payload: UserUpdate,
    principal: Principal = Depends(get_principal),
    service: UserService = Depends(svc),
):
    return await service.update_user(principal.user_id, user_id, payload)

@router.delete("/{user_id}", response_model=Message)
async def delete_user(
    user_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    service: UserService = Depends(svc),
):
    return await service.delete_user(principal.user_id, user_id)
