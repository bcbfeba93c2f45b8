from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_session
from app.core.security import get_principal, Principal
from app.modules.auth.schemas import RegisterRequest, LoginRequest, TokenOut
from app.modules.auth.service import AuthService
from app.modules.users.schemas import UserOut

router = APIRouter()

def svc(session: AsyncSession = Depends(get_session)) -> AuthService:
    return AuthService(session)

@router.post("/login", response_model=TokenOut)
async def login(payload: LoginRequest, service: AuthService = Depends(svc)):
    return await service.login(payload)

@router.post("/register", response_model=TokenOut, status_code=201)
async def register(payload: RegisterRequest, service: AuthService = Depends(svc)):
    return await service.register(payload)

@router.get("/profile", response_model=UserOut)
async def profile(principal: Principal = Depends(get_principal), service: AuthService = Depends(svc)):
    return await service.profile(principal)
