import logging
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import Unauthenticated, NotFound
from app.core.security import Principal, create_access_token, verify_password
from app.modules.auth.schemas import RegisterRequest, LoginRequest, TokenOut
from app.modules.users.models import User
from app.modules.users.repository import UserRepository
from app.modules.users.schemas import UserOut
from app.modules.users.service import UserService

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)

    async def register(self, payload: RegisterRequest) -> TokenOut:
        user = await UserService(self.session).create(payload)
        return self._token_for(user)

    async def validate_user(self, email: str, password: str) -> User | None:
        user = await self.users.get_by_email(email)
        if user and verify_password(password, user.password):
            return user
        return None

    async def login(self, payload: LoginRequest) -> TokenOut:
        user = await self.validate_user(payload.email, payload.password)
        if not user:
            logger.info(f"Failed login for {payload.email}")
            raise Unauthenticated("Invalid email or password")
        return self._token_for(user)

    async def profile(self, principal: Principal) -> User:
        user = await self.users.get(principal.user_id)
        if not user:
            raise NotFound("User not found")
        return user

    def _token_for(self, user: User) -> TokenOut:
        return TokenOut(access_token=create_access_token(user.id), user=UserOut.model_validate(user))
