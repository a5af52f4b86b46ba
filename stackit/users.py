import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordRequestForm
from fastapi_users import FastAPIUsers, exceptions
from fastapi_users.manager import BaseUserManager, IntegerIDMixin
from fastapi_users.authentication import BearerTransport, AuthenticationBackend, JWTStrategy
from fastapi_users.db import SQLAlchemyUserDatabase
from sqlalchemy import func, select

from .database import get_db
from .errors import ConflictError
from .models import User
from .settings.config import settings


logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

SECRET = (settings.SECRET or "").strip()
if not SECRET or SECRET == "CHANGE_ME_SECRET":
    raise RuntimeError(
        "SECRET environment variable must be set to a strong value; the default placeholder is not allowed."
    )


# -------------------------
# Database Dependency
# -------------------------
async def get_user_db(session=Depends(get_db)):
    yield SQLAlchemyUserDatabase(session, User)


# -------------------------
# User Manager
# -------------------------
class UserManager(IntegerIDMixin, BaseUserManager[User, int]):
    reset_password_token_secret = SECRET
    verification_token_secret = SECRET

    async def get_by_username(self, username: str) -> Optional[User]:
        session = self.user_db.session
        result = await session.execute(select(User).where(User.username == username))
        return result.scalars().first()

    async def validate_password(self, password: str, user) -> None:
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise exceptions.InvalidPasswordException(
                reason=f"Password should be at least {MIN_PASSWORD_LENGTH} characters"
            )

    async def create(self, user_create, safe: bool = False, request: Optional[Request] = None) -> User:
        # fastapi-users only guards the email; usernames are unique too
        session = self.user_db.session
        taken = await session.scalar(
            select(func.count(User.id)).where(User.username == user_create.username)
        )
        if taken:
            raise ConflictError("This username is already taken. Please choose a different username.")
        try:
            return await super().create(user_create, safe=safe, request=request)
        except exceptions.UserAlreadyExists:
            raise ConflictError(
                "This email is already registered. Please use a different email or try logging in."
            )

    async def authenticate(self, credentials: OAuth2PasswordRequestForm) -> Optional[User]:
        """Accept either the email address or the username as the login name."""
        try:
            user = await self.get_by_email(credentials.username)
        except exceptions.UserNotExists:
            user = await self.get_by_username(credentials.username)
        if user is None:
            # Run the hasher anyway to keep timing uniform
            self.password_helper.hash(credentials.password)
            return None

        verified, updated_password_hash = self.password_helper.verify_and_update(
            credentials.password, user.hashed_password
        )
        if not verified:
            return None
        if updated_password_hash is not None:
            await self.user_db.update(user, {"hashed_password": updated_password_hash})
        return user

    async def on_after_register(self, user: User, request=None):
        logger.info("User %s registered as %s", user.id, user.username)

    async def on_after_login(self, user: User, request=None, response=None):
        logger.info("User %s logged in", user.id)


async def get_user_manager(user_db=Depends(get_user_db)):
    yield UserManager(user_db)


# -------------------------
# Authentication Backend
# -------------------------
bearer_transport = BearerTransport(tokenUrl="auth/jwt/login")


def get_jwt_strategy() -> JWTStrategy:
    return JWTStrategy(secret=SECRET, lifetime_seconds=settings.JWT_LIFETIME_SECONDS)


auth_backend = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

# -------------------------
# FastAPI Users instance
# -------------------------
fastapi_users = FastAPIUsers[User, int](
    get_user_manager,
    [auth_backend],
)
