from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from fastapi_users import exceptions

from stackit.errors import UnauthorizedError, ValidationError
from stackit.schemas import AuthTokenRead, LoginRequest, RegisterRequest, UserCreate, UserRead
from stackit.users import UserManager, get_jwt_strategy, get_user_manager

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


async def _token_response(user) -> AuthTokenRead:
    strategy = get_jwt_strategy()
    token = await strategy.write_token(user)
    return AuthTokenRead(token=token, user=UserRead.model_validate(user))


@router.post("/register", response_model=AuthTokenRead, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    request: Request,
    user_manager: UserManager = Depends(get_user_manager),
):
    try:
        user = await user_manager.create(
            UserCreate(username=body.username, email=body.email, password=body.password),
            safe=True,
            request=request,
        )
    except exceptions.InvalidPasswordException as e:
        raise ValidationError(str(e.reason))
    return await _token_response(user)


@router.post("/login", response_model=AuthTokenRead)
async def login(
    body: LoginRequest,
    request: Request,
    user_manager: UserManager = Depends(get_user_manager),
):
    if not body.email_or_username.strip() or not body.password:
        raise ValidationError("Email/Username and password are required")
    credentials = OAuth2PasswordRequestForm(username=body.email_or_username.strip(), password=body.password)
    user = await user_manager.authenticate(credentials)
    if user is None or not user.is_active:
        raise UnauthorizedError("Invalid email/username or password")
    await user_manager.on_after_login(user, request)
    return await _token_response(user)


__all__ = ["router"]
