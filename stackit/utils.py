from typing import Iterable, Optional

from fastapi import Depends
from fastapi_users import models

from .errors import UnauthorizedError, ValidationError
from .models import TAG_MAX_LENGTH
from .users import fastapi_users


# Dependency to get the currently authenticated user, or None
async def get_current_user(
    user: Optional[models.UP] = Depends(fastapi_users.current_user(optional=True, active=True)),
):
    return user


# Dependency to enforce authentication
async def require_authenticated_user(
    user: Optional[models.UP] = Depends(fastapi_users.current_user(optional=True, active=True)),
):
    if not user:
        raise UnauthorizedError("No token, authorization denied")
    return user


def normalize_tag(s: Optional[str]) -> str:
    return (s or "").strip().lower()


def normalize_tags(raw: Optional[Iterable[str]], max_length: int = TAG_MAX_LENGTH) -> list[str]:
    """Trim and lower-case each tag, dropping blanks and repeats.

    The first occurrence keeps its place. A tag longer than ``max_length`` is
    rejected rather than shortened.
    """
    out: list[str] = []
    for t in raw or []:
        name = normalize_tag(t)
        if len(name) > max_length:
            raise ValidationError(f"Tags cannot exceed {max_length} characters")
        if name and name not in out:
            out.append(name)
    return out


def clean_text(value: Optional[str]) -> str:
    return (value or "").strip()
