"""Request-scoped dependencies: sessions, the signed-in user and service factories."""
from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Type, TypeVar

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .config import get_settings
from .database import get_session
from .models import User
from .schemas import TokenData

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"

bearer_scheme = HTTPBearer(auto_error=False)

ServiceT = TypeVar("ServiceT")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> User:
    """Resolve the payroll staff member behind the ``Authorization: Bearer`` token."""

    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Not authenticated")

    try:
        token_data = decode_access_token(credentials.credentials)
    except jwt.PyJWTError as exc:
        logger.warning("Rejected access token: %s", exc)
        raise _unauthorized("Could not validate credentials") from exc

    result = await session.execute(
        select(User).where(
            User.username == token_data.username,
            User.account_id == token_data.account_id,
        )
    )
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise _unauthorized("Inactive or missing user")
    return user


def client_ip(request: Request) -> Optional[str]:
    """Caller address recorded on audit rows; honours ``X-Forwarded-For``."""

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def service_dependency(service_cls: Type[ServiceT]) -> Callable[..., ServiceT]:
    """Build a dependency that binds ``service_cls`` to the session, user and client address."""

    def build(
        request: Request,
        current_user: User = Depends(get_current_user),
        session: AsyncSession = Depends(get_db_session),
    ) -> ServiceT:
        return service_cls(session, current_user, client_ip(request))

    build.__name__ = f"get_{service_cls.__name__}"
    return build


def decode_access_token(token: str) -> TokenData:
    payload: Dict[str, Any] = jwt.decode(
        token,
        get_settings().secret_key,
        algorithms=[TOKEN_ALGORITHM],
    )
    return TokenData(**payload)


def token_payload(user: User) -> Dict[str, Any]:
    """Claims for ``user``; the login route adds ``exp``."""

    return {
        "username": user.username,
        "account_id": user.account_id,
        "role": user.role,
        "iat": int(datetime.utcnow().timestamp()),
    }
