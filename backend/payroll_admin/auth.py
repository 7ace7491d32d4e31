"""Staff registration, login and the signed-in user's profile."""
import logging
from typing import Optional

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .config import get_settings
from .dependencies import TOKEN_ALGORITHM, get_current_user, get_db_session, token_payload
from .models import User
from .schemas import Token, UserCreate, UserLogin, UserRead, compute_expiry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

password_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return password_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return password_context.verify(password, password_hash)


def issue_token(user: User) -> Token:
    """Sign an access token carrying the user's tenant and role."""

    settings = get_settings()
    expires_at = compute_expiry(settings.access_token_expires_minutes)
    encoded = jwt.encode(
        {**token_payload(user), "exp": int(expires_at.timestamp())},
        settings.secret_key,
        algorithm=TOKEN_ALGORITHM,
    )
    return Token(access_token=encoded, expires_at=expires_at)


async def authenticate(session: AsyncSession, credentials: UserLogin) -> Optional[User]:
    result = await session.execute(
        select(User).where(
            User.username == credentials.username,
            User.account_id == credentials.account_id,
        )
    )
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        return None
    if not verify_password(credentials.password, user.password_hash):
        return None
    return user


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register_user(payload: UserCreate, session: AsyncSession = Depends(get_db_session)) -> User:
    """Create a payroll officer, manager or admin account within a tenant."""

    # usernames are unique across tenants so a token never resolves ambiguously
    existing = await session.execute(select(User.id).where(User.username == payload.username))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already exists")

    user = User(
        username=payload.username,
        account_id=payload.account_id,
        email=payload.email or "",
        full_name=payload.full_name or "",
        role=payload.role,
        password_hash=hash_password(payload.password),
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    logger.info("Registered %s %s for %s", user.role, user.username, user.account_id)
    return user


@router.post("/login", response_model=Token)
async def login(payload: UserLogin, session: AsyncSession = Depends(get_db_session)) -> Token:
    user = await authenticate(session, payload)
    if user is None:
        logger.warning("Failed login for %s on %s", payload.username, payload.account_id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    logger.info("User %s signed in to %s", user.username, user.account_id)
    return issue_token(user)


@router.get("/me", response_model=UserRead)
async def current_user(user: User = Depends(get_current_user)) -> User:
    return user
