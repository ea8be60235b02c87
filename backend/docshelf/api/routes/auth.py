"""Authentication endpoints: register, login, refresh, current user."""

import logging

from fastapi import APIRouter, Request, status

from docshelf.api.dependencies import (
    CurrentCaller,
    DbSession,
    create_access_token,
    hash_password,
    verify_password,
    verify_token,
)
from docshelf.db.models import Role
from docshelf.db.models import User as UserORM
from docshelf.db.repositories.user_repo import create_user, get_user_by_email, get_user_by_id
from docshelf.middleware.rate_limiter import AUTH_LIMIT, limiter
from docshelf.models.envelope import success_response
from docshelf.models.user import AuthToken, LoginRequest, RefreshRequest, RegisterRequest, UserResponse
from docshelf.services.exceptions import UnauthenticatedError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter()


def _token_for(user: UserORM) -> dict:
    token = create_access_token(user.id, user.email, user.role)
    return AuthToken(access_token=token, user_id=user.id, role=user.role).to_wire()


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_LIMIT)
async def register(request: Request, body: RegisterRequest, db: DbSession) -> dict:
    """Create a new member account and return a JWT."""
    existing = await get_user_by_email(db, body.email)
    if existing:
        raise ValidationError("Email already registered")

    user = UserORM(
        email=body.email,
        name=body.name,
        password_hash=hash_password(body.password),
        role=Role.MEMBER,
    )
    user = await create_user(db, user)
    logger.info(f"Registered user {user.id}")
    return success_response(_token_for(user))


@router.post("/login")
@limiter.limit(AUTH_LIMIT)
async def login(request: Request, body: LoginRequest, db: DbSession) -> dict:
    """Validate credentials and return a JWT."""
    user = await get_user_by_email(db, body.email)
    if not user or not user.password_hash or not verify_password(body.password, user.password_hash):
        raise UnauthenticatedError("Invalid email or password")
    return success_response(_token_for(user))


@router.post("/refresh")
async def refresh(body: RefreshRequest, db: DbSession) -> dict:
    """Exchange a still-valid token for a fresh one."""
    payload = verify_token(body.token)
    user = await get_user_by_id(db, payload["sub"])
    if not user:
        raise UnauthenticatedError("User not found")
    return success_response(_token_for(user))


@router.get("/me")
async def me(caller: CurrentCaller) -> dict:
    return success_response(
        UserResponse(id=caller.id, name=caller.name, email=caller.email, role=caller.role).to_wire()
    )
