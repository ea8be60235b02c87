"""API dependencies: DB sessions, JWT sessions and service wiring."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from docshelf.config import settings
from docshelf.core.permissions import Caller, is_admin
from docshelf.db.database import get_session
from docshelf.db.models import Role
from docshelf.db.repositories import user_repo
from docshelf.services.category_service import CategoryService
from docshelf.services.comment_service import CommentService
from docshelf.services.document_service import DocumentService
from docshelf.services.exceptions import ForbiddenError, UnauthenticatedError
from docshelf.services.export_service import ExportService
from docshelf.services.pdf_renderer import PdfRenderer
from docshelf.services.redis_client import PageCache
from docshelf.services.search_service import SearchService

# ---------------------------------------------------------------------------
# Database dependency
# ---------------------------------------------------------------------------

async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async for session in get_session(request.app.state.session_factory):
        yield session


DbSession = Annotated[AsyncSession, Depends(get_db)]

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a plain-text password."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plain-text password against a hash."""
    return pwd_context.verify(plain, hashed)

# ---------------------------------------------------------------------------
# JWT helpers
# ---------------------------------------------------------------------------

_bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(user_id: str, email: str, role: Role) -> str:
    """Create a signed JWT access token."""
    expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_expiration_minutes)
    payload = {
        "sub": user_id,
        "email": email,
        "role": role.value,
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict:
    """Decode and validate a JWT. Returns the payload or raises."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        if payload.get("sub") is None:
            raise JWTError("Missing subject")
        return payload
    except JWTError as exc:
        raise UnauthenticatedError("Invalid or expired token") from exc

# ---------------------------------------------------------------------------
# Session gate
# ---------------------------------------------------------------------------

async def get_current_caller(
    db: DbSession,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)] = None,
) -> Caller:
    """Resolve the Bearer token to the signed-in user.

    The role is read from the store rather than the token, so a demotion takes
    effect on the next request.
    """
    if credentials is None:
        raise UnauthenticatedError("Authentication required")
    payload = verify_token(credentials.credentials)
    user = await user_repo.get_user_by_id(db, payload["sub"])
    if user is None:
        raise UnauthenticatedError("Authentication required")
    return Caller(id=user.id, role=user.role, name=user.name, email=user.email)


CurrentCaller = Annotated[Caller, Depends(get_current_caller)]


async def require_admin(caller: CurrentCaller) -> Caller:
    if not is_admin(caller):
        raise ForbiddenError("Admin access required")
    return caller


AdminCaller = Annotated[Caller, Depends(require_admin)]

# ---------------------------------------------------------------------------
# Shared resources (created in the app lifespan)
# ---------------------------------------------------------------------------

def get_page_cache(request: Request) -> PageCache:
    return request.app.state.page_cache


def get_pdf_renderer(request: Request) -> PdfRenderer:
    return request.app.state.pdf_renderer


Pages = Annotated[PageCache, Depends(get_page_cache)]

# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

def get_document_service(db: DbSession, pages: Pages) -> DocumentService:
    return DocumentService(db, pages)


def get_category_service(db: DbSession, pages: Pages) -> CategoryService:
    return CategoryService(db, pages)


def get_comment_service(db: DbSession, pages: Pages) -> CommentService:
    return CommentService(db, pages)


def get_search_service(db: DbSession) -> SearchService:
    return SearchService(db, limit=settings.search_result_limit, radius=settings.search_snippet_radius)


def get_export_service(
    db: DbSession,
    renderer: Annotated[PdfRenderer, Depends(get_pdf_renderer)],
) -> ExportService:
    return ExportService(db, renderer, sanitize=settings.sanitize_export_html)


Documents = Annotated[DocumentService, Depends(get_document_service)]
Categories = Annotated[CategoryService, Depends(get_category_service)]
Comments = Annotated[CommentService, Depends(get_comment_service)]
Search = Annotated[SearchService, Depends(get_search_service)]
Exports = Annotated[ExportService, Depends(get_export_service)]
