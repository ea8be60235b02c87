"""Document version (snapshot) repository."""

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from docshelf.db.exceptions import ConnectionError, DatabaseError, DuplicateRecordError
from docshelf.db.models import DocumentVersion

logger = logging.getLogger(__name__)


async def get_max_version_number(db: AsyncSession, doc_id: str) -> int:
    """Highest version number stored for a document, 0 when none."""
    try:
        result = await db.execute(
            select(func.max(DocumentVersion.version_number)).where(DocumentVersion.document_id == doc_id)
        )
        return int(result.scalar_one_or_none() or 0)
    except OperationalError as e:
        logger.error(f"Database connection error in get_max_version_number: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error reading latest version of {doc_id}: {e}")
        raise DatabaseError(f"Failed to get latest version: {e}") from e


async def get_version(db: AsyncSession, doc_id: str, version_number: int) -> DocumentVersion | None:
    """Get one snapshot by its number."""
    try:
        result = await db.execute(
            select(DocumentVersion).where(
                DocumentVersion.document_id == doc_id,
                DocumentVersion.version_number == version_number,
            )
        )
        return result.scalar_one_or_none()
    except OperationalError as e:
        logger.error(f"Database connection error in get_version: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error getting version {version_number} of {doc_id}: {e}")
        raise DatabaseError(f"Failed to get version: {e}") from e


async def list_versions(db: AsyncSession, doc_id: str) -> list[DocumentVersion]:
    """All snapshots of a document, newest first."""
    try:
        result = await db.execute(
            select(DocumentVersion)
            .where(DocumentVersion.document_id == doc_id)
            .order_by(DocumentVersion.version_number.desc())
        )
        return list(result.scalars().all())
    except OperationalError as e:
        logger.error(f"Database connection error in list_versions: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error listing versions of {doc_id}: {e}")
        raise DatabaseError(f"Failed to list versions: {e}") from e


async def create_version(
    db: AsyncSession,
    doc_id: str,
    version_number: int,
    title: str,
    subtitle: str | None,
    content: str,
) -> DocumentVersion:
    """Append a snapshot."""
    try:
        version = DocumentVersion(
            document_id=doc_id,
            version_number=version_number,
            title=title,
            subtitle=subtitle or "",
            content=content,
        )
        db.add(version)
        await db.flush()
        return version
    except IntegrityError as e:
        logger.error(f"Version {version_number} of {doc_id} already exists: {e}")
        raise DuplicateRecordError(f"Version {version_number} already exists") from e
    except OperationalError as e:
        logger.error(f"Database connection error in create_version: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error creating version for {doc_id}: {e}")
        raise DatabaseError(f"Failed to create version: {e}") from e


async def delete_versions(db: AsyncSession, doc_id: str) -> int:
    """Delete every snapshot of a document. Returns the number removed."""
    try:
        result = await db.execute(delete(DocumentVersion).where(DocumentVersion.document_id == doc_id))
        await db.flush()
        return int(result.rowcount or 0)  # type: ignore[union-attr]
    except OperationalError as e:
        logger.error(f"Database connection error in delete_versions: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error deleting versions of {doc_id}: {e}")
        raise DatabaseError(f"Failed to delete versions: {e}") from e
