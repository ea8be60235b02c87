"""Document repository."""

import logging

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from docshelf.db.exceptions import ConnectionError, DatabaseError, DuplicateRecordError
from docshelf.db.models import Comment, Document

logger = logging.getLogger(__name__)

_LISTING_RELATIONS = (
    selectinload(Document.author),
    selectinload(Document.category),
    selectinload(Document.tags),
)

_DETAIL_RELATIONS = (
    *_LISTING_RELATIONS,
    selectinload(Document.versions),
)

_PAGE_RELATIONS = (
    *_DETAIL_RELATIONS,
    selectinload(Document.comments).selectinload(Comment.author),
)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def list_documents(
    db: AsyncSession,
    published: bool | None = None,
    category_id: str | None = None,
    limit: int | None = None,
) -> list[Document]:
    """Get documents, newest update first, with author, category and tags."""
    try:
        stmt = select(Document).options(*_LISTING_RELATIONS)
        if published is not None:
            stmt = stmt.where(Document.published.is_(published))
        if category_id:
            stmt = stmt.where(Document.category_id == category_id)
        stmt = stmt.order_by(Document.updated_at.desc())
        if limit:
            stmt = stmt.limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())
    except OperationalError as e:
        logger.error(f"Database connection error in list_documents: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error listing documents: {e}")
        raise DatabaseError(f"Failed to list documents: {e}") from e


async def get_document_by_id(db: AsyncSession, doc_id: str) -> Document | None:
    """Get a document with author, category, tags and version history."""
    try:
        result = await db.execute(
            select(Document)
            .options(*_DETAIL_RELATIONS)
            .where(Document.id == doc_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
    except OperationalError as e:
        logger.error(f"Database connection error in get_document_by_id: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error getting document {doc_id}: {e}")
        raise DatabaseError(f"Failed to get document: {e}") from e


async def get_document_by_slug(db: AsyncSession, slug: str) -> Document | None:
    """Get a document by slug with every relation the public page shows."""
    try:
        result = await db.execute(
            select(Document)
            .options(*_PAGE_RELATIONS)
            .where(Document.slug == slug)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
    except OperationalError as e:
        logger.error(f"Database connection error in get_document_by_slug: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error getting document by slug {slug}: {e}")
        raise DatabaseError(f"Failed to get document: {e}") from e


async def slug_taken(db: AsyncSession, slug: str, exclude_id: str | None = None) -> bool:
    """Check whether another document already uses ``slug``."""
    try:
        stmt = select(Document.id).where(Document.slug == slug)
        if exclude_id:
            stmt = stmt.where(Document.id != exclude_id)
        result = await db.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None
    except OperationalError as e:
        logger.error(f"Database connection error in slug_taken: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error checking slug {slug}: {e}")
        raise DatabaseError(f"Failed to check slug: {e}") from e


async def get_previous_published(db: AsyncSession, slug: str) -> Document | None:
    """Published document with the largest slug strictly before ``slug``."""
    try:
        result = await db.execute(
            select(Document)
            .where(Document.published.is_(True), Document.slug < slug)
            .order_by(Document.slug.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
    except OperationalError as e:
        logger.error(f"Database connection error in get_previous_published: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error finding document before {slug}: {e}")
        raise DatabaseError(f"Failed to get previous document: {e}") from e


async def get_next_published(db: AsyncSession, slug: str) -> Document | None:
    """Published document with the smallest slug strictly after ``slug``."""
    try:
        result = await db.execute(
            select(Document)
            .where(Document.published.is_(True), Document.slug > slug)
            .order_by(Document.slug.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()
    except OperationalError as e:
        logger.error(f"Database connection error in get_next_published: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error finding document after {slug}: {e}")
        raise DatabaseError(f"Failed to get next document: {e}") from e


async def search_published(db: AsyncSession, query: str, limit: int = 20) -> list[Document]:
    """Published documents whose title, subtitle or content contains ``query``.

    Matching is a case-insensitive literal substring test.
    """
    pattern = f"%{_escape_like(query)}%"
    try:
        result = await db.execute(
            select(Document)
            .options(selectinload(Document.category))
            .where(
                Document.published.is_(True),
                or_(
                    Document.title.ilike(pattern, escape="\\"),
                    Document.subtitle.ilike(pattern, escape="\\"),
                    Document.content.ilike(pattern, escape="\\"),
                ),
            )
            .order_by(Document.updated_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
    except OperationalError as e:
        logger.error(f"Database connection error in search_published: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error searching documents for {query!r}: {e}")
        raise DatabaseError(f"Failed to search documents: {e}") from e


async def create_document(db: AsyncSession, doc: Document) -> Document:
    """Insert a new document row."""
    try:
        db.add(doc)
        await db.flush()
        return doc
    except IntegrityError as e:
        logger.error(f"Duplicate document slug {doc.slug}: {e}")
        raise DuplicateRecordError(f"Document with slug {doc.slug} already exists") from e
    except OperationalError as e:
        logger.error(f"Database connection error in create_document: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error creating document: {e}")
        raise DatabaseError(f"Failed to create document: {e}") from e


async def save_document(db: AsyncSession, doc: Document) -> Document:
    """Flush pending changes made to a loaded document."""
    try:
        await db.flush()
        return doc
    except IntegrityError as e:
        logger.error(f"Integrity error updating document {doc.id}: {e}")
        raise DuplicateRecordError(f"Document with slug {doc.slug} already exists") from e
    except OperationalError as e:
        logger.error(f"Database connection error in save_document: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error updating document {doc.id}: {e}")
        raise DatabaseError(f"Failed to update document: {e}") from e


async def delete_document(db: AsyncSession, doc_id: str) -> bool:
    """Delete a document row. Returns True if deleted."""
    try:
        result = await db.execute(delete(Document).where(Document.id == doc_id))
        await db.flush()
        return bool(result.rowcount > 0)  # type: ignore[union-attr]
    except OperationalError as e:
        logger.error(f"Database connection error in delete_document: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error deleting document {doc_id}: {e}")
        raise DatabaseError(f"Failed to delete document: {e}") from e
