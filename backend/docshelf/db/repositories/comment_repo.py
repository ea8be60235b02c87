"""Comment repository."""

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from docshelf.db.exceptions import ConnectionError, DatabaseError
from docshelf.db.models import Comment

logger = logging.getLogger(__name__)


async def get_comment_by_id(db: AsyncSession, comment_id: str) -> Comment | None:
    """Get a comment with its author and document."""
    try:
        result = await db.execute(
            select(Comment)
            .options(selectinload(Comment.author), selectinload(Comment.document))
            .where(Comment.id == comment_id)
        )
        return result.scalar_one_or_none()
    except OperationalError as e:
        logger.error(f"Database connection error in get_comment_by_id: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error getting comment {comment_id}: {e}")
        raise DatabaseError(f"Failed to get comment: {e}") from e


async def list_comments(db: AsyncSession, doc_id: str) -> list[Comment]:
    """Comments on a document, newest first."""
    try:
        result = await db.execute(
            select(Comment)
            .options(selectinload(Comment.author))
            .where(Comment.document_id == doc_id)
            .order_by(Comment.created_at.desc())
        )
        return list(result.scalars().all())
    except OperationalError as e:
        logger.error(f"Database connection error in list_comments: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error listing comments for {doc_id}: {e}")
        raise DatabaseError(f"Failed to list comments: {e}") from e


async def create_comment(db: AsyncSession, doc_id: str, author_id: str, content: str) -> Comment:
    """Create a comment and return it with its author loaded."""
    try:
        comment = Comment(document_id=doc_id, author_id=author_id, content=content)
        db.add(comment)
        await db.flush()
        result = await db.execute(
            select(Comment)
            .options(selectinload(Comment.author))
            .where(Comment.id == comment.id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()
    except OperationalError as e:
        logger.error(f"Database connection error in create_comment: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error creating comment on {doc_id}: {e}")
        raise DatabaseError(f"Failed to create comment: {e}") from e


async def delete_comment(db: AsyncSession, comment_id: str) -> bool:
    """Delete a comment. Returns True if deleted."""
    try:
        result = await db.execute(delete(Comment).where(Comment.id == comment_id))
        await db.flush()
        return bool(result.rowcount > 0)  # type: ignore[union-attr]
    except OperationalError as e:
        logger.error(f"Database connection error in delete_comment: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error deleting comment {comment_id}: {e}")
        raise DatabaseError(f"Failed to delete comment: {e}") from e


async def delete_comments_for_document(db: AsyncSession, doc_id: str) -> int:
    """Delete every comment on a document. Returns the number removed."""
    try:
        result = await db.execute(delete(Comment).where(Comment.document_id == doc_id))
        await db.flush()
        return int(result.rowcount or 0)  # type: ignore[union-attr]
    except OperationalError as e:
        logger.error(f"Database connection error in delete_comments_for_document: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error deleting comments of {doc_id}: {e}")
        raise DatabaseError(f"Failed to delete comments: {e}") from e
