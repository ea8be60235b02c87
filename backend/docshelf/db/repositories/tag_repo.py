"""Tag repository."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from docshelf.db.exceptions import ConnectionError, DatabaseError, DuplicateRecordError, RecordNotFoundError
from docshelf.db.models import Tag

logger = logging.getLogger(__name__)


async def list_tags(db: AsyncSession) -> list[Tag]:
    """Get all tags ordered by name."""
    try:
        result = await db.execute(select(Tag).order_by(Tag.name))
        return list(result.scalars().all())
    except OperationalError as e:
        logger.error(f"Database connection error in list_tags: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error listing tags: {e}")
        raise DatabaseError(f"Failed to list tags: {e}") from e


async def get_tags_by_ids(db: AsyncSession, tag_ids: list[str]) -> list[Tag]:
    """Resolve tag IDs. Raises RecordNotFoundError if any ID is unknown."""
    wanted = list(dict.fromkeys(tag_ids))
    if not wanted:
        return []
    try:
        result = await db.execute(select(Tag).where(Tag.id.in_(wanted)))
        tags = list(result.scalars().all())
    except OperationalError as e:
        logger.error(f"Database connection error in get_tags_by_ids: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error resolving tags {wanted}: {e}")
        raise DatabaseError(f"Failed to get tags: {e}") from e

    missing = set(wanted) - {t.id for t in tags}
    if missing:
        raise RecordNotFoundError(f"Unknown tag ids: {', '.join(sorted(missing))}")
    return tags


async def create_tag(db: AsyncSession, name: str) -> Tag:
    """Create a new tag."""
    try:
        tag = Tag(name=name)
        db.add(tag)
        await db.flush()
        return tag
    except IntegrityError as e:
        logger.error(f"Duplicate tag {name}: {e}")
        raise DuplicateRecordError(f"Tag {name} already exists") from e
    except OperationalError as e:
        logger.error(f"Database connection error in create_tag: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error creating tag: {e}")
        raise DatabaseError(f"Failed to create tag: {e}") from e
