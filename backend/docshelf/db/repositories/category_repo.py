"""Category repository."""

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from docshelf.db.exceptions import ConnectionError, DatabaseError, DuplicateRecordError
from docshelf.db.models import Category, Document

logger = logging.getLogger(__name__)

# Only published documents are exposed under a category.
_PUBLISHED_DOCUMENTS = selectinload(Category.documents.and_(Document.published.is_(True)))


async def list_categories(db: AsyncSession) -> list[Category]:
    """Get all categories with their published documents."""
    try:
        result = await db.execute(
            select(Category).options(_PUBLISHED_DOCUMENTS).order_by(Category.name)
        )
        return list(result.scalars().all())
    except OperationalError as e:
        logger.error(f"Database connection error in list_categories: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error listing categories: {e}")
        raise DatabaseError(f"Failed to list categories: {e}") from e


async def get_category_by_id(db: AsyncSession, category_id: str) -> Category | None:
    """Get a category by ID with its published documents."""
    try:
        result = await db.execute(
            select(Category)
            .options(_PUBLISHED_DOCUMENTS)
            .where(Category.id == category_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
    except OperationalError as e:
        logger.error(f"Database connection error in get_category_by_id: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error getting category {category_id}: {e}")
        raise DatabaseError(f"Failed to get category: {e}") from e


async def get_category_by_slug(db: AsyncSession, slug: str) -> Category | None:
    """Get a category by slug (no relations loaded)."""
    try:
        result = await db.execute(select(Category).where(Category.slug == slug))
        return result.scalar_one_or_none()
    except OperationalError as e:
        logger.error(f"Database connection error in get_category_by_slug: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error getting category by slug {slug}: {e}")
        raise DatabaseError(f"Failed to get category: {e}") from e


async def lock_category(db: AsyncSession, category_id: str) -> Category | None:
    """Load a category with a row lock held until the transaction ends.

    On PostgreSQL the lock blocks concurrent inserts/updates of documents
    referencing this category (their FK check needs a share lock on the row).
    """
    try:
        result = await db.execute(
            select(Category).where(Category.id == category_id).with_for_update()
        )
        return result.scalar_one_or_none()
    except OperationalError as e:
        logger.error(f"Database connection error in lock_category: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error locking category {category_id}: {e}")
        raise DatabaseError(f"Failed to lock category: {e}") from e


async def count_documents(db: AsyncSession, category_id: str) -> int:
    """Count all documents (published or not) referencing a category."""
    try:
        result = await db.execute(
            select(func.count()).select_from(Document).where(Document.category_id == category_id)
        )
        return int(result.scalar_one())
    except OperationalError as e:
        logger.error(f"Database connection error in count_documents: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error counting documents for category {category_id}: {e}")
        raise DatabaseError(f"Failed to count documents: {e}") from e


async def create_category(
    db: AsyncSession,
    name: str,
    slug: str,
    description: str | None = None,
) -> Category:
    """Create a new category."""
    try:
        category = Category(name=name, slug=slug, description=description)
        db.add(category)
        await db.flush()
        return category
    except IntegrityError as e:
        logger.error(f"Duplicate category slug {slug}: {e}")
        raise DuplicateRecordError(f"Category with slug {slug} already exists") from e
    except OperationalError as e:
        logger.error(f"Database connection error in create_category: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error creating category: {e}")
        raise DatabaseError(f"Failed to create category: {e}") from e


async def update_category(db: AsyncSession, category: Category, updates: dict[str, object]) -> Category:
    """Apply field updates to a category."""
    try:
        for key, value in updates.items():
            if hasattr(category, key):
                setattr(category, key, value)
        await db.flush()
        return category
    except IntegrityError as e:
        logger.error(f"Integrity error updating category {category.id}: {e}")
        raise DuplicateRecordError(f"Category with slug {category.slug} already exists") from e
    except OperationalError as e:
        logger.error(f"Database connection error in update_category: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error updating category {category.id}: {e}")
        raise DatabaseError(f"Failed to update category: {e}") from e


async def delete_category(db: AsyncSession, category_id: str) -> bool:
    """Delete a category. Returns True if deleted."""
    try:
        result = await db.execute(delete(Category).where(Category.id == category_id))
        await db.flush()
        return bool(result.rowcount > 0)  # type: ignore[union-attr]
    except OperationalError as e:
        logger.error(f"Database connection error in delete_category: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error deleting category {category_id}: {e}")
        raise DatabaseError(f"Failed to delete category: {e}") from e


async def category_exists(db: AsyncSession, category_id: str) -> bool:
    """Check whether a category ID is known."""
    try:
        result = await db.execute(select(Category.id).where(Category.id == category_id))
        return result.scalar_one_or_none() is not None
    except OperationalError as e:
        logger.error(f"Database connection error in category_exists: {e}")
        raise ConnectionError("Database connection failed") from e
    except Exception as e:
        logger.error(f"Unexpected error checking category {category_id}: {e}")
        raise DatabaseError(f"Failed to check category: {e}") from e
