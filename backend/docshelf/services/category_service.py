"""Category management. Reads are public, writes are admin-only."""

import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from docshelf.core.patch import FieldPatch, PatchOp, field_patches
from docshelf.core.permissions import Caller, is_admin
from docshelf.db.exceptions import DuplicateRecordError
from docshelf.db.models import Category
from docshelf.db.repositories import category_repo
from docshelf.models.category import CategoryCreate, CategoryUpdate
from docshelf.services.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from docshelf.services.redis_client import DASHBOARD_PATH, DOCS_PATH, PageCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryPatch:
    name: FieldPatch[str] = field(default_factory=FieldPatch.unset)
    slug: FieldPatch[str] = field(default_factory=FieldPatch.unset)
    description: FieldPatch[str] = field(default_factory=FieldPatch.unset)

    @classmethod
    def from_request(cls, body: CategoryUpdate) -> "CategoryPatch":
        return cls(**field_patches(body, ["name", "slug", "description"]))


def _require_admin(caller: Caller) -> None:
    if not is_admin(caller):
        raise ForbiddenError("Admin access required")


class CategoryService:
    def __init__(self, db: AsyncSession, pages: PageCache):
        self.db = db
        self.pages = pages

    async def _load(self, category_id: str) -> Category:
        category = await category_repo.get_category_by_id(self.db, category_id)
        if category is None:
            raise NotFoundError("Category not found")
        return category

    async def list(self) -> list[Category]:
        """All categories by name, each with its published documents."""
        return await category_repo.list_categories(self.db)

    async def get(self, category_id: str) -> Category:
        return await self._load(category_id)

    async def create(self, data: CategoryCreate, caller: Caller) -> Category:
        _require_admin(caller)
        if not data.name.strip() or not data.slug.strip():
            raise ValidationError("Name and slug are required")
        if await category_repo.get_category_by_slug(self.db, data.slug):
            raise ValidationError(f"Slug '{data.slug}' is already in use")

        try:
            category = await category_repo.create_category(self.db, data.name, data.slug, data.description)
        except DuplicateRecordError as e:
            raise ValidationError(f"Slug '{data.slug}' is already in use") from e

        created = await self._load(category.id)
        await self.db.commit()
        logger.info(f"Created category {created.id} ({created.slug})")
        return created

    async def update(self, category_id: str, patch: CategoryPatch, caller: Caller) -> Category:
        """Apply a partial update. Name and slug may change but not be cleared."""
        _require_admin(caller)
        category = await self._load(category_id)

        updates: dict[str, object] = {}
        for name in ("name", "slug"):
            item: FieldPatch[str] = getattr(patch, name)
            match item.op:
                case PatchOp.CLEAR:
                    raise ValidationError(f"{name.capitalize()} cannot be cleared")
                case PatchOp.SET:
                    if not (item.value or "").strip():
                        raise ValidationError(f"{name.capitalize()} is required")
                    updates[name] = item.value
                case PatchOp.UNSET:
                    pass
        if not patch.description.is_unset:
            updates["description"] = patch.description.resolve(category.description)

        new_slug = updates.get("slug")
        if new_slug and new_slug != category.slug:
            existing = await category_repo.get_category_by_slug(self.db, new_slug)
            if existing is not None and existing.id != category.id:
                raise ValidationError(f"Slug '{new_slug}' is already in use")

        if updates:
            try:
                await category_repo.update_category(self.db, category, updates)
            except DuplicateRecordError as e:
                raise ValidationError(f"Slug '{new_slug}' is already in use") from e

        updated = await self._load(category.id)
        await self.db.commit()
        logger.info(f"Updated category {category_id}: {sorted(updates)}")
        if updates:
            # Listings and document pages embed the category
            await self.pages.invalidate(DASHBOARD_PATH)
            await self.pages.invalidate_tree(DOCS_PATH)
        return updated

    async def delete(self, category_id: str, caller: Caller) -> None:
        """Delete an unused category.

        The row lock keeps a concurrent document insert from attaching to the
        category between the count and the delete.
        """
        _require_admin(caller)
        if await category_repo.lock_category(self.db, category_id) is None:
            raise NotFoundError("Category not found")

        if await category_repo.count_documents(self.db, category_id) > 0:
            raise ConflictError("Cannot delete category with documents")

        await category_repo.delete_category(self.db, category_id)
        await self.db.commit()
        logger.info(f"Deleted category {category_id}")
