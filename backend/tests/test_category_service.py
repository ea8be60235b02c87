"""Tests for CategoryService."""

import pytest

from docshelf.core.patch import FieldPatch
from docshelf.db.models import Document
from docshelf.models.category import CategoryCreate
from docshelf.services.category_service import CategoryPatch, CategoryService
from docshelf.services.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError


@pytest.fixture
def service(db, pages) -> CategoryService:
    return CategoryService(db, pages)


async def _add_document(db, author_id: str, category_id: str, slug: str, published: bool) -> Document:
    doc = Document(
        title=slug.title(), slug=slug, content="Body", published=published,
        author_id=author_id, category_id=category_id,
    )
    db.add(doc)
    await db.commit()
    return doc


@pytest.mark.asyncio
async def test_admin_creates_category(service, admin):
    created = await service.create(CategoryCreate(name="Guides", slug="guides", description="How-tos"), admin)

    assert created.id
    assert created.slug == "guides"
    assert created.documents == []


@pytest.mark.asyncio
async def test_member_cannot_create_category(service, member):
    with pytest.raises(ForbiddenError):
        await service.create(CategoryCreate(name="Guides", slug="guides"), member)


@pytest.mark.asyncio
async def test_create_rejects_duplicate_slug(service, admin, category):
    with pytest.raises(ValidationError, match="already in use"):
        await service.create(CategoryCreate(name="Other", slug=category.slug), admin)


@pytest.mark.asyncio
async def test_list_sorted_by_name_with_published_documents_only(service, admin, member, db, category):
    await service.create(CategoryCreate(name="API Reference", slug="api-reference"), admin)
    await _add_document(db, member.id, category.id, "visible", published=True)
    await _add_document(db, member.id, category.id, "draft", published=False)

    categories = await service.list()

    assert [c.name for c in categories] == ["API Reference", "Guides"]
    assert [d.slug for d in categories[1].documents] == ["visible"]


@pytest.mark.asyncio
async def test_get_missing_category(service):
    with pytest.raises(NotFoundError):
        await service.get("missing")


@pytest.mark.asyncio
async def test_update_is_partial(service, admin, category):
    updated = await service.update(category.id, CategoryPatch(name=FieldPatch.of("Tutorials")), admin)

    assert updated.name == "Tutorials"
    assert updated.slug == "guides"
    assert updated.description == "Step-by-step guides"


@pytest.mark.asyncio
async def test_update_revalidates_pages_embedding_the_category(service, admin, category, pages):
    await pages.set("/docs/d", {"category": {"name": "Guides"}})
    await pages.set("/docs", [{"category": {"name": "Guides"}}])
    await pages.set("/dashboard", [])

    await service.update(category.id, CategoryPatch(name=FieldPatch.of("Renamed")), admin)

    assert pages.invalidated_trees == ["/docs"]
    assert pages.store == {}


@pytest.mark.asyncio
async def test_empty_update_leaves_pages_alone(service, admin, category, pages):
    await service.update(category.id, CategoryPatch(), admin)
    assert pages.invalidated == []


@pytest.mark.asyncio
async def test_update_clears_description(service, admin, category):
    updated = await service.update(category.id, CategoryPatch(description=FieldPatch.clear()), admin)
    assert updated.description is None


@pytest.mark.asyncio
async def test_update_cannot_clear_name(service, admin, category):
    with pytest.raises(ValidationError, match="cannot be cleared"):
        await service.update(category.id, CategoryPatch(name=FieldPatch.clear()), admin)


@pytest.mark.asyncio
async def test_update_rejects_slug_of_other_category(service, admin, category):
    other = await service.create(CategoryCreate(name="API", slug="api"), admin)
    with pytest.raises(ValidationError, match="already in use"):
        await service.update(other.id, CategoryPatch(slug=FieldPatch.of(category.slug)), admin)


@pytest.mark.asyncio
async def test_member_cannot_update_category(service, member, category):
    with pytest.raises(ForbiddenError):
        await service.update(category.id, CategoryPatch(name=FieldPatch.of("Mine")), member)


@pytest.mark.asyncio
async def test_delete_unused_category(service, admin, category):
    await service.delete(category.id, admin)
    with pytest.raises(NotFoundError):
        await service.get(category.id)


@pytest.mark.asyncio
async def test_delete_category_with_documents_conflicts(service, admin, member, db, category):
    # Unpublished documents still count as references
    await _add_document(db, member.id, category.id, "draft", published=False)

    with pytest.raises(ConflictError, match="Cannot delete category with documents"):
        await service.delete(category.id, admin)
    assert (await service.get(category.id)).id == category.id


@pytest.mark.asyncio
async def test_delete_missing_category(service, admin):
    with pytest.raises(NotFoundError):
        await service.delete("missing", admin)


@pytest.mark.asyncio
async def test_member_cannot_delete_category(service, member, category):
    with pytest.raises(ForbiddenError):
        await service.delete(category.id, member)
