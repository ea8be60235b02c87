"""
Document lifecycle: create, edit with version snapshots, delete, read.

Every edit appends an immutable DocumentVersion and bumps the live row's
``version`` in the same transaction, so the live document always mirrors its
newest snapshot. Mutations commit before the affected pages are revalidated.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from docshelf.core.patch import FieldPatch, PatchOp, field_patches
from docshelf.core.permissions import Caller, can_modify
from docshelf.db.exceptions import DuplicateRecordError, RecordNotFoundError
from docshelf.db.models import Document, DocumentVersion, Tag
from docshelf.db.repositories import category_repo, comment_repo, document_repo, tag_repo, version_repo
from docshelf.models.document import DocumentCreate, DocumentUpdate
from docshelf.services.exceptions import ForbiddenError, NotFoundError, ValidationError
from docshelf.services.redis_client import DASHBOARD_PATH, DOCS_PATH, PageCache, doc_page_path

logger = logging.getLogger(__name__)

_REQUIRED_TEXT_FIELDS = ("title", "slug", "content")
_PATCH_FIELDS = ["title", "slug", "subtitle", "content", "published", "category_id", "tag_ids"]


@dataclass(frozen=True)
class DocumentPatch:
    """Partial update of a document, one FieldPatch per editable field."""

    title: FieldPatch[str] = field(default_factory=FieldPatch.unset)
    slug: FieldPatch[str] = field(default_factory=FieldPatch.unset)
    subtitle: FieldPatch[str] = field(default_factory=FieldPatch.unset)
    content: FieldPatch[str] = field(default_factory=FieldPatch.unset)
    published: FieldPatch[bool] = field(default_factory=FieldPatch.unset)
    category_id: FieldPatch[str] = field(default_factory=FieldPatch.unset)
    tag_ids: FieldPatch[list[str]] = field(default_factory=FieldPatch.unset)

    @classmethod
    def from_request(cls, body: DocumentUpdate) -> "DocumentPatch":
        return cls(**field_patches(body, _PATCH_FIELDS))


@dataclass
class DocumentPage:
    """A document as shown on its public page, with slug-order neighbours."""

    document: Document
    prev_doc: Document | None = None
    next_doc: Document | None = None


def _require_text(name: str, value: str | None) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{name.capitalize()} is required")
    return value


class DocumentService:
    """Creates, edits, deletes and reads documents."""

    def __init__(self, db: AsyncSession, pages: PageCache):
        self.db = db
        self.pages = pages

    async def _resolve_tags(self, tag_ids: list[str]) -> list[Tag]:
        try:
            return await tag_repo.get_tags_by_ids(self.db, tag_ids)
        except RecordNotFoundError as e:
            raise ValidationError(str(e)) from e

    async def _check_category(self, category_id: str) -> None:
        if not await category_repo.category_exists(self.db, category_id):
            raise ValidationError(f"Category {category_id} does not exist")

    async def _revalidate(self, *slugs: str, navigation: bool = False) -> None:
        """Revalidate the listings and the given document pages.

        Every public page links its published neighbours by title and slug, so
        a change to either among published documents drops all document pages.
        """
        await self.pages.invalidate(DOCS_PATH, *(doc_page_path(s) for s in slugs), DASHBOARD_PATH)
        if navigation:
            await self.pages.invalidate_tree(DOCS_PATH)

    async def _load(self, doc_id: str) -> Document:
        doc = await document_repo.get_document_by_id(self.db, doc_id)
        if doc is None:
            raise NotFoundError("Document not found")
        return doc

    async def create(self, data: DocumentCreate, author_id: str) -> Document:
        """Insert a document at version 1 together with its first snapshot."""
        for name in _REQUIRED_TEXT_FIELDS:
            _require_text(name, getattr(data, name))

        if await document_repo.slug_taken(self.db, data.slug):
            raise ValidationError(f"Slug '{data.slug}' is already in use")
        if data.category_id:
            await self._check_category(data.category_id)
        tags = await self._resolve_tags(data.tag_ids) if data.tag_ids else []

        doc = Document(
            title=data.title,
            slug=data.slug,
            subtitle=data.subtitle,
            content=data.content,
            published=data.published,
            version=1,
            author_id=author_id,
            category_id=data.category_id or None,
            tags=tags,
        )
        try:
            doc = await document_repo.create_document(self.db, doc)
        except DuplicateRecordError as e:
            raise ValidationError(f"Slug '{data.slug}' is already in use") from e
        await version_repo.create_version(self.db, doc.id, 1, doc.title, doc.subtitle, doc.content)

        created = await self._load(doc.id)
        await self.db.commit()
        logger.info(f"Created document {created.id} ({created.slug})")

        await self._revalidate(navigation=created.published)
        return created

    async def update(self, doc_id: str, patch: DocumentPatch, caller: Caller) -> Document:
        """Snapshot the edited state as the next version, then overwrite the live row."""
        doc = await self._load(doc_id)
        if not can_modify(caller, doc.author_id):
            raise ForbiddenError("Not allowed to edit this document")

        for name in ("title", "slug", "content", "published"):
            if getattr(patch, name).op is PatchOp.CLEAR:
                raise ValidationError(f"{name.capitalize()} cannot be cleared")

        title = patch.title.resolve(doc.title)
        slug = patch.slug.resolve(doc.slug)
        content = patch.content.resolve(doc.content)
        for name, value in (("title", title), ("slug", slug), ("content", content)):
            _require_text(name, value)
        subtitle = patch.subtitle.resolve(doc.subtitle)
        published = patch.published.resolve(doc.published)
        category_id = patch.category_id.resolve(doc.category_id)

        old_slug, old_title, old_published = doc.slug, doc.title, doc.published
        if slug != old_slug and await document_repo.slug_taken(self.db, slug, exclude_id=doc.id):
            raise ValidationError(f"Slug '{slug}' is already in use")
        if not patch.category_id.is_unset and category_id:
            await self._check_category(category_id)

        tags: list[Tag] | None = None
        match patch.tag_ids.op:
            case PatchOp.SET:
                tags = await self._resolve_tags(patch.tag_ids.value or [])
            case PatchOp.CLEAR:
                tags = []
            case PatchOp.UNSET:
                tags = None

        next_version = await version_repo.get_max_version_number(self.db, doc.id) + 1
        await version_repo.create_version(self.db, doc.id, next_version, title, subtitle, content)

        doc.title = title
        doc.slug = slug
        doc.subtitle = subtitle
        doc.content = content
        doc.published = published
        doc.category_id = category_id or None
        doc.version = next_version
        if tags is not None:
            doc.tags = tags
        try:
            await document_repo.save_document(self.db, doc)
        except DuplicateRecordError as e:
            raise ValidationError(f"Slug '{slug}' is already in use") from e

        updated = await self._load(doc.id)
        await self.db.commit()
        logger.info(f"Updated document {doc.id} to version {next_version}")

        nav_changed = slug != old_slug or title != old_title or published != old_published
        await self._revalidate(
            *{slug, old_slug},
            navigation=(published or old_published) and nav_changed,
        )
        return updated

    async def delete(self, doc_id: str, caller: Caller) -> None:
        """Delete a document with its comments and full version history."""
        doc = await self._load(doc_id)
        if not can_modify(caller, doc.author_id):
            raise ForbiddenError("Not allowed to delete this document")
        slug, was_published = doc.slug, doc.published

        await comment_repo.delete_comments_for_document(self.db, doc.id)
        removed = await version_repo.delete_versions(self.db, doc.id)
        await document_repo.delete_document(self.db, doc.id)
        await self.db.commit()
        logger.info(f"Deleted document {doc_id} and {removed} versions")

        await self._revalidate(slug, navigation=was_published)

    async def get(self, doc_id: str) -> Document:
        return await self._load(doc_id)

    async def get_version(self, doc_id: str, version_number: int) -> DocumentVersion:
        """One snapshot of a document."""
        await self._load(doc_id)
        version = await version_repo.get_version(self.db, doc_id, version_number)
        if version is None:
            raise NotFoundError(f"Version {version_number} not found")
        return version

    async def get_by_slug(self, slug: str) -> DocumentPage | None:
        """Public page payload, or None when no document has this slug."""
        doc = await document_repo.get_document_by_slug(self.db, slug)
        if doc is None:
            return None
        return DocumentPage(
            document=doc,
            prev_doc=await document_repo.get_previous_published(self.db, slug),
            next_doc=await document_repo.get_next_published(self.db, slug),
        )

    async def list(
        self,
        published: bool | None = None,
        category_id: str | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        return await document_repo.list_documents(
            self.db, published=published, category_id=category_id, limit=limit,
        )
