"""Document endpoints.

The public page (``/slug/{slug}``), the public listing and the dashboard
listing are read through the page cache; mutations revalidate those pages.
"""

import logging

from fastapi import APIRouter, Query, status

from docshelf.api.dependencies import CurrentCaller, Documents, Pages
from docshelf.models.document import (
    DocumentCreate,
    DocumentDetail,
    DocumentPageResponse,
    DocumentSummary,
    DocumentUpdate,
    NavLink,
    VersionResponse,
)
from docshelf.models.envelope import success_response
from docshelf.services.document_service import DocumentPage, DocumentPatch
from docshelf.services.exceptions import NotFoundError
from docshelf.services.redis_client import DASHBOARD_PATH, DOCS_PATH, doc_page_path

logger = logging.getLogger(__name__)

router = APIRouter()


def _listing_page(published: bool | None) -> str | None:
    """Cached page a listing belongs to, or None for uncached listings."""
    match published:
        case True:
            return DOCS_PATH
        case None:
            return DASHBOARD_PATH
        case False:
            return None


def _listing_variant(category_id: str | None, limit: int | None) -> str | None:
    parts = []
    if category_id:
        parts.append(f"categoryId={category_id}")
    if limit:
        parts.append(f"limit={limit}")
    return "&".join(parts) or None


def _page_payload(page: DocumentPage) -> dict:
    response = DocumentPageResponse.model_validate(page.document).model_copy(
        update={
            "prev_doc": NavLink.model_validate(page.prev_doc) if page.prev_doc else None,
            "next_doc": NavLink.model_validate(page.next_doc) if page.next_doc else None,
        }
    )
    return response.to_wire()


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

@router.get("")
async def list_documents(
    service: Documents,
    pages: Pages,
    published: bool | None = None,
    category_id: str | None = Query(None, alias="categoryId"),
    limit: int | None = Query(None, ge=1, le=100),
) -> dict:
    """List documents, most recently updated first."""
    page_path = _listing_page(published)
    variant = _listing_variant(category_id, limit)
    if page_path:
        cached = await pages.get(page_path, variant)
        if cached is not None:
            return success_response(cached)

    docs = await service.list(published=published, category_id=category_id, limit=limit)
    payload = [DocumentSummary.model_validate(d).to_wire() for d in docs]
    if page_path:
        await pages.set(page_path, payload, variant)
    return success_response(payload)


@router.get("/slug/{slug}")
async def get_document_by_slug(slug: str, service: Documents, pages: Pages) -> dict:
    """Public page payload: document, history, comments and neighbours."""
    path = doc_page_path(slug)
    cached = await pages.get(path)
    if cached is not None:
        return success_response(cached)

    page = await service.get_by_slug(slug)
    if page is None:
        raise NotFoundError("Document not found")
    payload = _page_payload(page)
    await pages.set(path, payload)
    return success_response(payload)


@router.get("/{doc_id}")
async def get_document(doc_id: str, service: Documents) -> dict:
    doc = await service.get(doc_id)
    return success_response(DocumentDetail.model_validate(doc).to_wire())


@router.get("/{doc_id}/versions/{version_number}")
async def get_document_version(doc_id: str, version_number: int, service: Documents) -> dict:
    version = await service.get_version(doc_id, version_number)
    return success_response(VersionResponse.model_validate(version).to_wire())


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_document(body: DocumentCreate, caller: CurrentCaller, service: Documents) -> dict:
    """Create a document authored by the caller, at version 1."""
    doc = await service.create(body, author_id=caller.id)
    return success_response(DocumentDetail.model_validate(doc).to_wire())


@router.put("/{doc_id}")
async def update_document(
    doc_id: str,
    body: DocumentUpdate,
    caller: CurrentCaller,
    service: Documents,
) -> dict:
    """Edit a document. Absent keys are kept, explicit nulls clear the field."""
    doc = await service.update(doc_id, DocumentPatch.from_request(body), caller)
    return success_response(DocumentDetail.model_validate(doc).to_wire())


@router.delete("/{doc_id}")
async def delete_document(doc_id: str, caller: CurrentCaller, service: Documents) -> dict:
    await service.delete(doc_id, caller)
    return success_response({"message": "Document deleted successfully"})
