"""Full-text search over published documents."""

from fastapi import APIRouter

from docshelf.api.dependencies import Search
from docshelf.models.envelope import success_response
from docshelf.models.search import SearchCategory, SearchResult
from docshelf.services.search_service import SearchHit

router = APIRouter()


def _to_result(hit: SearchHit) -> dict:
    doc = hit.document
    return SearchResult(
        id=doc.id,
        title=doc.title,
        subtitle=doc.subtitle,
        slug=doc.slug,
        category=SearchCategory.model_validate(doc.category) if doc.category else None,
        content_snippet=hit.content_snippet,
    ).to_wire()


@router.get("")
async def search(service: Search, q: str | None = None) -> dict:
    """Published documents containing ``q`` in title, subtitle or content."""
    hits = await service.search(q)
    return success_response([_to_result(h) for h in hits], query=q, count=len(hits))
