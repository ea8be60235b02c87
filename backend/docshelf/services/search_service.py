"""Literal substring search over published documents."""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from docshelf.core.snippet import build_snippet
from docshelf.db.models import Document
from docshelf.db.repositories import document_repo
from docshelf.services.exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class SearchHit:
    document: Document
    content_snippet: str


class SearchService:
    def __init__(self, db: AsyncSession, limit: int = 20, radius: int = 100):
        self.db = db
        self.limit = limit
        self.radius = radius

    async def search(self, query: str | None) -> list[SearchHit]:
        """Published documents matching ``query`` in title, subtitle or content.

        Newest update first, capped at ``limit``. Each hit carries the
        content around the first match, or an empty snippet when the match
        was only in the title or subtitle.
        """
        if query is None or not query.strip():
            raise ValidationError("Search query is required")

        docs = await document_repo.search_published(self.db, query, limit=self.limit)
        logger.debug(f"Search {query!r} matched {len(docs)} documents")
        return [
            SearchHit(document=doc, content_snippet=build_snippet(doc.content, query, self.radius))
            for doc in docs
        ]
