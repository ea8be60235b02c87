"""Export a stored document as a styled PDF."""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from docshelf.core.export_template import build_export_html
from docshelf.db.models import utcnow
from docshelf.db.repositories import document_repo
from docshelf.services.exceptions import NotFoundError, UnexpectedError
from docshelf.services.pdf_renderer import PdfRenderer, PdfRenderError
from docshelf.utils.html_sanitizer import sanitize_html

logger = logging.getLogger(__name__)


@dataclass
class PdfExport:
    filename: str
    content: bytes


class ExportService:
    """Builds the export page for a document and renders it to PDF."""

    def __init__(self, db: AsyncSession, renderer: PdfRenderer, sanitize: bool = True):
        self.db = db
        self.renderer = renderer
        self.sanitize = sanitize

    async def export_pdf(self, document_id: str) -> PdfExport:
        doc = await document_repo.get_document_by_id(self.db, document_id)
        if doc is None:
            raise NotFoundError("Document not found")

        content = sanitize_html(doc.content) if self.sanitize else doc.content
        html = build_export_html(
            title=doc.title,
            content_html=content,
            author_name=doc.author.name,
            updated_at=doc.updated_at,
            subtitle=doc.subtitle,
            category_name=doc.category.name if doc.category else None,
            generated_at=utcnow(),
        )

        try:
            pdf = await self.renderer.render(html)
        except PdfRenderError as e:
            raise UnexpectedError("Failed to generate PDF") from e

        logger.info(f"Exported document {doc.id} as PDF ({len(pdf)} bytes)")
        return PdfExport(filename=f"{doc.slug}.pdf", content=pdf)
