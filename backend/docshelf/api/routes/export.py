"""PDF export endpoint."""

from fastapi import APIRouter, Request, Response

from docshelf.api.dependencies import Exports
from docshelf.middleware.rate_limiter import EXPORT_LIMIT, limiter
from docshelf.models.export import PdfExportRequest

router = APIRouter()


@router.post("/pdf")
@limiter.limit(EXPORT_LIMIT)
async def export_pdf(request: Request, body: PdfExportRequest, service: Exports) -> Response:
    """Render a document to PDF and return it as a download."""
    export = await service.export_pdf(body.document_id)
    return Response(
        content=export.content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )
