"""PDF export request schema."""

from docshelf.models.common import CamelModel


class PdfExportRequest(CamelModel):
    """Body of ``POST /export/pdf``."""

    document_id: str
