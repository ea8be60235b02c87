"""HTML-to-PDF rendering through wkhtmltopdf (pdfkit)."""

import asyncio
import logging

import pdfkit

from docshelf.config import settings

logger = logging.getLogger(__name__)


class PdfRenderError(Exception):
    """wkhtmltopdf failed, was missing, or ran past the timeout."""


class PdfRenderer:
    """Renders self-contained HTML pages to PDF bytes.

    pdfkit builds the wkhtmltopdf command line; the process itself runs under
    asyncio and is killed once ``timeout_seconds`` elapse.
    """

    def __init__(
        self,
        wkhtmltopdf_path: str = "",
        page_size: str = "A4",
        margin: str = "20mm",
        timeout_seconds: float = 30.0,
    ):
        self.wkhtmltopdf_path = wkhtmltopdf_path
        self.timeout_seconds = timeout_seconds
        self.options = {
            "page-size": page_size,
            "margin-top": margin,
            "margin-right": margin,
            "margin-bottom": margin,
            "margin-left": margin,
            "encoding": "UTF-8",
            "background": None,
            "print-media-type": None,
            "no-outline": None,
            "quiet": "",
        }
        self._configuration = None

    def _get_configuration(self):
        # Resolved lazily so the app starts even when wkhtmltopdf is absent
        if self._configuration is None:
            if self.wkhtmltopdf_path:
                self._configuration = pdfkit.configuration(wkhtmltopdf=self.wkhtmltopdf_path)
            else:
                self._configuration = pdfkit.configuration()
        return self._configuration

    def _command(self, html: str) -> tuple[list[str], dict]:
        kit = pdfkit.PDFKit(html, "string", options=self.options, configuration=self._get_configuration())
        return kit.command(), kit.environ

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        try:
            process.kill()
        except ProcessLookupError:
            return
        await process.wait()

    async def render(self, html: str) -> bytes:
        """Render ``html`` to PDF. Raises PdfRenderError on any failure."""
        try:
            args, env = self._command(html)
            process = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except Exception as e:
            logger.error(f"PDF rendering failed to start: {e}")
            raise PdfRenderError(f"PDF rendering failed: {e}") from e

        try:
            pdf, stderr = await asyncio.wait_for(
                process.communicate(html.encode("utf-8")),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            await self._kill(process)
            logger.error(f"PDF rendering timed out after {self.timeout_seconds}s, killed pid {process.pid}")
            raise PdfRenderError("PDF rendering timed out") from e
        except asyncio.CancelledError:
            await self._kill(process)
            raise

        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            logger.error(f"wkhtmltopdf exited with code {process.returncode}: {detail}")
            raise PdfRenderError(f"PDF rendering failed: wkhtmltopdf exited with code {process.returncode}")
        if not pdf:
            raise PdfRenderError("PDF renderer returned no output")
        return pdf


def create_pdf_renderer() -> PdfRenderer:
    """Build the renderer from application settings."""
    return PdfRenderer(
        wkhtmltopdf_path=settings.wkhtmltopdf_path,
        page_size=settings.pdf_page_size,
        margin=settings.pdf_margin,
        timeout_seconds=settings.pdf_render_timeout_seconds,
    )
