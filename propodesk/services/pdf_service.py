"""Client for the external HTML-to-PDF rendering service"""

import logging
from typing import Optional

import httpx

from ..config import PDF_SERVICE_TIMEOUT, PDF_SERVICE_URL

logger = logging.getLogger(__name__)


class PDFServiceError(RuntimeError):
    """Raised when the renderer is unreachable or returns a non-PDF response"""


class PDFService:
    """Posts rendered HTML to the PDF service and returns the PDF bytes"""

    def __init__(
        self,
        service_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.service_url = service_url or PDF_SERVICE_URL
        self.timeout = timeout or PDF_SERVICE_TIMEOUT
        self.transport = transport

    async def render_pdf(self, html: str, filename: str = "document.pdf") -> bytes:
        """Render ``html`` to a PDF document"""
        if not self.service_url:
            raise PDFServiceError("PDF service not configured")

        logger.info(f"📄 Rendering PDF {filename} ({len(html)} chars of HTML)")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.service_url, json={"html": html, "filename": filename}
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"❌ PDF service returned {e.response.status_code}: {e.response.text[:200]}")
            raise PDFServiceError(f"PDF service returned {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"❌ PDF service unreachable: {e}")
            raise PDFServiceError("PDF service unreachable") from e

        content_type = response.headers.get("content-type", "")
        if "application/pdf" not in content_type:
            logger.error(f"❌ PDF service returned unexpected content-type: {content_type}")
            raise PDFServiceError("PDF service returned a non-PDF response")

        logger.info(f"✅ PDF rendered: {filename} ({len(response.content)} bytes)")
        return response.content
