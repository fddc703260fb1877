import io
import logging
from html import escape

from xhtml2pdf import pisa

from .errors import PdfRenderError

logger = logging.getLogger(__name__)

DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ font-family: Helvetica, sans-serif; font-size: 11pt; }}
pre, code {{ font-family: Courier, monospace; }}
</style>
</head>
<body>
{body}
</body>
</html>
"""


# PUBLIC_INTERFACE
class PdfExporter:
    """Turns rendered note HTML into PDF bytes."""

    def render(self, html: str, title: str = "Note") -> bytes:
        document = DOCUMENT_TEMPLATE.format(title=escape(title), body=html)
        buffer = io.BytesIO()
        try:
            status = pisa.CreatePDF(document, dest=buffer, encoding="utf-8")
        except Exception as exc:
            raise PdfRenderError(f"xhtml2pdf crashed: {exc}") from exc
        if status.err:
            raise PdfRenderError(f"xhtml2pdf reported {status.err} error(s)")
        data = buffer.getvalue()
        if not data:
            raise PdfRenderError("xhtml2pdf produced an empty document")
        logger.debug("Rendered PDF of %d bytes", len(data))
        return data
