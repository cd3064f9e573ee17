# pdf_service.py
import io
import re
from dataclasses import dataclass, field
from datetime import datetime

from reportlab.pdfgen import canvas
from reportlab.lib import colors

from config import Config
from delivery import deliver
from errors import DeliveryError
from logs import logger
from models import InvoiceDocument, ResolvedTheme
from page_layout import FillRect, LayoutRegion, PageLayout, PageSpec, RuleLine, TextRun, layout_invoice
from themes import resolve_theme

log = logger(__name__)


@dataclass
class ExportResult:
    """
    A rendered invoice. Kept by the caller so a failed delivery can be
    retried without laying the document out again.
    """
    artifact: bytes
    file_name: str
    page_count: int
    overflows: list = field(default_factory=list)

    @property
    def mimetype(self) -> str:
        return "application/pdf"


def _safe_filename(name: str) -> str:
    # strip characters not allowed on Windows/mac paths
    cleaned = re.sub(r'[\\/*?:"<>|\x00-\x1f]', "", (name or ""))
    return re.sub(r"\s+", "-", cleaned.strip()).strip(".-")


def suggested_file_name(invoice_number: str, ext: str = "pdf", now: datetime | None = None) -> str:
    """
    ``invoice-<number>.<ext>``; a timestamp stands in when the number is
    empty (or nothing survives filename sanitising).
    """
    stem = _safe_filename(invoice_number)
    if not stem:
        stem = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return f"invoice-{stem}.{ext.lstrip('.')}"


# -----------------------------
# Canvas walker
# -----------------------------
def _draw_primitive(pdf: canvas.Canvas, prim) -> None:
    if isinstance(prim, FillRect):
        pdf.setFillColor(colors.HexColor(prim.color))
        pdf.rect(prim.x, prim.y, prim.width, prim.height, stroke=0, fill=1)
    elif isinstance(prim, RuleLine):
        pdf.setStrokeColor(colors.HexColor(prim.color))
        pdf.setLineWidth(prim.width)
        pdf.line(prim.x1, prim.y1, prim.x2, prim.y2)
    elif isinstance(prim, TextRun):
        pdf.setFillColor(colors.HexColor(prim.color))
        pdf.setFont(prim.face, prim.size)
        if prim.align == "right":
            pdf.drawRightString(prim.x, prim.y, prim.text)
        elif prim.align == "center":
            pdf.drawCentredString(prim.x, prim.y, prim.text)
        else:
            pdf.drawString(prim.x, prim.y, prim.text)
    else:
        raise TypeError(f"Unknown drawing primitive: {prim!r}")


def _draw_region(pdf: canvas.Canvas, region: LayoutRegion) -> None:
    for prim in region.primitives:
        _draw_primitive(pdf, prim)
    for child in region.children:
        _draw_region(pdf, child)


def render_pdf(layout: PageLayout, title: str = "", invariant: bool = False) -> bytes:
    """
    Draw every page of ``layout`` in order into a single PDF.

    ``invariant`` pins the creation date and document id reportlab would
    otherwise embed, so identical layouts give identical bytes.
    """
    spec = layout.page_spec
    buf = io.BytesIO()
    pdf = canvas.Canvas(buf, pagesize=(spec.width, spec.height), invariant=1 if invariant else 0)
    if title:
        pdf.setTitle(title)

    for page in layout.pages:
        for region in page.regions:
            _draw_region(pdf, region)
        pdf.showPage()

    pdf.save()
    return buf.getvalue()


def export_pages(layout: PageLayout, invoice_number: str, invariant: bool = False,
                 now: datetime | None = None) -> tuple[bytes, str]:
    title = f"Invoice - {invoice_number}" if invoice_number else "Invoice"
    return render_pdf(layout, title=title, invariant=invariant), suggested_file_name(invoice_number, now=now)


# -----------------------------
# Pipeline
# -----------------------------
def export_invoice(
    doc: InvoiceDocument,
    theme: ResolvedTheme | None = None,
    page_spec: PageSpec | None = None,
    invariant: bool = False,
    measure=None,
) -> ExportResult:
    """
    totals -> theme -> layout -> PDF, synchronously, on one immutable
    snapshot. Overflowing content is clipped, never fatal.
    """
    resolved = theme or resolve_theme(doc.theme)
    spec = page_spec or PageSpec.from_name(Config.PAGE_SIZE)

    layout = layout_invoice(doc, resolved, spec, measure=measure)
    artifact, file_name = export_pages(layout, doc.invoice_number, invariant=invariant)

    if layout.overflows:
        log.warning("Invoice %s rendered with %d clipped element(s)", doc.invoice_number, len(layout.overflows))
    log.info("Rendered %s (%d page(s), %d bytes)", file_name, layout.page_count, len(artifact))
    return ExportResult(
        artifact=artifact,
        file_name=file_name,
        page_count=layout.page_count,
        overflows=list(layout.overflows),
    )


def generate_and_deliver(doc: InvoiceDocument, destination, **export_kwargs) -> tuple[ExportResult, str]:
    """
    Export then hand the artifact to the delivery collaborator.

    ``DeliveryError`` propagates unchanged; the rendered result is attached
    to it as ``exc.result`` so the caller can retry ``deliver`` alone.
    """
    result = export_invoice(doc, **export_kwargs)
    try:
        location = deliver(result.artifact, result.file_name, destination)
    except DeliveryError as exc:
        log.error("Delivery of %s failed: %s", result.file_name, exc)
        exc.result = result
        raise
    return result, location
