# page_layout.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.units import inch

from config import Config
from errors import LayoutOverflowError
from logs import logger
from models import InvoiceDocument, ResolvedTheme
from text_layout import (
    CLIP_MARKER,
    FontSpec,
    Measure,
    clip_text,
    default_measure,
    font_face,
    wrap_paragraphs,
    wrap_text,
)
from themes import resolve_theme
from totals import compute_totals, money, tax_label

log = logger(__name__)

PAGE_SIZES = {"LETTER": LETTER, "A4": A4}

# -----------------------------
# Layout constants
# -----------------------------
TITLE_SIZE = 24
ISSUER_NAME_SIZE = 12
HEADING_SIZE = 11
BODY_SIZE = 10
SMALL_SIZE = 9
TOTAL_SIZE = 13

LINE_H = 14           # body line step
ISSUER_LINE_H = 12
HEADING_H = 18        # block heading ("BILL TO", "NOTES") incl. gap
ROW_PAD = 4
CELL_PAD = 6
REGION_GAP = 14
LABEL_W = 70          # metadata label column

QTY_W = 60
RATE_W = 90
AMOUNT_W = 100
TOTALS_W = 240
TOTALS_H = 60

WHITE = "#ffffff"
RULE_GREY = "#dddddd"
FOOTER_GREY = "#6b7280"


@dataclass(frozen=True)
class PageSpec:
    width: float = LETTER[0]
    height: float = LETTER[1]
    top_margin: float = 0.75 * inch
    bottom_margin: float = 0.75 * inch
    left_margin: float = 0.75 * inch
    right_margin: float = 0.75 * inch
    header_row_height: float = 20.0
    row_height: float = 20.0

    @classmethod
    def from_name(cls, name: str | None, **overrides) -> "PageSpec":
        key = (name or "LETTER").strip().upper()
        w, h = PAGE_SIZES.get(key, LETTER)
        return cls(width=w, height=h, **overrides)

    @property
    def content_width(self) -> float:
        return self.width - self.left_margin - self.right_margin

    @property
    def usable_height(self) -> float:
        return self.height - self.top_margin - self.bottom_margin


# -----------------------------
# Drawing primitives (PDF coordinates, origin bottom-left)
# -----------------------------
@dataclass(frozen=True)
class FillRect:
    x: float
    y: float
    width: float
    height: float
    color: str


@dataclass(frozen=True)
class TextRun:
    x: float
    y: float
    text: str
    face: str
    size: float
    color: str
    align: str = "left"  # left | right | center


@dataclass(frozen=True)
class RuleLine:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    width: float = 0.5


Primitive = Union[FillRect, TextRun, RuleLine]


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float

    @property
    def top(self) -> float:
        return self.y + self.height


@dataclass
class LayoutRegion:
    kind: str
    box: Box
    page_index: int
    primitives: list[Primitive] = field(default_factory=list)
    children: list = field(default_factory=list)


@dataclass
class LayoutPage:
    index: int
    regions: list = field(default_factory=list)


@dataclass
class PageLayout:
    pages: list
    page_spec: PageSpec
    overflows: list = field(default_factory=list, compare=False)

    @property
    def page_count(self) -> int:
        return len(self.pages)


@dataclass(frozen=True)
class _Row:
    lines: list
    quantity: str
    rate: str
    amount: str
    height: float


def _qty(q) -> str:
    return f"{float(q):g}"


def layout_invoice(
    doc: InvoiceDocument,
    theme: Optional[ResolvedTheme] = None,
    page_spec: Optional[PageSpec] = None,
    measure: Optional[Measure] = None,
) -> PageLayout:
    """
    Arrange the invoice into positioned regions, page by page.

    Fixed order: title, metadata, bill-to, item table, totals, notes. A
    vertical cursor (distance from the page top) advances as regions are
    placed; a region (or a single table row / notes line) that would cross
    ``height - bottom_margin`` moves whole to a fresh page. The table header
    row is repeated at the top of every page the table continues on.
    """
    theme = theme or resolve_theme(doc.theme)
    spec = page_spec or PageSpec.from_name(Config.PAGE_SIZE)
    measure = measure or default_measure

    heading_bold = FontSpec(font_face(theme.heading_font, bold=True), HEADING_SIZE)
    body = FontSpec(font_face(theme.body_font), BODY_SIZE)
    body_bold = FontSpec(font_face(theme.body_font, bold=True), BODY_SIZE)

    left = spec.left_margin
    right = spec.width - spec.right_margin
    content_w = spec.content_width
    limit = spec.height - spec.bottom_margin

    pages: list[LayoutPage] = [LayoutPage(0)]
    overflows: list[LayoutOverflowError] = []
    cursor = spec.top_margin
    table_children: Optional[list] = None

    # -----------------------------
    # Overflow handling (clip, record, continue)
    # -----------------------------
    def _overflow(exc: LayoutOverflowError) -> None:
        overflows.append(exc)
        log.warning("Clipping content: %s", exc)

    def _check_width(line: str, width: float, font: FontSpec, kind: str) -> None:
        if measure(line, font.face, font.size) > width:
            raise LayoutOverflowError(kind, f"{line[:32]!r} is wider than {width:.0f}pt", len(pages) - 1)

    def _check_lines(lines: list, max_lines: int, kind: str) -> None:
        if len(lines) > max_lines:
            raise LayoutOverflowError(
                kind, f"{len(lines)} lines but room for {max_lines} on one page", len(pages) - 1
            )

    def fit_line(line: str, width: float, font: FontSpec, kind: str) -> str:
        try:
            _check_width(line, width, font, kind)
        except LayoutOverflowError as exc:
            _overflow(exc)
            return clip_text(line, width, font, measure)
        return line

    def cap_lines(lines: list, max_lines: int, width: float, font: FontSpec, kind: str) -> list:
        max_lines = max(1, max_lines)
        try:
            _check_lines(lines, max_lines, kind)
        except LayoutOverflowError as exc:
            _overflow(exc)
            kept = list(lines[:max_lines])
            kept[-1] = clip_text(f"{kept[-1]} {CLIP_MARKER}".strip(), width, font, measure)
            return kept
        return lines

    # -----------------------------
    # Cursor + pages
    # -----------------------------
    def fits(h: float) -> bool:
        return cursor + h <= limit

    def flush_table() -> None:
        nonlocal table_children
        if not table_children:
            return
        top = table_children[0].box.top
        bottom = table_children[-1].box.y
        pages[-1].regions.append(
            LayoutRegion("table", Box(left, bottom, content_w, top - bottom), len(pages) - 1,
                         children=table_children)
        )
        table_children = []

    def new_page() -> None:
        nonlocal cursor
        flush_table()
        pages.append(LayoutPage(len(pages)))
        cursor = spec.top_margin

    def ensure_room(h: float) -> None:
        if not fits(h) and cursor > spec.top_margin:
            new_page()

    def place(kind: str, h: float, draw: Callable[[float], list], *, gap: float = REGION_GAP,
              x: Optional[float] = None, width: Optional[float] = None) -> LayoutRegion:
        nonlocal cursor
        top_y = spec.height - cursor
        box = Box(left if x is None else x, top_y - h, content_w if width is None else width, h)
        region = LayoutRegion(kind, box, len(pages) - 1, draw(top_y))
        if table_children is not None:
            table_children.append(region)
        else:
            pages[-1].regions.append(region)
        cursor += h + gap
        return region

    # -----------------------------
    # Title block (INVOICE + issuer identity)
    # -----------------------------
    issuer = doc.issuer
    issuer_w = content_w / 2
    issuer_lines: list[tuple[str, FontSpec]] = []
    name_font = FontSpec(heading_bold.face, ISSUER_NAME_SIZE)
    if issuer.name:
        issuer_lines.append((fit_line(issuer.name, issuer_w, name_font, "title"), name_font))
    small = FontSpec(body.face, SMALL_SIZE)
    for extra in [issuer.company, *issuer.address.splitlines()[:2], issuer.email, issuer.phone]:
        extra = (extra or "").strip()
        if extra:
            issuer_lines.append((fit_line(extra, issuer_w, small, "title"), small))
    title_h = max(TITLE_SIZE + 12, ISSUER_LINE_H * len(issuer_lines) + 6)

    def draw_title(top: float) -> list:
        out: list = [TextRun(left, top - TITLE_SIZE, "INVOICE", heading_bold.face, TITLE_SIZE, theme.primary)]
        y = top - ISSUER_LINE_H
        for text, font in issuer_lines:
            out.append(TextRun(right, y, text, font.face, font.size, theme.secondary, align="right"))
            y -= ISSUER_LINE_H
        out.append(RuleLine(left, top - title_h, right, top - title_h, theme.accent, 1.5))
        return out

    place("title", title_h, draw_title)

    # -----------------------------
    # Metadata (number / dates)
    # -----------------------------
    meta = [("Invoice #:", doc.invoice_number or "-"), ("Date:", doc.issue_date or "-")]
    if doc.due_date:
        meta.append(("Due Date:", doc.due_date))
    meta = [(label, fit_line(value, content_w - LABEL_W, body, "metadata")) for label, value in meta]
    meta_h = LINE_H * len(meta)

    def draw_meta(top: float) -> list:
        out = []
        y = top - BODY_SIZE
        for label, value in meta:
            out.append(TextRun(left, y, label, body_bold.face, BODY_SIZE, theme.secondary))
            out.append(TextRun(left + LABEL_W, y, value, body.face, BODY_SIZE, theme.secondary))
            y -= LINE_H
        return out

    ensure_room(meta_h)
    place("metadata", meta_h, draw_meta)

    # -----------------------------
    # Bill To
    # -----------------------------
    party = doc.bill_to
    bill_w = content_w / 2
    bill_lines: list[str] = []
    for raw in [party.name, party.company, party.email and f"Email: {party.email}",
                party.phone and f"Phone: {party.phone}"]:
        if raw:
            bill_lines.extend(wrap_text(raw, bill_w, body, measure))
    for addr in (party.address or "").splitlines():
        if addr.strip():
            bill_lines.extend(wrap_text(addr.strip(), bill_w, body, measure))
    bill_lines = [fit_line(ln, bill_w, body, "bill_to") for ln in bill_lines]
    bill_lines = cap_lines(bill_lines, int((spec.usable_height - HEADING_H) // LINE_H), bill_w, body, "bill_to")
    bill_h = HEADING_H + LINE_H * len(bill_lines)

    def draw_bill_to(top: float) -> list:
        out = [TextRun(left, top - HEADING_SIZE, "BILL TO", heading_bold.face, HEADING_SIZE, theme.primary)]
        y = top - HEADING_H - BODY_SIZE
        for ln in bill_lines:
            out.append(TextRun(left, y, ln, body.face, BODY_SIZE, theme.secondary))
            y -= LINE_H
        return out

    ensure_room(bill_h)
    place("bill_to", bill_h, draw_bill_to)

    # -----------------------------
    # Item table
    # -----------------------------
    desc_w = content_w - QTY_W - RATE_W - AMOUNT_W
    col_qty_right = left + desc_w + QTY_W
    col_rate_right = col_qty_right + RATE_W
    header_h = spec.header_row_height
    max_row_h = spec.usable_height - header_h
    max_row_lines = int((max_row_h - ROW_PAD - 2) // LINE_H)
    text_w = desc_w - 2 * CELL_PAD

    def build_row(description: str, quantity: str, rate: str, amount: str) -> _Row:
        lines = [fit_line(ln, text_w, body, "table_row") for ln in wrap_text(description, text_w, body, measure)]
        lines = cap_lines(lines, max_row_lines, text_w, body, "table_row")
        cells = [fit_line(v, w - 2 * CELL_PAD, body, "table_row")
                 for v, w in ((quantity, QTY_W), (rate, RATE_W), (amount, AMOUNT_W))]
        height = max(spec.row_height, len(lines) * LINE_H + ROW_PAD + 2)
        return _Row(lines, cells[0], cells[1], cells[2], height)

    rows = [build_row(it.description, _qty(it.quantity), money(it.rate), money(it.amount)) for it in doc.items]
    if not rows:
        rows = [build_row("No line items", "", "", "")]

    def draw_header() -> Callable[[float], list]:
        def _draw(top: float) -> list:
            y = top - header_h * 0.68
            face = heading_bold.face
            return [
                FillRect(left, top - header_h, content_w, header_h, theme.primary),
                TextRun(left + CELL_PAD, y, "Description", face, BODY_SIZE, WHITE),
                TextRun(col_qty_right - CELL_PAD, y, "Quantity", face, BODY_SIZE, WHITE, align="right"),
                TextRun(col_rate_right - CELL_PAD, y, "Rate", face, BODY_SIZE, WHITE, align="right"),
                TextRun(right - CELL_PAD, y, "Amount", face, BODY_SIZE, WHITE, align="right"),
            ]
        return _draw

    def draw_row(row: _Row) -> Callable[[float], list]:
        def _draw(top: float) -> list:
            out = []
            y = top - ROW_PAD - BODY_SIZE
            for ln in row.lines:
                out.append(TextRun(left + CELL_PAD, y, ln, body.face, BODY_SIZE, theme.secondary))
                y -= LINE_H
            first = top - ROW_PAD - BODY_SIZE
            for value, x in ((row.quantity, col_qty_right), (row.rate, col_rate_right), (row.amount, right)):
                if value:
                    out.append(TextRun(x - CELL_PAD, first, value, body.face, BODY_SIZE, theme.secondary,
                                       align="right"))
            out.append(RuleLine(left, top - row.height, right, top - row.height, RULE_GREY, 0.5))
            return out
        return _draw

    # Header stays with the first row
    ensure_room(header_h + rows[0].height)
    table_children = []
    place("table_header", header_h, draw_header(), gap=0)
    for row in rows:
        if not fits(row.height):
            new_page()
            place("table_header", header_h, draw_header(), gap=0)
        place("table_row", row.height, draw_row(row), gap=0)
    flush_table()
    table_children = None
    cursor += REGION_GAP

    # -----------------------------
    # Totals
    # -----------------------------
    totals = compute_totals(doc.items, doc.tax_rate)
    sum_x = right - TOTALS_W
    total_font = FontSpec(heading_bold.face, TOTAL_SIZE)

    def draw_totals(top: float) -> list:
        label_x = sum_x + 10
        y1 = top - 12
        y2 = y1 - 16
        y3 = y2 - 24
        return [
            TextRun(label_x, y1, "Subtotal:", body_bold.face, BODY_SIZE, theme.secondary),
            TextRun(right, y1, money(totals.subtotal), body.face, BODY_SIZE, theme.secondary, align="right"),
            TextRun(label_x, y2, f"{tax_label(totals.tax_rate)}:", body_bold.face, BODY_SIZE, theme.secondary),
            TextRun(right, y2, money(totals.tax), body.face, BODY_SIZE, theme.secondary, align="right"),
            RuleLine(sum_x, y2 - 8, right, y2 - 8, theme.accent, 1.0),
            TextRun(label_x, y3, "Total:", total_font.face, TOTAL_SIZE, theme.primary),
            TextRun(right, y3, money(totals.total), total_font.face, TOTAL_SIZE, theme.primary, align="right"),
        ]

    ensure_room(TOTALS_H)
    place("totals", TOTALS_H, draw_totals, x=sum_x, width=TOTALS_W)

    # -----------------------------
    # Notes (split line by line across pages)
    # -----------------------------
    note_lines = [fit_line(ln, content_w, body, "notes") for ln in wrap_paragraphs(doc.notes, content_w, body, measure)]
    start = 0
    while start < len(note_lines):
        ensure_room(HEADING_H + LINE_H)
        room = int((limit - cursor - HEADING_H) // LINE_H)
        chunk = note_lines[start:start + max(1, room)]
        heading = "NOTES" if start == 0 else "NOTES (cont.)"

        def draw_notes(top: float, chunk=chunk, heading=heading) -> list:
            out = [TextRun(left, top - HEADING_SIZE, heading, heading_bold.face, HEADING_SIZE, theme.primary)]
            y = top - HEADING_H - BODY_SIZE
            for ln in chunk:
                if ln:
                    out.append(TextRun(left, y, ln, body.face, BODY_SIZE, theme.secondary))
                y -= LINE_H
            return out

        place("notes", HEADING_H + LINE_H * len(chunk), draw_notes)
        start += len(chunk)

    # -----------------------------
    # Footers (bottom margin band, outside the content area)
    # -----------------------------
    total_pages = len(pages)
    footer_y = spec.bottom_margin / 2
    for page in pages:
        prims = [
            TextRun(left, footer_y, "Thank you for your business!", body.face, SMALL_SIZE, FOOTER_GREY),
            TextRun(right, footer_y, f"Page {page.index + 1} of {total_pages}", body.face, SMALL_SIZE,
                    FOOTER_GREY, align="right"),
        ]
        page.regions.append(
            LayoutRegion("footer", Box(left, footer_y - 3, content_w, SMALL_SIZE + 3), page.index, prims)
        )

    log.debug("Laid out invoice %s on %d page(s)", doc.invoice_number, total_pages)
    return PageLayout(pages=pages, page_spec=spec, overflows=overflows)
