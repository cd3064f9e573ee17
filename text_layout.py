# text_layout.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from reportlab.pdfbase.pdfmetrics import stringWidth

# measure(text, face, size) -> width in points
Measure = Callable[[str, str, float], float]

CLIP_MARKER = "..."


@dataclass(frozen=True)
class FontSpec:
    face: str
    size: float


def default_measure(text: str, face: str, size: float) -> float:
    return stringWidth(text, face, size)


def font_face(family: str | None, bold: bool = False) -> str:
    """
    Map a theme font family onto one of the PDF base-14 faces. Brand fonts
    ("Inter", "Playfair Display", ...) are not embedded, so anything that is
    not a serif or monospace family renders as Helvetica.
    """
    fam = (family or "Helvetica").strip().lower()

    is_serif = (
        fam in {"times", "times-roman", "times new roman", "serif"}
        or "playfair" in fam
        or "georgia" in fam
        or (fam.endswith("serif") and "sans" not in fam)
    )
    if is_serif:
        return "Times-Bold" if bold else "Times-Roman"
    if "courier" in fam or "mono" in fam:
        return "Courier-Bold" if bold else "Courier"
    return "Helvetica-Bold" if bold else "Helvetica"


def wrap_text(text, max_width: float, font: FontSpec, measure: Optional[Measure] = None) -> list[str]:
    """
    Greedy word wrap.

    Tokens are whitespace-delimited. A token that is wider than
    ``max_width`` on its own is placed alone on its own line and never split;
    callers that need a hard width use :func:`clip_text` afterwards.
    """
    measure = measure or default_measure
    words = str(text or "").split()
    lines: list[str] = []
    current = ""

    for w in words:
        test = current + (" " if current else "") + w
        if not current or measure(test, font.face, font.size) <= max_width:
            current = test
        else:
            lines.append(current)
            current = w
    if current:
        lines.append(current)
    return lines or [""]


def wrap_paragraphs(text, max_width: float, font: FontSpec, measure: Optional[Measure] = None) -> list[str]:
    """
    Wrap multi-line text. Each hard line break starts a new paragraph;
    blank lines inside the text are kept as empty lines.
    """
    raw = str(text or "").strip()
    if not raw:
        return []

    out: list[str] = []
    for paragraph in raw.splitlines():
        if not paragraph.strip():
            out.append("")
            continue
        out.extend(wrap_text(paragraph, max_width, font, measure))
    return out


def clip_text(text: str, max_width: float, font: FontSpec, measure: Optional[Measure] = None,
              marker: str = CLIP_MARKER) -> str:
    """Truncate ``text`` so that ``text + marker`` fits ``max_width``."""
    measure = measure or default_measure
    if measure(text, font.face, font.size) <= max_width:
        return text

    lo, hi = 0, len(text)
    fit = 0
    while lo <= hi:
        mid = (lo + hi) // 2
        if measure(text[:mid] + marker, font.face, font.size) <= max_width:
            fit = mid
            lo = mid + 1
        else:
            hi = mid - 1
    return text[:fit] + marker
