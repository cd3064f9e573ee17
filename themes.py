# themes.py
from __future__ import annotations

import re
from typing import Optional

from models import ResolvedTheme, Theme

DEFAULT_PRIMARY = "#2563eb"
DEFAULT_SECONDARY = "#1f2937"
DEFAULT_ACCENT = "#f59e0b"
DEFAULT_FONT = "Helvetica"

DEFAULT_THEME = ResolvedTheme(
    primary=DEFAULT_PRIMARY,
    secondary=DEFAULT_SECONDARY,
    accent=DEFAULT_ACCENT,
    heading_font=DEFAULT_FONT,
    body_font=DEFAULT_FONT,
)

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{3})")


def _color(value: Optional[str], fallback: str) -> str:
    raw = (value or "").strip()
    if not _HEX_COLOR.fullmatch(raw):
        return fallback
    # reportlab reads "#fff" as 0x000fff, so short forms are expanded
    if len(raw) == 4:
        return "#" + "".join(ch * 2 for ch in raw[1:])
    return raw


def _font(value: Optional[str], fallback: str) -> str:
    raw = (value or "").strip()
    return raw or fallback


def resolve_theme(theme: Optional[Theme]) -> ResolvedTheme:
    """
    Merge an applied theme over the built-in defaults, one field at a time.

    Never raises: a missing theme, a missing section, a blank font or a color
    that is neither ``#rrggbb`` nor ``#rgb`` all fall back to the default for that field.
    """
    if theme is None:
        return DEFAULT_THEME

    colors = getattr(theme, "colors", None)
    fonts = getattr(theme, "fonts", None)
    return ResolvedTheme(
        primary=_color(getattr(colors, "primary", None), DEFAULT_PRIMARY),
        secondary=_color(getattr(colors, "secondary", None), DEFAULT_SECONDARY),
        accent=_color(getattr(colors, "accent", None), DEFAULT_ACCENT),
        heading_font=_font(getattr(fonts, "heading", None), DEFAULT_FONT),
        body_font=_font(getattr(fonts, "body", None), DEFAULT_FONT),
    )
