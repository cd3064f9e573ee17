# models.py
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Optional

from totals import DEFAULT_TAX_RATE, Totals, compute_totals


# -----------------------------
# Theme
# -----------------------------
@dataclass(frozen=True)
class ThemeColors:
    primary: Optional[str] = None
    secondary: Optional[str] = None
    accent: Optional[str] = None


@dataclass(frozen=True)
class ThemeFonts:
    heading: Optional[str] = None
    body: Optional[str] = None


@dataclass(frozen=True)
class Theme:
    """
    A brand theme as applied by the user. Any field may be missing; the
    resolver fills the gaps one field at a time.
    """
    colors: ThemeColors = field(default_factory=ThemeColors)
    fonts: ThemeFonts = field(default_factory=ThemeFonts)


@dataclass(frozen=True)
class ResolvedTheme:
    primary: str
    secondary: str
    accent: str
    heading_font: str
    body_font: str


# -----------------------------
# Parties + line items
# -----------------------------
@dataclass(frozen=True)
class PartyInfo:
    name: str
    company: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""  # may contain newlines


def _new_item_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class LineItem:
    description: str
    quantity: float = 1.0
    rate: float = 0.0
    id: str = field(default_factory=_new_item_id)

    @property
    def amount(self) -> float:
        return self.quantity * self.rate


def add_item(items: tuple[LineItem, ...], item: LineItem) -> tuple[LineItem, ...]:
    return tuple(items) + (item,)


def remove_item(items: tuple[LineItem, ...], item_id: str) -> tuple[LineItem, ...]:
    return tuple(i for i in items if i.id != item_id)


def replace_item(items: tuple[LineItem, ...], item_id: str, **changes) -> tuple[LineItem, ...]:
    """
    Returns a new tuple with the matching item rebuilt from ``changes``.
    The amount is a property, so an edited quantity/rate can never leave a
    stale amount behind.
    """
    out = []
    found = False
    for item in items:
        if item.id == item_id:
            out.append(replace(item, **changes))
            found = True
        else:
            out.append(item)
    if not found:
        raise KeyError(f"Line item not found: id={item_id}")
    return tuple(out)


# -----------------------------
# Invoice snapshot
# -----------------------------
@dataclass(frozen=True)
class InvoiceDocument:
    """
    Immutable snapshot handed to the layout engine. Edits go through
    ``dataclasses.replace`` and produce a new document.
    """
    invoice_number: str
    issue_date: str
    issuer: PartyInfo
    bill_to: PartyInfo
    items: tuple[LineItem, ...] = ()
    due_date: str = ""
    notes: str = ""
    theme: Optional[Theme] = None
    tax_rate: float = DEFAULT_TAX_RATE

    def __post_init__(self):
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))

    # Computed, never stored
    @property
    def totals(self) -> Totals:
        return compute_totals(self.items, self.tax_rate)


# -----------------------------
# Dict payloads (CLI / JSON input)
# -----------------------------
def _party_from_dict(data: dict | None) -> PartyInfo:
    data = data or {}
    return PartyInfo(
        name=str(data.get("name") or "").strip(),
        company=str(data.get("company") or "").strip(),
        email=str(data.get("email") or "").strip(),
        phone=str(data.get("phone") or "").strip(),
        address=str(data.get("address") or "").strip(),
    )


def theme_from_dict(data: dict | None) -> Optional[Theme]:
    if not data:
        return None
    colors = data.get("colors") or {}
    fonts = data.get("fonts") or {}
    return Theme(
        colors=ThemeColors(
            primary=colors.get("primary"),
            secondary=colors.get("secondary"),
            accent=colors.get("accent"),
        ),
        fonts=ThemeFonts(heading=fonts.get("heading"), body=fonts.get("body")),
    )


def document_from_dict(data: dict, default_tax_rate: float = DEFAULT_TAX_RATE) -> InvoiceDocument:
    """
    Build a snapshot from the JSON shape used by the CLI:
    ``{"invoice_number", "issue_date", "due_date", "issuer": {...},
    "bill_to": {...}, "items": [{"description", "quantity", "rate"}],
    "notes", "theme": {"colors": {...}, "fonts": {...}}, "tax_rate"}``.
    """
    items = []
    for raw in data.get("items") or []:
        kwargs = {
            "description": str(raw.get("description") or "").strip(),
            "quantity": float(raw.get("quantity", 1) or 0.0),
            "rate": float(raw.get("rate", 0) or 0.0),
        }
        if raw.get("id"):
            kwargs["id"] = str(raw["id"])
        items.append(LineItem(**kwargs))

    tax_rate = data.get("tax_rate")
    return InvoiceDocument(
        invoice_number=str(data.get("invoice_number") or "").strip(),
        issue_date=str(data.get("issue_date") or "").strip(),
        due_date=str(data.get("due_date") or "").strip(),
        issuer=_party_from_dict(data.get("issuer")),
        bill_to=_party_from_dict(data.get("bill_to")),
        items=tuple(items),
        notes=str(data.get("notes") or "").rstrip(),
        theme=theme_from_dict(data.get("theme")),
        tax_rate=default_tax_rate if tax_rate is None else float(tax_rate),
    )
