# totals.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Protocol

DEFAULT_TAX_RATE = 0.08

_CENT = Decimal("0.01")


class _Billable(Protocol):
    @property
    def amount(self) -> float: ...


@dataclass(frozen=True)
class Totals:
    subtotal: float
    tax_rate: float
    tax: float
    total: float


def round2(x) -> float:
    """Round half-up to cents. Goes through str() so 0.125 rounds to 0.13."""
    return float(Decimal(str(x)).quantize(_CENT, rounding=ROUND_HALF_UP))


def money(x) -> str:
    try:
        return f"${float(x):,.2f}"
    except Exception:
        return f"${x}"


def tax_label(tax_rate: float) -> str:
    rate = float(tax_rate or 0.0) * 100
    if rate:
        return f"Tax ({round(rate, 4):g}%)"
    return "Tax"


def compute_totals(items: Iterable[_Billable], tax_rate: float = DEFAULT_TAX_RATE) -> Totals:
    """
    Subtotal is the plain sum of line amounts; rounding happens once, on the
    tax, so per-line rounding never compounds.
    """
    if tax_rate < 0:
        raise ValueError(f"tax_rate must be >= 0, got {tax_rate!r}")

    subtotal = 0.0
    for item in items:
        subtotal += item.amount

    tax = round2(subtotal * tax_rate)
    return Totals(subtotal=subtotal, tax_rate=tax_rate, tax=tax, total=subtotal + tax)
