"""
Canned data sources.

Stand-ins for the receipt matcher, brand theme generator, client lookup and
payment-reminder drafting. Each waits ``Config.SOURCE_DELAY_SECONDS`` and
then returns fixed data; callers treat the output as ordinary input.
"""
from __future__ import annotations

import time
from dataclasses import dataclass

from config import Config
from errors import ValidationError
from logs import logger
from models import LineItem, PartyInfo, Theme, ThemeColors, ThemeFonts

log = logger(__name__)


def _simulate_latency() -> None:
    if Config.SOURCE_DELAY_SECONDS > 0:
        time.sleep(Config.SOURCE_DELAY_SECONDS)


# -----------------------------
# Receipt matching
# -----------------------------
@dataclass(frozen=True)
class ExpenseItem:
    id: str
    description: str
    amount: float
    category: str
    date: str
    confidence: float


_CANNED_EXPENSES = (
    ExpenseItem("1", "Office Supplies - Printer Paper", 24.99, "Office Supplies", "2024-01-15", 0.95),
    ExpenseItem("2", "Business Lunch - Restaurant ABC", 87.50, "Meals & Entertainment", "2024-01-16", 0.88),
    ExpenseItem("3", "Travel - Taxi Fare", 15.30, "Transportation", "2024-01-16", 0.92),
    ExpenseItem("4", "Software License - Design Tool", 199.00, "Software", "2024-01-17", 0.97),
)

_RECEIPT_SUFFIXES = (".pdf", ".png", ".jpg", ".jpeg", ".gif", ".webp", ".heic")


def match_receipts(file_names: list[str]) -> list[ExpenseItem]:
    if not file_names:
        raise ValidationError("Upload at least one receipt.", field="receipts")
    bad = [f for f in file_names if not f.lower().endswith(_RECEIPT_SUFFIXES)]
    if bad:
        raise ValidationError(f"Only image and PDF receipts are supported: {', '.join(bad)}", field="receipts")

    _simulate_latency()
    log.info("Matched %d billable item(s) from %d receipt(s)", len(_CANNED_EXPENSES), len(file_names))
    return list(_CANNED_EXPENSES)


def expenses_to_line_items(expenses: list[ExpenseItem]) -> tuple[LineItem, ...]:
    # expense amount becomes the rate of a single-quantity line
    return tuple(LineItem(description=e.description, quantity=1, rate=e.amount) for e in expenses)


# -----------------------------
# Brand themes
# -----------------------------
@dataclass(frozen=True)
class BrandTheme:
    id: str
    name: str
    theme: Theme
    preview: str

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "preview": self.preview,
            "colors": {
                "primary": self.theme.colors.primary,
                "secondary": self.theme.colors.secondary,
                "accent": self.theme.colors.accent,
            },
            "fonts": {"heading": self.theme.fonts.heading, "body": self.theme.fonts.body},
        }


def _brand(id_, name, primary, secondary, accent, heading, body, preview) -> BrandTheme:
    return BrandTheme(
        id=id_,
        name=name,
        theme=Theme(ThemeColors(primary, secondary, accent), ThemeFonts(heading, body)),
        preview=preview,
    )


THEME_PRESETS = (
    _brand("1", "Professional Blue", "#2563eb", "#64748b", "#f59e0b", "Inter", "Open Sans",
           "Clean and trustworthy"),
    _brand("2", "Creative Purple", "#7c3aed", "#ec4899", "#06b6d4", "Poppins", "Roboto",
           "Bold and innovative with gradient accents"),
    _brand("3", "Elegant Dark", "#1f2937", "#6b7280", "#10b981", "Playfair Display", "Source Sans Pro",
           "Sophisticated serif headings"),
    _brand("4", "Tech Modern", "#0ea5e9", "#334155", "#f97316", "JetBrains Mono", "Inter",
           "Tech-savvy with modern typography"),
)


def generate_themes(brand_description: str = "", has_logo: bool = False) -> list[BrandTheme]:
    if not (brand_description or "").strip() and not has_logo:
        raise ValidationError("Provide a brand description or a logo.", field="brand_description")
    _simulate_latency()
    return list(THEME_PRESETS)


def theme_preset(theme_id: str) -> BrandTheme | None:
    for preset in THEME_PRESETS:
        if preset.id == str(theme_id):
            return preset
    return None


# -----------------------------
# Client lookup
# -----------------------------
def enrich_client(name: str = "", email: str = "") -> PartyInfo:
    name = (name or "").strip()
    email = (email or "").strip()
    if not name and not email:
        raise ValidationError("Provide a client name or email address.", field="client")

    _simulate_latency()
    return PartyInfo(
        name=name or "John Mitchell",
        company="TechCorp Solutions",
        email=email or "john.mitchell@techcorp.com",
        phone="+1 (555) 123-4567",
        address="123 Innovation Drive\nSan Francisco, CA 94105",
    )


# -----------------------------
# Payment reminder drafts
# -----------------------------
@dataclass(frozen=True)
class PaymentContext:
    invoice_number: str
    client_name: str
    amount: float
    days_overdue: int = 0
    previous_contacts: int = 0
    dispute_reason: str = ""


@dataclass(frozen=True)
class DraftMessage:
    kind: str
    tone: str
    subject: str
    body: str
    follow_up_days: int


MESSAGE_KINDS = ("reminder", "dispute", "final-notice")
MESSAGE_TONES = ("professional", "firm", "friendly")


def draft_payment_messages(ctx: PaymentContext, kind: str = "reminder", tone: str = "professional") -> list[DraftMessage]:
    if not ctx.invoice_number or not ctx.client_name or ctx.amount <= 0:
        raise ValidationError("Invoice number, client name and a positive amount are required.")
    if kind not in MESSAGE_KINDS:
        raise ValidationError(f"Unknown message kind: {kind}", field="kind")
    if tone not in MESSAGE_TONES:
        raise ValidationError(f"Unknown tone: {tone}", field="tone")

    _simulate_latency()
    amount = f"${ctx.amount:,.2f}"
    no = ctx.invoice_number

    if kind == "reminder":
        out = [DraftMessage(
            "reminder", tone,
            f"Payment Reminder: Invoice {no}",
            f"Dear {ctx.client_name},\n\nThis is a reminder that Invoice {no} for {amount} "
            f"was due {ctx.days_overdue} days ago. If you have already paid, please disregard "
            "this message.\n\nBest regards,\n[Your Name]",
            7,
        )]
        if ctx.days_overdue > 30:
            out.append(DraftMessage(
                "reminder", "firm",
                f"Urgent: Overdue Payment Required - Invoice {no}",
                f"Dear {ctx.client_name},\n\nInvoice {no} for {amount} is now {ctx.days_overdue} days "
                f"past due after {ctx.previous_contacts} previous contact(s). Please remit payment "
                "within 5 business days.\n\nSincerely,\n[Your Name]",
                5,
            ))
        return out

    if kind == "dispute":
        reason = f'Regarding your concern: "{ctx.dispute_reason}"\n\n' if ctx.dispute_reason else ""
        return [DraftMessage(
            "dispute", tone,
            f"Re: Dispute Resolution - Invoice {no}",
            f"Dear {ctx.client_name},\n\nThank you for raising your concerns about Invoice {no}.\n\n"
            f"{reason}Could we schedule a short call this week to resolve this?\n\nBest regards,\n[Your Name]",
            3,
        )]

    return [DraftMessage(
        "final-notice", "firm",
        f"FINAL NOTICE: Invoice {no} - Immediate Action Required",
        f"Dear {ctx.client_name},\n\nInvoice {no} for {amount} remains unpaid {ctx.days_overdue} days "
        f"past due despite {ctx.previous_contacts} previous attempt(s). Please remit payment or "
        "contact us within 48 hours.\n\n[Your Name]",
        2,
    )]
