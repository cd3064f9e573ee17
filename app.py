import io
import re
from dataclasses import asdict
from datetime import datetime

from flask import Flask, jsonify, request, send_file

from config import Config
from delivery import EmailAttachment, invoice_email
from errors import DeliveryError, ValidationError
from logs import logger
from models import InvoiceDocument, LineItem, PartyInfo, Theme, ThemeColors, ThemeFonts
from pdf_service import export_invoice, generate_and_deliver
from sources import (
    THEME_PRESETS,
    PaymentContext,
    draft_payment_messages,
    enrich_client,
    expenses_to_line_items,
    generate_themes,
    match_receipts,
    theme_preset,
)

log = logger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# -----------------------------
# Helpers
# -----------------------------
def _to_float(s, default=0.0):
    try:
        s = (s or "").strip()
        return float(s) if s else float(default)
    except Exception:
        return float(default)


def _normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def _looks_like_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value or ""))


def _has_line_break(value: str) -> bool:
    return "\n" in value or "\r" in value


def _parse_repeating_fields(descriptions, quantities, rates):
    out = []
    n = max(len(descriptions), len(quantities), len(rates))
    for i in range(n):
        desc = (descriptions[i] if i < len(descriptions) else "").strip()
        qty = (quantities[i] if i < len(quantities) else "").strip()
        rate = (rates[i] if i < len(rates) else "").strip()
        if not desc and not qty and not rate:
            continue
        out.append((desc, qty, rate))
    return out


def _party(form, prefix: str) -> PartyInfo:
    return PartyInfo(
        name=(form.get(f"{prefix}_name") or "").strip(),
        company=(form.get(f"{prefix}_company") or "").strip(),
        email=_normalize_email(form.get(f"{prefix}_email")),
        phone=(form.get(f"{prefix}_phone") or "").strip(),
        address=(form.get(f"{prefix}_address") or "").strip(),
    )


def _theme_from_form(form) -> Theme | None:
    theme_id = (form.get("theme_id") or "").strip()
    if theme_id:
        preset = theme_preset(theme_id)
        if preset is None:
            raise ValidationError(f"Unknown theme: {theme_id}", field="theme_id")
        return preset.theme

    fields = {k: (form.get(f"theme_{k}") or "").strip() or None
              for k in ("primary", "secondary", "accent", "heading_font", "body_font")}
    if not any(fields.values()):
        return None
    return Theme(
        colors=ThemeColors(fields["primary"], fields["secondary"], fields["accent"]),
        fonts=ThemeFonts(fields["heading_font"], fields["body_font"]),
    )


def parse_invoice_form(form) -> InvoiceDocument:
    """
    Validate a submitted invoice form and build the immutable snapshot the
    renderer consumes. Raises ValidationError on the first problem found.
    """
    issuer = _party(form, "issuer")
    client = _party(form, "client")

    if not client.name:
        raise ValidationError("Please enter the client's name.", field="client_name")
    if not issuer.name:
        raise ValidationError("Please enter your name.", field="issuer_name")
    for field_name, value in (("client_name", client.name), ("issuer_name", issuer.name)):
        if _has_line_break(value):
            raise ValidationError("Names must fit on a single line.", field=field_name)
    if not _looks_like_email(issuer.email):
        raise ValidationError("Please enter a valid email address.", field="issuer_email")
    if client.email and not _looks_like_email(client.email):
        raise ValidationError("Please enter a valid client email address.", field="client_email")

    rows = _parse_repeating_fields(
        form.getlist("item_description"),
        form.getlist("item_quantity"),
        form.getlist("item_rate"),
    )
    if not rows:
        raise ValidationError("Add at least one line item.", field="item_description")

    items = []
    for idx, (desc, qty, rate) in enumerate(rows, start=1):
        if not desc:
            raise ValidationError(f"Line {idx}: please enter a description.", field="item_description")
        # blank quantity means the UI default of 1; garbage becomes 0 and is rejected
        quantity = _to_float(qty, 0.0) if qty else 1.0
        price = _to_float(rate)
        if quantity <= 0:
            raise ValidationError(f"Line {idx}: quantity must be greater than zero.", field="item_quantity")
        if price <= 0:
            raise ValidationError(f"Line {idx}: rate must be greater than zero.", field="item_rate")
        items.append(LineItem(description=desc, quantity=quantity, rate=price))

    tax_rate = _to_float(form.get("tax_rate"), Config.TAX_RATE)
    if tax_rate < 0:
        raise ValidationError("Tax rate cannot be negative.", field="tax_rate")

    return InvoiceDocument(
        invoice_number=(form.get("invoice_number") or "").strip(),
        issue_date=(form.get("issue_date") or "").strip() or datetime.now().strftime("%m/%d/%Y"),
        due_date=(form.get("due_date") or "").strip(),
        issuer=issuer,
        bill_to=client,
        items=tuple(items),
        notes=(form.get("notes") or "").rstrip(),
        theme=_theme_from_form(form),
        tax_rate=tax_rate,
    )


# -----------------------------
# App factory
# -----------------------------
def create_app():
    app = Flask(__name__)
    app.config.from_object(Config)

    @app.errorhandler(ValidationError)
    def _validation_error(exc: ValidationError):
        return jsonify({"error": exc.message, "field": exc.field}), 400

    @app.errorhandler(DeliveryError)
    def _delivery_error(exc: DeliveryError):
        return jsonify({"error": str(exc), "file_name": exc.file_name}), 502

    @app.route("/themes")
    def themes():
        return jsonify([preset.as_dict() for preset in THEME_PRESETS])

    # -----------------------------
    # PDF routes
    # -----------------------------
    @app.route("/invoices/pdf", methods=["POST"])
    def invoice_pdf_download():
        doc = parse_invoice_form(request.form)
        result = export_invoice(doc)
        return send_file(
            io.BytesIO(result.artifact),
            as_attachment=True,
            download_name=result.file_name,
            mimetype=result.mimetype,
        )

    @app.route("/invoices/email", methods=["POST"])
    def invoice_pdf_email():
        doc = parse_invoice_form(request.form)

        recipient = _normalize_email(request.form.get("recipient")) or doc.issuer.email
        if not _looks_like_email(recipient):
            raise ValidationError("Please enter a valid recipient address.", field="recipient")

        destination = invoice_email(doc, recipient)
        subject = (request.form.get("subject") or "").strip()
        if _has_line_break(subject):
            raise ValidationError("The subject must fit on a single line.", field="subject")
        body = (request.form.get("body") or "").strip()
        if subject or body:
            destination = EmailAttachment(recipient, subject or destination.subject, body or destination.body)

        result, sent_to = generate_and_deliver(doc, destination)
        return jsonify({
            "sent_to": sent_to,
            "file_name": result.file_name,
            "pages": result.page_count,
            "clipped": len(result.overflows),
        })

    # -----------------------------
    # Assistant endpoints (canned data sources)
    # -----------------------------
    @app.route("/assist/expenses", methods=["POST"])
    def assist_expenses():
        names = [f.filename for f in request.files.getlist("receipts") if f.filename]
        names += [n.strip() for n in request.form.getlist("receipt_name") if n.strip()]
        expenses = match_receipts(names)
        return jsonify({
            "expenses": [asdict(e) for e in expenses],
            "items": [asdict(i) for i in expenses_to_line_items(expenses)],
        })

    @app.route("/assist/themes", methods=["POST"])
    def assist_themes():
        description = request.form.get("brand_description") or ""
        has_logo = bool(request.files.get("logo"))
        return jsonify([preset.as_dict() for preset in generate_themes(description, has_logo)])

    @app.route("/assist/client", methods=["POST"])
    def assist_client():
        party = enrich_client(request.form.get("client_name"), request.form.get("client_email"))
        return jsonify(asdict(party))

    @app.route("/assist/messages", methods=["POST"])
    def assist_messages():
        form = request.form
        ctx = PaymentContext(
            invoice_number=(form.get("invoice_number") or "").strip(),
            client_name=(form.get("client_name") or "").strip(),
            amount=_to_float(form.get("amount")),
            days_overdue=int(_to_float(form.get("days_overdue"))),
            previous_contacts=int(_to_float(form.get("previous_contacts"))),
            dispute_reason=(form.get("dispute_reason") or "").strip(),
        )
        drafts = draft_payment_messages(ctx, form.get("kind") or "reminder", form.get("tone") or "professional")
        return jsonify([asdict(d) for d in drafts])

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True)
