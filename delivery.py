# delivery.py
import os
import smtplib
from dataclasses import dataclass
from datetime import datetime
from email.message import EmailMessage

from config import Config
from errors import DeliveryError
from logs import logger
from totals import money

log = logger(__name__)


@dataclass(frozen=True)
class LocalSave:
    directory: str = ""  # defaults to Config.EXPORTS_DIR
    by_year: bool = True


@dataclass(frozen=True)
class EmailAttachment:
    recipient: str
    subject: str
    body: str


def invoice_email(doc, recipient: str, when: datetime | None = None) -> EmailAttachment:
    """Default subject/body for sending an invoice as an attachment."""
    when = when or datetime.now()
    date_label = doc.issue_date or when.strftime("%m/%d/%Y")
    client = doc.bill_to.name or "client"
    totals = doc.totals
    lines = [
        f"Dear {doc.issuer.name or 'customer'},",
        "",
        "Your invoice has been generated. The PDF is attached to this email.",
        "",
        f"Invoice #: {doc.invoice_number or '-'}",
        f"Client: {client}",
        f"Items: {len(doc.items)}",
        f"Total: {money(totals.total)}",
        "",
        "Thank you for your business!",
    ]
    return EmailAttachment(
        recipient=recipient,
        subject=f"Invoice for {client} - {date_label}",
        body="\n".join(lines),
    )


def _save_local(artifact: bytes, file_name: str, dest: LocalSave) -> str:
    base_dir = dest.directory or Config.EXPORTS_DIR
    out_dir = os.path.join(base_dir, datetime.now().strftime("%Y")) if dest.by_year else base_dir
    os.makedirs(out_dir, exist_ok=True)

    path = os.path.abspath(os.path.join(out_dir, file_name))
    with open(path, "wb") as fh:
        fh.write(artifact)
    return path


def _send_email(artifact: bytes, file_name: str, dest: EmailAttachment) -> str:
    for header, value in (("To", dest.recipient), ("Subject", dest.subject)):
        if "\r" in value or "\n" in value:
            raise DeliveryError(f"{header} header may not contain line breaks", file_name)

    msg = EmailMessage()
    msg["From"] = Config.MAIL_FROM
    msg["To"] = dest.recipient
    msg["Subject"] = dest.subject
    msg.set_content(dest.body)
    msg.add_attachment(artifact, maintype="application", subtype="pdf", filename=file_name)

    with smtplib.SMTP(Config.SMTP_HOST, Config.SMTP_PORT, timeout=Config.SMTP_TIMEOUT) as smtp:
        if Config.SMTP_USE_TLS:
            smtp.starttls()
        if Config.SMTP_USERNAME:
            smtp.login(Config.SMTP_USERNAME, Config.SMTP_PASSWORD)
        smtp.send_message(msg)
    return dest.recipient


def deliver(artifact: bytes, file_name: str, destination) -> str:
    """
    Hand a rendered artifact to its destination.

    Returns the saved path (LocalSave) or the recipient (EmailAttachment).
    Disk and SMTP failures surface as DeliveryError; the artifact itself is
    untouched so the caller may retry.
    """
    try:
        if isinstance(destination, LocalSave):
            where = _save_local(artifact, file_name, destination)
        elif isinstance(destination, EmailAttachment):
            where = _send_email(artifact, file_name, destination)
        else:
            raise DeliveryError(f"Unsupported destination: {destination!r}", file_name)
    except (OSError, smtplib.SMTPException) as exc:
        raise DeliveryError(f"Could not deliver {file_name}: {exc}", file_name) from exc

    log.info("Delivered %s -> %s", file_name, where)
    return where
