from __future__ import annotations

import smtplib
from datetime import datetime

import pytest

from delivery import EmailAttachment, LocalSave, deliver, invoice_email
from errors import DeliveryError


def test_local_save_goes_into_year_folder(tmp_path) -> None:
    path = deliver(b"%PDF-1.4 test", "invoice-X.pdf", LocalSave(str(tmp_path)))

    year = datetime.now().strftime("%Y")
    assert path == str(tmp_path / year / "invoice-X.pdf")
    assert (tmp_path / year / "invoice-X.pdf").read_bytes() == b"%PDF-1.4 test"


def test_email_attaches_pdf(fake_smtp) -> None:
    dest = EmailAttachment("client@acme.test", "Invoice for Acme", "See attached.")

    where = deliver(b"%PDF-1.4 data", "invoice-INV-001.pdf", dest)

    assert where == "client@acme.test"
    (msg,) = fake_smtp.sent
    assert msg["To"] == "client@acme.test"
    assert msg["Subject"] == "Invoice for Acme"
    attachments = list(msg.iter_attachments())
    assert attachments[0].get_filename() == "invoice-INV-001.pdf"
    assert attachments[0].get_content() == b"%PDF-1.4 data"


def test_smtp_failure_becomes_delivery_error(fake_smtp) -> None:
    fake_smtp.fail = True

    with pytest.raises(DeliveryError) as info:
        deliver(b"%PDF", "invoice-1.pdf", EmailAttachment("a@b.test", "s", "b"))

    assert info.value.file_name == "invoice-1.pdf"
    assert isinstance(info.value.__cause__, smtplib.SMTPException)


def test_unsupported_destination() -> None:
    with pytest.raises(DeliveryError):
        deliver(b"%PDF", "invoice-1.pdf", "ftp://somewhere")


def test_invoice_email_defaults(doc) -> None:
    email = invoice_email(doc, "billing@acme.test")

    assert email.recipient == "billing@acme.test"
    assert email.subject == "Invoice for Acme Corp - 01/15/2024"
    assert "Total: $1,177.20" in email.body
    assert "Items: 2" in email.body


def test_header_line_breaks_become_delivery_error(fake_smtp) -> None:
    dest = EmailAttachment("a@b.test", "Invoice\nBcc: x@y.test", "body")

    with pytest.raises(DeliveryError) as info:
        deliver(b"%PDF", "invoice-1.pdf", dest)

    assert info.value.file_name == "invoice-1.pdf"
    assert fake_smtp.sent == []
