from __future__ import annotations

import smtplib
import sys
from pathlib import Path

import pytest

TESTS_ROOT = Path(__file__).parent
REPO_ROOT = TESTS_ROOT.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from models import InvoiceDocument, LineItem, PartyInfo  # noqa: E402


def char_measure(text: str, face: str, size: float) -> float:
    """One point per character, whatever the font."""
    return float(len(text))


@pytest.fixture
def measure():
    return char_measure


def make_doc(items=None, notes: str = "", **overrides) -> InvoiceDocument:
    if items is None:
        items = (
            LineItem(description="Website redesign", quantity=10, rate=85.0, id="a"),
            LineItem(description="Hosting (12 months)", quantity=1, rate=240.0, id="b"),
        )
    fields = dict(
        invoice_number="INV-001",
        issue_date="01/15/2024",
        due_date="02/14/2024",
        issuer=PartyInfo(name="Jane Doe", email="jane@example.com", phone="555-0100"),
        bill_to=PartyInfo(
            name="Acme Corp",
            company="Acme Holdings",
            email="billing@acme.test",
            address="1 Main St\nSpringfield, IL 62701",
        ),
        items=tuple(items),
        notes=notes,
    )
    fields.update(overrides)
    return InvoiceDocument(**fields)


@pytest.fixture
def doc() -> InvoiceDocument:
    return make_doc(notes="Payment by bank transfer.\nThanks!")


class FakeSMTP:
    """Stands in for smtplib.SMTP; records sent messages."""

    sent: list = []
    fail = False

    def __init__(self, host, port, timeout=None) -> None:
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        return None

    def starttls(self) -> None:
        pass

    def login(self, user, password) -> None:
        pass

    def send_message(self, msg) -> None:
        if FakeSMTP.fail:
            raise smtplib.SMTPServerDisconnected("connection lost")
        FakeSMTP.sent.append(msg)


@pytest.fixture
def fake_smtp(monkeypatch):
    import delivery

    FakeSMTP.sent = []
    FakeSMTP.fail = False
    monkeypatch.setattr(delivery.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP
