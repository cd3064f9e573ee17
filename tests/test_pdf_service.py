from __future__ import annotations

from datetime import datetime

import pytest

from conftest import make_doc
from delivery import LocalSave, deliver
from errors import DeliveryError
from models import LineItem
from page_layout import PageSpec, TextRun, layout_invoice
from pdf_service import _draw_primitive, export_invoice, generate_and_deliver, render_pdf, suggested_file_name
from themes import DEFAULT_THEME


def test_export_produces_pdf_bytes_and_name(doc) -> None:
    result = export_invoice(doc, page_spec=PageSpec())

    assert result.artifact.startswith(b"%PDF")
    assert result.file_name == "invoice-INV-001.pdf"
    assert result.mimetype == "application/pdf"
    assert result.page_count == 1
    assert result.overflows == []


def test_suggested_file_name() -> None:
    now = datetime(2024, 3, 9, 14, 5, 7)

    assert suggested_file_name("INV 2024/07") == "invoice-INV-202407.pdf"
    assert suggested_file_name("", now=now) == "invoice-20240309-140507.pdf"
    assert suggested_file_name("???", now=now) == "invoice-20240309-140507.pdf"
    assert suggested_file_name("A-1", ext=".png") == "invoice-A-1.png"


def test_invariant_export_is_byte_identical(doc) -> None:
    first = export_invoice(doc, page_spec=PageSpec(), invariant=True)
    second = export_invoice(doc, page_spec=PageSpec(), invariant=True)

    assert first.artifact == second.artifact


def test_page_count_matches_layout() -> None:
    items = [LineItem(description=f"Item {i}", quantity=1, rate=10.0, id=str(i)) for i in range(60)]
    doc = make_doc(items=items)
    layout = layout_invoice(doc, DEFAULT_THEME, PageSpec())

    result = export_invoice(doc, page_spec=PageSpec())

    assert result.page_count == layout.page_count
    assert f"/Count {layout.page_count}".encode() in result.artifact


def test_render_pdf_sets_title(doc) -> None:
    layout = layout_invoice(doc, DEFAULT_THEME, PageSpec())

    pdf = render_pdf(layout, title="Invoice - INV-001", invariant=True)

    assert b"Invoice - INV-001" in pdf


def test_clipped_export_still_renders() -> None:
    doc = make_doc(items=[LineItem(description="y" * 500, quantity=1, rate=1.0, id="y")])

    result = export_invoice(doc, page_spec=PageSpec())

    assert result.artifact.startswith(b"%PDF")
    assert len(result.overflows) == 1


def test_unknown_primitive_is_rejected() -> None:
    with pytest.raises(TypeError):
        _draw_primitive(None, object())


def test_generate_and_deliver_saves_file(doc, tmp_path) -> None:
    result, location = generate_and_deliver(doc, LocalSave(str(tmp_path), by_year=False), page_spec=PageSpec())

    assert location == str(tmp_path / "invoice-INV-001.pdf")
    with open(location, "rb") as fh:
        assert fh.read() == result.artifact


def test_failed_delivery_keeps_artifact_for_retry(doc, tmp_path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")

    with pytest.raises(DeliveryError) as info:
        generate_and_deliver(doc, LocalSave(str(blocker), by_year=False), page_spec=PageSpec())

    result = info.value.result
    assert result is not None
    assert result.artifact.startswith(b"%PDF")
    assert info.value.file_name == "invoice-INV-001.pdf"

    location = deliver(result.artifact, result.file_name, LocalSave(str(tmp_path), by_year=False))
    assert (tmp_path / "invoice-INV-001.pdf").read_bytes() == result.artifact
    assert location.endswith("invoice-INV-001.pdf")


def test_text_runs_reach_the_canvas(doc) -> None:
    class Recorder:
        def __init__(self) -> None:
            self.calls = []

        def setFillColor(self, color) -> None:
            pass

        def setFont(self, face, size) -> None:
            self.calls.append(("font", face, size))

        def drawRightString(self, x, y, text) -> None:
            self.calls.append(("right", text))

        def drawString(self, x, y, text) -> None:
            self.calls.append(("left", text))

    rec = Recorder()
    _draw_primitive(rec, TextRun(10, 10, "$1.00", "Helvetica", 10, "#000000", align="right"))
    _draw_primitive(rec, TextRun(10, 10, "INVOICE", "Helvetica-Bold", 24, "#2563eb"))

    assert rec.calls == [
        ("font", "Helvetica", 10),
        ("right", "$1.00"),
        ("font", "Helvetica-Bold", 24),
        ("left", "INVOICE"),
    ]
