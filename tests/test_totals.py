from __future__ import annotations

import pytest

from models import LineItem, add_item, remove_item, replace_item
from totals import compute_totals, money, round2, tax_label


def test_single_item_scenario() -> None:
    items = [LineItem(description="Consulting", quantity=2, rate=50.00)]

    totals = compute_totals(items, 0.08)

    assert items[0].amount == 100.00
    assert totals.subtotal == 100.00
    assert totals.tax == 8.00
    assert totals.total == 108.00


def test_three_items_scenario() -> None:
    items = [
        LineItem(description="Design", quantity=1, rate=100.0),
        LineItem(description="Build", quantity=4, rate=25.0),
        LineItem(description="Review", quantity=0.5, rate=100.0),
    ]

    totals = compute_totals(items)

    assert totals.subtotal == 250.00
    assert totals.tax == 20.00
    assert totals.total == 270.00


def test_amount_is_exact_product() -> None:
    for quantity, rate in [(3, 19.99), (0, 12.5), (1.5, 33.33), (7, 0)]:
        item = LineItem(description="x", quantity=quantity, rate=rate)
        assert item.amount == quantity * rate


def test_invariants_hold_for_mixed_items() -> None:
    items = [
        LineItem(description="Paper", quantity=1, rate=24.99),
        LineItem(description="Lunch", quantity=1, rate=87.50),
        LineItem(description="Taxi", quantity=3, rate=15.30),
        LineItem(description="License", quantity=1, rate=199.00),
    ]

    totals = compute_totals(items, 0.08)

    assert totals.subtotal == sum(i.amount for i in items)
    assert totals.tax == round2(totals.subtotal * 0.08)
    assert totals.total == totals.subtotal + totals.tax
    assert totals.tax_rate == 0.08


def test_round2_is_half_up() -> None:
    assert round2(0.125) == 0.13
    assert round2(2.675) == 2.68
    assert round2(-1.005) == -1.01
    assert round2(10) == 10.0


def test_empty_items() -> None:
    totals = compute_totals([], 0.08)
    assert (totals.subtotal, totals.tax, totals.total) == (0.0, 0.0, 0.0)


def test_negative_values_are_accepted_arithmetically() -> None:
    totals = compute_totals([LineItem(description="Refund", quantity=1, rate=-50.0)], 0.08)
    assert totals.subtotal == -50.0
    assert totals.tax == -4.0
    assert totals.total == -54.0


def test_negative_tax_rate_rejected() -> None:
    with pytest.raises(ValueError):
        compute_totals([LineItem(description="x", quantity=1, rate=1)], -0.01)


def test_custom_tax_rate() -> None:
    totals = compute_totals([LineItem(description="x", quantity=1, rate=200.0)], 0.0)
    assert totals.tax == 0.0
    assert totals.total == 200.0


def test_edit_produces_new_items_without_stale_amount() -> None:
    items = (LineItem(description="Hours", quantity=1, rate=80.0, id="h"),)
    before = compute_totals(items)

    edited = replace_item(items, "h", quantity=3)

    assert items[0].amount == 80.0
    assert edited[0].amount == 240.0
    assert compute_totals(edited).subtotal == 240.0
    assert before.subtotal == 80.0


def test_add_and_remove_item() -> None:
    items = add_item((), LineItem(description="a", rate=1, id="1"))
    items = add_item(items, LineItem(description="b", rate=2, id="2"))
    assert [i.id for i in remove_item(items, "1")] == ["2"]

    with pytest.raises(KeyError):
        replace_item(items, "missing", rate=3)


def test_display_helpers() -> None:
    assert money(1234.5) == "$1,234.50"
    assert tax_label(0.08) == "Tax (8%)"
    assert tax_label(0.075) == "Tax (7.5%)"
    assert tax_label(0) == "Tax"
