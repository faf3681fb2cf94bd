import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from poolservice.estimates.calculator import (
    calculate_tax,
    dollars_to_cents,
    estimate_totals,
    is_valid_cents_amount,
    is_valid_tax_rate,
    line_item_total,
    pool_volume_estimate,
)


def test_totals_example():
    items = [
        {'quantity': 2, 'unit_price_cents': 150000},
        {'quantity': 1, 'unit_price_cents': 50000},
    ]
    totals = estimate_totals(items, 0.07)
    assert totals == {
        'subtotal_cents': 350000,
        'tax_amount_cents': 24500,
        'total_cents': 374500,
    }


def test_camel_case_items_accepted():
    items = [{'quantity': 3, 'unitPriceCents': 1999}]
    assert estimate_totals(items)['subtotal_cents'] == 5997


def test_line_items_rounded_before_summing():
    # each half cent rounds up on its own line: 1 + 1 + 1, not round(1.5)
    items = [{'quantity': 0.5, 'unit_price_cents': 1}] * 3
    totals = estimate_totals(items, 0)
    assert totals['subtotal_cents'] == 3


def test_tax_rounded_on_subtotal():
    items = [{'quantity': 1, 'unit_price_cents': 1001}]
    totals = estimate_totals(items, 0.0725)
    # 1001 * 0.0725 = 72.5725
    assert totals['tax_amount_cents'] == 73
    assert totals['total_cents'] == totals['subtotal_cents'] + totals['tax_amount_cents']


def test_total_identity_holds():
    cases = [
        ([{'quantity': 1.25, 'unit_price_cents': 3333}], 0.0825),
        ([{'quantity': 7, 'unit_price_cents': 99}, {'quantity': 0.3, 'unit_price_cents': 12345}], 0.06),
        ([{'quantity': 9999, 'unit_price_cents': 99999999}], 1),
        ([{'quantity': 2, 'unit_price_cents': 0}], 0.5),
    ]
    for items, rate in cases:
        totals = estimate_totals(items, rate)
        assert totals['total_cents'] == totals['subtotal_cents'] + totals['tax_amount_cents']


def test_line_item_total_rounds_half_up():
    assert line_item_total(1.5, 1) == 2
    assert line_item_total(2.5, 1) == 3
    assert line_item_total(0.333, 300) == 100
    assert line_item_total(2, 150000) == 300000


def test_line_item_total_matches_plain_product_for_whole_quantities():
    for quantity in (1, 2, 5, 12, 9999):
        for cents in (0, 1, 99, 12345, 99999999):
            assert line_item_total(quantity, cents) == quantity * cents


def test_objects_with_attributes():
    class Item:
        def __init__(self, quantity, unit_price_cents):
            self.quantity = quantity
            self.unit_price_cents = unit_price_cents

    totals = estimate_totals([Item(2, 500), Item(1, 250)], 0.1)
    assert totals['subtotal_cents'] == 1250
    assert totals['tax_amount_cents'] == 125


def test_empty_estimate_is_zero():
    assert estimate_totals([], 0.07) == {
        'subtotal_cents': 0, 'tax_amount_cents': 0, 'total_cents': 0,
    }


def test_calculate_tax():
    assert calculate_tax(350000, 0.07) == 24500
    assert calculate_tax(0, 0.5) == 0


def test_pool_volume_with_both_depths():
    assert pool_volume_estimate(32, 16, 3.5, 9) == 24000


def test_pool_volume_with_one_depth():
    assert pool_volume_estimate(20, 10, 4, None) == 6000
    assert pool_volume_estimate(20, 10, None, 4) == 6000


def test_pool_volume_needs_length_width_and_a_depth():
    assert pool_volume_estimate(None, 16, 3.5, 9) is None
    assert pool_volume_estimate(32, None, 3.5, 9) is None
    assert pool_volume_estimate(32, 16, None, None) is None


def test_money_helpers():
    assert dollars_to_cents('19.99') == 1999
    assert dollars_to_cents(0.015) == 2
    assert is_valid_cents_amount(100)
    assert not is_valid_cents_amount(-1)
    assert not is_valid_cents_amount(1.5)
    assert not is_valid_cents_amount(True)
    assert is_valid_tax_rate(0)
    assert is_valid_tax_rate(1)
    assert not is_valid_tax_rate(1.01)
    assert not is_valid_tax_rate('0.1')
