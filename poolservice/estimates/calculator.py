# poolservice/estimates/calculator.py

"""Money math for estimates.

All amounts are integer cents.  Every line item is rounded to a whole cent
first, the rounded lines are summed into the subtotal, and the tax is then
rounded once more on that subtotal.  Rounding once at the end instead can
give a different total, so keep the two stages.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Mapping, Optional, TypedDict

# US gallons per cubic foot (approximate, used for volume estimates)
GALLONS_PER_CUBIC_FOOT = Decimal('7.5')

MAX_CENTS = 2 ** 53 - 1


class EstimateTotals(TypedDict):
    subtotal_cents: int
    tax_amount_cents: int
    total_cents: int


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 0.07 as 0.07 rather than its binary float expansion
    return Decimal(str(value))


def round_half_up(value) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(_to_decimal(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def line_item_total(quantity, unit_price_cents: int) -> int:
    return round_half_up(_to_decimal(quantity) * unit_price_cents)


def calculate_tax(subtotal_cents: int, tax_rate) -> int:
    return round_half_up(subtotal_cents * _to_decimal(tax_rate))


def _item_field(item, snake: str, camel: str):
    if isinstance(item, Mapping):
        return item[snake] if snake in item else item[camel]
    return getattr(item, snake)


def estimate_totals(line_items: Iterable, tax_rate=0) -> EstimateTotals:
    """Compute subtotal, tax and total for ``line_items``.

    Items may be mappings (``quantity`` / ``unit_price_cents``, camelCase
    keys are accepted too) or objects exposing those attributes.
    """
    subtotal = sum(
        line_item_total(
            _item_field(item, 'quantity', 'quantity'),
            _item_field(item, 'unit_price_cents', 'unitPriceCents'),
        )
        for item in line_items
    )
    tax = calculate_tax(subtotal, tax_rate)
    return {
        'subtotal_cents': subtotal,
        'tax_amount_cents': tax,
        'total_cents': subtotal + tax,
    }


def pool_volume_estimate(length_ft, width_ft, depth_shallow_ft=None,
                         depth_deep_ft=None) -> Optional[int]:
    """Rough gallon count for a rectangular pool.

    This is a heuristic: length x width x average depth x 7.5.  The average
    depth is the mean of both depths when both are known, otherwise the one
    that is.  Returns ``None`` when length, width or both depths are missing.
    """
    if not length_ft or not width_ft:
        return None

    if depth_shallow_ft and depth_deep_ft:
        avg_depth = (_to_decimal(depth_shallow_ft) + _to_decimal(depth_deep_ft)) / 2
    elif depth_shallow_ft:
        avg_depth = _to_decimal(depth_shallow_ft)
    elif depth_deep_ft:
        avg_depth = _to_decimal(depth_deep_ft)
    else:
        return None

    volume = _to_decimal(length_ft) * _to_decimal(width_ft) * avg_depth * GALLONS_PER_CUBIC_FOOT
    return round_half_up(volume)


def dollars_to_cents(dollars) -> int:
    return round_half_up(_to_decimal(dollars) * 100)


def cents_to_dollars(cents: int) -> Decimal:
    return Decimal(cents) / 100


def is_valid_cents_amount(cents) -> bool:
    return (
        isinstance(cents, int)
        and not isinstance(cents, bool)
        and 0 <= cents <= MAX_CENTS
    )


def is_valid_tax_rate(rate) -> bool:
    if isinstance(rate, bool) or not isinstance(rate, (int, float, Decimal)):
        return False
    return 0 <= rate <= 1
