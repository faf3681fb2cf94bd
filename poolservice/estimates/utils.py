# poolservice/estimates/utils.py

"""Helpers for the estimates blueprint."""

import re
import uuid

from poolservice.estimates.calculator import estimate_totals, line_item_total
from poolservice.estimates.status import allowed_next_statuses, is_valid_transition, status_label
from poolservice.formatters import format_currency, format_date, format_tax_rate, to_iso_utc
from poolservice.models import Estimate
from poolservice.validation import ValidationResult

NUMBER_PATTERN = re.compile(r'^EST-(\d+)$')


def generate_estimate_number(sequence: int) -> str:
    return f'EST-{sequence:04d}'


def next_estimate_number() -> str:
    """One past the highest EST-nnnn issued so far."""
    highest = 0
    for (number,) in Estimate.query.with_entities(Estimate.estimate_number):
        match = NUMBER_PATTERN.match(number or '')
        if match:
            highest = max(highest, int(match.group(1)))
    return generate_estimate_number(highest + 1)


def build_line_items(items) -> list:
    """Validated LineItem models -> stored dicts with their rounded totals."""
    return [
        {
            'id'              : it.id,
            'description'     : it.description,
            'quantity'        : it.quantity,
            'unit_price_cents': it.unit_price_cents,
            'total_cents'     : line_item_total(it.quantity, it.unit_price_cents),
        }
        for it in items
    ]


def apply_totals(est: Estimate) -> dict:
    """Recompute the stored subtotal/tax/total from the line items."""
    totals = estimate_totals(est.line_items or [], est.tax_rate or 0)
    est.subtotal_cents = totals['subtotal_cents']
    est.tax_amount_cents = totals['tax_amount_cents']
    est.total_cents = totals['total_cents']
    return totals


def check_status_change(current: str, target: str) -> ValidationResult:
    """Ask the transition table before a status write; never raises."""
    if not is_valid_transition(current, target):
        return ValidationResult.failure(
            'invalid_transition',
            f"Invalid status transition from '{current}' to '{target}'",
        )
    return ValidationResult(value=target)


def duplicate_estimate(est: Estimate, number: str) -> Estimate:
    """Copy of ``est`` as a new draft with fresh line item ids."""
    items = [dict(it, id=str(uuid.uuid4())) for it in (est.line_items or [])]
    copy = Estimate(
        estimate_number = number,
        customer_id     = est.customer_id,
        pool_id         = est.pool_id,
        status          = 'draft',
        line_items      = items,
        tax_rate        = est.tax_rate,
        notes           = est.notes,
        valid_until     = est.valid_until,
    )
    apply_totals(copy)
    return copy


def serialize_estimate(est: Estimate, detail: bool = False) -> dict:
    out = {
        'id'              : est.id,
        'estimate_number' : est.estimate_number,
        'customer_id'     : est.customer_id,
        'customer_name'   : est.customer.name if est.customer else None,
        'pool_id'         : est.pool_id,
        'status'          : est.status,
        'status_label'    : status_label(est.status),
        'subtotal_cents'  : est.subtotal_cents,
        'tax_rate'        : est.tax_rate,
        'tax_amount_cents': est.tax_amount_cents,
        'total_cents'     : est.total_cents,
        'total'           : format_currency(est.total_cents),
        'valid_until'     : est.valid_until.isoformat() if est.valid_until else None,
        'created_at'      : to_iso_utc(est.created_at) if est.created_at else None,
    }
    if detail:
        out.update({
            'line_items'        : est.line_items or [],
            'notes'             : est.notes,
            'subtotal'          : format_currency(est.subtotal_cents),
            'tax_amount'        : format_currency(est.tax_amount_cents),
            'tax_rate_display'  : format_tax_rate(est.tax_rate or 0),
            'valid_until_display': format_date(est.valid_until),
            'allowed_statuses'  : allowed_next_statuses(est.status),
        })
    return out
