# poolservice/estimates/routes.py

import logging
from datetime import date, timedelta

from flask import Blueprint, current_app, jsonify, request
from poolservice import db
from poolservice.errors import Conflict, InvalidTransition, NotFound, ensure_valid
from poolservice.estimates.schemas import (
    CreateEstimate,
    ListEstimates,
    UpdateEstimate,
    UpdateEstimateStatus,
)
from poolservice.estimates.status import is_editable
from poolservice.estimates.utils import (
    apply_totals,
    build_line_items,
    check_status_change,
    duplicate_estimate,
    next_estimate_number,
    serialize_estimate,
)
from poolservice.models import Customer, Estimate, Pool
from poolservice.utils import get_or_404, request_data
from poolservice.validation import Change, apply_updates, validate

log = logging.getLogger(__name__)

bp = Blueprint('estimates', __name__)


def _check_pool(pool_id, customer_id):
    """The pool must exist and sit on one of the customer's properties."""
    if pool_id is None:
        return
    pool = get_or_404(Pool, pool_id, 'Pool')
    if pool.property.customer_id != customer_id:
        raise NotFound('Pool')


@bp.route('/')
def list_estimates():
    params = ensure_valid(validate(ListEstimates, request.args.to_dict()))
    query = Estimate.query
    if params.status:
        query = query.filter_by(status=params.status)
    if params.customer_id:
        query = query.filter_by(customer_id=params.customer_id)
    total = query.count()
    ests = (
        query.order_by(Estimate.created_at.desc())
        .offset(params.offset)
        .limit(params.limit)
        .all()
    )
    return jsonify(estimates=[serialize_estimate(e) for e in ests], total=total)


@bp.route('/', methods=['POST'])
def create_estimate():
    """Create a draft estimate with totals computed from its line items."""
    data = ensure_valid(validate(CreateEstimate, request_data()))
    customer = get_or_404(Customer, data.customer_id, 'Customer')
    if customer.is_deleted:
        raise NotFound('Customer')
    _check_pool(data.pool_id, customer.id)

    tax_rate = data.tax_rate
    if 'tax_rate' not in data.model_fields_set:
        tax_rate = current_app.config.get('DEFAULT_TAX_RATE', 0.0)
    valid_until = data.valid_until
    if 'valid_until' not in data.model_fields_set:
        valid_until = date.today() + timedelta(days=current_app.config['ESTIMATE_VALID_DAYS'])

    est = Estimate(
        estimate_number = next_estimate_number(),
        customer_id     = customer.id,
        pool_id         = data.pool_id,
        status          = 'draft',
        line_items      = build_line_items(data.line_items),
        tax_rate        = tax_rate,
        notes           = data.notes,
        valid_until     = valid_until,
    )
    apply_totals(est)
    db.session.add(est)
    db.session.commit()
    log.info('Created estimate %s (%s) total=%s', est.estimate_number, est.id, est.total_cents)
    return jsonify(estimate=serialize_estimate(est, detail=True)), 201


@bp.route('/<estimate_id>')
def view_estimate(estimate_id):
    est = get_or_404(Estimate, estimate_id, 'Estimate')
    return jsonify(estimate=serialize_estimate(est, detail=True))


@bp.route('/<estimate_id>', methods=['PATCH', 'POST'])
def update_estimate(estimate_id):
    est = get_or_404(Estimate, estimate_id, 'Estimate')
    if not is_editable(est.status):
        raise Conflict('Converted estimates cannot be edited', {'status': est.status})

    data = ensure_valid(validate(UpdateEstimate, request_data()))
    updates = data.updates()

    if updates['pool_id'].change is Change.SET:
        _check_pool(updates['pool_id'].value, est.customer_id)
    items = updates['line_items']
    if items.change is Change.SET:
        updates['line_items'] = items._replace(value=build_line_items(items.value))

    touched = apply_updates(est, updates)
    if 'line_items' in touched or 'tax_rate' in touched:
        apply_totals(est)
    db.session.commit()
    return jsonify(estimate=serialize_estimate(est, detail=True))


@bp.route('/<estimate_id>/status', methods=['POST'])
def update_status(estimate_id):
    est = get_or_404(Estimate, estimate_id, 'Estimate')
    target = ensure_valid(validate(UpdateEstimateStatus, request_data())).status

    result = check_status_change(est.status, target)
    if not result.ok:
        log.warning('Rejected status change for %s: %s -> %s',
                    est.estimate_number, est.status, target)
        raise InvalidTransition(est.status, target)

    previous, est.status = est.status, result.value
    db.session.commit()
    log.info('Estimate %s status %s -> %s', est.estimate_number, previous, est.status)
    return jsonify(estimate=serialize_estimate(est, detail=True))


@bp.route('/<estimate_id>/duplicate', methods=['POST'])
def duplicate(estimate_id):
    est = get_or_404(Estimate, estimate_id, 'Estimate')
    copy = duplicate_estimate(est, next_estimate_number())
    db.session.add(copy)
    db.session.commit()
    log.info('Duplicated estimate %s as %s', est.estimate_number, copy.estimate_number)
    return jsonify(estimate=serialize_estimate(copy, detail=True)), 201


@bp.route('/<estimate_id>/delete', methods=['POST'])
def delete_estimate(estimate_id):
    est = get_or_404(Estimate, estimate_id, 'Estimate')
    db.session.delete(est)
    db.session.commit()
    log.info('Deleted estimate %s', est.estimate_number)
    return jsonify(success=True)
