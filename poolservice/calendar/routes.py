# poolservice/calendar/routes.py

"""Scheduling calendar.

Event times are stored as naive UTC.  Ranges asked for in local view dates
are widened to whole days in the configured time zone before querying.
"""

import logging

from flask import Blueprint, jsonify, request
from poolservice import db
from poolservice.calendar.schemas import (
    CANCELED,
    COMPLETED,
    SCHEDULED,
    CreateEvent,
    EVENT_STATUSES,
    EVENT_TYPES,
    EventRange,
    RescheduleEvent,
    UpdateEvent,
    VersionOnly,
    is_valid_event_transition,
)
from poolservice.errors import Conflict, InvalidTransition, NotFound, ValidationFailed, ensure_valid
from poolservice.formatters import (
    calendar_range_utc,
    default_event_times,
    event_duration_minutes,
    format_date_range,
    format_duration,
    parse_instant,
    relative_date_label,
    to_iso_utc,
)
from poolservice.models import CalendarEvent, Customer, Pool, Property
from poolservice.utils import get_or_404, naive_utc, request_data
from poolservice.validation import Change, FieldError, apply_updates, validate

log = logging.getLogger(__name__)

bp = Blueprint('calendar', __name__)


def serialize_event(ev: CalendarEvent) -> dict:
    duration = event_duration_minutes(ev.start_datetime, ev.end_datetime)
    return {
        'id'            : ev.id,
        'customer_id'   : ev.customer_id,
        'customer_name' : ev.customer.name if ev.customer else None,
        'property_id'   : ev.property_id,
        'pool_id'       : ev.pool_id,
        'title'         : ev.title,
        'description'   : ev.description,
        'event_type'    : ev.event_type,
        'event_type_label': EVENT_TYPES.get(ev.event_type, ev.event_type),
        'status'        : ev.status,
        'status_label'  : EVENT_STATUSES.get(ev.status, ev.status),
        'start_datetime': to_iso_utc(ev.start_datetime),
        'end_datetime'  : to_iso_utc(ev.end_datetime),
        'all_day'       : ev.all_day,
        'location_url'  : ev.location_url,
        'version'       : ev.version,
        'when'          : format_date_range(ev.start_datetime, ev.end_datetime),
        'day_label'     : relative_date_label(ev.start_datetime),
        'duration'      : format_duration(duration),
    }


def _check_links(customer_id, property_id, pool_id):
    """Property and pool, when given, must belong to the customer."""
    prop = None
    if property_id:
        prop = get_or_404(Property, property_id, 'Property')
        if prop.customer_id != customer_id:
            raise NotFound('Property')
    if pool_id:
        pool = get_or_404(Pool, pool_id, 'Pool')
        if pool.property.customer_id != customer_id:
            raise NotFound('Pool')
        if prop is not None and pool.property_id != prop.id:
            raise NotFound('Pool')


def _locked_event(event_id, version):
    """Load an event and check the caller saw its latest version."""
    ev = get_or_404(CalendarEvent, event_id, 'Event')
    if ev.version != version:
        log.warning('Stale write to event %s: version %s, current %s',
                    ev.id, version, ev.version)
        raise Conflict(
            'This event was changed by someone else. Reload and try again.',
            {'current_version': ev.version},
        )
    return ev


@bp.route('/events')
def list_events():
    params = ensure_valid(validate(EventRange, request.args.to_dict()))
    if params.start is not None:
        start, end = params.start, params.end
    else:
        bounds = calendar_range_utc(params.from_date, params.to_date)
        start, end = parse_instant(bounds['start']), parse_instant(bounds['end'])

    # anything overlapping the window
    query = CalendarEvent.query.filter(
        CalendarEvent.start_datetime <= naive_utc(end),
        CalendarEvent.end_datetime >= naive_utc(start),
    )
    if params.customer_id:
        query = query.filter_by(customer_id=params.customer_id)
    if params.status:
        query = query.filter_by(status=params.status)
    if params.event_type:
        query = query.filter_by(event_type=params.event_type)
    events = query.order_by(CalendarEvent.start_datetime).all()
    return jsonify(
        events=[serialize_event(ev) for ev in events],
        start=to_iso_utc(start),
        end=to_iso_utc(end),
    )


@bp.route('/default-times')
def default_times():
    return jsonify(default_event_times())


@bp.route('/events', methods=['POST'])
def create_event():
    data = ensure_valid(validate(CreateEvent, request_data()))
    customer = get_or_404(Customer, data.customer_id, 'Customer')
    if customer.is_deleted:
        raise NotFound('Customer')
    _check_links(customer.id, data.property_id, data.pool_id)

    ev = CalendarEvent(
        customer_id    = customer.id,
        property_id    = data.property_id,
        pool_id        = data.pool_id,
        title          = data.title,
        description    = data.description,
        event_type     = data.event_type,
        status         = SCHEDULED,
        start_datetime = naive_utc(data.start_datetime),
        end_datetime   = naive_utc(data.end_datetime),
        all_day        = data.all_day,
        location_url   = data.location_url,
        version        = 1,
    )
    db.session.add(ev)
    db.session.commit()
    log.info('Scheduled %s event %s for customer %s', ev.event_type, ev.id, customer.id)
    return jsonify(event=serialize_event(ev)), 201


@bp.route('/events/<event_id>')
def view_event(event_id):
    ev = get_or_404(CalendarEvent, event_id, 'Event')
    return jsonify(event=serialize_event(ev))


@bp.route('/events/<event_id>', methods=['PATCH', 'POST'])
def update_event(event_id):
    data = ensure_valid(validate(UpdateEvent, request_data()))
    ev = _locked_event(event_id, data.version)
    updates = data.updates()

    for name in ('start_datetime', 'end_datetime'):
        if updates[name].change is Change.SET:
            updates[name] = updates[name]._replace(value=naive_utc(updates[name].value))
    start = updates['start_datetime'].value or ev.start_datetime
    end = updates['end_datetime'].value or ev.end_datetime
    if end <= start:
        raise ValidationFailed([FieldError('end_datetime', 'End time must be after start time')])

    property_id = ev.property_id
    if updates['property_id'].change is not Change.UNCHANGED:
        property_id = updates['property_id'].value
    pool_id = ev.pool_id
    if updates['pool_id'].change is not Change.UNCHANGED:
        pool_id = updates['pool_id'].value
    _check_links(ev.customer_id, property_id, pool_id)

    apply_updates(ev, updates)
    ev.version += 1
    db.session.commit()
    return jsonify(event=serialize_event(ev))


@bp.route('/events/<event_id>/reschedule', methods=['POST'])
def reschedule_event(event_id):
    data = ensure_valid(validate(RescheduleEvent, request_data()))
    ev = _locked_event(event_id, data.version)
    ev.start_datetime = naive_utc(data.start_datetime)
    ev.end_datetime = naive_utc(data.end_datetime)
    if data.all_day is not None:
        ev.all_day = data.all_day
    ev.version += 1
    db.session.commit()
    log.info('Rescheduled event %s to %s', ev.id, to_iso_utc(ev.start_datetime))
    return jsonify(event=serialize_event(ev))


def _move_status(event_id, target):
    data = ensure_valid(validate(VersionOnly, request_data()))
    ev = _locked_event(event_id, data.version)
    if not is_valid_event_transition(ev.status, target):
        log.warning('Rejected event status change %s: %s -> %s', ev.id, ev.status, target)
        raise InvalidTransition(ev.status, target)
    ev.status = target
    ev.version += 1
    db.session.commit()
    log.info('Event %s is now %s', ev.id, target)
    return jsonify(event=serialize_event(ev))


@bp.route('/events/<event_id>/complete', methods=['POST'])
def complete_event(event_id):
    return _move_status(event_id, COMPLETED)


@bp.route('/events/<event_id>/cancel', methods=['POST'])
def cancel_event(event_id):
    return _move_status(event_id, CANCELED)


@bp.route('/events/<event_id>/reopen', methods=['POST'])
def reopen_event(event_id):
    return _move_status(event_id, SCHEDULED)


@bp.route('/events/<event_id>/delete', methods=['POST'])
def delete_event(event_id):
    ev = get_or_404(CalendarEvent, event_id, 'Event')
    db.session.delete(ev)
    db.session.commit()
    log.info('Deleted event %s', event_id)
    return jsonify(success=True)
