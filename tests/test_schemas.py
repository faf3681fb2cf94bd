import os
import sys
import uuid

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from poolservice.calendar.schemas import CreateEvent, EventRange, UpdateEvent
from poolservice.communications.schemas import CreateCommunication, ListCommunications, UpdateCommunication
from poolservice.customers.schemas import CreateCustomer, ListCustomers, UpdateCustomer
from poolservice.estimates.schemas import CreateEstimate, UpdateEstimate
from poolservice.notes.schemas import CreateNote
from poolservice.pools.schemas import CreatePool, UpdatePool
from poolservice.properties.schemas import CreateProperty
from poolservice.tags.schemas import CreateTag
from poolservice.validation import Change, apply_updates, validate

CUSTOMER_ID = str(uuid.uuid4())
PROPERTY_ID = str(uuid.uuid4())


def errors_by_field(result):
    return {e.field: e.message for e in result.errors}


# --- customers -------------------------------------------------------------

def test_customer_accepts_formatted_phone():
    result = validate(CreateCustomer, {'name': ' Jane ', 'phone': '(555) 123-4567'})
    assert result.ok
    assert result.value.name == 'Jane'
    assert result.value.email is None


def test_customer_short_phone():
    result = validate(CreateCustomer, {'name': 'Jane', 'phone': '12345'})
    assert errors_by_field(result) == {'phone': 'Phone number must be at least 10 characters'}


def test_customer_phone_with_letters():
    result = validate(CreateCustomer, {'name': 'Jane', 'phone': '555-CALL-NOW'})
    assert errors_by_field(result)['phone'] == 'Please enter a valid phone number'


def test_customer_blank_name_is_required():
    result = validate(CreateCustomer, {'name': '   ', 'phone': '5551234567'})
    assert errors_by_field(result) == {'name': 'Name is required'}


def test_customer_email_rules():
    result = validate(CreateCustomer, {'name': 'Jane', 'phone': '5551234567', 'email': ''})
    assert result.ok and result.value.email is None

    result = validate(CreateCustomer, {'name': 'Jane', 'phone': '5551234567',
                                       'email': 'jane@poolco.com'})
    assert result.value.email == 'jane@poolco.com'

    result = validate(CreateCustomer, {'name': 'Jane', 'phone': '5551234567',
                                       'email': 'not-an-email'})
    assert errors_by_field(result) == {'email': 'Please enter a valid email address'}


def test_missing_fields_all_reported():
    result = validate(CreateCustomer, {})
    assert set(errors_by_field(result)) == {'name', 'phone'}


def test_update_three_outcomes():
    result = validate(UpdateCustomer, {'id': CUSTOMER_ID, 'name': 'Bob', 'email': ''})
    assert result.ok
    updates = result.value.updates()
    assert 'id' not in updates
    assert updates['name'].change is Change.SET
    assert updates['name'].value == 'Bob'
    assert updates['email'].change is Change.CLEARED
    assert updates['phone'].change is Change.UNCHANGED
    assert updates['source'].change is Change.UNCHANGED
    assert set(result.value.changes()) == {'name', 'email'}


def test_update_cannot_clear_required_field():
    result = validate(UpdateCustomer, {'id': CUSTOMER_ID, 'name': None})
    assert 'name' in errors_by_field(result)


def test_update_requires_valid_id():
    result = validate(UpdateCustomer, {'id': 'abc', 'name': 'Bob'})
    assert errors_by_field(result) == {'id': 'Invalid customer ID'}


def test_apply_updates_touches_only_sent_fields():
    class Row:
        name = 'Jane'
        email = 'jane@poolco.com'
        source = 'referral'

    row = Row()
    data = validate(UpdateCustomer, {'id': CUSTOMER_ID, 'email': None, 'source': 'yelp'}).value
    touched = apply_updates(row, data.updates())
    assert sorted(touched) == ['email', 'source']
    assert row.name == 'Jane'
    assert row.email is None
    assert row.source == 'yelp'


# --- properties ------------------------------------------------------------

def test_property_state_is_upper_cased():
    result = validate(CreateProperty, {
        'customer_id': CUSTOMER_ID,
        'address_line1': '12 Palm Way',
        'city': 'Tampa',
        'state': 'fl',
        'zip_code': '33601-1234',
    })
    assert result.ok
    assert result.value.state == 'FL'


def test_property_bad_state_and_zip():
    result = validate(CreateProperty, {
        'customer_id': CUSTOMER_ID,
        'address_line1': '12 Palm Way',
        'city': 'Tampa',
        'state': 'ZZ',
        'zip_code': '3360',
    })
    errs = errors_by_field(result)
    assert errs['state'] == 'Please select a valid US state'
    assert errs['zip_code'] == 'ZIP code must be at least 5 digits'

    result = validate(CreateProperty, {
        'customer_id': CUSTOMER_ID,
        'address_line1': '12 Palm Way',
        'city': 'Tampa',
        'state': 'FL',
        'zip_code': '33601-12',
    })
    assert errors_by_field(result)['zip_code'].startswith('ZIP code must be 5 digits')


# --- pools -----------------------------------------------------------------

def test_pool_string_dimensions_fill_volume():
    result = validate(CreatePool, {
        'property_id': PROPERTY_ID,
        'type': 'inground',
        'length_ft': '32',
        'width_ft': '16',
        'depth_shallow_ft': '3.5',
        'depth_deep_ft': '9',
    })
    assert result.ok
    pool = result.value
    assert pool.length_ft == 32.0
    assert pool.volume_gallons == 24000


def test_pool_explicit_volume_kept():
    result = validate(CreatePool, {
        'property_id': PROPERTY_ID,
        'type': 'spa',
        'length_ft': 8,
        'width_ft': 8,
        'depth_deep_ft': 3,
        'volume_gallons': '1000',
    })
    assert result.value.volume_gallons == 1000


def test_pool_dimension_errors():
    result = validate(CreatePool, {
        'property_id': PROPERTY_ID,
        'type': 'lake',
        'length_ft': 'abc',
        'width_ft': '-4',
        'depth_deep_ft': '1000',
        'volume_gallons': '12.5',
    })
    errs = errors_by_field(result)
    assert errs['type'] == 'Please select a valid pool type'
    assert errs['length_ft'] == 'Must be a number'
    assert errs['width_ft'] == 'Must be a positive number'
    assert errs['depth_deep_ft'] == 'Value is too large'
    assert errs['volume_gallons'] == 'Volume must be a whole number'


def test_pool_blank_dimensions_are_none():
    result = validate(CreatePool, {'property_id': PROPERTY_ID, 'type': 'inground',
                                   'length_ft': '', 'width_ft': ' '})
    assert result.ok
    assert result.value.length_ft is None
    assert result.value.volume_gallons is None


def test_pool_update_clears_dimension():
    data = validate(UpdatePool, {'depth_shallow_ft': '', 'surface_type': 'pebble'}).value
    updates = data.updates()
    assert updates['depth_shallow_ft'].change is Change.CLEARED
    assert updates['surface_type'].value == 'pebble'
    assert updates['type'].change is Change.UNCHANGED


# --- estimates -------------------------------------------------------------

def _estimate(**overrides):
    data = {
        'customer_id': CUSTOMER_ID,
        'line_items': [
            {'description': 'Pump replacement', 'quantity': 1, 'unit_price_cents': 85000},
        ],
        'tax_rate': 0.07,
    }
    data.update(overrides)
    return data


def test_estimate_line_items_get_ids():
    result = validate(CreateEstimate, _estimate())
    assert result.ok
    item = result.value.line_items[0]
    assert uuid.UUID(item.id)
    assert item.description == 'Pump replacement'


def test_estimate_needs_a_line_item():
    result = validate(CreateEstimate, _estimate(line_items=[]))
    assert errors_by_field(result) == {'line_items': 'At least one line item is required'}


def test_estimate_line_item_errors_are_indexed():
    items = [
        {'description': 'ok', 'quantity': 1, 'unit_price_cents': 100},
        {'description': '', 'quantity': 0, 'unit_price_cents': -1},
    ]
    errs = errors_by_field(validate(CreateEstimate, _estimate(line_items=items)))
    assert errs['line_items.1.description'] == 'Description is required'
    assert errs['line_items.1.quantity'] == 'Quantity must be greater than 0'
    assert errs['line_items.1.unit_price_cents'] == 'Unit price cannot be negative'
    assert not any(f.startswith('line_items.0') for f in errs)


def test_estimate_limits():
    items = [{'description': 'x', 'quantity': 10000, 'unit_price_cents': 100_000_000}]
    errs = errors_by_field(validate(CreateEstimate, _estimate(line_items=items, tax_rate=1.5)))
    assert errs['line_items.0.quantity'] == 'Quantity must be at most 9999'
    assert errs['line_items.0.unit_price_cents'] == 'Unit price is too large'
    assert errs['tax_rate'] == 'Tax rate cannot exceed 100%'


def test_estimate_valid_until():
    result = validate(CreateEstimate, _estimate(valid_until='2025-03-01'))
    assert result.value.valid_until.isoformat() == '2025-03-01'

    errs = errors_by_field(validate(CreateEstimate, _estimate(valid_until='2025-02-30')))
    assert errs == {'valid_until': 'Invalid date format'}

    errs = errors_by_field(validate(CreateEstimate, _estimate(valid_until='03/01/2025')))
    assert errs == {'valid_until': 'Invalid date format'}


def test_estimate_rejects_non_finite_numbers():
    for bad in ('nan', 'NaN', 'inf', float('nan')):
        items = [{'description': 'Pump', 'quantity': bad, 'unit_price_cents': 100}]
        errs = errors_by_field(validate(CreateEstimate, _estimate(line_items=items)))
        assert 'line_items.0.quantity' in errs

        errs = errors_by_field(validate(CreateEstimate, _estimate(tax_rate=bad)))
        assert 'tax_rate' in errs

        errs = errors_by_field(validate(UpdateEstimate, {'tax_rate': bad}))
        assert 'tax_rate' in errs


def test_estimate_rejects_booleans_as_numbers():
    items = [{'description': 'Pump', 'quantity': True, 'unit_price_cents': True}]
    errs = errors_by_field(validate(CreateEstimate, _estimate(line_items=items, tax_rate=False)))
    assert errs['line_items.0.quantity'] == 'Quantity must be a number'
    assert errs['line_items.0.unit_price_cents'] == 'Unit price must be a whole number of cents'
    assert errs['tax_rate'] == 'Tax rate must be a number'


def test_estimate_update_partial():
    data = validate(UpdateEstimate, {'notes': '', 'tax_rate': 0.05}).value
    changes = data.changes()
    assert changes['notes'].change is Change.CLEARED
    assert changes['tax_rate'].value == 0.05
    assert 'line_items' not in changes


# --- notes -----------------------------------------------------------------

def test_note_content():
    errs = errors_by_field(validate(CreateNote, {'customer_id': CUSTOMER_ID, 'content': ' '}))
    assert errs == {'content': 'Note content is required'}

    errs = errors_by_field(validate(CreateNote, {'customer_id': CUSTOMER_ID,
                                                 'content': 'x' * 10001}))
    assert errs == {'content': 'Note content must be 10,000 characters or less'}


# --- calendar --------------------------------------------------------------

def _event(**overrides):
    data = {
        'customer_id': CUSTOMER_ID,
        'title': 'Site visit',
        'event_type': 'estimate_visit',
        'start_datetime': '2025-01-15T19:30:00.000Z',
        'end_datetime': '2025-01-15T20:30:00.000Z',
    }
    data.update(overrides)
    return data


def test_event_times_parsed_as_utc():
    result = validate(CreateEvent, _event())
    assert result.ok
    assert result.value.start_datetime.utcoffset().total_seconds() == 0
    assert result.value.start_datetime.hour == 19


def test_event_end_must_follow_start():
    result = validate(CreateEvent, _event(end_datetime='2025-01-15T19:30:00Z'))
    assert errors_by_field(result) == {'end_datetime': 'End time must be after start time'}


def test_event_bad_url_and_type():
    errs = errors_by_field(validate(CreateEvent, _event(location_url='ftp://x', event_type='party')))
    assert errs['location_url'] == 'Invalid URL format'
    assert errs['event_type'] == 'Invalid event type'


def test_event_update_needs_version():
    errs = errors_by_field(validate(UpdateEvent, {'title': 'New'}))
    assert 'version' in errs
    data = validate(UpdateEvent, {'version': 3, 'description': ''}).value
    updates = data.updates()
    assert 'version' not in updates
    assert updates['description'].change is Change.CLEARED


def test_event_range_needs_bounds():
    errs = errors_by_field(validate(EventRange, {}))
    assert errs == {'start': 'A date range is required'}

    errs = errors_by_field(validate(EventRange, {'from_date': '2025-01-15'}))
    assert errs == {'to_date': 'Both from_date and to_date are required'}

    result = validate(EventRange, {'from_date': '2025-01-12', 'to_date': '2025-01-18'})
    assert result.ok


def test_event_version_rejects_boolean():
    errs = errors_by_field(validate(UpdateEvent, {'version': True, 'title': 'x'}))
    assert errs == {'version': 'Version must be a positive integer'}


# --- communications --------------------------------------------------------

def _communication(**overrides):
    data = {
        'customer_id': CUSTOMER_ID,
        'type': 'call',
        'direction': 'inbound',
        'summary': '  Asked about a heater quote  ',
        'occurred_at': '2025-01-15T19:30:00Z',
    }
    data.update(overrides)
    return data


def test_communication_valid():
    result = validate(CreateCommunication, _communication())
    assert result.ok
    assert result.value.summary == 'Asked about a heater quote'
    assert result.value.occurred_at.hour == 19


def test_communication_errors():
    errs = errors_by_field(validate(CreateCommunication, _communication(
        type='fax', direction='sideways', summary=' ', occurred_at='yesterday',
    )))
    assert errs == {
        'type': 'Please select a communication type',
        'direction': 'Please select a direction',
        'summary': 'Summary is required',
        'occurred_at': 'Please enter a valid date and time',
    }

    errs = errors_by_field(validate(CreateCommunication, _communication(summary='x' * 5001)))
    assert errs == {'summary': 'Summary must be 5000 characters or less'}


def test_communication_update_is_partial():
    data = validate(UpdateCommunication, {'direction': 'outbound'}).value
    changes = data.changes()
    assert list(changes) == ['direction']

    errs = errors_by_field(validate(UpdateCommunication, {'occurred_at': None}))
    assert errs == {'occurred_at': 'Please enter a valid date and time'}


def test_communication_list_window():
    result = validate(ListCommunications, {'customer_id': CUSTOMER_ID, 'date_from': ''})
    assert result.ok and result.value.date_from is None

    errs = errors_by_field(validate(ListCommunications, {
        'customer_id': CUSTOMER_ID,
        'date_from': '2025-02-01T00:00:00Z',
        'date_to': '2025-01-01T00:00:00Z',
    }))
    assert errs == {'date_to': 'date_to must not be before date_from'}


# --- tags ------------------------------------------------------------------

def test_tag_schema():
    result = validate(CreateTag, {'name': ' VIP ', 'color': '#AABBCC'})
    assert result.value.name == 'VIP'
    assert result.value.color == '#aabbcc'

    errs = errors_by_field(validate(CreateTag, {'name': 'x' * 51, 'color': 'blue'}))
    assert errs == {
        'name': 'Tag name must be 50 characters or less',
        'color': 'Color must be a hex value like #3182ce',
    }


def test_customer_list_tag_filter_parsing():
    tag_a, tag_b = str(uuid.uuid4()), str(uuid.uuid4())
    result = validate(ListCustomers, {'tags': f'{tag_a}, {tag_b}'})
    assert result.value.tags == [tag_a, tag_b]
    assert validate(ListCustomers, {'tags': ''}).value.tags is None

    errs = errors_by_field(validate(ListCustomers, {'tags': 'vip'}))
    assert errs == {'tags': 'Invalid tag ID'}
