import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from poolservice import create_app, db


def setup_app():
    app = create_app('testing')
    app.config.update(
        DEFAULT_TIMEZONE='America/New_York',
        DEFAULT_TAX_RATE=0.0,
        ESTIMATE_VALID_DAYS=30,
    )
    with app.app_context():
        db.drop_all()
        db.create_all()
    return app


@pytest.fixture
def app():
    app = setup_app()
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def customer(client):
    resp = client.post('/customers/', json={
        'name': 'Jane Waters',
        'phone': '(555) 123-4567',
        'email': 'jane@poolco.com',
        'source': 'referral',
    })
    assert resp.status_code == 201
    return resp.get_json()['customer']


@pytest.fixture
def pool(client, customer):
    resp = client.post('/properties/', json={
        'customer_id': customer['id'],
        'address_line1': '12 Palm Way',
        'city': 'Tampa',
        'state': 'fl',
        'zip_code': '33601',
    })
    assert resp.status_code == 201
    prop = resp.get_json()['property']
    resp = client.post('/pools/', json={
        'property_id': prop['id'],
        'type': 'inground',
        'length_ft': 32,
        'width_ft': 16,
        'depth_shallow_ft': 3.5,
        'depth_deep_ft': 9,
    })
    assert resp.status_code == 201
    return resp.get_json()['pool']
