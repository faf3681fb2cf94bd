# poolservice/pools/routes.py

import logging

from flask import Blueprint, jsonify, request
from poolservice import db
from poolservice.errors import ensure_valid
from poolservice.estimates.calculator import pool_volume_estimate
from poolservice.models import Pool, Property
from poolservice.pools.schemas import CreatePool, UpdatePool, VolumeQuery
from poolservice.pools.utils import detach_pools, format_pool_volume, serialize_pool
from poolservice.utils import get_or_404, request_data
from poolservice.validation import apply_updates, validate

log = logging.getLogger(__name__)

bp = Blueprint('pools', __name__)


@bp.route('/', methods=['POST'])
def create_pool():
    data = ensure_valid(validate(CreatePool, request_data()))
    prop = get_or_404(Property, data.property_id, 'Property')

    pool = Pool(**data.model_dump())
    db.session.add(pool)
    db.session.commit()
    log.info('Created pool %s on property %s', pool.id, prop.id)
    return jsonify(pool=serialize_pool(pool)), 201


@bp.route('/volume-estimate')
def volume_estimate():
    """Gallons from ``?length_ft=&width_ft=&depth_shallow_ft=&depth_deep_ft=``."""
    dims = ensure_valid(validate(VolumeQuery, request.args.to_dict()))
    gallons = pool_volume_estimate(
        dims.length_ft, dims.width_ft, dims.depth_shallow_ft, dims.depth_deep_ft,
    )
    return jsonify(volume_gallons=gallons, volume=format_pool_volume(gallons))


@bp.route('/<pool_id>')
def view_pool(pool_id):
    pool = get_or_404(Pool, pool_id, 'Pool')
    return jsonify(pool=serialize_pool(pool))


@bp.route('/<pool_id>', methods=['PATCH', 'POST'])
def update_pool(pool_id):
    pool = get_or_404(Pool, pool_id, 'Pool')
    data = ensure_valid(validate(UpdatePool, request_data()))
    apply_updates(pool, data.updates())
    db.session.commit()
    return jsonify(pool=serialize_pool(pool))


@bp.route('/<pool_id>/delete', methods=['POST'])
def delete_pool(pool_id):
    pool = get_or_404(Pool, pool_id, 'Pool')
    detach_pools([pool.id])
    db.session.delete(pool)
    db.session.commit()
    log.info('Deleted pool %s', pool_id)
    return jsonify(success=True)
