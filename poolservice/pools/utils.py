# poolservice/pools/utils.py

"""Display helpers and serialization for pools."""

from poolservice.pools.schemas import POOL_TYPES, SURFACE_TYPES


def _ft(value) -> str:
    # 32.0 -> 32, 3.5 -> 3.5
    return f"{value:g}'"


def format_pool_dimensions(pool) -> str | None:
    """``32' × 16' × 3.5'-9' deep`` from whatever dimensions are known."""
    parts = []
    length, width = pool.length_ft, pool.width_ft
    if length and width:
        parts.append(f'{_ft(length)} × {_ft(width)}')
    elif length:
        parts.append(f'{_ft(length)} long')
    elif width:
        parts.append(f'{_ft(width)} wide')

    shallow, deep = pool.depth_shallow_ft, pool.depth_deep_ft
    if shallow and deep:
        parts.append(f"{_ft(shallow)[:-1]}'-{_ft(deep)} deep")
    elif shallow or deep:
        parts.append(f'{_ft(shallow or deep)} deep')

    return ' × '.join(parts) if parts else None


def format_pool_volume(volume_gallons) -> str | None:
    if not volume_gallons:
        return None
    return f'{volume_gallons:,} gal'


def pool_type_label(pool_type: str) -> str:
    return POOL_TYPES.get(pool_type, pool_type)


def surface_type_label(surface_type) -> str:
    if not surface_type:
        return 'Unknown'
    return SURFACE_TYPES.get(surface_type, surface_type)


def serialize_pool(pool) -> dict:
    return {
        'id'               : pool.id,
        'property_id'      : pool.property_id,
        'type'             : pool.type,
        'type_label'       : pool_type_label(pool.type),
        'surface_type'     : pool.surface_type,
        'surface_label'    : surface_type_label(pool.surface_type),
        'length_ft'        : pool.length_ft,
        'width_ft'         : pool.width_ft,
        'depth_shallow_ft' : pool.depth_shallow_ft,
        'depth_deep_ft'    : pool.depth_deep_ft,
        'volume_gallons'   : pool.volume_gallons,
        'equipment_notes'  : pool.equipment_notes,
        'dimensions'       : format_pool_dimensions(pool),
        'volume'           : format_pool_volume(pool.volume_gallons),
    }


def detach_pools(pool_ids) -> None:
    """Clear references to pools that are about to be deleted."""
    from poolservice.models import CalendarEvent, Estimate

    pool_ids = list(pool_ids)
    if not pool_ids:
        return
    Estimate.query.filter(Estimate.pool_id.in_(pool_ids)).update(
        {Estimate.pool_id: None}, synchronize_session=False
    )
    CalendarEvent.query.filter(CalendarEvent.pool_id.in_(pool_ids)).update(
        {CalendarEvent.pool_id: None}, synchronize_session=False
    )
