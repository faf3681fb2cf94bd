# poolservice/properties/utils.py

"""Address rendering and serialization for properties."""


def format_address(p) -> str:
    """``123 Main St, Apt 4, Tampa, FL 33601``"""
    line2 = f', {p.address_line2}' if p.address_line2 else ''
    return f'{p.address_line1}{line2}, {p.city}, {p.state} {p.zip_code}'


def format_address_lines(p) -> list:
    lines = [p.address_line1]
    if p.address_line2:
        lines.append(p.address_line2)
    lines.append(f'{p.city}, {p.state} {p.zip_code}')
    return lines


def serialize_property(p, with_pools: bool = False) -> dict:
    out = {
        'id'           : p.id,
        'customer_id'  : p.customer_id,
        'address_line1': p.address_line1,
        'address_line2': p.address_line2,
        'city'         : p.city,
        'state'        : p.state,
        'zip_code'     : p.zip_code,
        'gate_code'    : p.gate_code,
        'access_notes' : p.access_notes,
        'address'      : format_address(p),
    }
    if with_pools:
        from poolservice.pools.utils import serialize_pool
        out['pools'] = [serialize_pool(pool) for pool in p.pools]
    return out
