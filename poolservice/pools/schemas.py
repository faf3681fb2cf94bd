# poolservice/pools/schemas.py

from typing import Annotated, Optional

from pydantic import model_validator

from poolservice.estimates.calculator import pool_volume_estimate
from poolservice.validation import (
    MAX_VOLUME_GALLONS, Blank, Dimension, Schema, UpdateSchema, Volume, choice, identifier, text,
)

POOL_TYPES = {
    'inground': 'Inground',
    'above_ground': 'Above Ground',
    'spa': 'Spa',
    'other': 'Other',
}

SURFACE_TYPES = {
    'plaster': 'Plaster',
    'pebble': 'Pebble',
    'tile': 'Tile',
    'vinyl': 'Vinyl',
    'fiberglass': 'Fiberglass',
}

PoolType = Annotated[str, choice(POOL_TYPES, 'Please select a valid pool type')]
SurfaceType = Annotated[Optional[str], Blank,
                        choice(SURFACE_TYPES, 'Please select a valid surface type')]
EquipmentNotes = Annotated[Optional[str], Blank,
                           text(1000, 'Equipment notes must be 1000 characters or less')]


class CreatePool(Schema):
    property_id: Annotated[str, identifier('property')]
    type: PoolType
    surface_type: SurfaceType = None
    length_ft: Dimension = None
    width_ft: Dimension = None
    depth_shallow_ft: Dimension = None
    depth_deep_ft: Dimension = None
    volume_gallons: Volume = None
    equipment_notes: EquipmentNotes = None

    @model_validator(mode='after')
    def estimate_volume(self):
        if self.volume_gallons is None:
            estimate = pool_volume_estimate(
                self.length_ft, self.width_ft, self.depth_shallow_ft, self.depth_deep_ft,
            )
            if estimate and estimate <= MAX_VOLUME_GALLONS:
                self.volume_gallons = estimate
        return self


class UpdatePool(UpdateSchema):
    type: PoolType = None
    surface_type: SurfaceType = None
    length_ft: Dimension = None
    width_ft: Dimension = None
    depth_shallow_ft: Dimension = None
    depth_deep_ft: Dimension = None
    volume_gallons: Volume = None
    equipment_notes: EquipmentNotes = None


class VolumeQuery(Schema):
    length_ft: Dimension = None
    width_ft: Dimension = None
    depth_shallow_ft: Dimension = None
    depth_deep_ft: Dimension = None
