"""Raster primitives for the suitability engine: grids, alignment and composites."""

from .grid import (
    Grid,
    Extent,
    value_at,
    crop,
    is_conformant,
    check_conformant,
)

from .align import (
    align,
    resample,
)

from .composite import (
    mean_composite,
    kelvin_to_celsius,
)

__all__ = [
    # Grid
    'Grid',
    'Extent',
    'value_at',
    'crop',
    'is_conformant',
    'check_conformant',
    # Alignment
    'align',
    'resample',
    # Composites
    'mean_composite',
    'kelvin_to_celsius',
]
