"""Zone rasterization, geodesic cell area and zonal aggregation."""

from .schemas import (
    Zone,
    ZoneId,
    ZonalResult,
)

from .rasterize import (
    ZoneRaster,
    rasterize_zones,
)

from .area import cell_area_km2

from .aggregate import (
    aggregate,
    suitable_area_by_zone,
    total_suitable_area_km2,
    results_to_dataframe,
)

__all__ = [
    # Schemas
    'Zone',
    'ZoneId',
    'ZonalResult',
    # Rasterization
    'ZoneRaster',
    'rasterize_zones',
    # Area
    'cell_area_km2',
    # Aggregation
    'aggregate',
    'suitable_area_by_zone',
    'total_suitable_area_km2',
    'results_to_dataframe',
]
