"""
Zone and result schemas for zonal aggregation.

Design Principles:
- A missing total-area attribute stays missing (None), never 0
- Percentages that cannot be computed are None with an explicit flag
- Percentages above 100 are kept and flagged, never clamped
"""

from typing import Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field, validator
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

# Type aliases
ZoneId = Union[int, str]
ResultFlag = Literal["ok", "exceeds_total_area", "zero_total_area", "missing_total_area"]


class Zone(BaseModel):
    """
    Polygon region over which suitable area is aggregated.

    Zones in one set should be disjoint; `id` must be unique within the set.
    """

    id: ZoneId = Field(..., description="Zone identifier, unique within a zone set")
    geometry: BaseGeometry = Field(..., description="Zone polygon in the grid's CRS")
    total_area_km2: Optional[float] = Field(None, ge=0.0, description="Reference zone area (km²)")

    @validator('geometry', pre=True)
    def geometry_from_mapping(cls, v):
        """Accept GeoJSON-like geometry mappings as well as shapely objects"""
        if isinstance(v, Mapping):
            v = shape(v)
        if not isinstance(v, BaseGeometry):
            raise ValueError(f"geometry must be a shapely geometry or GeoJSON mapping, got {type(v).__name__}")
        if v.is_empty:
            raise ValueError("geometry must not be empty")
        return v

    @classmethod
    def from_feature(
        cls,
        feature: Mapping[str, Any],
        id_field: str = "id",
        area_field: str = "area_km2"
    ) -> 'Zone':
        """
        Build a zone from a GeoJSON-like feature.

        The id is read from `properties[id_field]`, falling back to the
        feature's top-level "id". A missing `area_field` leaves
        `total_area_km2` unset so the aggregator can flag it.

        Args:
            feature: Mapping with "geometry" and "properties"
            id_field: Property holding the zone id
            area_field: Property holding the zone's total area in km²

        Raises:
            ValueError: If the feature has no id
        """
        properties = dict(feature.get('properties') or {})
        zone_id = properties.get(id_field, feature.get('id'))
        if zone_id is None:
            raise ValueError(f"Feature has no '{id_field}' property and no top-level id")

        return cls(
            id=zone_id,
            geometry=feature['geometry'],
            total_area_km2=properties.get(area_field)
        )

    class Config:
        """Pydantic config"""
        arbitrary_types_allowed = True


class ZonalResult(BaseModel):
    """Suitable area aggregated over one zone."""

    zone_id: ZoneId = Field(..., description="Zone identifier")
    suitable_area_km2: float = Field(..., ge=0.0, description="Sum of suitable cell areas (km²)")
    total_area_km2: Optional[float] = Field(None, description="Zone area joined from the zone attribute (km²)")
    pct_suitable: Optional[float] = Field(None, ge=0.0, description="100 × suitable / total, None if undefined")
    flag: ResultFlag = Field("ok", description="Data-quality flag")
    message: Optional[str] = Field(None, description="Explanation when flag is not 'ok'")
