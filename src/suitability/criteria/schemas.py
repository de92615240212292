"""
Criterion schemas for the suitability engine.

A criterion is the acceptable range of one environmental variable for one
species. Bounds are inclusive on both ends.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field, validator


class SuitabilityCriterion(BaseModel):
    """Acceptable range of one environmental variable."""

    name: str = Field(..., description="Variable name (e.g. 'sst', 'depth')")
    min_threshold: float = Field(..., description="Lowest suitable value (inclusive)")
    max_threshold: float = Field(..., description="Highest suitable value (inclusive)")

    @validator('max_threshold')
    def max_not_below_min(cls, v, values):
        """Ensure the range is not inverted"""
        lower = values.get('min_threshold')
        if lower is not None and v < lower:
            raise ValueError(
                f"max_threshold ({v}) must be >= min_threshold ({lower})"
            )
        return v

    def contains(self, value: float) -> bool:
        """True if a single value lies inside the inclusive range."""
        return self.min_threshold <= value <= self.max_threshold


class SuitabilityCriteria(BaseModel):
    """Temperature and depth criteria for one pipeline run."""

    sst: SuitabilityCriterion = Field(..., description="Sea surface temperature range (°C)")
    depth: SuitabilityCriterion = Field(..., description="Depth range (m, sign convention caller's)")
    species_label: Optional[str] = Field(None, description="Opaque label for presentation only")

    @classmethod
    def from_mapping(cls, criteria) -> 'SuitabilityCriteria':
        """Accept an existing model or a {'sst': ..., 'depth': ...} mapping."""
        if isinstance(criteria, cls):
            return criteria
        return cls(**dict(criteria))

    def as_dict(self) -> Dict[str, SuitabilityCriterion]:
        return {'sst': self.sst, 'depth': self.depth}


def criteria_from_options(
    min_temp: float,
    max_temp: float,
    min_depth: float,
    max_depth: float,
    species_label: Optional[str] = None
) -> SuitabilityCriteria:
    """
    Build criteria from the flat configuration surface.

    Args:
        min_temp: Lowest suitable temperature (°C)
        max_temp: Highest suitable temperature (°C)
        min_depth: Lowest suitable depth (m)
        max_depth: Highest suitable depth (m)
        species_label: Carried through untouched

    Examples:
        >>> c = criteria_from_options(11, 30, -70, 0, species_label="oyster")
        >>> c.sst.max_threshold
        30.0
    """
    return SuitabilityCriteria(
        sst=SuitabilityCriterion(name="sst", min_threshold=min_temp, max_threshold=max_temp),
        depth=SuitabilityCriterion(name="depth", min_threshold=min_depth, max_threshold=max_depth),
        species_label=species_label
    )
