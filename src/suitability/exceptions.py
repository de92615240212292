"""
Error taxonomy for the suitability engine.

Alignment, rule and conformance errors are caller or pipeline-ordering bugs
and abort the run. Zone attribute errors are scoped to a single zone: the
aggregator logs them, flags the zone and carries on with the others.

Nodata is never an error. It is the "unsuitable" signal and flows through
reclassification, combination and aggregation as zero suitable area.
"""


class SuitabilityError(Exception):
    """Base class for all suitability engine errors"""
    pass


# Alignment

class AlignmentError(SuitabilityError):
    """Raised when two grids cannot be brought onto a common cell grid"""
    pass


class CrsMismatch(AlignmentError):
    """Raised when grids declare different coordinate reference systems"""
    pass


class ExtentMismatch(AlignmentError):
    """Raised when a requested extent does not intersect a grid at all"""
    pass


class EmptyIntersection(AlignmentError):
    """Raised when cropping one grid to another leaves no cells"""
    pass


# Reclassification

class RuleError(SuitabilityError):
    """Raised for malformed reclassification rules"""
    pass


class InvalidRule(RuleError):
    """Raised when rule intervals overlap, leave gaps or emit bad values"""
    pass


# Combination

class ConformanceError(SuitabilityError):
    """Raised when grids that must share a cell grid do not"""
    pass


class NonConformantInputs(ConformanceError):
    """Raised when masks passed to a cell-by-cell operation are not conformant"""
    pass


# Zones

class ZoneAttributeError(SuitabilityError):
    """Raised when a zone lacks an attribute the aggregation needs"""
    pass


class UnknownZoneField(ZoneAttributeError):
    """Raised when a zone has no total-area attribute to join against"""

    def __init__(self, zone_id, field: str = "total_area_km2"):
        self.zone_id = zone_id
        self.field = field
        super().__init__(f"Zone {zone_id!r} has no '{field}' attribute")
