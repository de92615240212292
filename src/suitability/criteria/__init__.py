"""Criterion reclassification and mask combination for the suitability engine."""

from .schemas import (
    SuitabilityCriterion,
    SuitabilityCriteria,
    criteria_from_options,
)

from .reclassify import (
    Interval,
    ReclassificationRule,
    classify,
    classify_criterion,
    SUITABLE,
)

from .combine import combine

__all__ = [
    # Schemas
    'SuitabilityCriterion',
    'SuitabilityCriteria',
    'criteria_from_options',
    # Reclassification
    'Interval',
    'ReclassificationRule',
    'classify',
    'classify_criterion',
    'SUITABLE',
    # Combination
    'combine',
]
