"""
Threshold Reclassifier

Maps a continuous grid to a binary suitability mask using ordered interval
rules.

Each cell takes the output of the first interval that contains it. Rules
must partition the whole real line, so every measured value has exactly one
home. Boundary inclusivity is explicit per interval: a rule built from a
criterion is `(-inf, min) -> nodata`, `[min, max] -> 1`,
`(max, inf) -> nodata`, so values exactly on a threshold are suitable.

Design Principles:
- Nodata in, nodata out (never an error)
- Rules are validated on construction, not at classification time
- Vectorized over the whole grid
"""

import logging
import math
from typing import List, Sequence, Tuple

import numpy as np

from ..exceptions import InvalidRule
from ..raster.grid import Grid
from .schemas import SuitabilityCriterion

logger = logging.getLogger(__name__)

SUITABLE = 1
MASK_DTYPE = np.float32


def _is_nodata_value(value: float, nodata: float) -> bool:
    if np.isnan(nodata):
        return bool(np.isnan(value))
    return value == nodata


class Interval:
    """
    One reclassification interval.

    Attributes:
        lower: Lower bound (may be -inf)
        upper: Upper bound (may be +inf)
        output: Value written for matching cells (1 or the nodata sentinel)
        include_lower: Whether `lower` itself matches
        include_upper: Whether `upper` itself matches
    """

    def __init__(
        self,
        lower: float,
        upper: float,
        output: float,
        include_lower: bool = True,
        include_upper: bool = True
    ):
        self.lower = float(lower)
        self.upper = float(upper)
        self.output = float(output)
        self.include_lower = include_lower
        self.include_upper = include_upper

    def matches(self, values: np.ndarray) -> np.ndarray:
        """Boolean array of cells falling inside this interval."""
        above = values >= self.lower if self.include_lower else values > self.lower
        below = values <= self.upper if self.include_upper else values < self.upper
        return above & below

    def __repr__(self) -> str:
        left = '[' if self.include_lower else '('
        right = ']' if self.include_upper else ')'
        return f"{left}{self.lower}, {self.upper}{right} -> {self.output}"


class ReclassificationRule:
    """
    Ordered, exhaustive, non-overlapping list of intervals.

    Raises:
        InvalidRule: If the intervals leave a gap, overlap, are out of order
            or emit anything other than 1 or the nodata sentinel
    """

    def __init__(self, intervals: Sequence[Interval], nodata: float = np.nan):
        self.intervals: List[Interval] = list(intervals)
        self.nodata = nodata
        self._validate()

    def _validate(self) -> None:
        if not self.intervals:
            raise InvalidRule("Rule has no intervals")

        first, last = self.intervals[0], self.intervals[-1]
        if not (first.lower == -math.inf):
            raise InvalidRule(f"Rule does not start at -inf: first interval is {first}")
        if not (last.upper == math.inf):
            raise InvalidRule(f"Rule does not end at +inf: last interval is {last}")

        for interval in self.intervals:
            if interval.output != SUITABLE and not _is_nodata_value(interval.output, self.nodata):
                raise InvalidRule(
                    f"Interval {interval} emits {interval.output}; "
                    f"only {SUITABLE} or nodata ({self.nodata}) are allowed"
                )
            if interval.lower > interval.upper:
                raise InvalidRule(f"Interval {interval} has lower > upper")
            if interval.lower == interval.upper and not (interval.include_lower and interval.include_upper):
                raise InvalidRule(f"Interval {interval} is empty")

        for prev, nxt in zip(self.intervals, self.intervals[1:]):
            if prev.upper != nxt.lower:
                kind = "gap" if prev.upper < nxt.lower else "overlap"
                raise InvalidRule(f"Rule has a {kind} between {prev} and {nxt}")
            if prev.include_upper == nxt.include_lower:
                kind = "overlap" if prev.include_upper else "gap"
                raise InvalidRule(
                    f"Rule has a boundary {kind} at {prev.upper} between {prev} and {nxt}"
                )

    @classmethod
    def from_criterion(cls, criterion: SuitabilityCriterion, nodata: float = np.nan) -> 'ReclassificationRule':
        """
        Canonical rule for one criterion, inclusive on both thresholds.

        Examples:
            >>> c = SuitabilityCriterion(name="sst", min_threshold=11, max_threshold=30)
            >>> ReclassificationRule.from_criterion(c).intervals
            [(-inf, 11.0) -> nan, [11.0, 30.0] -> 1.0, (30.0, inf) -> nan]
        """
        lo, hi = criterion.min_threshold, criterion.max_threshold
        return cls(
            [
                Interval(-math.inf, lo, nodata, include_lower=True, include_upper=False),
                Interval(lo, hi, SUITABLE, include_lower=True, include_upper=True),
                Interval(hi, math.inf, nodata, include_lower=False, include_upper=True),
            ],
            nodata=nodata
        )

    @classmethod
    def from_tuples(
        cls,
        breaks: Sequence[Tuple[float, float, float]],
        nodata: float = np.nan
    ) -> 'ReclassificationRule':
        """
        Build a rule from (lower, upper, output) triples.

        Boundaries are half-open `[lower, upper)` except the last interval,
        which is closed on the right.
        """
        intervals = [
            Interval(lo, hi, out, include_lower=True, include_upper=(i == len(breaks) - 1))
            for i, (lo, hi, out) in enumerate(breaks)
        ]
        return cls(intervals, nodata=nodata)


def classify(grid: Grid, rule: ReclassificationRule) -> Grid:
    """
    Reclassify a grid into a {1, nodata} mask.

    Args:
        grid: Continuous input grid
        rule: Validated reclassification rule

    Returns:
        New mask Grid on the input's georeferencing, nodata = rule.nodata
    """
    values = grid.cells.astype(np.float64)
    unassigned = grid.valid_mask()
    out = np.full(grid.shape, rule.nodata, dtype=MASK_DTYPE)

    for interval in rule.intervals:
        hit = unassigned & interval.matches(values)
        out[hit] = interval.output
        unassigned &= ~hit

    logger.debug(
        f"Classified {grid.width}x{grid.height} grid: "
        f"{int(np.sum(out == SUITABLE))} suitable cells"
    )
    return grid.derive(out, nodata=rule.nodata)


def classify_criterion(grid: Grid, criterion: SuitabilityCriterion, nodata: float = np.nan) -> Grid:
    """Reclassify a grid against one criterion's inclusive range."""
    rule = ReclassificationRule.from_criterion(criterion, nodata=nodata)
    mask = classify(grid, rule)
    logger.info(
        f"Criterion '{criterion.name}' [{criterion.min_threshold}, {criterion.max_threshold}]: "
        f"{int(np.sum(mask.cells == SUITABLE))} of {mask.cells.size} cells suitable"
    )
    return mask
