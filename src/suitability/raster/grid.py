"""
Grid: Regular Georeferenced Raster

The basic unit of every raster operation in the suitability engine.

A Grid is a 2-D numeric field of shape (height, width) plus an affine
transform, a coordinate reference system identifier and a nodata sentinel.

Design Principles:
- Immutable (cells are copied on construction and made read-only)
- Every operation returns a new Grid
- NaN is always treated as missing, whatever the declared nodata value
- North-up grids only (no rotation terms in the transform)
"""

import logging
import math
from typing import Iterable, Optional, Tuple, Union

import numpy as np
from affine import Affine
from rasterio.crs import CRS
from rasterio.windows import Window
from rasterio.windows import transform as window_transform

from ..exceptions import ExtentMismatch, NonConformantInputs

logger = logging.getLogger(__name__)


# Type aliases
Extent = Tuple[float, float, float, float]  # (xmin, ymin, xmax, ymax)

# Tolerance when snapping extents to cell edges
_EDGE_EPS = 1e-9


class Grid:
    """
    Regular 2-D raster with georeferencing metadata.

    Attributes:
        cells: Read-only array of shape (height, width)
        transform: Affine mapping (col, row) to (x, y) of the cell's top-left corner
        crs_id: Coordinate reference system identifier (e.g. "EPSG:4326")
        nodata: Missing-value sentinel (NaN by default)
    """

    def __init__(
        self,
        cells,
        transform: Union[Affine, Iterable[float]],
        crs_id: str,
        nodata: float = np.nan
    ):
        arr = np.array(cells, copy=True)
        if arr.ndim != 2:
            raise ValueError(f"Grid cells must be 2-D, got shape {arr.shape}")
        if arr.size == 0:
            raise ValueError("Grid must have at least one cell")

        if not isinstance(transform, Affine):
            transform = Affine(*tuple(transform)[:6])
        if transform.b != 0 or transform.d != 0:
            raise ValueError("Rotated grids are not supported (transform has shear terms)")
        if transform.a == 0 or transform.e == 0:
            raise ValueError("Grid transform has zero cell size")

        # A NaN sentinel cannot live in an integer array
        if np.isnan(nodata) and not np.issubdtype(arr.dtype, np.floating):
            arr = arr.astype(np.float64)

        arr.setflags(write=False)

        self.cells = arr
        self.transform = transform
        self.crs_id = str(crs_id)
        self.nodata = nodata

    @property
    def height(self) -> int:
        return self.cells.shape[0]

    @property
    def width(self) -> int:
        return self.cells.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.cells.shape

    @property
    def res(self) -> Tuple[float, float]:
        """Absolute cell size (x, y) in CRS units."""
        return abs(self.transform.a), abs(self.transform.e)

    @property
    def crs(self) -> CRS:
        return CRS.from_user_input(self.crs_id)

    @property
    def bounds(self) -> Extent:
        """Grid extent as (xmin, ymin, xmax, ymax)."""
        x0, y0 = self.transform * (0, 0)
        x1, y1 = self.transform * (self.width, self.height)
        return min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1)

    def is_nodata(self, value) -> bool:
        """True if a single cell value means "no valid measurement"."""
        if value is None or np.isnan(value):
            return True
        return (not np.isnan(self.nodata)) and value == self.nodata

    def valid_mask(self) -> np.ndarray:
        """Boolean array, True where the cell holds a real measurement."""
        if np.issubdtype(self.cells.dtype, np.floating):
            valid = ~np.isnan(self.cells)
        else:
            valid = np.ones(self.shape, dtype=bool)
        if not np.isnan(self.nodata):
            valid &= self.cells != self.nodata
        return valid

    def derive(self, cells, nodata: Optional[float] = None) -> 'Grid':
        """New Grid on this grid's georeferencing with different cells."""
        cells = np.asarray(cells)
        if cells.shape != self.shape:
            raise ValueError(
                f"Derived cells shape {cells.shape} does not match grid shape {self.shape}"
            )
        return Grid(
            cells,
            transform=self.transform,
            crs_id=self.crs_id,
            nodata=self.nodata if nodata is None else nodata
        )

    def __repr__(self) -> str:
        return (
            f"Grid(width={self.width}, height={self.height}, crs_id={self.crs_id!r}, "
            f"nodata={self.nodata}, res={self.res})"
        )


def value_at(grid: Grid, row: int, col: int):
    """
    Read one cell.

    Args:
        grid: Source grid
        row: Row index (0 = top)
        col: Column index (0 = left)

    Returns:
        The stored value; missing cells return the nodata sentinel

    Raises:
        IndexError: If (row, col) lies outside the grid. Negative indices are
            rejected rather than wrapped.

    Examples:
        >>> g = Grid([[1.0, 2.0]], Affine(1, 0, 0, 0, -1, 1), "EPSG:4326")
        >>> value_at(g, 0, 1)
        2.0
    """
    if not (0 <= row < grid.height and 0 <= col < grid.width):
        raise IndexError(
            f"Cell ({row}, {col}) is outside grid of {grid.height} rows x {grid.width} cols"
        )
    return grid.cells[row, col].item()


def crop(grid: Grid, extent: Extent) -> Grid:
    """
    Restrict a grid to the cells intersecting an extent.

    Partially covered cells are kept, so the result snaps outward to whole
    cells of the source grid and never resamples.

    Args:
        grid: Source grid
        extent: (xmin, ymin, xmax, ymax) in the grid's CRS

    Returns:
        New Grid covering the intersection

    Raises:
        ValueError: If the extent is inverted
        ExtentMismatch: If the extent does not intersect the grid
    """
    xmin, ymin, xmax, ymax = extent
    if xmin > xmax or ymin > ymax:
        raise ValueError(f"Invalid extent {extent}: min must not exceed max")

    inverse = ~grid.transform
    c0, r0 = inverse * (xmin, ymax)
    c1, r1 = inverse * (xmax, ymin)

    col_start = max(0, math.floor(min(c0, c1) + _EDGE_EPS))
    col_stop = min(grid.width, math.ceil(max(c0, c1) - _EDGE_EPS))
    row_start = max(0, math.floor(min(r0, r1) + _EDGE_EPS))
    row_stop = min(grid.height, math.ceil(max(r0, r1) - _EDGE_EPS))

    if col_stop <= col_start or row_stop <= row_start:
        raise ExtentMismatch(
            f"Extent {extent} does not intersect grid bounds {grid.bounds}"
        )

    window = Window(col_start, row_start, col_stop - col_start, row_stop - row_start)
    logger.debug(f"Cropping {grid!r} to window {window}")

    return Grid(
        grid.cells[row_start:row_stop, col_start:col_stop],
        transform=window_transform(window, grid.transform),
        crs_id=grid.crs_id,
        nodata=grid.nodata
    )


def is_conformant(a: Grid, b: Grid) -> bool:
    """
    Check whether two grids share a cell grid.

    Conformant grids have the same width, height, transform (within floating
    tolerance) and coordinate reference system, and may be combined
    cell-by-cell.
    """
    return (
        a.width == b.width
        and a.height == b.height
        and a.transform.almost_equals(b.transform)
        and a.crs == b.crs
    )


def check_conformant(grids) -> None:
    """
    Raise NonConformantInputs unless every grid conforms to the first.

    Raises:
        NonConformantInputs: On an empty sequence or the first mismatch found
    """
    grids = list(grids)
    if not grids:
        raise NonConformantInputs("At least one grid is required")

    reference = grids[0]
    for i, other in enumerate(grids[1:], start=1):
        if not is_conformant(reference, other):
            raise NonConformantInputs(
                f"Grid {i} ({other!r}, transform={tuple(other.transform)[:6]}) is not "
                f"conformant with grid 0 ({reference!r}, transform={tuple(reference.transform)[:6]})"
            )
