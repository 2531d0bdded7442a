"""
Subset class for dicsubset.

A subset is a fixed, ordered collection of pixel locations in a reference
image together with two intensity buffers: the reference intensities
sampled at the pixels themselves and the deformed intensities sampled at
the pixels carried through a DeformationMap.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

import numba
import numpy as np
from numpy.typing import NDArray, ArrayLike

from .deformation import DeformationMap
from .errors import InvalidArgumentError, OutOfRangeError
from .image import Image
from ..utils.image_writer import write_intensity_image
from ..utils.validation import is_int_bounded

logger = logging.getLogger(__name__)

# Coordinates are stored as int64
_COORD_LIMIT = 2 ** 62


class FillMode(str, Enum):
    """Target buffer of Subset.initialize."""

    FILL_REF = "ref"  # Reference intensities
    FILL_DEF = "def"  # Deformed intensities

    @classmethod
    def _missing_(cls, value):
        # Accept member names ("FILL_DEF") as well as values ("def")
        if isinstance(value, str):
            return cls.__members__.get(value.upper())
        return None


@contextmanager
def _thread_limit(total_threads: int):
    """Limit numba's parallel loops to total_threads (0 keeps the current setting)."""
    if total_threads <= 0:
        yield
        return

    previous = numba.get_num_threads()
    numba.set_num_threads(min(total_threads, numba.config.NUMBA_NUM_THREADS))
    try:
        yield
    finally:
        numba.set_num_threads(previous)


def _checked_int(value, name: str) -> int:
    valid, parsed, msg = is_int_bounded(value, -_COORD_LIMIT, _COORD_LIMIT)
    if not valid or isinstance(value, str):
        raise InvalidArgumentError(f"Invalid {name}: {msg or 'must be an integer'}")
    return parsed


def _checked_coords(values: ArrayLike, name: str) -> NDArray[np.int64]:
    arr = np.asarray(values)
    if arr.ndim != 1:
        raise InvalidArgumentError(f"{name} must be one-dimensional, got shape {arr.shape}")
    if arr.size and not np.issubdtype(arr.dtype, np.integer):
        if not np.issubdtype(arr.dtype, np.floating) or not np.all(np.mod(arr, 1) == 0):
            raise InvalidArgumentError(f"{name} must hold integer pixel coordinates")
    coords = np.array(arr, dtype=np.int64, copy=True)
    coords.setflags(write=False)
    return coords


class Subset:
    """
    Collection of pixels tracked between a reference and a deformed image.

    The centroid is the declared origin of the deformation map; it is not
    derived from the pixel coordinates. Geometry and centroid are fixed at
    construction. Each call to initialize() replaces one intensity buffer
    as a whole, and only after every pixel has been sampled successfully.

    Concurrent initialize() calls on the same instance are not supported.

    Examples:
        >>> subset = Subset.from_rectangle(125, 250, 13, 19)
        >>> subset.num_pixels()
        247
        >>> subset.initialize(ref_image)
        >>> subset.initialize(def_image, DeformationMap(u=2.5), FillMode.FILL_DEF)
        >>> subset.gamma()
    """

    def __init__(self, cx: int, cy: int, xs: ArrayLike, ys: ArrayLike):
        """
        Create a subset from parallel coordinate arrays.

        Args:
            cx: Centroid x-coordinate
            cy: Centroid y-coordinate
            xs: X-coordinate of each pixel, in order
            ys: Y-coordinate of each pixel, in order

        Raises:
            InvalidArgumentError: If the arrays differ in length, are empty,
                or hold non-integer values
        """
        self._cx = _checked_int(cx, "cx")
        self._cy = _checked_int(cy, "cy")

        xs = _checked_coords(xs, "xs")
        ys = _checked_coords(ys, "ys")
        if len(xs) != len(ys):
            raise InvalidArgumentError(
                f"xs and ys must have equal length, got {len(xs)} and {len(ys)}"
            )
        if len(xs) == 0:
            raise InvalidArgumentError("A subset must contain at least one pixel")

        self._xs = xs
        self._ys = ys
        self._ref: Optional[NDArray[np.float64]] = None
        self._def: Optional[NDArray[np.float64]] = None

    @classmethod
    def from_points(cls, cx: int, cy: int, xs: ArrayLike, ys: ArrayLike) -> "Subset":
        """Create a subset from parallel coordinate arrays (same as the constructor)."""
        return cls(cx, cy, xs, ys)

    @classmethod
    def from_rectangle(cls, cx: int, cy: int, width: int, height: int) -> "Subset":
        """
        Create a subset covering a width x height box centred on (cx, cy).

        Offsets along x run from -(width // 2) to -(width // 2) + width - 1,
        and likewise along y. Pixels are ordered row by row (y outer, x inner).

        Raises:
            InvalidArgumentError: If width or height is not a positive integer
        """
        cx = _checked_int(cx, "cx")
        cy = _checked_int(cy, "cy")
        for name, value in (("width", width), ("height", height)):
            valid, _, msg = is_int_bounded(value, 0, _COORD_LIMIT, include_lower=False)
            if not valid or isinstance(value, str):
                raise InvalidArgumentError(f"Invalid {name}: {msg or 'must be an integer'}")
        width = int(width)
        height = int(height)

        x_range = np.arange(width, dtype=np.int64) - width // 2 + cx
        y_range = np.arange(height, dtype=np.int64) - height // 2 + cy
        yy, xx = np.meshgrid(y_range, x_range, indexing="ij")

        return cls(cx, cy, xx.ravel(), yy.ravel())

    # ------------------------------------------------------------------
    # Geometry accessors
    # ------------------------------------------------------------------

    def num_pixels(self) -> int:
        return len(self._xs)

    def __len__(self) -> int:
        return len(self._xs)

    def centroid_x(self) -> int:
        return self._cx

    def centroid_y(self) -> int:
        return self._cy

    def x(self, i: int) -> int:
        """X-coordinate of pixel i (raises OutOfRangeError if i >= num_pixels())."""
        return int(self._xs[self._check_index(i)])

    def y(self, i: int) -> int:
        """Y-coordinate of pixel i (raises OutOfRangeError if i >= num_pixels())."""
        return int(self._ys[self._check_index(i)])

    def coordinates(self) -> Tuple[NDArray[np.int64], NDArray[np.int64]]:
        """Read-only (xs, ys) arrays in construction order."""
        return self._xs, self._ys

    def bounding_box(self) -> Tuple[int, int, int, int]:
        """Inclusive (min_x, min_y, max_x, max_y) of the pixel coordinates."""
        return (
            int(self._xs.min()),
            int(self._ys.min()),
            int(self._xs.max()),
            int(self._ys.max()),
        )

    def _check_index(self, i: int) -> int:
        if isinstance(i, bool) or not isinstance(i, (int, np.integer)):
            raise OutOfRangeError(f"Pixel index must be an integer, got {i!r}")
        if not 0 <= i < len(self._xs):
            raise OutOfRangeError(
                f"Pixel index {i} out of range for subset with {len(self._xs)} pixels"
            )
        return int(i)

    # ------------------------------------------------------------------
    # Intensities
    # ------------------------------------------------------------------

    @property
    def reference_intensities(self) -> Optional[NDArray[np.float64]]:
        """Read-only reference intensities (None before the first reference fill)."""
        return self._ref

    @property
    def deformed_intensities(self) -> Optional[NDArray[np.float64]]:
        """Read-only deformed intensities (None before the first deformed fill)."""
        return self._def

    def ref_intensities(self, i: int) -> float:
        return float(self._buffer(False)[self._check_index(i)])

    def def_intensities(self, i: int) -> float:
        return float(self._buffer(True)[self._check_index(i)])

    def is_initialized(self, use_deformed: bool = False) -> bool:
        return (self._def if use_deformed else self._ref) is not None

    def _buffer(self, use_deformed: bool) -> NDArray[np.float64]:
        values = self._def if use_deformed else self._ref
        if values is None:
            kind = "deformed" if use_deformed else "reference"
            raise InvalidArgumentError(f"The {kind} intensities have not been initialized")
        return values

    def initialize(
        self,
        image: Image,
        deformation: Optional[DeformationMap] = None,
        mode: Union[FillMode, str] = FillMode.FILL_REF,
    ) -> None:
        """
        Sample intensities from an image into one of the buffers.

        Without a deformation map and in FILL_REF mode, each pixel's stored
        image value is copied (exact lookup). Otherwise every pixel is
        carried through the map (identity if None) about the centroid and
        the image is interpolated at the mapped location.

        The target buffer is replaced only when every pixel has been sampled.

        Args:
            image: Source image
            deformation: Map from reference to deformed coordinates
            mode: FILL_REF to write reference intensities, FILL_DEF for deformed

        Raises:
            BoundsError: If any pixel (or mapped pixel) lies outside the image
        """
        try:
            mode = FillMode(mode)
        except ValueError:
            raise InvalidArgumentError(f"Unknown fill mode: {mode!r}")

        with _thread_limit(image.params.total_threads):
            if deformation is None and mode == FillMode.FILL_REF:
                values = image.exact_batch(self._xs, self._ys)
            else:
                if deformation is None:
                    deformation = DeformationMap()
                xs_def, ys_def = deformation.apply_batch(
                    self._xs, self._ys, self._cx, self._cy
                )
                values = image.interpolate_batch(xs_def, ys_def)

        values.setflags(write=False)
        if mode == FillMode.FILL_REF:
            self._ref = values
        else:
            self._def = values

        logger.debug(
            "Filled %s intensities of %d pixels from %s (map=%s)",
            mode.name, len(values), image.name or "image", deformation,
        )

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def mean(self, use_deformed: bool = False) -> float:
        """Mean of the reference (or deformed) intensities."""
        return float(np.mean(self._buffer(use_deformed)))

    def gamma(self) -> float:
        """
        Zero-normalised sum of squared differences between the buffers.

        Returns 0 for identical (or linearly related) intensity patterns and
        at most 4. Returns NaN if either buffer has zero variance.

        Raises:
            InvalidArgumentError: If either buffer has not been initialized
        """
        ref = self._buffer(False)
        cur = self._buffer(True)

        ref_zero = ref - ref.mean()
        cur_zero = cur - cur.mean()
        ref_norm = np.sqrt(np.sum(ref_zero * ref_zero))
        cur_norm = np.sqrt(np.sum(cur_zero * cur_zero))

        if ref_norm == 0.0 or cur_norm == 0.0:
            return np.nan

        diff = ref_zero / ref_norm - cur_zero / cur_norm
        return float(np.sum(diff * diff))

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def write_tif(
        self,
        path: Union[str, Path],
        use_deformed: bool = False,
        bit_depth: int = 8,
    ) -> Path:
        """
        Write the reference (or deformed) intensities as an image.

        The output covers the subset's bounding box; pixel i lands at
        (x(i) - min_x, y(i) - min_y) and uncovered pixels are black.

        Args:
            path: Output file path
            use_deformed: Write deformed instead of reference intensities
            bit_depth: 8 or 16

        Returns:
            Path written

        Raises:
            InvalidArgumentError: If the chosen buffer has not been initialized
            ImageIOError: If the file cannot be written
        """
        values = self._buffer(use_deformed)
        min_x, min_y, max_x, max_y = self.bounding_box()

        return write_intensity_image(
            path,
            values,
            self._xs - min_x,
            self._ys - min_y,
            width=max_x - min_x + 1,
            height=max_y - min_y + 1,
            bit_depth=bit_depth,
        )

    def __repr__(self) -> str:
        return (
            f"Subset(cx={self._cx}, cy={self._cy}, num_pixels={len(self._xs)}, "
            f"ref={'set' if self._ref is not None else 'unset'}, "
            f"def={'set' if self._def is not None else 'unset'})"
        )
