"""
Image class for dicsubset.

An immutable grid of grayscale intensities with exact (integer) and
subpixel (interpolated) sampling.
"""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

import numpy as np
from numpy.typing import NDArray, ArrayLike

from .errors import BoundsError, InvalidArgumentError
from .sampling_parameters import InterpolationMethod, SamplingParameters
from ..algorithms.interpolation import (
    gather_exact,
    interpolate_bilinear_batch,
    interpolate_bicubic_batch,
    interpolate_biquintic_batch,
    padded_bcoef,
)
from ..utils.image_loader import load_grayscale, to_grayscale

logger = logging.getLogger(__name__)


class ImageType(str, Enum):
    """How the image was obtained."""

    FILE = "file"   # Decoded from an image file
    LOAD = "load"   # Built from an in-memory array


@dataclass(eq=False)
class Image:
    """
    Grayscale image used as a sampling source.

    The intensity grid is copied on construction and made read-only, so an
    Image can be shared between any number of subsets and threads.

    Attributes:
        gs: Grayscale values (float64, shape: H x W), read-only
        params: Sampling parameters (selects the interpolation scheme)
        img_type: How the image was obtained
        height: Image height in pixels
        width: Image width in pixels
        name: Image filename
        path: Directory of the image file
    """

    gs: NDArray[np.float64] = field(repr=False)
    params: SamplingParameters = field(default_factory=SamplingParameters)
    img_type: ImageType = ImageType.LOAD
    name: str = ""
    path: str = ""
    height: int = field(init=False, default=0)
    width: int = field(init=False, default=0)
    _bcoef: Optional[NDArray[np.float64]] = field(init=False, default=None, repr=False)
    _bcoef_border: int = field(init=False, default=0, repr=False)

    def __post_init__(self):
        gs = np.array(self.gs, dtype=np.float64, order="C", copy=True)
        if gs.ndim != 2 or gs.size == 0:
            raise InvalidArgumentError(
                f"Intensity grid must be a non-empty 2D array, got shape {gs.shape}"
            )
        if not np.all(np.isfinite(gs)):
            raise InvalidArgumentError("Intensity grid contains non-finite values")
        gs.setflags(write=False)
        self.gs = gs
        self.height, self.width = gs.shape
        if not isinstance(self.params, SamplingParameters):
            raise InvalidArgumentError(
                f"params must be SamplingParameters, got {type(self.params).__name__}"
            )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_file(
        cls,
        filepath: Union[str, Path],
        params: Optional[SamplingParameters] = None,
    ) -> "Image":
        """
        Load image from file.

        Args:
            filepath: Path to image file
            params: Sampling parameters (defaults used if None)

        Returns:
            Loaded Image instance

        Raises:
            FileNotFoundError: If the file does not exist
            ImageIOError: If the file cannot be decoded
        """
        filepath = Path(filepath)
        gs = load_grayscale(filepath)
        logger.debug("Loaded image %s (%d x %d)", filepath, gs.shape[1], gs.shape[0])

        return cls(
            gs,
            params=params if params is not None else SamplingParameters(),
            img_type=ImageType.FILE,
            name=filepath.name,
            path=str(filepath.parent),
        )

    @classmethod
    def from_array(
        cls,
        img_array: NDArray,
        name: str = "array",
        params: Optional[SamplingParameters] = None,
    ) -> "Image":
        """
        Create image from numpy array.

        uint8 and uint16 data are normalised to [0, 1]; RGB data is
        converted to grayscale.

        Args:
            img_array: Image data as numpy array (H x W or H x W x 3)
            name: Optional name for the image
            params: Sampling parameters (defaults used if None)

        Returns:
            Image instance
        """
        try:
            gs = to_grayscale(np.asarray(img_array))
        except ValueError as e:
            raise InvalidArgumentError(str(e)) from e

        return cls(
            gs,
            params=params if params is not None else SamplingParameters(),
            img_type=ImageType.LOAD,
            name=name,
        )

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    def in_bounds(self, x: float, y: float) -> bool:
        """Check if (x, y) lies in [0, width) x [0, height)."""
        return 0 <= x < self.width and 0 <= y < self.height

    def exact(self, x: int, y: int) -> float:
        """
        Stored intensity at integer pixel (x, y).

        Raises:
            InvalidArgumentError: If x or y is not an integer
            BoundsError: If (x, y) is outside the image
        """
        x = _as_pixel_index(x, "x")
        y = _as_pixel_index(y, "y")
        if not self.in_bounds(x, y):
            raise BoundsError(x, y, self.width, self.height)
        return float(self.gs[y, x])

    def __call__(self, x: int, y: int) -> float:
        return self.exact(x, y)

    def interpolate(
        self,
        x: float,
        y: float,
        method: Optional[InterpolationMethod] = None,
    ) -> float:
        """
        Intensity at real-valued (x, y).

        Integer coordinates return exact(x, y). Non-integer coordinates
        are interpolated over a local neighbourhood; neighbours outside the
        grid are clamped to the edge.

        Args:
            x: X-coordinate, must lie in (-1, width)
            y: Y-coordinate, must lie in (-1, height)
            method: Interpolation scheme (defaults to params.interpolation)

        Raises:
            BoundsError: If (x, y) is outside the sampling domain
        """
        values = self.interpolate_batch(np.array([x], dtype=np.float64),
                                        np.array([y], dtype=np.float64),
                                        method=method)
        return float(values[0])

    def exact_batch(self, xs: ArrayLike, ys: ArrayLike) -> NDArray[np.float64]:
        """
        Stored intensities at many integer pixels.

        Raises:
            InvalidArgumentError: If the arrays differ in length or hold non-integers
            BoundsError: If any pixel is outside the image (reports the first)
        """
        xs = _as_index_array(xs, "xs")
        ys = _as_index_array(ys, "ys")
        if xs.shape != ys.shape:
            raise InvalidArgumentError(
                f"xs and ys must have equal length, got {len(xs)} and {len(ys)}"
            )

        values = gather_exact(self.gs, xs, ys)
        self._check_samples(values, xs, ys)
        return values

    def interpolate_batch(
        self,
        xs: ArrayLike,
        ys: ArrayLike,
        method: Optional[InterpolationMethod] = None,
    ) -> NDArray[np.float64]:
        """
        Interpolated intensities at many real-valued points.

        Raises:
            InvalidArgumentError: If the arrays differ in length
            BoundsError: If any point is outside the sampling domain (reports the first)
        """
        xs = np.ascontiguousarray(xs, dtype=np.float64).ravel()
        ys = np.ascontiguousarray(ys, dtype=np.float64).ravel()
        if xs.shape != ys.shape:
            raise InvalidArgumentError(
                f"xs and ys must have equal length, got {len(xs)} and {len(ys)}"
            )

        method = InterpolationMethod(method or self.params.interpolation)

        if method == InterpolationMethod.BILINEAR:
            values = interpolate_bilinear_batch(self.gs, xs, ys)
        elif method == InterpolationMethod.BICUBIC:
            values = interpolate_bicubic_batch(self.gs, xs, ys)
        else:
            bcoef = self.bcoef
            values = interpolate_biquintic_batch(
                self.gs, bcoef, self._bcoef_border, xs, ys
            )

        self._check_samples(values, xs, ys)
        return values

    @property
    def bcoef(self) -> NDArray[np.float64]:
        """Biquintic B-spline coefficients of the edge-padded grid (computed once per border)."""
        border = self.params.border_bcoef
        if self._bcoef is None or self._bcoef_border != border:
            bcoef = padded_bcoef(self.gs, border)
            bcoef.setflags(write=False)
            self._bcoef = bcoef
            self._bcoef_border = border
        return self._bcoef

    def _check_samples(self, values: NDArray[np.float64], xs: NDArray, ys: NDArray) -> None:
        bad = np.flatnonzero(np.isnan(values))
        if bad.size:
            i = bad[0]
            raise BoundsError(
                xs[i], ys[i], self.width, self.height,
                f"Coordinate ({xs[i]}, {ys[i]}) is outside the image extent "
                f"{self.width} x {self.height} ({bad.size} point(s) out of bounds)",
            )


def _as_pixel_index(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, numbers.Integral):
        return int(value)
    if not float(value).is_integer():
        raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")
    return int(value)


def _as_index_array(values: ArrayLike, name: str) -> NDArray[np.int64]:
    arr = np.asarray(values).ravel()
    if arr.size and not np.issubdtype(arr.dtype, np.integer):
        if not np.issubdtype(arr.dtype, np.floating) or not np.all(np.mod(arr, 1) == 0):
            raise InvalidArgumentError(f"{name} must hold integer pixel coordinates")
    return np.ascontiguousarray(arr, dtype=np.int64)
