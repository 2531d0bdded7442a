"""
Rendering of subset intensity buffers to image files.

The renderer scatters per-pixel intensities into a dense buffer and writes
it with Pillow. Pixels not covered by any point are left at zero.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import numpy as np
from numpy.typing import NDArray
from PIL import Image as PILImage

from ..core.errors import ImageIOError, InvalidArgumentError

logger = logging.getLogger(__name__)


def render_intensity_buffer(
    values: NDArray[np.float64],
    xs: NDArray[np.int64],
    ys: NDArray[np.int64],
    width: int,
    height: int,
) -> NDArray[np.float64]:
    """
    Scatter intensities into a dense (height x width) buffer.

    When a coordinate appears more than once the last value written wins.

    Args:
        values: Intensity per point
        xs: X-coordinates in buffer space
        ys: Y-coordinates in buffer space
        width: Buffer width
        height: Buffer height

    Returns:
        Dense float64 buffer

    Raises:
        InvalidArgumentError: If array lengths differ or a point falls outside the buffer
    """
    values = np.asarray(values, dtype=np.float64)
    xs = np.asarray(xs, dtype=np.int64)
    ys = np.asarray(ys, dtype=np.int64)

    if not (len(values) == len(xs) == len(ys)):
        raise InvalidArgumentError(
            f"Array lengths differ: values={len(values)}, xs={len(xs)}, ys={len(ys)}"
        )

    if width < 1 or height < 1:
        raise InvalidArgumentError(f"Invalid buffer size: {width} x {height}")

    buffer = np.zeros((height, width), dtype=np.float64)
    if len(values) == 0:
        return buffer

    if xs.min() < 0 or xs.max() >= width or ys.min() < 0 or ys.max() >= height:
        raise InvalidArgumentError(
            f"Point coordinates fall outside the {width} x {height} buffer"
        )

    flat = ys * width + xs
    # np.unique returns the first occurrence, so search the reversed order
    _, first_reversed = np.unique(flat[::-1], return_index=True)
    last = len(flat) - 1 - first_reversed
    buffer.flat[flat[last]] = values[last]

    return buffer


def to_pixel_depth(
    buffer: NDArray[np.float64],
    max_value: float = 1.0,
    bit_depth: int = 8,
) -> NDArray:
    """
    Scale a float buffer to an unsigned integer pixel array.

    Args:
        buffer: Intensities, where max_value maps to full scale
        max_value: Intensity mapped to the largest pixel value
        bit_depth: 8 or 16

    Returns:
        uint8 or uint16 array
    """
    if bit_depth == 8:
        dtype, full_scale = np.uint8, 255.0
    elif bit_depth == 16:
        dtype, full_scale = np.uint16, 65535.0
    else:
        raise InvalidArgumentError(f"bit_depth must be 8 or 16, got {bit_depth}")

    if max_value <= 0:
        raise InvalidArgumentError(f"max_value must be positive, got {max_value}")

    scaled = np.clip(buffer / max_value, 0.0, 1.0) * full_scale
    return np.round(scaled).astype(dtype)


def write_intensity_image(
    path: Union[str, Path],
    values: NDArray[np.float64],
    xs: NDArray[np.int64],
    ys: NDArray[np.int64],
    width: int,
    height: int,
    max_value: float = 1.0,
    bit_depth: int = 8,
) -> Path:
    """
    Write point intensities to an image file.

    Args:
        path: Output path (format is taken from the suffix, e.g. .tif)
        values: Intensity per point
        xs: X-coordinates in output image space
        ys: Y-coordinates in output image space
        width: Output image width
        height: Output image height
        max_value: Intensity mapped to full scale
        bit_depth: 8 or 16

    Returns:
        Path written

    Raises:
        InvalidArgumentError: If the inputs are malformed
        ImageIOError: If the file cannot be written
    """
    path = Path(path)
    buffer = render_intensity_buffer(values, xs, ys, width, height)
    pixels = to_pixel_depth(buffer, max_value=max_value, bit_depth=bit_depth)

    try:
        PILImage.fromarray(pixels).save(path)
    except (OSError, ValueError) as e:
        raise ImageIOError(f"Could not write image {path}: {e}") from e

    logger.debug("Wrote %s (%d x %d, %d-bit)", path, width, height, bit_depth)
    return path
