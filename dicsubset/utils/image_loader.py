"""
Image loading utilities.

Decodes image files with Pillow into normalised grayscale intensity grids.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple, Union

import numpy as np
from numpy.typing import NDArray
from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from ..core.errors import ImageIOError

logger = logging.getLogger(__name__)


def validate_image_format(img_array: NDArray) -> Tuple[bool, str]:
    """
    Validate image format for subset sampling.

    Supported formats:
    - Grayscale (H x W)
    - RGB (H x W x 3)
    - 8-bit, 16-bit or floating point depth

    Args:
        img_array: Image array to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if img_array is None:
        return False, "Image is None"

    if img_array.ndim not in (2, 3):
        return False, f"Invalid dimensions: {img_array.ndim}, expected 2 or 3"

    if img_array.ndim == 3:
        if img_array.shape[2] == 4:
            return False, "CMYK/RGBA images (4 channels) are not supported"
        if img_array.shape[2] != 3:
            return False, f"Invalid number of channels: {img_array.shape[2]}"

    if img_array.dtype not in (np.uint8, np.uint16, np.float32, np.float64):
        return False, f"Unsupported dtype: {img_array.dtype}"

    if img_array.shape[0] < 1 or img_array.shape[1] < 1:
        return False, "Image is empty"

    return True, ""


def to_double(img: NDArray) -> NDArray[np.float64]:
    """Convert image to float64 in range [0, 1]."""
    if img.dtype == np.float64:
        return img
    elif img.dtype == np.float32:
        return img.astype(np.float64)
    elif img.dtype == np.uint8:
        return img.astype(np.float64) / 255.0
    elif img.dtype == np.uint16:
        return img.astype(np.float64) / 65535.0
    else:
        return img.astype(np.float64)


def rgb_to_grayscale(img: NDArray) -> NDArray[np.float64]:
    """Convert RGB image to grayscale using ITU-R 601-2 luma transform."""
    img_double = to_double(img)
    if img_double.ndim == 2:
        return img_double
    return (
        0.299 * img_double[:, :, 0] +
        0.587 * img_double[:, :, 1] +
        0.114 * img_double[:, :, 2]
    )


def to_grayscale(img_array: NDArray) -> NDArray[np.float64]:
    """
    Validate an array and convert it to a float64 grayscale grid.

    Raises:
        ValueError: If the array is not a supported image format
    """
    is_valid, error = validate_image_format(img_array)
    if not is_valid:
        raise ValueError(f"Invalid image format: {error}")

    if img_array.ndim == 3:
        return rgb_to_grayscale(img_array)
    return to_double(img_array)


def read_image_array(path: Union[str, Path]) -> NDArray:
    """
    Decode an image file into a numpy array.

    Args:
        path: Path to image file

    Returns:
        Decoded pixel array (dtype as stored in the file)

    Raises:
        FileNotFoundError: If file not found
        ImageIOError: If the file cannot be decoded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")

    try:
        with PILImage.open(path) as pil_img:
            if pil_img.mode == "I;16B":
                pil_img = pil_img.convert("I;16")
            img_array = np.array(pil_img)
    except UnidentifiedImageError as e:
        raise ImageIOError(f"Could not decode image {path}: {e}") from e
    except OSError as e:
        raise ImageIOError(f"Could not read image {path}: {e}") from e

    # Pillow decodes 32-bit integer modes as int32
    if img_array.dtype == np.int32:
        img_array = img_array.astype(np.float64) / 65535.0

    logger.debug("Decoded %s: shape=%s dtype=%s", path, img_array.shape, img_array.dtype)
    return img_array


def load_grayscale(path: Union[str, Path]) -> NDArray[np.float64]:
    """
    Decode an image file into a normalised grayscale grid.

    Raises:
        FileNotFoundError: If file not found
        ImageIOError: If the file cannot be decoded or has an unsupported format
    """
    img_array = read_image_array(path)
    try:
        return to_grayscale(img_array)
    except ValueError as e:
        raise ImageIOError(f"{path}: {e}") from e
