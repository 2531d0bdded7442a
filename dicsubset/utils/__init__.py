"""Utility functions for dicsubset."""

from .image_loader import load_grayscale, validate_image_format
from .image_writer import write_intensity_image
from .validation import is_int_bounded

__all__ = [
    "load_grayscale",
    "validate_image_format",
    "write_intensity_image",
    "is_int_bounded",
]
