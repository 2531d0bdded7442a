"""Core data structures and classes for dicsubset."""

from .errors import (
    SubsetError,
    InvalidArgumentError,
    OutOfRangeError,
    BoundsError,
    ImageIOError,
)
from .sampling_parameters import InterpolationMethod, SamplingParameters
from .image import Image, ImageType
from .deformation import DeformationMap
from .subset import Subset, FillMode

__all__ = [
    "SubsetError",
    "InvalidArgumentError",
    "OutOfRangeError",
    "BoundsError",
    "ImageIOError",
    "InterpolationMethod",
    "SamplingParameters",
    "Image",
    "ImageType",
    "DeformationMap",
    "Subset",
    "FillMode",
]
