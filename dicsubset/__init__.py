"""
dicsubset - subset sampling for Digital Image Correlation (DIC).

A subset is a fixed set of pixel locations in a reference image whose
intensities are sampled from a reference image by exact lookup and from a
deformed image through a parametric deformation map with subpixel
interpolation.
"""

from .core.errors import (
    SubsetError,
    InvalidArgumentError,
    OutOfRangeError,
    BoundsError,
    ImageIOError,
)
from .core.sampling_parameters import InterpolationMethod, SamplingParameters
from .core.image import Image, ImageType
from .core.deformation import DeformationMap
from .core.subset import Subset, FillMode

__version__ = "0.1.0"

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
