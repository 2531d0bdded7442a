"""
Sampling parameters configuration.

Stores the settings used when sampling image intensities for a subset.
Parameters are frozen and validated on construction, so an Image can hold
them without its cached B-spline coefficients going stale.
"""

from dataclasses import dataclass
from enum import Enum

from .errors import InvalidArgumentError
from ..utils.validation import is_int_bounded


class InterpolationMethod(str, Enum):
    """Subpixel interpolation schemes."""

    BILINEAR = "bilinear"    # 2x2 neighbourhood
    BICUBIC = "bicubic"      # Keys cubic convolution, 4x4 neighbourhood
    BIQUINTIC = "biquintic"  # Quintic B-spline, 6x6 neighbourhood


@dataclass(frozen=True)
class SamplingParameters:
    """
    Subset sampling parameters.

    Attributes:
        interpolation: Scheme used for subpixel (non-integer) lookups
        total_threads: Number of numba threads used for a fill (0 = all available)
        border_bcoef: Edge padding for the B-spline coefficient array (>= 3)
    """

    interpolation: InterpolationMethod = InterpolationMethod.BILINEAR
    total_threads: int = 0
    border_bcoef: int = 20

    def __post_init__(self):
        if isinstance(self.interpolation, str) and not isinstance(
            self.interpolation, InterpolationMethod
        ):
            try:
                object.__setattr__(
                    self, "interpolation", InterpolationMethod(self.interpolation)
                )
            except ValueError:
                raise InvalidArgumentError(
                    f"Unknown interpolation method: {self.interpolation}"
                )
        self.validate()
        object.__setattr__(self, "total_threads", int(self.total_threads))
        object.__setattr__(self, "border_bcoef", int(self.border_bcoef))

    def validate(self) -> bool:
        """
        Validate parameters are within acceptable ranges.

        Returns:
            True if parameters are valid, raises InvalidArgumentError otherwise
        """
        if not isinstance(self.interpolation, InterpolationMethod):
            raise InvalidArgumentError(
                f"interpolation must be an InterpolationMethod, got {self.interpolation!r}"
            )

        valid, _, msg = is_int_bounded(self.total_threads, 0, 256)
        if not valid:
            raise InvalidArgumentError(f"Invalid total_threads: {msg}")

        valid, _, msg = is_int_bounded(self.border_bcoef, 3, 100)
        if not valid:
            raise InvalidArgumentError(f"Invalid border_bcoef: {msg}")

        return True

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "interpolation": self.interpolation.value,
            "total_threads": self.total_threads,
            "border_bcoef": self.border_bcoef,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "SamplingParameters":
        """Create from dictionary."""
        return cls(
            interpolation=d.get("interpolation", "bilinear"),
            total_threads=d.get("total_threads", 0),
            border_bcoef=d.get("border_bcoef", 20),
        )
