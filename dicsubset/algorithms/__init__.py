"""Sampling kernels for dicsubset."""

from .interpolation import (
    gather_exact,
    interpolate_bilinear_batch,
    interpolate_bicubic_batch,
    interpolate_biquintic_batch,
    form_bcoef,
    padded_bcoef,
)

__all__ = [
    "gather_exact",
    "interpolate_bilinear_batch",
    "interpolate_bicubic_batch",
    "interpolate_biquintic_batch",
    "form_bcoef",
    "padded_bcoef",
]
