"""
Intensity sampling kernels for dicsubset.

Implements exact gathering at integer pixels and subpixel interpolation
(bilinear, Keys bicubic and biquintic B-spline) over batches of points.

All per-point loops are Numba-compiled with ``parallel=True``; every
point writes only its own output slot, so the ``prange`` loops need no
locking. Kernels never raise: a point outside the sampling domain
produces NaN and the caller decides how to report it.

Sampling domain for interpolation is the open box (-1, width) x (-1, height).
Neighbourhood reads outside the grid are clamped to the edge pixel.
Integer coordinates inside the grid return the stored sample unchanged.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from numba import njit, prange
from scipy.fft import fft, ifft


# Keys cubic convolution parameter
KEYS_A = -0.5

# Sampled quintic B-spline kernel at integer offsets -2..2
QUINTIC_KERNEL = np.array([1/120, 13/60, 11/20, 13/60, 1/120], dtype=np.float64)


# =============================================================================
# Point helpers
# =============================================================================

@njit(cache=True)
def _in_domain(x: float, y: float, w: int, h: int) -> bool:
    # NaN compares false, so non-finite input is rejected here too
    return x > -1.0 and x < w and y > -1.0 and y < h


@njit(cache=True)
def _is_integer_point(x: float, y: float) -> bool:
    return x == np.floor(x) and y == np.floor(y)


@njit(cache=True)
def _clamp(i: int, n: int) -> int:
    if i < 0:
        return 0
    if i > n - 1:
        return n - 1
    return i


@njit(cache=True)
def _keys_weight(t: float) -> float:
    """Keys cubic convolution kernel evaluated at t."""
    at = abs(t)
    if at <= 1.0:
        return ((KEYS_A + 2.0) * at - (KEYS_A + 3.0)) * at * at + 1.0
    elif at < 2.0:
        return ((KEYS_A * at - 5.0 * KEYS_A) * at + 8.0 * KEYS_A) * at - 4.0 * KEYS_A
    return 0.0


@njit(cache=True)
def _quintic_bspline(t: float) -> float:
    """
    Evaluate the centred quintic B-spline basis function at t.

    Support is [-3, 3]; B(0) = 11/20, B(1) = 13/60, B(2) = 1/120.
    """
    at = abs(t)

    if at >= 3.0:
        return 0.0
    elif at >= 2.0:
        tmp = 3.0 - at
        return tmp * tmp * tmp * tmp * tmp / 120.0
    elif at >= 1.0:
        t2 = at * at
        t3 = t2 * at
        t4 = t3 * at
        t5 = t4 * at
        return (5.0 * t5 - 45.0 * t4 + 150.0 * t3 - 210.0 * t2 + 75.0 * at + 51.0) / 120.0
    else:
        t2 = at * at
        t4 = t2 * t2
        t5 = t4 * at
        return (66.0 - 60.0 * t2 + 30.0 * t4 - 10.0 * t5) / 120.0


@njit(cache=True)
def bilinear_point(gs: NDArray[np.float64], x: float, y: float) -> float:
    """
    Bilinear interpolation at a single point.

    Args:
        gs: Intensity grid (H x W)
        x: X-coordinate (column)
        y: Y-coordinate (row)

    Returns:
        Interpolated value (NaN if outside the sampling domain)
    """
    h, w = gs.shape
    if not _in_domain(x, y, w, h):
        return np.nan
    if _is_integer_point(x, y):
        return gs[int(y), int(x)]

    x0 = int(np.floor(x))
    y0 = int(np.floor(y))
    fx = x - x0
    fy = y - y0

    xa = _clamp(x0, w)
    xb = _clamp(x0 + 1, w)
    ya = _clamp(y0, h)
    yb = _clamp(y0 + 1, h)

    top = gs[ya, xa] * (1.0 - fx) + gs[ya, xb] * fx
    bottom = gs[yb, xa] * (1.0 - fx) + gs[yb, xb] * fx
    return top * (1.0 - fy) + bottom * fy


@njit(cache=True)
def bicubic_point(gs: NDArray[np.float64], x: float, y: float) -> float:
    """
    Keys cubic convolution at a single point (4x4 neighbourhood).

    Returns NaN if outside the sampling domain.
    """
    h, w = gs.shape
    if not _in_domain(x, y, w, h):
        return np.nan
    if _is_integer_point(x, y):
        return gs[int(y), int(x)]

    x0 = int(np.floor(x))
    y0 = int(np.floor(y))
    fx = x - x0
    fy = y - y0

    value = 0.0
    for j in range(-1, 3):
        wy = _keys_weight(fy - j)
        row = _clamp(y0 + j, h)
        for i in range(-1, 3):
            wx = _keys_weight(fx - i)
            value += gs[row, _clamp(x0 + i, w)] * wx * wy

    return value


@njit(cache=True)
def biquintic_point(
    gs: NDArray[np.float64],
    bcoef: NDArray[np.float64],
    border: int,
    x: float,
    y: float,
) -> float:
    """
    Biquintic B-spline interpolation at a single point (6x6 neighbourhood).

    Args:
        gs: Intensity grid (H x W), used for integer coordinates
        bcoef: B-spline coefficients of the edge-padded grid
        border: Padding width of bcoef on each side (>= 3)
        x: X-coordinate in image coordinates
        y: Y-coordinate in image coordinates

    Returns:
        Interpolated value (NaN if outside the sampling domain)
    """
    h, w = gs.shape
    if not _in_domain(x, y, w, h):
        return np.nan
    if _is_integer_point(x, y):
        return gs[int(y), int(x)]

    px = x + border
    py = y + border
    ix = int(np.floor(px))
    iy = int(np.floor(py))
    fx = px - ix
    fy = py - iy

    value = 0.0
    for j in range(-2, 4):
        by = _quintic_bspline(fy - j)
        for i in range(-2, 4):
            bx = _quintic_bspline(fx - i)
            value += bcoef[iy + j, ix + i] * bx * by

    return value


# =============================================================================
# Batch kernels (data-parallel over points)
# =============================================================================

@njit(cache=True, parallel=True)
def gather_exact(
    gs: NDArray[np.float64],
    xs: NDArray[np.int64],
    ys: NDArray[np.int64],
) -> NDArray[np.float64]:
    """
    Look up stored samples at integer pixel coordinates.

    Args:
        gs: Intensity grid (H x W)
        xs: X-coordinates
        ys: Y-coordinates

    Returns:
        Sample per point (NaN for points outside [0, W) x [0, H))
    """
    n = xs.shape[0]
    out = np.empty(n, dtype=np.float64)
    h, w = gs.shape

    for idx in prange(n):
        x = xs[idx]
        y = ys[idx]
        if x < 0 or x >= w or y < 0 or y >= h:
            out[idx] = np.nan
        else:
            out[idx] = gs[y, x]

    return out


@njit(cache=True, parallel=True)
def interpolate_bilinear_batch(
    gs: NDArray[np.float64],
    xs: NDArray[np.float64],
    ys: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Bilinear interpolation at many points."""
    n = xs.shape[0]
    out = np.empty(n, dtype=np.float64)
    for idx in prange(n):
        out[idx] = bilinear_point(gs, xs[idx], ys[idx])
    return out


@njit(cache=True, parallel=True)
def interpolate_bicubic_batch(
    gs: NDArray[np.float64],
    xs: NDArray[np.float64],
    ys: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Keys bicubic interpolation at many points."""
    n = xs.shape[0]
    out = np.empty(n, dtype=np.float64)
    for idx in prange(n):
        out[idx] = bicubic_point(gs, xs[idx], ys[idx])
    return out


@njit(cache=True, parallel=True)
def interpolate_biquintic_batch(
    gs: NDArray[np.float64],
    bcoef: NDArray[np.float64],
    border: int,
    xs: NDArray[np.float64],
    ys: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Biquintic B-spline interpolation at many points."""
    n = xs.shape[0]
    out = np.empty(n, dtype=np.float64)
    for idx in prange(n):
        out[idx] = biquintic_point(gs, bcoef, border, xs[idx], ys[idx])
    return out


# =============================================================================
# B-spline coefficients
# =============================================================================

def form_bcoef(data: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Compute biquintic B-spline coefficients of input array.

    The coefficients are obtained by deconvolving each row and then each
    column with the sampled quintic kernel in the Fourier domain. The size
    returned is the same as the input array.

    Args:
        data: Input array (must be at least 5x5 or empty)

    Returns:
        Biquintic B-spline coefficients

    Raises:
        ValueError: If array is smaller than 5x5 and not empty
    """
    if data.size == 0:
        return np.zeros_like(data, dtype=np.float64)

    if data.shape[0] < 5 or data.shape[1] < 5:
        raise ValueError(
            "Array for obtaining B-spline coefficients must be >= 5x5 or empty"
        )

    h, w = data.shape

    kernel_x = np.zeros(w, dtype=np.complex128)
    kernel_x[:3] = QUINTIC_KERNEL[2:]
    kernel_x[-2:] = QUINTIC_KERNEL[:2]
    kernel_x = fft(kernel_x)

    kernel_y = np.zeros(h, dtype=np.complex128)
    kernel_y[:3] = QUINTIC_KERNEL[2:]
    kernel_y[-2:] = QUINTIC_KERNEL[:2]
    kernel_y = fft(kernel_y)

    # Rows (x-direction), then columns (y-direction)
    result = np.real(ifft(fft(data, axis=1) / kernel_x[np.newaxis, :], axis=1))
    result = np.real(ifft(fft(result, axis=0) / kernel_y[:, np.newaxis], axis=0))

    return np.ascontiguousarray(result, dtype=np.float64)


def padded_bcoef(gs: NDArray[np.float64], border: int) -> NDArray[np.float64]:
    """
    B-spline coefficients of the grid padded by edge replication.

    Args:
        gs: Intensity grid (H x W)
        border: Padding width on each side

    Returns:
        Coefficient array of shape (H + 2*border, W + 2*border)
    """
    padded = np.pad(gs.astype(np.float64), border, mode="edge")
    return form_bcoef(padded)
