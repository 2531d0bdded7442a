"""
Deformation map for subset sampling.

Maps a reference-frame pixel to its location in the deformed frame using a
first-order expansion about the subset centroid:

    dx = x - cx
    dy = y - cy
    Dx = (1 + ex) * dx + gxy * dy
    Dy = (1 + ey) * dy + gxy * dx
    x' = cos(theta) * Dx - sin(theta) * Dy + u + cx
    y' = sin(theta) * Dx + cos(theta) * Dy + v + cy

u, v are displacements in pixels, theta is a rotation in radians, ex and ey
are normal strains and gxy is the shear strain. Strain and shear are applied
first, then the rotation, then the translation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from typing import Tuple

import numpy as np
from numpy.typing import NDArray, ArrayLike


@dataclass(frozen=True)
class DeformationMap:
    """
    Motion and deformation parameters of a subset.

    Attributes:
        u: Displacement in x (pixels)
        v: Displacement in y (pixels)
        theta: Rotation about the centroid (radians, counter-clockwise in x-y)
        ex: Normal strain in x
        ey: Normal strain in y
        gxy: Shear strain
    """

    u: float = 0.0
    v: float = 0.0
    theta: float = 0.0
    ex: float = 0.0
    ey: float = 0.0
    gxy: float = 0.0

    def is_identity(self) -> bool:
        """Check if every parameter is zero."""
        return (
            self.u == 0.0 and self.v == 0.0 and self.theta == 0.0
            and self.ex == 0.0 and self.ey == 0.0 and self.gxy == 0.0
        )

    def apply(self, x: float, y: float, cx: float, cy: float) -> Tuple[float, float]:
        """
        Map a reference pixel to the deformed frame.

        Args:
            x: Reference x-coordinate
            y: Reference y-coordinate
            cx: Centroid x-coordinate (deformation origin)
            cy: Centroid y-coordinate (deformation origin)

        Returns:
            Tuple of (x', y')
        """
        dx = x - cx
        dy = y - cy
        big_dx = (1.0 + self.ex) * dx + self.gxy * dy
        big_dy = (1.0 + self.ey) * dy + self.gxy * dx
        cos_t = math.cos(self.theta)
        sin_t = math.sin(self.theta)
        return (
            cos_t * big_dx - sin_t * big_dy + self.u + cx,
            sin_t * big_dx + cos_t * big_dy + self.v + cy,
        )

    def apply_batch(
        self,
        xs: ArrayLike,
        ys: ArrayLike,
        cx: float,
        cy: float,
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """
        Vectorised form of apply() over arrays of reference coordinates.

        Returns:
            Tuple of (xs', ys') float64 arrays
        """
        dx = np.asarray(xs, dtype=np.float64) - cx
        dy = np.asarray(ys, dtype=np.float64) - cy
        big_dx = (1.0 + self.ex) * dx + self.gxy * dy
        big_dy = (1.0 + self.ey) * dy + self.gxy * dx
        cos_t = math.cos(self.theta)
        sin_t = math.sin(self.theta)
        x_def = cos_t * big_dx - sin_t * big_dy + self.u + cx
        y_def = sin_t * big_dx + cos_t * big_dy + self.v + cy
        return x_def, y_def

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "DeformationMap":
        """Create from dictionary."""
        return cls(
            u=d.get("u", 0.0),
            v=d.get("v", 0.0),
            theta=d.get("theta", 0.0),
            ex=d.get("ex", 0.0),
            ey=d.get("ey", 0.0),
            gxy=d.get("gxy", 0.0),
        )
