"""
Exception hierarchy for dicsubset.

Every error raised by the package derives from SubsetError and from the
builtin exception a caller would naturally catch for the same problem.
"""


class SubsetError(Exception):
    """Base class for all dicsubset errors."""


class InvalidArgumentError(SubsetError, ValueError):
    """Malformed construction or call input (mismatched arrays, bad sizes)."""


class OutOfRangeError(SubsetError, IndexError):
    """Accessor index beyond the number of pixels in a subset."""


class BoundsError(SubsetError, IndexError):
    """Sampled coordinate lies outside the image extent."""

    def __init__(self, x: float, y: float, width: int, height: int, message: str = ""):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        if not message:
            message = (
                f"Coordinate ({x}, {y}) is outside the image extent "
                f"{width} x {height}"
            )
        super().__init__(message)


class ImageIOError(SubsetError, OSError):
    """Image could not be decoded or written."""
