"""
Exceptions raised by the temporal filter core.
"""

from typing import Optional, Tuple


class VidmagError(Exception):
    """Base class for zs.vidmag errors."""


class InvalidFilterSpec(VidmagError, ValueError):
    """Filter parameters violate tap-count or Nyquist constraints."""


class FrameShapeMismatch(VidmagError, ValueError):
    """
    Frame shape differs from the shape the filter history was built with.

    The rejected frame is never added to the history.
    """

    def __init__(self, expected: Tuple[Optional[int], ...], actual: Tuple[int, ...]):
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        super().__init__(
            f"Frame shape {self.actual} does not match expected {self.expected}"
        )
