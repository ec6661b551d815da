"""Rectangle clamping against image bounds.

Detection coordinates come from an approximate upstream source and may be
negative, oversized or entirely off-image. :func:`clamp` never fails: bad
geometry degrades to an empty rectangle so the remaining rectangles of a
batch are still processed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray


@dataclass(frozen=True)
class Dimensions:
    """Image size in pixels."""

    width: int
    height: int

    @classmethod
    def of(cls, image: NDArray[np.uint8]) -> Dimensions:
        """Return the dimensions of an HxWxC image array."""
        height, width = image.shape[:2]
        return cls(width=int(width), height=int(height))


@dataclass(frozen=True)
class Rectangle:
    """Requested region in pixel space; may be out of range."""

    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class ClampedRectangle:
    """Region guaranteed to lie inside an image.

    Only :func:`clamp` should build these. ``x + width <= image.width`` and
    ``y + height <= image.height`` always hold; a zero width or height marks
    the rectangle as empty.
    """

    x: int
    y: int
    width: int
    height: int

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @property
    def area(self) -> int:
        return self.width * self.height

    def as_rectangle(self) -> Rectangle:
        return Rectangle(x=self.x, y=self.y, width=self.width, height=self.height)


def _clamp_span(start: int, length: int, limit: int) -> tuple[int, int]:
    start = max(start, 0)
    if length <= 0 or start >= limit:
        return min(start, limit), 0
    return start, min(length, limit - start)


def clamp(rect: Rectangle, image: Dimensions) -> ClampedRectangle:
    """Clamp ``rect`` into ``image``.

    Negative origins are floored to 0. Width and height are then capped so the
    rectangle ends at the image edge. Non-positive sizes and origins past the
    edge produce an empty rectangle.
    """
    x, width = _clamp_span(rect.x, rect.width, image.width)
    y, height = _clamp_span(rect.y, rect.height, image.height)
    if width == 0 or height == 0:
        width = height = 0
    return ClampedRectangle(x=x, y=y, width=width, height=height)
