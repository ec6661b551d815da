"""Sub-image extraction for clamped rectangles."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from facebox.imaging.geometry import ClampedRectangle


def crop(image: NDArray[np.uint8], rect: ClampedRectangle) -> NDArray[np.uint8]:
    """Return a new array holding only the pixels inside ``rect``.

    An empty rectangle yields a 0x0 placeholder with the same channel layout,
    so batch callers can keep iterating. The result never shares storage with
    ``image``.
    """
    if rect.is_empty:
        return np.zeros((0, 0, *image.shape[2:]), dtype=image.dtype)

    region = image[rect.y : rect.y + rect.height, rect.x : rect.x + rect.width]
    return region.copy()
