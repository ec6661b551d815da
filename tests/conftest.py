"""Shared image fixtures."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

import numpy as np
import pytest
from PIL import Image

if TYPE_CHECKING:
    from collections.abc import Callable

    from numpy.typing import NDArray

BACKGROUND = (240, 240, 240)


def _synthetic_image(width: int, height: int) -> NDArray[np.uint8]:
    """Light background with two skin-toned blocks where faces would be."""
    image = np.empty((height, width, 3), dtype=np.uint8)
    image[:, :] = BACKGROUND
    image[100:180, 100:180] = (200, 180, 160)
    image[100:180, 300:380] = (180, 160, 140)
    return image


@pytest.fixture()
def make_image() -> Callable[[int, int], NDArray[np.uint8]]:
    """Factory for synthetic HxWx3 RGB images."""
    return _synthetic_image


@pytest.fixture()
def image_300() -> NDArray[np.uint8]:
    return _synthetic_image(300, 300)


@pytest.fixture()
def encode_as() -> Callable[..., bytes]:
    """Serialize an array with Pillow, independent of the code under test."""

    def _encode(image: NDArray[np.uint8], fmt: str = "PNG") -> bytes:
        buffer = io.BytesIO()
        Image.fromarray(image).save(buffer, format=fmt)
        return buffer.getvalue()

    return _encode
