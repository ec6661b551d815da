"""Image container decoding and encoding.

Images travel through the pipeline as HxWx3 RGB uint8 numpy arrays. This
module is the only place that touches container formats (JPEG, PNG, ...).
"""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING, Literal

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)

OutputFormat = Literal["JPEG", "PNG"]

MIME_TYPES: dict[str, str] = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
}


class ImageFormatError(ValueError):
    """Raised when image bytes cannot be parsed or an image cannot be serialized."""


def decode_image(data: bytes, *, max_pixels: int | None = None) -> NDArray[np.uint8]:
    """Decode raw image bytes into an RGB uint8 numpy array.

    EXIF orientation is applied, so the array is upright.

    Args:
        data: Raw file bytes in any format Pillow can read.
        max_pixels: Reject images with more pixels than this. ``None`` disables
            the check.

    Returns:
        HxWx3 RGB uint8 numpy array.

    Raises:
        ImageFormatError: If the data is empty, not an image, or too large.
    """
    if not data:
        raise ImageFormatError("Empty image data")

    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
            if max_pixels is not None and width * height > max_pixels:
                raise ImageFormatError(f"Image too large: {width}x{height} exceeds {max_pixels} pixels")
            upright = ImageOps.exif_transpose(img)
            rgb = upright.convert("RGB")
            logger.debug("Decoded %s image %dx%d", img.format, width, height)
            return np.array(rgb, dtype=np.uint8)
    except (UnidentifiedImageError, Image.DecompressionBombError) as exc:
        raise ImageFormatError(f"Cannot decode image: {exc}") from exc
    except OSError as exc:
        raise ImageFormatError(f"Corrupt image data: {exc}") from exc


def encode_image(image: NDArray[np.uint8], *, fmt: OutputFormat = "JPEG", quality: int = 85) -> bytes:
    """Serialize an RGB array into container bytes.

    Raises:
        ImageFormatError: If the array is empty or Pillow cannot write it.
    """
    if image.size == 0:
        raise ImageFormatError("Cannot encode an empty image")
    if fmt not in MIME_TYPES:
        raise ImageFormatError(f"Unsupported output format: {fmt}")

    buffer = io.BytesIO()
    try:
        pil_image = Image.fromarray(np.ascontiguousarray(image, dtype=np.uint8))
        if fmt == "JPEG":
            pil_image.convert("RGB").save(buffer, format="JPEG", quality=quality)
        else:
            pil_image.save(buffer, format="PNG")
    except (OSError, ValueError, TypeError) as exc:
        raise ImageFormatError(f"Cannot encode image as {fmt}: {exc}") from exc
    return buffer.getvalue()
