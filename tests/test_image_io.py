"""Tests for image container I/O and data-URI transport."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

import numpy as np
import pytest
from PIL import Image

from facebox.imaging import codec
from facebox.imaging.codec import InvalidCharacterError
from facebox.imaging.image_io import ImageFormatError, decode_image, encode_image
from facebox.imaging.transport import (
    EncodedPayload,
    decode_data_uri,
    image_from_data_uri,
    image_to_payload,
    strip_data_uri_prefix,
    to_payload,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from numpy.typing import NDArray


class TestDecodeImage:
    def test_png_round_trip_is_lossless(
        self, image_300: NDArray[np.uint8], encode_as: Callable[..., bytes]
    ) -> None:
        decoded = decode_image(encode_as(image_300, "PNG"))
        assert np.array_equal(decoded, image_300)

    def test_grayscale_converted_to_rgb(self) -> None:
        buffer = io.BytesIO()
        Image.new("L", (20, 10), color=128).save(buffer, format="PNG")
        decoded = decode_image(buffer.getvalue())
        assert decoded.shape == (10, 20, 3)

    def test_rgba_converted_to_rgb(self) -> None:
        buffer = io.BytesIO()
        Image.new("RGBA", (8, 8), color=(1, 2, 3, 4)).save(buffer, format="PNG")
        assert decode_image(buffer.getvalue()).shape == (8, 8, 3)

    def test_exif_orientation_applied(self) -> None:
        img = Image.new("RGB", (40, 20), color=(10, 20, 30))
        exif = img.getexif()
        exif[0x0112] = 6  # rotate 90 CW
        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", exif=exif)
        assert decode_image(buffer.getvalue()).shape == (40, 20, 3)

    def test_empty_data_rejected(self) -> None:
        with pytest.raises(ImageFormatError, match="Empty"):
            decode_image(b"")

    def test_garbage_rejected(self) -> None:
        with pytest.raises(ImageFormatError):
            decode_image(b"fake image data")

    def test_too_many_pixels_rejected(self, image_300: NDArray[np.uint8], encode_as: Callable[..., bytes]) -> None:
        with pytest.raises(ImageFormatError, match="too large"):
            decode_image(encode_as(image_300), max_pixels=1000)


class TestEncodeImage:
    def test_jpeg_signature(self, image_300: NDArray[np.uint8]) -> None:
        assert encode_image(image_300, fmt="JPEG").startswith(b"\xff\xd8")

    def test_png_signature(self, image_300: NDArray[np.uint8]) -> None:
        assert encode_image(image_300, fmt="PNG").startswith(b"\x89PNG")

    def test_empty_image_rejected(self) -> None:
        with pytest.raises(ImageFormatError):
            encode_image(np.zeros((0, 0, 3), dtype=np.uint8))

    def test_jpeg_keeps_dimensions(self, make_image: Callable[[int, int], NDArray[np.uint8]]) -> None:
        image = make_image(123, 45)
        assert decode_image(encode_image(image, fmt="JPEG")).shape == (45, 123, 3)


class TestTransport:
    def test_payload_data_uri(self) -> None:
        payload = to_payload(b"Man", "image/jpeg")
        assert payload == EncodedPayload(mime="image/jpeg", text="TWFu")
        assert payload.data_uri == "data:image/jpeg;base64,TWFu"

    @pytest.mark.parametrize(
        "text",
        ["data:image/jpeg;base64,TWFu", "data:image/png;base64,TWFu", "TWFu"],
    )
    def test_strip_known_prefixes(self, text: str) -> None:
        assert strip_data_uri_prefix(text) == "TWFu"

    def test_other_prefixes_left_alone(self) -> None:
        with pytest.raises(InvalidCharacterError):
            decode_data_uri("data:image/gif;base64,TWFu")

    def test_decode_data_uri(self) -> None:
        assert decode_data_uri("data:image/png;base64,TWFu") == b"Man"

    def test_image_payload_round_trip(self, image_300: NDArray[np.uint8]) -> None:
        payload = image_to_payload(image_300, fmt="PNG")
        assert payload.mime == "image/png"
        assert np.array_equal(image_from_data_uri(payload.data_uri), image_300)

    def test_payload_text_decodes_to_serialized_bytes(self, image_300: NDArray[np.uint8]) -> None:
        payload = image_to_payload(image_300, fmt="JPEG", quality=70)
        assert codec.decode(payload.text) == encode_image(image_300, fmt="JPEG", quality=70)
