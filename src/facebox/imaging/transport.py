"""Data-URI transport for images.

Images cross the text boundary as ``data:<mime>;base64,<payload>`` where the
payload is :func:`facebox.imaging.codec.encode` of the serialized image.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from facebox.imaging import codec
from facebox.imaging.image_io import MIME_TYPES, OutputFormat, decode_image, encode_image

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray

ACCEPTED_PREFIXES: tuple[str, ...] = (
    "data:image/jpeg;base64,",
    "data:image/png;base64,",
)


@dataclass(frozen=True)
class EncodedPayload:
    """Codec output together with the MIME type of the bytes it encodes."""

    mime: str
    text: str

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime};base64,{self.text}"


def to_payload(data: bytes, mime: str) -> EncodedPayload:
    return EncodedPayload(mime=mime, text=codec.encode(data))


def image_to_payload(image: NDArray[np.uint8], *, fmt: OutputFormat = "JPEG", quality: int = 85) -> EncodedPayload:
    """Serialize ``image`` and encode it for transport.

    Raises:
        ImageFormatError: If the image cannot be serialized.
    """
    return to_payload(encode_image(image, fmt=fmt, quality=quality), MIME_TYPES[fmt])


def strip_data_uri_prefix(text: str) -> str:
    """Remove a leading JPEG or PNG data-URI prefix, if present."""
    for prefix in ACCEPTED_PREFIXES:
        if text.startswith(prefix):
            return text[len(prefix) :]
    return text


def decode_data_uri(text: str) -> bytes:
    """Decode a data URI (or a bare payload) back into bytes.

    Raises:
        DecodeError: If the payload is not valid base64 text.
    """
    return codec.decode(strip_data_uri_prefix(text))


def image_from_data_uri(text: str, *, max_pixels: int | None = None) -> NDArray[np.uint8]:
    """Decode a data URI straight into an RGB image array.

    Raises:
        DecodeError: If the payload is not valid base64 text.
        ImageFormatError: If the decoded bytes are not a readable image.
    """
    return decode_image(decode_data_uri(text), max_pixels=max_pixels)
