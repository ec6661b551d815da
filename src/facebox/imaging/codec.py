"""Base64 text codec for arbitrary byte payloads.

Encoding is standard base64 (``A-Z a-z 0-9 + /`` with ``=`` padding).
Decoding is lenient in two ways:

* spaces, ``\\n`` and ``\\r`` are skipped wherever they appear;
* the first ``=`` ends the data. Anything after it is ignored rather than
  validated, so padding length and position are never checked.

Every other character outside the alphabet raises :class:`InvalidCharacterError`.
The codec knows nothing about images and is usable on any bytes.
"""

from __future__ import annotations

import base64
import binascii

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
PAD = "="

_ALPHABET_SET = frozenset(ALPHABET)
_SKIPPED = frozenset(" \n\r")


class DecodeError(ValueError):
    """Raised when text cannot be decoded into bytes."""


class InvalidCharacterError(DecodeError):
    """Raised when the input holds a character outside the base64 alphabet."""

    def __init__(self, char: str, position: int) -> None:
        super().__init__(f"Invalid base64 character {char!r} at position {position}")
        self.char = char
        self.position = position


def encode(data: bytes) -> str:
    """Encode bytes as base64 text. Empty input gives an empty string."""
    return base64.b64encode(data).decode("ascii")


def decode(text: str) -> bytes:
    """Decode base64 text into bytes.

    Raises:
        InvalidCharacterError: If ``text`` contains a character that is not in
            the alphabet, not ``=`` and not a space, newline or carriage return.
    """
    symbols: list[str] = []
    for position, char in enumerate(text):
        if char in _SKIPPED:
            continue
        if char == PAD:
            break
        if char not in _ALPHABET_SET:
            raise InvalidCharacterError(char, position)
        symbols.append(char)

    # A lone trailing symbol carries 6 bits, which is less than one byte.
    if len(symbols) % 4 == 1:
        symbols.pop()
    if not symbols:
        return b""

    cleaned = "".join(symbols)
    cleaned += PAD * (-len(cleaned) % 4)
    try:
        return base64.b64decode(cleaned, validate=True)
    except binascii.Error as exc:
        raise DecodeError(str(exc)) from exc
