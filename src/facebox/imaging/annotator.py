"""Burn rectangle outlines and text labels into a copy of an image."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image, ImageDraw, ImageFont

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import NDArray

    from facebox.imaging.geometry import ClampedRectangle


@dataclass(frozen=True)
class Annotation:
    """A clamped rectangle with the label drawn above it.

    ``color`` overrides the style color for this annotation only.
    """

    rect: ClampedRectangle
    label: str
    confidence: float
    color: tuple[int, int, int] | None = None


@dataclass(frozen=True)
class AnnotationStyle:
    """Visual style shared by every annotation in a render call."""

    color: tuple[int, int, int] = (0, 255, 0)
    font_size: int = 20
    label_gap: int = 2


DEFAULT_STYLE = AnnotationStyle()


def face_label(index: int, confidence: float) -> str:
    """Label for the ``index``-th (1-based) face, e.g. ``Face 1: 95.0%``.

    The percentage is rounded half-up from the confidence as written, so
    ``0.8765`` gives ``87.7%``.
    """
    percent = (Decimal(str(confidence)) * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"Face {index}: {percent}%"


@lru_cache(maxsize=8)
def _load_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    return ImageFont.load_default(size=size)


def annotate(
    image: NDArray[np.uint8],
    annotations: Sequence[Annotation],
    *,
    style: AnnotationStyle = DEFAULT_STYLE,
) -> NDArray[np.uint8]:
    """Return an RGB copy of ``image`` with every annotation drawn on it.

    Annotations are drawn in order, so later ones paint over earlier ones.
    Empty rectangles are skipped entirely. Labels sit just above the top edge
    of their rectangle and are shifted back inside the image when they would
    leave it. ``image`` itself is never modified. Grayscale input comes back
    as ``H x W x 3`` whether or not anything was drawn.
    """
    if image.size == 0:
        return image.copy()

    canvas = Image.fromarray(np.array(image, dtype=np.uint8, copy=True))
    if canvas.mode != "RGB":
        canvas = canvas.convert("RGB")

    drawable = [annotation for annotation in annotations if not annotation.rect.is_empty]
    if not drawable:
        return np.array(canvas, dtype=np.uint8)

    draw = ImageDraw.Draw(canvas)
    font = _load_font(style.font_size)

    for annotation in drawable:
        rect = annotation.rect
        color = annotation.color or style.color
        draw.rectangle(
            (rect.x, rect.y, rect.x + rect.width - 1, rect.y + rect.height - 1),
            outline=color,
            width=1,
        )

        _left, top, right, bottom = draw.textbbox((0, 0), annotation.label, font=font)
        text_x = min(rect.x, max(canvas.width - right, 0))
        text_y = rect.y - bottom - style.label_gap
        text_y = min(max(text_y, -top), max(canvas.height - bottom, 0))
        draw.text((text_x, text_y), annotation.label, fill=color, font=font)

    return np.array(canvas, dtype=np.uint8)
