"""Face detection capability.

Any detector (ONNX model, classical vision, ...) plugs in behind the
:class:`FaceDetector` protocol. :class:`PlaceholderFaceDetector` is the
built-in stand-in: it synthesizes boxes from the image dimensions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from facebox.imaging.geometry import Dimensions, Rectangle

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Detection:
    """Raw face detection result.

    Coordinates are in pixel space of the input image and are not clamped.
    """

    rect: Rectangle
    confidence: float


class FaceDetector(Protocol):
    """Protocol for face detection models."""

    @property
    def model_name(self) -> str:
        """Return the model identifier string."""
        ...

    def detect(self, image: NDArray[np.uint8]) -> list[Detection]:
        """Detect faces in an image.

        Args:
            image: HxWx3 RGB uint8 array.

        Returns:
            List of detections, unclamped, in detector order.
        """
        ...


class PlaceholderFaceDetector:
    """Synthesizes up to three face boxes from the image size.

    Larger images get more boxes: one above ``min_dimension``, a second above
    400px and a third above 600px on both axes.
    """

    def __init__(self, min_dimension: int = 200, confidence_threshold: float = 0.5) -> None:
        self._min_dimension = min_dimension
        self._confidence_threshold = max(0.0, min(1.0, confidence_threshold))

    @property
    def model_name(self) -> str:
        return "placeholder"

    @property
    def min_dimension(self) -> int:
        return self._min_dimension

    @property
    def confidence_threshold(self) -> float:
        return self._confidence_threshold

    def detect(self, image: NDArray[np.uint8]) -> list[Detection]:
        dims = Dimensions.of(image)
        candidates = self._synthesize(dims.width, dims.height)
        detections = [d for d in candidates if d.confidence >= self._confidence_threshold]
        logger.info(
            "Placeholder detection on %dx%d image: %d faces",
            dims.width,
            dims.height,
            len(detections),
        )
        return detections

    def _synthesize(self, width: int, height: int) -> list[Detection]:
        faces: list[Detection] = []
        if width > self._min_dimension and height > self._min_dimension:
            faces.append(Detection(Rectangle(width // 4, height // 4, width // 4, height // 4), 0.95))
        if width > 400 and height > 400:
            faces.append(Detection(Rectangle(width * 2 // 3, height // 3, width // 5, height // 5), 0.87))
        if width > 600 and height > 600:
            faces.append(Detection(Rectangle(width // 2, height * 2 // 3, width // 6, height // 6), 0.92))
        return faces
