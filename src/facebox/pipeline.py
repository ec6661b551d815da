"""Per-request orchestration: clamp, annotate, crop, encode.

All functions here are synchronous and stateless; the API layer runs them on
the worker pool. Each cropped face is handled independently, so one bad
rectangle only costs that face.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from facebox.imaging.annotator import DEFAULT_STYLE, Annotation, AnnotationStyle, annotate, face_label
from facebox.imaging.cropper import crop
from facebox.imaging.geometry import ClampedRectangle, Dimensions, clamp
from facebox.imaging.image_io import ImageFormatError, OutputFormat
from facebox.imaging.transport import EncodedPayload, image_to_payload

if TYPE_CHECKING:
    from collections.abc import Sequence

    import numpy as np
    from numpy.typing import NDArray

    from facebox.ml.face_detector import Detection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    original_image: EncodedPayload
    annotated_image: EncodedPayload
    boxes: list[ClampedRectangle]


@dataclass(frozen=True)
class CropResult:
    cropped_faces: list[EncodedPayload] = field(default_factory=list)
    skipped: int = 0

    @property
    def count(self) -> int:
        return len(self.cropped_faces)


@dataclass(frozen=True)
class PipelineResult:
    """Everything the outer layer needs to build a detection response."""

    original_image: EncodedPayload
    annotated_image: EncodedPayload
    detections: list[Detection]
    boxes: list[ClampedRectangle]
    cropped_faces: list[EncodedPayload]
    skipped_crops: int
    processing_time_ms: int

    @property
    def total_faces(self) -> int:
        return len(self.detections)


def clamp_detections(image: NDArray[np.uint8], detections: Sequence[Detection]) -> list[ClampedRectangle]:
    dims = Dimensions.of(image)
    return [clamp(detection.rect, dims) for detection in detections]


def build_annotations(detections: Sequence[Detection], boxes: Sequence[ClampedRectangle]) -> list[Annotation]:
    """Pair each clamped box with its label; numbering follows input order."""
    return [
        Annotation(rect=box, label=face_label(index, detection.confidence), confidence=detection.confidence)
        for index, (detection, box) in enumerate(zip(detections, boxes, strict=True), start=1)
    ]


def render_detections(
    image: NDArray[np.uint8],
    detections: Sequence[Detection],
    *,
    fmt: OutputFormat = "JPEG",
    quality: int = 85,
    style: AnnotationStyle = DEFAULT_STYLE,
) -> RenderResult:
    """Encode the original image and an annotated copy of it.

    Raises:
        ImageFormatError: If either image cannot be serialized.
    """
    boxes = clamp_detections(image, detections)
    annotated = annotate(image, build_annotations(detections, boxes), style=style)
    return RenderResult(
        original_image=image_to_payload(image, fmt=fmt, quality=quality),
        annotated_image=image_to_payload(annotated, fmt=fmt, quality=quality),
        boxes=boxes,
    )


def crop_detections(
    image: NDArray[np.uint8],
    detections: Sequence[Detection],
    *,
    fmt: OutputFormat = "JPEG",
    quality: int = 85,
) -> CropResult:
    """Crop and encode every detection, skipping the ones that fail."""
    boxes = clamp_detections(image, detections)
    return _crop_boxes(image, boxes, fmt=fmt, quality=quality)


def _crop_boxes(
    image: NDArray[np.uint8],
    boxes: Sequence[ClampedRectangle],
    *,
    fmt: OutputFormat,
    quality: int,
) -> CropResult:
    cropped: list[EncodedPayload] = []
    skipped = 0
    for index, box in enumerate(boxes, start=1):
        if box.is_empty:
            logger.debug("Skipping face %d: empty region after clamping", index)
            skipped += 1
            continue
        try:
            cropped.append(image_to_payload(crop(image, box), fmt=fmt, quality=quality))
        except ImageFormatError as exc:
            logger.warning(
                "Failed to crop face %d at (%d, %d) size %dx%d: %s",
                index,
                box.x,
                box.y,
                box.width,
                box.height,
                exc,
            )
            skipped += 1

    logger.info("Cropped %d of %d faces", len(cropped), len(boxes))
    return CropResult(cropped_faces=cropped, skipped=skipped)


def run_pipeline(
    image: NDArray[np.uint8],
    detections: Sequence[Detection],
    *,
    include_crops: bool = True,
    fmt: OutputFormat = "JPEG",
    quality: int = 85,
    style: AnnotationStyle = DEFAULT_STYLE,
) -> PipelineResult:
    """Annotate, optionally crop, and encode one image with its detections.

    Raises:
        ImageFormatError: If the original or annotated image cannot be
            serialized. Per-face crop failures are skipped instead.
    """
    start = time.perf_counter()

    rendered = render_detections(image, detections, fmt=fmt, quality=quality, style=style)
    crops = _crop_boxes(image, rendered.boxes, fmt=fmt, quality=quality) if include_crops else CropResult()

    elapsed_ms = int((time.perf_counter() - start) * 1000)
    logger.info(
        "Pipeline completed: %d faces, %d crops in %dms",
        len(detections),
        crops.count,
        elapsed_ms,
    )
    return PipelineResult(
        original_image=rendered.original_image,
        annotated_image=rendered.annotated_image,
        detections=list(detections),
        boxes=rendered.boxes,
        cropped_faces=crops.cropped_faces,
        skipped_crops=crops.skipped,
        processing_time_ms=elapsed_ms,
    )
