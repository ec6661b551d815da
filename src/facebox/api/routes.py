"""API route definitions."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from facebox import __version__
from facebox.api.dependencies import FaceDetectorDep, SettingsDep, WorkerPoolDep, verify_api_key
from facebox.api.schemas import (
    CropRequest,
    CropResponse,
    DetectionResponse,
    ErrorResponse,
    FaceBox,
    HealthResponse,
)
from facebox.imaging.annotator import AnnotationStyle
from facebox.imaging.codec import DecodeError
from facebox.imaging.geometry import Rectangle
from facebox.imaging.image_io import ImageFormatError, decode_image
from facebox.imaging.transport import image_from_data_uri
from facebox.ml.face_detector import Detection
from facebox.pipeline import CropResult, PipelineResult, crop_detections, run_pipeline
from facebox.workers import PoolBusyError

if TYPE_CHECKING:
    from facebox.config import Settings
    from facebox.ml.face_detector import FaceDetector

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", dependencies=[Depends(verify_api_key)])

_HTTP_413_PAYLOAD_TOO_LARGE = 413

# Room for a data-URI prefix and line breaks around the base64 text.
_ENCODED_OVERHEAD = 64


def _max_encoded_length(max_bytes: int) -> int:
    """Longest base64 text accepted for a payload of at most ``max_bytes``."""
    return -(-max_bytes // 3) * 4 + _ENCODED_OVERHEAD


def _busy() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Server busy, retry later",
        headers={"Retry-After": "1"},
    )


def _detect_and_process(detector: FaceDetector, data: bytes, settings: Settings) -> tuple[PipelineResult, int]:
    start = time.perf_counter()
    image = decode_image(data, max_pixels=settings.max_image_pixels)
    detections = detector.detect(image)
    result = run_pipeline(
        image,
        detections,
        include_crops=settings.include_crops,
        fmt=settings.output_format,
        quality=settings.jpeg_quality,
        style=AnnotationStyle(font_size=settings.label_font_size),
    )
    return result, int((time.perf_counter() - start) * 1000)


def _decode_and_crop(image_data: str, detections: list[Detection], settings: Settings) -> CropResult:
    image = image_from_data_uri(image_data, max_pixels=settings.max_image_pixels)
    return crop_detections(image, detections, fmt=settings.output_format, quality=settings.jpeg_quality)


@router.post(
    "/detect-faces",
    response_model=DetectionResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        _HTTP_413_PAYLOAD_TOO_LARGE: {"model": ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
    },
    summary="Detect, annotate and crop faces in an image",
)
async def detect_faces(
    file: UploadFile,
    settings: SettingsDep,
    pool: WorkerPoolDep,
    detector: FaceDetectorDep,
) -> DetectionResponse:
    """Detect faces in an uploaded image and return annotated and cropped images."""
    data = await file.read(settings.max_file_size + 1)
    if len(data) > settings.max_file_size:
        raise HTTPException(
            status_code=_HTTP_413_PAYLOAD_TOO_LARGE,
            detail=f"File too large (max: {settings.max_file_size} bytes)",
        )
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    logger.info("Received upload %s (%d bytes)", file.filename, len(data))
    try:
        result, elapsed_ms = await pool.run(_detect_and_process, detector, data, settings)
    except ImageFormatError as exc:
        logger.warning("Rejected upload %s: %s", file.filename, exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid image: {exc}") from exc
    except (PoolBusyError, TimeoutError) as exc:
        raise _busy() from exc

    return DetectionResponse(
        original_image=result.original_image.data_uri,
        processed_image=result.annotated_image.data_uri,
        faces=[
            FaceBox(
                x=d.rect.x,
                y=d.rect.y,
                width=d.rect.width,
                height=d.rect.height,
                confidence=d.confidence,
            )
            for d in result.detections
        ],
        cropped_faces=[payload.data_uri for payload in result.cropped_faces],
        total_faces=result.total_faces,
        processing_time_ms=elapsed_ms,
    )


@router.post(
    "/crop-faces",
    response_model=CropResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        _HTTP_413_PAYLOAD_TOO_LARGE: {"model": ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
    },
    summary="Crop face regions out of a base64 image",
)
async def crop_faces(body: CropRequest, settings: SettingsDep, pool: WorkerPoolDep) -> CropResponse:
    """Crop each requested region; regions that cannot be cropped are skipped."""
    max_chars = _max_encoded_length(settings.max_file_size)
    if len(body.image_data) > max_chars:
        raise HTTPException(
            status_code=_HTTP_413_PAYLOAD_TOO_LARGE,
            detail=f"Image data too large (max: {max_chars} characters)",
        )

    logger.info("Received crop request for %d faces", len(body.faces))

    detections = [
        Detection(Rectangle(face.x, face.y, face.width, face.height), face.confidence) for face in body.faces
    ]
    try:
        result = await pool.run(_decode_and_crop, body.image_data, detections, settings)
    except DecodeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid image encoding: {exc}") from exc
    except ImageFormatError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid image: {exc}") from exc
    except (PoolBusyError, TimeoutError) as exc:
        raise _busy() from exc

    return CropResponse(
        cropped_faces=[payload.data_uri for payload in result.cropped_faces],
        total_cropped=result.count,
        skipped=result.skipped,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health(pool: WorkerPoolDep, detector: FaceDetectorDep) -> HealthResponse:
    """Return service health status."""
    return HealthResponse(
        status="ok",
        version=__version__,
        detector=detector.model_name,
        concurrent_requests=pool.active_count,
        queue_depth=pool.queue_depth,
    )
