"""Pydantic request/response schemas for the facebox API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class FaceBox(BaseModel):
    """A face region in pixel space of the source image.

    Coordinates may be negative or out of range; they are clamped before use.
    """

    x: int
    y: int
    width: int
    height: int
    confidence: float = Field(default=1.0, ge=0.0, le=1.0, description="Detection confidence (0.0-1.0)")


class DetectionResponse(BaseModel):
    """Response for the face detection endpoint."""

    original_image: str = Field(description="Data URI of the re-encoded original image")
    processed_image: str = Field(description="Data URI of the image with boxes and labels drawn")
    faces: list[FaceBox]
    cropped_faces: list[str] = Field(
        description=(
            "Data URIs of the faces that were cropped, in detection order. Faces that could not be cropped "
            "are omitted, so positions do not line up with `faces` when any were skipped"
        )
    )
    total_faces: int
    processing_time_ms: int


class CropRequest(BaseModel):
    """Request for the face cropping endpoint."""

    image_data: str = Field(description="Base64 image, optionally with a data:image/jpeg or data:image/png prefix")
    faces: list[FaceBox]


class CropResponse(BaseModel):
    """Response for the face cropping endpoint."""

    cropped_faces: list[str] = Field(
        description="Data URIs of the faces that were cropped, in request order. Skipped faces are omitted"
    )
    total_cropped: int
    skipped: int = Field(description="Number of faces that were empty after clamping or failed to encode")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    detector: str
    concurrent_requests: int
    queue_depth: int


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
