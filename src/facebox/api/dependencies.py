"""FastAPI dependencies: app-state accessors and optional bearer-token auth."""

from __future__ import annotations

import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from facebox.config import Settings
from facebox.ml.face_detector import FaceDetector
from facebox.workers import WorkerPool

_bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def get_worker_pool(request: Request) -> WorkerPool:
    pool: WorkerPool = request.app.state.worker_pool
    return pool


def get_face_detector(request: Request) -> FaceDetector:
    detector: FaceDetector = request.app.state.face_detector
    return detector


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
WorkerPoolDep = Annotated[WorkerPool, Depends(get_worker_pool)]
FaceDetectorDep = Annotated[FaceDetector, Depends(get_face_detector)]


async def verify_api_key(
    settings: SettingsDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
) -> None:
    """Check the Bearer token against the configured API key.

    Without FACEBOX_API_KEY every request passes. With it, requests must send
    'Authorization: Bearer <key>'.
    """
    if settings.api_key is None:
        return

    if credentials is None or not secrets.compare_digest(credentials.credentials.encode(), settings.api_key.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
            headers={"WWW-Authenticate": "Bearer"},
        )
