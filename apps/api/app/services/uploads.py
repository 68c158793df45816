from __future__ import annotations

import logging
import os
import re
import time
from collections.abc import Callable

from fastapi import UploadFile, status

from app.config import AppSettings
from app.errors import ApiError, StorageConfigError, StorageError
from app.schemas.uploads import MindUploadResponse, VideoUploadResponse
from app.services.object_storage import ObjectStorage, create_storage

logger = logging.getLogger(__name__)

MOCK_BASE_URL = "https://mock.local/uploads"

MIND_BUCKET = "mind-files"
MIND_EXTENSION = ".mind"
MIND_CONTENT_TYPE = "application/octet-stream"
MIN_MIND_FILE_BYTES = 1000

VIDEO_BUCKET = "videos"
ALLOWED_VIDEO_TYPES = (
    "video/mp4",
    "video/webm",
    "video/ogg",
    "video/avi",
    "video/mov",
    "video/quicktime",
)

StorageFactory = Callable[[AppSettings], ObjectStorage]


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def sanitize_mind_path(path: str) -> str:
    return re.sub(r"[^a-zA-Z0-9._/-]", "_", path)


def sanitize_video_name(filename: str | None) -> str:
    if not filename:
        return "video.mp4"
    return re.sub(r"[^a-zA-Z0-9._-]", "_", filename)


def build_video_filename(filename: str, timestamp_ms: int) -> str:
    return f"video-{timestamp_ms}-{filename}"


def _file_size(file: UploadFile) -> int:
    if file.size is not None:
        return file.size
    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(0)
    return size


def _read_bytes(file: UploadFile) -> bytes:
    file.file.seek(0)
    return file.file.read()


def _format_mb(size_bytes: int) -> str:
    return f"{size_bytes / 1024 / 1024:.1f}"


def _open_storage(storage_factory: StorageFactory, settings: AppSettings) -> ObjectStorage:
    try:
        return storage_factory(settings)
    except StorageConfigError as exc:
        raise ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc)) from exc


class MindFileUploadHandler:
    """Validates `.mind` tracking files and stores them under the requested path."""

    def __init__(
        self,
        *,
        settings: AppSettings,
        storage_factory: StorageFactory = create_storage,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._settings = settings
        self._storage_factory = storage_factory
        self._clock = clock

    def handle(self, *, file: UploadFile | None, path: str | None) -> MindUploadResponse:
        try:
            return self._handle(file=file, path=path)
        except ApiError:
            raise
        except Exception as exc:
            logger.exception(".mind file upload error")
            raise ApiError(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                f".mind file upload failed: {str(exc) or 'Unknown error'}",
            ) from exc

    def _handle(self, *, file: UploadFile | None, path: str | None) -> MindUploadResponse:
        if file is None:
            raise ApiError(status.HTTP_400_BAD_REQUEST, "No file uploaded")

        filename = file.filename or ""
        target_path = path or f"mind-{self._clock()}-{filename or 'file.mind'}"

        if not target_path.endswith(MIND_EXTENSION) and not filename.endswith(MIND_EXTENSION):
            raise ApiError(status.HTTP_400_BAD_REQUEST, "Invalid file type. Must be a .mind file.")

        data = _read_bytes(file)
        if len(data) < MIN_MIND_FILE_BYTES:
            raise ApiError(status.HTTP_400_BAD_REQUEST, "Invalid .mind file. File is too small.")

        if self._settings.mock_uploads:
            safe_path = sanitize_mind_path(target_path)
            return MindUploadResponse(url=f"{MOCK_BASE_URL}/{MIND_BUCKET}/{safe_path}", path=safe_path)

        storage = _open_storage(self._storage_factory, self._settings)
        try:
            storage.upload(
                bucket=MIND_BUCKET,
                path=target_path,
                data=data,
                content_type=MIND_CONTENT_TYPE,
                upsert=False,
            )
        except StorageError as exc:
            logger.error("Upload error: %s", exc)
            raise ApiError(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                f".mind file upload failed: Failed to upload .mind file: {exc}",
            ) from exc

        url = storage.get_public_url(bucket=MIND_BUCKET, path=target_path)
        return MindUploadResponse(url=url, path=target_path)


class VideoUploadHandler:
    """Checks video size and type, then stores it under a timestamped name."""

    def __init__(
        self,
        *,
        settings: AppSettings,
        storage_factory: StorageFactory = create_storage,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._settings = settings
        self._storage_factory = storage_factory
        self._clock = clock

    def handle(self, *, file: UploadFile | None) -> VideoUploadResponse:
        try:
            return self._handle(file=file)
        except ApiError:
            raise
        except Exception as exc:
            logger.exception("Video upload error")
            raise ApiError(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                f"Video upload failed: {str(exc) or 'Unknown error'}",
            ) from exc

    def _handle(self, *, file: UploadFile | None) -> VideoUploadResponse:
        logger.info("Video upload request received")
        if file is None:
            raise ApiError(status.HTTP_400_BAD_REQUEST, "No file uploaded")

        size = _file_size(file)
        content_type = file.content_type or ""
        logger.info(
            "Video file details: name=%s size=%d sizeMB=%.2f type=%s",
            file.filename,
            size,
            size / 1024 / 1024,
            content_type,
        )

        max_size_mb = self._settings.max_file_size_mb
        max_size_bytes = self._settings.max_file_size_bytes
        logger.info("Video size check: size=%d max=%d over=%s", size, max_size_bytes, size > max_size_bytes)
        if size > max_size_bytes:
            raise ApiError(
                status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                f"Video file too large. Maximum size is {max_size_mb}MB, your file is {_format_mb(size)}MB",
            )

        if content_type not in ALLOWED_VIDEO_TYPES:
            raise ApiError(
                status.HTTP_400_BAD_REQUEST,
                f"Unsupported video format. Please use MP4, WebM, or MOV files. Current type: {content_type}",
            )

        timestamp = self._clock()
        if self._settings.mock_uploads:
            mock_name = build_video_filename(sanitize_video_name(file.filename), timestamp)
            return VideoUploadResponse(url=f"{MOCK_BASE_URL}/{VIDEO_BUCKET}/{mock_name}")

        data = _read_bytes(file)
        filename = build_video_filename(file.filename or "video.mp4", timestamp)

        storage = _open_storage(self._storage_factory, self._settings)
        try:
            storage.upload(
                bucket=VIDEO_BUCKET,
                path=filename,
                data=data,
                content_type=content_type,
                upsert=False,
            )
        except StorageError as exc:
            logger.error("Upload error: %s", exc)
            raise ApiError(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                f"Video upload failed: Failed to upload video: {exc}",
            ) from exc

        url = storage.get_public_url(bucket=VIDEO_BUCKET, path=filename)
        return VideoUploadResponse(url=url)
