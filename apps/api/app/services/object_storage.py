from __future__ import annotations

import logging
from typing import Protocol
from urllib.parse import quote

import httpx

from app.config import AppSettings
from app.errors import StorageConfigError, StorageError
from app.services.s3_storage import create_s3_storage

logger = logging.getLogger(__name__)

SUPABASE_CONFIG_MISSING = (
    "Supabase configuration missing. Set SUPABASE_URL and SUPABASE_ANON_KEY "
    "(or SUPABASE_SERVICE_ROLE_KEY)."
)


class ObjectStorage(Protocol):
    def upload(
        self,
        *,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        upsert: bool = False,
    ) -> None: ...

    def get_public_url(self, *, bucket: str, path: str) -> str: ...


def _extract_error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if message:
            return str(message)
    return response.text or f"HTTP {response.status_code}"


class SupabaseStorage:
    """Supabase Storage REST client for single-object uploads."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._transport = transport

    def upload(
        self,
        *,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        upsert: bool = False,
    ) -> None:
        url = f"{self._base_url}/storage/v1/object/{bucket}/{quote(path, safe='/')}"
        try:
            with httpx.Client(timeout=60.0, transport=self._transport) as client:
                response = client.post(
                    url,
                    headers={
                        "Authorization": f"Bearer {self._api_key}",
                        "apikey": self._api_key,
                        "Content-Type": content_type,
                        "x-upsert": "true" if upsert else "false",
                    },
                    content=data,
                )
        except httpx.RequestError as exc:
            raise StorageError(str(exc)) from exc

        if response.is_error:
            message = _extract_error_message(response)
            logger.error("Storage upload to %s/%s rejected: %s", bucket, path, message)
            raise StorageError(message)

    def get_public_url(self, *, bucket: str, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{bucket}/{quote(path, safe='/')}"


def create_storage(settings: AppSettings) -> ObjectStorage:
    """Build a fresh storage client for one request.

    Raises StorageConfigError naming the settings to provide when the selected
    backend is not configured.
    """
    if settings.storage_backend == "s3":
        return create_s3_storage(settings)
    if settings.storage_backend != "supabase":
        raise StorageConfigError(f"Unknown STORAGE_BACKEND: {settings.storage_backend}")
    if not settings.supabase_url or not settings.supabase_key:
        raise StorageConfigError(SUPABASE_CONFIG_MISSING)
    return SupabaseStorage(base_url=settings.supabase_url, api_key=settings.supabase_key)
