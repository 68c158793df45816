from __future__ import annotations

from urllib.parse import quote

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from app.config import AppSettings
from app.errors import StorageConfigError, StorageError


def create_s3_client(settings: AppSettings) -> BaseClient:
    access_key = settings.s3_access_key_id
    secret_key = settings.s3_secret_access_key
    if not access_key or not secret_key:
        raise StorageConfigError(
            "S3 configuration missing. Set S3_ACCESS_KEY_ID and S3_SECRET_ACCESS_KEY."
        )

    return boto3.client(
        "s3",
        region_name=settings.s3_region,
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        aws_session_token=settings.s3_session_token,
        endpoint_url=resolve_endpoint_url(settings),
    )


def resolve_endpoint_url(settings: AppSettings) -> str:
    return settings.s3_endpoint_url or f"https://s3.{settings.s3_region}.amazonaws.com"


def build_public_url(*, base_url: str, bucket: str, key: str) -> str:
    return f"{base_url.rstrip('/')}/{bucket}/{quote(key, safe='/')}"


def put_object_bytes(
    *,
    client: BaseClient,
    bucket: str,
    key: str,
    data: bytes,
    content_type: str,
    upsert: bool = False,
) -> None:
    params = {
        "Bucket": bucket,
        "Key": key,
        "Body": data,
        "ContentType": content_type,
    }
    if not upsert:
        # Conditional write: fails with 412 when the key already exists.
        params["IfNoneMatch"] = "*"
    client.put_object(**params)


def _client_error_message(exc: ClientError) -> str:
    error = exc.response.get("Error") or {}
    return str(error.get("Message") or error.get("Code") or exc)


class S3Storage:
    def __init__(self, *, client: BaseClient, public_base_url: str) -> None:
        self._client = client
        self._public_base_url = public_base_url

    def upload(
        self,
        *,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        upsert: bool = False,
    ) -> None:
        try:
            put_object_bytes(
                client=self._client,
                bucket=bucket,
                key=path,
                data=data,
                content_type=content_type,
                upsert=upsert,
            )
        except ClientError as exc:
            raise StorageError(_client_error_message(exc)) from exc
        except BotoCoreError as exc:
            raise StorageError(str(exc)) from exc

    def get_public_url(self, *, bucket: str, path: str) -> str:
        return build_public_url(base_url=self._public_base_url, bucket=bucket, key=path)


def create_s3_storage(settings: AppSettings) -> S3Storage:
    client = create_s3_client(settings)
    return S3Storage(
        client=client,
        public_base_url=settings.s3_public_base_url or resolve_endpoint_url(settings),
    )
