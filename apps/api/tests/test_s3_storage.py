import pytest
from botocore.exceptions import ClientError

from app.config import AppSettings
from app.errors import StorageConfigError, StorageError
from app.services import s3_storage
from app.services.s3_storage import S3Storage, create_s3_storage, put_object_bytes


class _FakeS3Client:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[dict] = []

    def put_object(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return {"ETag": '"abc"'}


def test_put_object_bytes_is_conditional_unless_upsert():
    client = _FakeS3Client()

    put_object_bytes(client=client, bucket="videos", key="a.mp4", data=b"x", content_type="video/mp4")
    put_object_bytes(client=client, bucket="videos", key="a.mp4", data=b"x", content_type="video/mp4", upsert=True)

    assert client.calls[0]["IfNoneMatch"] == "*"
    assert "IfNoneMatch" not in client.calls[1]
    assert client.calls[0]["ContentType"] == "video/mp4"


def test_s3_storage_wraps_client_error_message():
    error = ClientError(
        {"Error": {"Code": "PreconditionFailed", "Message": "At least one of the pre-conditions you specified did not hold"}},
        "PutObject",
    )
    storage = S3Storage(client=_FakeS3Client(error=error), public_base_url="https://cdn.example.com")

    with pytest.raises(StorageError, match="pre-conditions"):
        storage.upload(bucket="mind-files", path="a.mind", data=b"x", content_type="application/octet-stream")


def test_create_s3_storage_requires_credentials():
    with pytest.raises(StorageConfigError, match="S3_ACCESS_KEY_ID"):
        create_s3_storage(AppSettings(storage_backend="s3"))


def test_create_s3_storage_public_url_prefers_public_base(monkeypatch):
    captured: dict = {}

    def _fake_client(service_name, **kwargs):
        captured.update(kwargs, service_name=service_name)
        return _FakeS3Client()

    monkeypatch.setattr(s3_storage.boto3, "client", _fake_client)
    settings = AppSettings(
        storage_backend="s3",
        s3_access_key_id="AKIA",
        s3_secret_access_key="secret",
        s3_endpoint_url="https://minio.local:9000",
    )

    storage = create_s3_storage(settings)

    assert captured["service_name"] == "s3"
    assert captured["endpoint_url"] == "https://minio.local:9000"
    assert storage.get_public_url(bucket="videos", path="v 1.mp4") == "https://minio.local:9000/videos/v%201.mp4"

    cdn = create_s3_storage(
        AppSettings(
            storage_backend="s3",
            s3_access_key_id="AKIA",
            s3_secret_access_key="secret",
            s3_public_base_url="https://cdn.example.com/",
        )
    )
    assert cdn.get_public_url(bucket="videos", path="v.mp4") == "https://cdn.example.com/videos/v.mp4"
