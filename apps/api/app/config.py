import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(_ENV_PATH, override=False)

_DEFAULT_MAX_FILE_SIZE_MB = 100


def _get_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def get_mock_uploads() -> bool:
    return (_get_env("MOCK_UPLOADS") or "").lower() in ("1", "true")


def get_storage_backend() -> str:
    return (_get_env("STORAGE_BACKEND") or "supabase").lower()


def get_supabase_url() -> str | None:
    return _get_env("SUPABASE_URL") or _get_env("NEXT_PUBLIC_SUPABASE_URL")


def get_supabase_anon_key() -> str | None:
    return _get_env("SUPABASE_ANON_KEY") or _get_env("NEXT_PUBLIC_SUPABASE_ANON_KEY")


def get_supabase_key() -> str | None:
    """Return the storage credential, preferring the service-role key."""
    return _get_env("SUPABASE_SERVICE_ROLE_KEY") or get_supabase_anon_key()


def get_s3_region() -> str:
    return _get_env("S3_REGION") or "ap-northeast-2"


def get_s3_access_key_id() -> str | None:
    return _get_env("S3_ACCESS_KEY_ID")


def get_s3_secret_access_key() -> str | None:
    return _get_env("S3_SECRET_ACCESS_KEY")


def get_s3_session_token() -> str | None:
    return _get_env("S3_SESSION_TOKEN")


def get_s3_endpoint_url() -> str | None:
    return _get_env("S3_ENDPOINT_URL")


def get_s3_public_base_url() -> str | None:
    return _get_env("S3_PUBLIC_BASE_URL")


def get_max_file_size_mb() -> int:
    raw = _get_env("MAX_FILE_SIZE_MB")
    if raw is None:
        return _DEFAULT_MAX_FILE_SIZE_MB
    try:
        return int(raw)
    except ValueError:
        return _DEFAULT_MAX_FILE_SIZE_MB


def get_billing_proxy_url() -> str:
    return _get_env("BILLING_PROXY_URL") or "http://localhost:3000"


def get_cors_origins() -> list[str]:
    raw = _get_env("CORS_ORIGINS") or "http://localhost:3000"
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass(frozen=True)
class AppSettings:
    mock_uploads: bool = False
    storage_backend: str = "supabase"
    supabase_url: str | None = None
    supabase_key: str | None = None
    s3_region: str = "ap-northeast-2"
    s3_access_key_id: str | None = None
    s3_secret_access_key: str | None = None
    s3_session_token: str | None = None
    s3_endpoint_url: str | None = None
    s3_public_base_url: str | None = None
    max_file_size_mb: int = _DEFAULT_MAX_FILE_SIZE_MB
    billing_proxy_url: str = "http://localhost:3000"
    cors_origins: tuple[str, ...] = ("http://localhost:3000",)

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


def load_settings() -> AppSettings:
    """Snapshot the environment into an immutable settings object.

    Called once when the app is built; handlers receive the snapshot instead
    of reading the environment per request.
    """
    return AppSettings(
        mock_uploads=get_mock_uploads(),
        storage_backend=get_storage_backend(),
        supabase_url=get_supabase_url(),
        supabase_key=get_supabase_key(),
        s3_region=get_s3_region(),
        s3_access_key_id=get_s3_access_key_id(),
        s3_secret_access_key=get_s3_secret_access_key(),
        s3_session_token=get_s3_session_token(),
        s3_endpoint_url=get_s3_endpoint_url(),
        s3_public_base_url=get_s3_public_base_url(),
        max_file_size_mb=get_max_file_size_mb(),
        billing_proxy_url=get_billing_proxy_url(),
        cors_origins=tuple(get_cors_origins()),
    )
