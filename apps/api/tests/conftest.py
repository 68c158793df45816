import json

import httpx
import pytest

from app.errors import StorageError


class FakeStorage:
    def __init__(self, *, fail_with: str | None = None) -> None:
        self.fail_with = fail_with
        self.uploads: list[dict] = []

    def upload(self, *, bucket: str, path: str, data: bytes, content_type: str, upsert: bool = False) -> None:
        if self.fail_with is not None:
            raise StorageError(self.fail_with)
        self.uploads.append(
            {"bucket": bucket, "path": path, "size": len(data), "content_type": content_type, "upsert": upsert}
        )

    def get_public_url(self, *, bucket: str, path: str) -> str:
        return f"https://cdn.example.com/{bucket}/{path}"


class StorageFactorySpy:
    def __init__(self, storage: FakeStorage) -> None:
        self.storage = storage
        self.calls = 0

    def __call__(self, settings):
        del settings
        self.calls += 1
        return self.storage


class FakeBillingProxy:
    """Programmable stand-in for the billing proxy, served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.prices: tuple[int, object] = (
            200,
            {
                "prices": [
                    {
                        "id": "price_remote_pro",
                        "name": "Remote Pro",
                        "description": "From the proxy",
                        "amount": 4999,
                        "currency": "USD",
                        "recurring": {"interval": "month"},
                        "features": ["Everything"],
                    }
                ]
            },
        )
        self.subscription: tuple[int, object] = (200, {"subscription": None})
        self.create: tuple[int, object] = (200, {})
        self.cancel: tuple[int, object] = (200, {"success": True})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET":
            action = request.url.params.get("action")
            status_code, payload = self.prices if action == "prices" else self.subscription
        else:
            body = json.loads(request.content)
            status_code, payload = self.create if body["action"] == "create_subscription" else self.cancel
        return httpx.Response(status_code=status_code, json=payload, request=request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def actions(self) -> list[str]:
        actions = []
        for request in self.requests:
            if request.method == "GET":
                actions.append(request.url.params.get("action"))
            else:
                actions.append(json.loads(request.content)["action"])
        return actions


@pytest.fixture
def storage_spy() -> StorageFactorySpy:
    return StorageFactorySpy(FakeStorage())


@pytest.fixture
def failing_storage_spy() -> StorageFactorySpy:
    return StorageFactorySpy(FakeStorage(fail_with="The resource already exists"))


@pytest.fixture
def billing_proxy() -> FakeBillingProxy:
    return FakeBillingProxy()
