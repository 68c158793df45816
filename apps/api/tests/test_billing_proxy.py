import asyncio
import json

import httpx

from app.schemas.billing import ActionError, CancelResult, CreateSubscriptionResult, PricesResult, SubscriptionResult
from app.services.billing_proxy import BillingProxyClient


def _client(transport: httpx.AsyncBaseTransport) -> BillingProxyClient:
    return BillingProxyClient(base_url="http://proxy.test/", transport=transport)


def test_fetch_prices_parses_proxy_payload(billing_proxy):
    result = asyncio.run(_client(billing_proxy.transport()).fetch_prices())

    assert isinstance(result, PricesResult)
    assert result.prices[0].id == "price_remote_pro"
    assert result.prices[0].recurring.interval == "month"
    assert str(billing_proxy.requests[0].url) == "http://proxy.test/api/polar?action=prices"


def test_fetch_prices_returns_error_on_non_success(billing_proxy):
    billing_proxy.prices = (503, {"error": "Polar unavailable"})

    result = asyncio.run(_client(billing_proxy.transport()).fetch_prices())

    assert isinstance(result, ActionError)
    assert result.status_code == 503
    assert result.message == "Polar unavailable"


def test_fetch_prices_returns_error_on_malformed_body(billing_proxy):
    billing_proxy.prices = (200, {"prices": [{"id": "p", "name": "No recurring", "amount": 10}]})

    result = asyncio.run(_client(billing_proxy.transport()).fetch_prices())

    assert isinstance(result, ActionError)


def test_transport_failure_becomes_action_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("proxy down", request=request)

    result = asyncio.run(_client(httpx.MockTransport(handler)).fetch_subscription("user-1"))

    assert isinstance(result, ActionError)
    assert result.message == "proxy down"


def test_fetch_subscription_applies_defaults(billing_proxy):
    billing_proxy.subscription = (
        200,
        {"subscription": {"id": "sub_1", "status": "active", "current_period_end": "2026-11-19", "is_active": True}},
    )

    result = asyncio.run(_client(billing_proxy.transport()).fetch_subscription("user-1"))

    assert isinstance(result, SubscriptionResult)
    assert result.subscription.plan_name == "Unknown Plan"
    assert result.subscription.features == []
    assert billing_proxy.requests[0].url.params["userId"] == "user-1"


def test_fetch_subscription_without_subscription(billing_proxy):
    result = asyncio.run(_client(billing_proxy.transport()).fetch_subscription("user-1"))

    assert result == SubscriptionResult(subscription=None)


def test_create_subscription_posts_action_body(billing_proxy):
    billing_proxy.create = (200, {"client_secret": "cs_123"})

    result = asyncio.run(_client(billing_proxy.transport()).create_subscription(user_id="user-1", price_id="price_x"))

    assert result == CreateSubscriptionResult(client_secret="cs_123")
    assert json.loads(billing_proxy.requests[0].content) == {
        "action": "create_subscription",
        "userId": "user-1",
        "priceId": "price_x",
    }


def test_create_subscription_surfaces_proxy_error(billing_proxy):
    billing_proxy.create = (402, {"error": "Card declined"})

    result = asyncio.run(_client(billing_proxy.transport()).create_subscription(user_id="user-1", price_id="price_x"))

    assert result == ActionError(message="Card declined", status_code=402)


def test_cancel_subscription(billing_proxy):
    result = asyncio.run(_client(billing_proxy.transport()).cancel_subscription(user_id="user-1"))

    assert isinstance(result, CancelResult)
    assert json.loads(billing_proxy.requests[0].content) == {"action": "cancel_subscription", "userId": "user-1"}
