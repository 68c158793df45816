from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from app.schemas.billing import (
    ActionError,
    CancelResult,
    CreateSubscriptionResult,
    PricesResult,
    ProxyCreatePayload,
    ProxyPricesPayload,
    ProxySubscriptionPayload,
    SubscriptionResult,
    UserSubscription,
)

logger = logging.getLogger(__name__)

_PROXY_PATH = "/api/polar"


def _error_message(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return None


class BillingProxyClient:
    """Async client for the billing proxy.

    Every method returns a tagged result; HTTP errors, transport failures and
    malformed bodies all come back as ActionError instead of raising.
    """

    def __init__(self, *, base_url: str, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self._base_url, timeout=30.0, transport=self._transport)

    async def fetch_prices(self) -> PricesResult | ActionError:
        try:
            async with self._client() as client:
                response = await client.get(_PROXY_PATH, params={"action": "prices"})
        except httpx.RequestError as exc:
            logger.warning("Billing proxy unreachable while fetching prices: %s", exc)
            return ActionError(message=str(exc))

        if response.is_error:
            return ActionError(message=_error_message(response), status_code=response.status_code)
        try:
            payload = ProxyPricesPayload.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.warning("Malformed prices payload from billing proxy: %s", exc)
            return ActionError(message="Malformed prices response", status_code=response.status_code)
        return PricesResult(prices=payload.prices)

    async def fetch_subscription(self, user_id: str) -> SubscriptionResult | ActionError:
        try:
            async with self._client() as client:
                response = await client.get(_PROXY_PATH, params={"action": "subscription", "userId": user_id})
        except httpx.RequestError as exc:
            logger.error("Failed to fetch subscription: %s", exc)
            return ActionError(message=str(exc))

        if response.is_error:
            return ActionError(message=_error_message(response), status_code=response.status_code)
        try:
            payload = ProxySubscriptionPayload.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.error("Malformed subscription payload from billing proxy: %s", exc)
            return ActionError(message="Malformed subscription response", status_code=response.status_code)

        raw = payload.subscription
        if raw is None:
            return SubscriptionResult(subscription=None)
        return SubscriptionResult(
            subscription=UserSubscription(
                id=raw.id,
                status=raw.status,
                plan_name=raw.plan_name or "Unknown Plan",
                features=raw.features or [],
                current_period_end=raw.current_period_end,
                is_active=raw.is_active,
            )
        )

    async def create_subscription(self, *, user_id: str, price_id: str) -> CreateSubscriptionResult | ActionError:
        response = await self._post({"action": "create_subscription", "userId": user_id, "priceId": price_id})
        if isinstance(response, ActionError):
            return response
        try:
            payload = ProxyCreatePayload.model_validate(response.json())
        except (ValueError, ValidationError):
            return CreateSubscriptionResult()
        return CreateSubscriptionResult(client_secret=payload.client_secret)

    async def cancel_subscription(self, *, user_id: str) -> CancelResult | ActionError:
        response = await self._post({"action": "cancel_subscription", "userId": user_id})
        if isinstance(response, ActionError):
            return response
        return CancelResult()

    async def _post(self, body: dict) -> httpx.Response | ActionError:
        try:
            async with self._client() as client:
                response = await client.post(_PROXY_PATH, json=body)
        except httpx.RequestError as exc:
            logger.error("Billing proxy %s failed: %s", body.get("action"), exc)
            return ActionError(message=None)

        if response.is_error:
            return ActionError(message=_error_message(response), status_code=response.status_code)
        return response
