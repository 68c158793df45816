from __future__ import annotations

import logging
from typing import Protocol

from app.schemas.billing import ActionError, ProxyPrice, SubscriptionPlan
from app.services.billing_proxy import BillingProxyClient

logger = logging.getLogger(__name__)

FREE_PLAN_ID = "price_free"
HOSTED_CHECKOUT_BASE_URL = "https://buy.polar.sh"
DEFAULT_CHECKOUT_URL = f"{HOSTED_CHECKOUT_BASE_URL}/polar_cl_tIJXTsoXdnxQRDa7GaT3JBFrWiJY3CTYZ0vkr2Mwj9d"

# Remote amounts are in minor units (cents).
_POPULAR_MIN_AMOUNT = 4999
_RECOMMENDED_MIN_AMOUNT = 999

_STARTER_FEATURES = [
    "10 AR Experiences",
    "Standard Analytics",
    "Email Support",
    "Custom Branding",
    "Advanced Templates",
    "Export Options",
]

_PRO_FEATURES = [
    "Unlimited AR Experiences",
    "Advanced Analytics",
    "Priority Support",
    "Custom Branding",
    "API Access",
    "White-label Options",
    "Team Collaboration",
    "Custom Integrations",
]

DEFAULT_PLANS: tuple[SubscriptionPlan, ...] = (
    SubscriptionPlan(
        id=FREE_PLAN_ID,
        name="Free Plan",
        description="Get started with AR experiences",
        amount=0,
        interval="month",
        features=["1 AR Experience", "Basic Analytics", "Community Support", "Standard Templates"],
    ),
    SubscriptionPlan(
        id="price_starter",
        name="Starter Plan",
        description="Perfect for growing creators",
        amount=9.99,
        interval="month",
        features=_STARTER_FEATURES,
        recommended=True,
        checkout_url=DEFAULT_CHECKOUT_URL,
    ),
    SubscriptionPlan(
        id="price_pro",
        name="Professional Plan",
        description="For businesses and agencies",
        amount=49.99,
        interval="month",
        features=_PRO_FEATURES,
        popular=True,
        checkout_url=DEFAULT_CHECKOUT_URL,
    ),
    SubscriptionPlan(
        id="price_starter_yearly",
        name="Starter Plan (Yearly)",
        description="Save 20% with annual billing",
        amount=99.99,
        interval="year",
        features=_STARTER_FEATURES,
        checkout_url=DEFAULT_CHECKOUT_URL,
    ),
    SubscriptionPlan(
        id="price_pro_yearly",
        name="Professional Plan (Yearly)",
        description="Save 20% with annual billing",
        amount=499.99,
        interval="year",
        features=_PRO_FEATURES,
        checkout_url=DEFAULT_CHECKOUT_URL,
    ),
)


def plan_from_price(price: ProxyPrice) -> SubscriptionPlan:
    interval = price.recurring.interval
    monthly = interval == "month"
    return SubscriptionPlan(
        id=price.id,
        name=price.name,
        description=price.description or "",
        amount=price.amount,
        currency=price.currency,
        interval=interval,
        features=price.features or [],
        popular=monthly and price.amount >= _POPULAR_MIN_AMOUNT,
        recommended=monthly and _RECOMMENDED_MIN_AMOUNT <= price.amount < _POPULAR_MIN_AMOUNT,
        checkout_url=price.checkout_url or f"{HOSTED_CHECKOUT_BASE_URL}/{price.id}",
    )


class PlanSource(Protocol):
    async def list_plans(self) -> list[SubscriptionPlan] | None:
        """Return the plans, or None when this source cannot serve them."""
        ...


class RemotePlanSource:
    def __init__(self, billing: BillingProxyClient) -> None:
        self._billing = billing

    async def list_plans(self) -> list[SubscriptionPlan] | None:
        result = await self._billing.fetch_prices()
        if isinstance(result, ActionError):
            return None
        return [plan_from_price(price) for price in result.prices]


class StaticPlanSource:
    def __init__(self, plans: tuple[SubscriptionPlan, ...] = DEFAULT_PLANS) -> None:
        self._plans = plans

    async def list_plans(self) -> list[SubscriptionPlan]:
        return [plan.model_copy(deep=True) for plan in self._plans]


class FallbackPlanProvider:
    """Serves plans from the primary source, falling back to the secondary one."""

    def __init__(self, primary: PlanSource, secondary: PlanSource) -> None:
        self._primary = primary
        self._secondary = secondary

    @classmethod
    def for_billing(cls, billing: BillingProxyClient) -> FallbackPlanProvider:
        return cls(RemotePlanSource(billing), StaticPlanSource())

    async def list_plans(self) -> list[SubscriptionPlan]:
        try:
            plans = await self._primary.list_plans()
        except Exception:
            logger.exception("Error fetching plans")
            plans = None
        if plans is not None:
            return plans

        logger.warning("Falling back to default subscription plans")
        return await self._secondary.list_plans() or []
