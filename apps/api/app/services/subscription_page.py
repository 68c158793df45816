from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from app.schemas.billing import (
    AccessPrompt,
    ActionError,
    Notification,
    PageState,
    SubscriptionPageView,
    SubscriptionPlan,
    UserSubscription,
)
from app.services.billing_proxy import BillingProxyClient
from app.services.plans import FREE_PLAN_ID, FallbackPlanProvider, PlanSource

logger = logging.getLogger(__name__)

CANCEL_CONFIRMATION = (
    "Are you sure you want to cancel your subscription? You will lose access to "
    "premium features at the end of your current billing period."
)


class SubscriptionPageController:
    """State holder for the subscription page of one user session.

    Starts in LOADING; `load()` moves it to UNAUTHENTICATED (no session, no
    fetches) or LOADED. Failures surface as notifications.
    """

    def __init__(
        self,
        *,
        user_id: str | None,
        billing: BillingProxyClient,
        plan_provider: PlanSource | None = None,
    ) -> None:
        self.user_id = user_id
        self.state = PageState.LOADING
        self.plans: list[SubscriptionPlan] = []
        self.current_subscription: UserSubscription | None = None
        self.is_subscribing = False
        self.notifications: list[Notification] = []
        self._billing = billing
        self._plan_provider = plan_provider or FallbackPlanProvider.for_billing(billing)

    def _notify_success(self, message: str) -> None:
        self.notifications.append(Notification(level="success", message=message))

    def _notify_error(self, message: str) -> None:
        self.notifications.append(Notification(level="error", message=message))

    async def load(self) -> None:
        if self.user_id is None:
            self.state = PageState.UNAUTHENTICATED
            return
        results = await asyncio.gather(
            self._load_plans(),
            self.refresh_subscription(),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                logger.error("Subscription page load failed: %s", result)
        self.state = PageState.LOADED

    async def _load_plans(self) -> None:
        self.plans = await self._plan_provider.list_plans()

    async def refresh_subscription(self) -> None:
        if self.user_id is None:
            return
        result = await self._billing.fetch_subscription(self.user_id)
        if isinstance(result, ActionError):
            logger.error("Failed to fetch subscription: %s", result.message)
            return
        if result.subscription is not None:
            self.current_subscription = result.subscription

    def find_plan(self, plan_id: str) -> SubscriptionPlan | None:
        return next((plan for plan in self.plans if plan.id == plan_id), None)

    async def subscribe(self, plan_id: str) -> str | None:
        """Start a subscription; returns the hosted checkout URL to open, if any."""
        if self.user_id is None:
            self._notify_error("Please sign in to subscribe")
            return None

        if plan_id == FREE_PLAN_ID:
            self._notify_success("Free plan activated!")
            return None

        if not self.plans:
            await self._load_plans()
        plan = self.find_plan(plan_id)
        if plan is not None and plan.checkout_url:
            self._notify_success("Opening Polar.sh checkout...")
            return plan.checkout_url

        self.is_subscribing = True
        try:
            result = await self._billing.create_subscription(user_id=self.user_id, price_id=plan_id)
            if isinstance(result, ActionError):
                self._notify_error(result.message or "Failed to create subscription")
            elif result.client_secret:
                self._notify_success("Redirecting to payment...")
            else:
                self._notify_success("Subscription created successfully!")
                await self.refresh_subscription()
        except Exception:
            logger.exception("Subscription error")
            self._notify_error("Failed to create subscription")
        finally:
            self.is_subscribing = False
        return None

    async def cancel_subscription(self, confirm: Callable[[str], bool]) -> bool:
        if self.user_id is None or self.current_subscription is None:
            return False
        if not confirm(CANCEL_CONFIRMATION):
            return False

        try:
            result = await self._billing.cancel_subscription(user_id=self.user_id)
        except Exception:
            logger.exception("Cancel error")
            self._notify_error("Failed to cancel subscription")
            return False
        if isinstance(result, ActionError):
            self._notify_error(result.message or "Failed to cancel subscription")
            return False

        self._notify_success("Subscription canceled successfully")
        await self.refresh_subscription()
        return True

    def view(self) -> SubscriptionPageView:
        return SubscriptionPageView(
            state=self.state,
            plans=self.plans,
            current_subscription=self.current_subscription,
            is_subscribing=self.is_subscribing,
            notifications=list(self.notifications),
            access_prompt=AccessPrompt() if self.state is PageState.UNAUTHENTICATED else None,
        )
