from fastapi import APIRouter, Depends

from app.dependencies import get_subscription_controller
from app.schemas.billing import (
    ActionOutcome,
    CancelRequest,
    Notification,
    SubscribeRequest,
    SubscriptionPageView,
)
from app.services.subscription_page import SubscriptionPageController

router = APIRouter(prefix="/subscription", tags=["subscription"])


@router.get("", response_model=SubscriptionPageView)
async def get_subscription_page(
    controller: SubscriptionPageController = Depends(get_subscription_controller),
) -> SubscriptionPageView:
    await controller.load()
    return controller.view()


@router.post("/subscribe", response_model=ActionOutcome)
async def subscribe(
    payload: SubscribeRequest,
    controller: SubscriptionPageController = Depends(get_subscription_controller),
) -> ActionOutcome:
    checkout_url = await controller.subscribe(payload.plan_id)
    return ActionOutcome(
        checkout_url=checkout_url,
        current_subscription=controller.current_subscription,
        notifications=controller.notifications,
    )


@router.post("/cancel", response_model=ActionOutcome)
async def cancel_subscription(
    payload: CancelRequest,
    controller: SubscriptionPageController = Depends(get_subscription_controller),
) -> ActionOutcome:
    await controller.load()
    if not payload.confirm:
        notifications = [Notification(level="error", message="Cancellation requires confirmation")]
        return ActionOutcome(current_subscription=controller.current_subscription, notifications=notifications)

    await controller.cancel_subscription(lambda _message: payload.confirm)
    return ActionOutcome(
        current_subscription=controller.current_subscription,
        notifications=controller.notifications,
    )
