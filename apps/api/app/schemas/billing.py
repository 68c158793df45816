from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class SubscriptionPlan(BaseModel):
    id: str = Field(min_length=1)
    name: str
    description: str = ""
    amount: float = Field(ge=0)
    currency: str = "USD"
    interval: str = "month"
    features: list[str] = Field(default_factory=list)
    popular: bool = False
    recommended: bool = False
    checkout_url: str | None = None


class UserSubscription(BaseModel):
    id: str
    status: str
    plan_name: str = "Unknown Plan"
    features: list[str] = Field(default_factory=list)
    current_period_end: str | None = None
    is_active: bool = False


# Raw billing-proxy payloads, validated before anything else touches them.


class ProxyRecurring(BaseModel):
    interval: str


class ProxyPrice(BaseModel):
    id: str = Field(min_length=1)
    name: str
    description: str | None = None
    amount: float
    currency: str = "USD"
    recurring: ProxyRecurring
    features: list[str] | None = None
    checkout_url: str | None = None


class ProxyPricesPayload(BaseModel):
    prices: list[ProxyPrice]


class ProxySubscription(BaseModel):
    id: str
    status: str
    plan_name: str | None = None
    features: list[str] | None = None
    current_period_end: str | None = None
    is_active: bool = False


class ProxySubscriptionPayload(BaseModel):
    subscription: ProxySubscription | None = None


class ProxyCreatePayload(BaseModel):
    client_secret: str | None = None


# Tagged results returned by the billing-proxy client.


class PricesResult(BaseModel):
    kind: Literal["prices"] = "prices"
    prices: list[ProxyPrice]


class SubscriptionResult(BaseModel):
    kind: Literal["subscription"] = "subscription"
    subscription: UserSubscription | None = None


class CreateSubscriptionResult(BaseModel):
    kind: Literal["subscription_created"] = "subscription_created"
    client_secret: str | None = None


class CancelResult(BaseModel):
    kind: Literal["subscription_canceled"] = "subscription_canceled"


class ActionError(BaseModel):
    kind: Literal["error"] = "error"
    message: str | None = None
    status_code: int | None = None


# Page view model.


class PageState(str, Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    LOADED = "loaded"


class Notification(BaseModel):
    level: Literal["success", "error"]
    message: str


class AccessPrompt(BaseModel):
    title: str = "Access Required"
    message: str = "Please sign in to view subscription options"
    sign_in_url: str = "/auth/signin"


class SubscriptionPageView(BaseModel):
    state: PageState
    plans: list[SubscriptionPlan] = Field(default_factory=list)
    current_subscription: UserSubscription | None = None
    is_subscribing: bool = False
    notifications: list[Notification] = Field(default_factory=list)
    access_prompt: AccessPrompt | None = None


class SubscribeRequest(BaseModel):
    plan_id: str = Field(min_length=1)


class CancelRequest(BaseModel):
    confirm: bool = False


class ActionOutcome(BaseModel):
    checkout_url: str | None = None
    current_subscription: UserSubscription | None = None
    notifications: list[Notification] = Field(default_factory=list)
