from fastapi import Depends, Header, Request

from app.config import AppSettings
from app.services.billing_proxy import BillingProxyClient
from app.services.subscription_page import SubscriptionPageController
from app.services.uploads import MindFileUploadHandler, StorageFactory, VideoUploadHandler


def get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_storage_factory(request: Request) -> StorageFactory:
    return request.app.state.storage_factory


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str | None:
    """Session identity forwarded by the upstream auth provider."""
    if x_user_id is None:
        return None
    return x_user_id.strip() or None


def get_mind_upload_handler(
    settings: AppSettings = Depends(get_settings),
    storage_factory: StorageFactory = Depends(get_storage_factory),
) -> MindFileUploadHandler:
    return MindFileUploadHandler(settings=settings, storage_factory=storage_factory)


def get_video_upload_handler(
    settings: AppSettings = Depends(get_settings),
    storage_factory: StorageFactory = Depends(get_storage_factory),
) -> VideoUploadHandler:
    return VideoUploadHandler(settings=settings, storage_factory=storage_factory)


def get_billing_client(request: Request, settings: AppSettings = Depends(get_settings)) -> BillingProxyClient:
    return BillingProxyClient(
        base_url=settings.billing_proxy_url,
        transport=request.app.state.billing_transport,
    )


def get_subscription_controller(
    user_id: str | None = Depends(get_current_user_id),
    billing: BillingProxyClient = Depends(get_billing_client),
) -> SubscriptionPageController:
    return SubscriptionPageController(user_id=user_id, billing=billing)
