from app.services.billing_proxy import BillingProxyClient
from app.services.object_storage import ObjectStorage, SupabaseStorage, create_storage
from app.services.plans import (
    DEFAULT_PLANS,
    FallbackPlanProvider,
    RemotePlanSource,
    StaticPlanSource,
    plan_from_price,
)
from app.services.s3_storage import S3Storage, create_s3_client, create_s3_storage, put_object_bytes
from app.services.subscription_page import SubscriptionPageController
from app.services.uploads import (
    MindFileUploadHandler,
    VideoUploadHandler,
    sanitize_mind_path,
    sanitize_video_name,
)

__all__ = [
    "BillingProxyClient",
    "ObjectStorage",
    "SupabaseStorage",
    "create_storage",
    "S3Storage",
    "create_s3_client",
    "create_s3_storage",
    "put_object_bytes",
    "DEFAULT_PLANS",
    "FallbackPlanProvider",
    "RemotePlanSource",
    "StaticPlanSource",
    "plan_from_price",
    "SubscriptionPageController",
    "MindFileUploadHandler",
    "VideoUploadHandler",
    "sanitize_mind_path",
    "sanitize_video_name",
]
