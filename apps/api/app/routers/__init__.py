from app.routers.subscription import router as subscription_router
from app.routers.uploads import router as uploads_router

__all__ = ["subscription_router", "uploads_router"]
