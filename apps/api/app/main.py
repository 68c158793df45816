import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.config import AppSettings, load_settings
from app.errors import ApiError, api_error_handler, validation_error_handler
from app.routers import subscription_router, uploads_router
from app.services.object_storage import create_storage
from app.services.uploads import StorageFactory


def create_app(
    settings: AppSettings | None = None,
    *,
    storage_factory: StorageFactory = create_storage,
    billing_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(
        title="QuickScanAR API",
        description="AR asset uploads and subscription management",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.storage_factory = storage_factory
    app.state.billing_transport = billing_transport

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(uploads_router)
    app.include_router(subscription_router)

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "service": "quickscanar-api"}

    return app


app = create_app()
