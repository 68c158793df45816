from fastapi import Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

UPLOAD_PATH_PREFIX = "/api/upload/"


class ApiError(Exception):
    """Error that maps onto a `{"error": message}` JSON response."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class StorageError(Exception):
    pass


class StorageConfigError(Exception):
    pass


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    del request
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    if not request.url.path.startswith(UPLOAD_PATH_PREFIX):
        return await request_validation_exception_handler(request, exc)

    # A `file` part that is not a file counts as no file at all.
    fields = {tuple(error.get("loc", ()))[:2] for error in exc.errors()}
    if ("body", "file") in fields:
        return JSONResponse(status_code=400, content={"error": "No file uploaded"})
    return JSONResponse(status_code=400, content={"error": "Invalid upload request"})
