from fastapi import APIRouter, Depends, File, Form, UploadFile

from app.dependencies import get_mind_upload_handler, get_video_upload_handler
from app.schemas.uploads import ErrorResponse, MindUploadResponse, VideoUploadResponse
from app.services.uploads import MindFileUploadHandler, VideoUploadHandler

router = APIRouter(prefix="/api/upload", tags=["uploads"])


@router.post(
    "/mind",
    response_model=MindUploadResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def upload_mind_file(
    file: UploadFile | None = File(default=None),
    path: str | None = Form(default=None),
    handler: MindFileUploadHandler = Depends(get_mind_upload_handler),
) -> MindUploadResponse:
    return handler.handle(file=file, path=path)


@router.post(
    "/video",
    response_model=VideoUploadResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def upload_video(
    file: UploadFile | None = File(default=None),
    handler: VideoUploadHandler = Depends(get_video_upload_handler),
) -> VideoUploadResponse:
    return handler.handle(file=file)
