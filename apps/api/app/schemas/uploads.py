from pydantic import BaseModel, Field


class MindUploadResponse(BaseModel):
    success: bool = True
    url: str = Field(min_length=1)
    path: str = Field(min_length=1)


class VideoUploadResponse(BaseModel):
    success: bool = True
    url: str = Field(min_length=1)


class ErrorResponse(BaseModel):
    error: str
