"""Request/response Pydantic models."""

from typing import Literal

from pydantic import BaseModel, Field, StrictStr


class ProcessRequest(BaseModel):
    url: StrictStr = Field(min_length=1)


class DownloadOptionOut(BaseModel):
    url: str
    label: str


class ProcessResponse(BaseModel):
    status: Literal["success"] = "success"
    original_url: str
    title: str | None = None
    download_options: list[DownloadOptionOut] = []


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    message: str
    original_url: str | None = None


class StatusResponse(BaseModel):
    status: str = "online"
    message: str = "GrabnWatch API is running"
    usage: str = "Send POST request with JSON body containing 'url' field"
