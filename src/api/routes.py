"""GET /, POST / and POST /api/process endpoint handlers."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.api.schemas import ErrorResponse, ProcessRequest, ProcessResponse, StatusResponse
from src.api.service import process_video_url
from src.scraper import PageScraper, SessionProvider

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_sessions(request: Request) -> SessionProvider:
    return request.app.state.sessions


def _get_scraper(request: Request) -> PageScraper:
    return request.app.state.scraper


def error_response(status_code: int, message: str, original_url: str | None = None) -> JSONResponse:
    body = ErrorResponse(message=message, original_url=original_url)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.get("/")
async def status() -> StatusResponse:
    return StatusResponse()


@router.post("/", response_model=ProcessResponse)
@router.post("/api/process", response_model=ProcessResponse)
async def process(
    request: Request,
    sessions: SessionProvider = Depends(_get_sessions),
    scraper: PageScraper = Depends(_get_scraper),
):
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.error("failed to parse request body: %s", exc)
        return error_response(400, "Invalid JSON in request body")

    try:
        body = ProcessRequest.model_validate(payload)
    except ValidationError:
        return error_response(400, "Missing or invalid 'url' field in request body")

    try:
        response = await process_video_url(sessions, scraper, body.url)
    except Exception as exc:
        logger.exception("error processing request", extra={"original_url": body.url})
        return error_response(500, f"Server error: {exc}")

    if response is None:
        return error_response(404, "Failed to generate download links", original_url=body.url)
    return response
