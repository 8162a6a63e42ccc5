"""FastAPI app entrypoint."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.routes import error_response, router
from src.config import get_settings
from src.logging_config import setup_logging
from src.scraper import PageScraper, build_session_provider

logger = logging.getLogger(__name__)

CORS_ALLOW_HEADERS = [
    "X-CSRF-Token",
    "X-Requested-With",
    "Accept",
    "Accept-Version",
    "Content-Length",
    "Content-MD5",
    "Content-Type",
    "Date",
    "X-Api-Version",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # Initialize logging FIRST so all subsequent operations produce JSON logs
    setup_logging(settings.log_level)
    logger.info("starting grabnwatch service")

    scraper = PageScraper(settings)
    sessions = build_session_provider(settings, scraper)
    await sessions.start()

    # Attach to app state for dependency injection
    app.state.settings = settings
    app.state.scraper = scraper
    app.state.sessions = sessions

    logger.info(
        "grabnwatch service ready",
        extra={
            "site_url": settings.site_url,
            "session_mode": settings.session_mode,
            "pool_size": settings.pool_size,
        },
    )

    yield

    # Cleanup
    logger.info("shutting down grabnwatch service")
    await sessions.close()


app = FastAPI(title="GrabnWatch Service", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origin_list(),
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS", "POST"],
    allow_headers=CORS_ALLOW_HEADERS,
)
app.include_router(router)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # Unserved methods on known paths read the same as unknown paths
    if exc.status_code in (404, 405):
        return error_response(404, "Not found")
    return error_response(exc.status_code, str(exc.detail))


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.options("/{path:path}", include_in_schema=False)
async def options_ok(path: str) -> Response:
    return Response(status_code=200)


def run() -> None:
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
