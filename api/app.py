from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from api.routers import scrape

log = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="Twitter Scraper API", version="0.1.0")

    app.include_router(scrape.router)

    # Malformed request bodies are client errors, not 422s
    @app.exception_handler(RequestValidationError)
    async def invalid_input(request: Request, exc: RequestValidationError):
        log.info("Rejected %s %s: invalid input", request.method, request.url.path)
        return JSONResponse(
            status_code=400,
            content={
                "error": 'Invalid input: "urls" must be a non-empty array of strings.',
                "details": jsonable_encoder(exc.errors()),
            },
        )

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "Twitter Scraper API is running!"

    # Health check
    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
