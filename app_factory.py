"""Application factory that wires configuration, services, middleware, and routes."""

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

if os.getenv("LOAD_DOTENV", "1").lower() == "1":
    load_dotenv(os.getenv("DOTENV_FILE") or None)

from config import BaseConfig, config_values, get_config_class
from logging_config import configure_logging
from paths import STATIC_DIR, TEMPLATES_DIR
from routes import register_routes
from services import AppServices, SessionRegistry
from services.ai import EditClient, build_edit_client

logger = logging.getLogger(__name__)

DEFAULT_SECRET_KEY = "dev-secret-2025"


UPLOAD_TOO_LARGE_MESSAGE = "Request body too large."


class UploadTooLarge(Exception):
    pass


def _declared_length(scope) -> int:
    for key, value in scope.get("headers", []):
        if key.lower() == b"content-length":
            try:
                return int(value)
            except (TypeError, ValueError):
                return 0
    return 0


class UploadLimitMiddleware:
    """Answers 413 once an upload exceeds MAX_CONTENT_LENGTH, declared or streamed."""

    def __init__(self, app, limit: int) -> None:
        self.app = app
        self.limit = limit

    async def __call__(self, scope, receive, send) -> None:
        if scope["type"] != "http" or self.limit <= 0:
            await self.app(scope, receive, send)
            return
        if _declared_length(scope) > self.limit:
            await self._reject(scope, receive, send)
            return

        consumed = 0
        started = False

        async def counting_receive():
            nonlocal consumed
            message = await receive()
            if message["type"] == "http.request":
                consumed += len(message.get("body", b""))
                if consumed > self.limit:
                    raise UploadTooLarge()
            return message

        async def tracking_send(message):
            nonlocal started
            started = started or message["type"] == "http.response.start"
            await send(message)

        try:
            await self.app(scope, counting_receive, tracking_send)
        except UploadTooLarge:
            logger.info("Rejected upload over %d bytes", self.limit)
            if not started:
                await self._reject(scope, receive, send)

    @staticmethod
    async def _reject(scope, receive, send) -> None:
        response = JSONResponse({"error": UPLOAD_TOO_LARGE_MESSAGE}, status_code=413)
        await response(scope, receive, send)


def create_app(
    config_class: type[BaseConfig] | None = None,
    edit_client: Optional[EditClient] = None,
) -> FastAPI:
    app = FastAPI(title="Gemini Image Enhancer")
    app_config = config_class or get_config_class()

    configure_logging(getattr(app_config, "LOG_LEVEL", "INFO"))
    max_body_size = int(getattr(app_config, "MAX_CONTENT_LENGTH", 0) or 0)
    if max_body_size > 0:
        app.add_middleware(UploadLimitMiddleware, limit=max_body_size)

    if edit_client is None:
        edit_client = build_edit_client(config_values(app_config))
    if edit_client is None:
        logger.warning("Image editing unavailable; set GEMINI_API_KEY to enable it.")

    app.state.services = AppServices(
        sessions=SessionRegistry(edit_client, getattr(app_config, "SESSION_CAPACITY", 200)),
        edit_client=edit_client,
    )
    app.state.config = app_config
    app.state.templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.add_middleware(
        SessionMiddleware,
        secret_key=getattr(app_config, "SECRET_KEY", DEFAULT_SECRET_KEY),
        same_site=getattr(app_config, "SESSION_COOKIE_SAMESITE", "Lax"),
        https_only=getattr(app_config, "SESSION_COOKIE_SECURE", False),
    )

    register_routes(app)

    if (
        getattr(app_config, "ENV", "development") == "production"
        and getattr(app_config, "SECRET_KEY", DEFAULT_SECRET_KEY) == DEFAULT_SECRET_KEY
    ):
        logger.warning("Using default SECRET_KEY in production.")

    return app
