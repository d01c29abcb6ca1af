"""
FastAPI Application - Main web application setup
===============================================

This module creates and configures the FastAPI application that
serves the agent endpoint and the browser chat page.
"""

import uuid
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates

from core.config import Config, load_config
from core.logging import setup_logging, get_logger, set_log_context, reset_log_context
from services.responder import Responder

logger = get_logger("web.app")


INVALID_MESSAGE_ERROR = "Invalid message format"
INTERNAL_ERROR = "Internal server error"


def create_app(
    config: Optional[Config] = None,
    responder: Optional[Responder] = None,
    debug: bool = False
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application configuration
        responder: Responder answering this app's requests; built from
            ``config.responder`` when omitted
        debug: Enable debug mode

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = load_config()

    setup_logging(
        log_dir=config.log_dir or None,
        log_level="DEBUG" if debug else config.logging.level,
        json_format=config.logging.json_format,
        console_output=config.logging.console_output,
    )

    if responder is None:
        responder = Responder.from_config(config.responder)

    app = FastAPI(
        title=config.app_name,
        description="Rule-based chat agent",
        version=config.version,
        debug=debug or config.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ui.cors_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    templates_dir = Path(__file__).parent / "templates"
    templates = Jinja2Templates(directory=str(templates_dir))

    app.state.config = config
    app.state.responder = responder
    app.state.templates = templates

    from .routes import router as main_router
    app.include_router(main_router, prefix="")

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        token = set_log_context(request_id=uuid.uuid4().hex[:8])
        try:
            return await call_next(request)
        finally:
            reset_log_context(token)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected malformed request to {request.url.path}")
        return JSONResponse(status_code=400, content={"error": INVALID_MESSAGE_ERROR})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})

    logger.info("Web application created")

    return app


def run_app(
    host: str = "127.0.0.1",
    port: int = 8080,
    debug: bool = False,
    config: Optional[Config] = None
) -> None:
    """
    Run the web application server.

    Args:
        host: Host address to bind
        port: Port to listen on
        debug: Enable debug mode
        config: Application configuration
    """
    if config is None:
        config = load_config()

    app = create_app(config=config, debug=debug)

    logger.info(f"Starting web server on {host}:{port}")

    import uvicorn
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level="debug" if debug else "info"
    )
