"""Conceptcraft — FastAPI Application.

This module is the single entry point for the web application.  It defines
the FastAPI ``app`` instance, all REST API routes, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
The application is a stateless relay:

- **Relay calls** are performed by :class:`~conceptcraft.core.relay_client.RelayClient`,
  created once per process in the lifespan handler and stored on ``app.state``.
- **Prompts** are assembled by :mod:`conceptcraft.core.prompt_composer`.
- **Nothing is persisted server-side.**  The gallery belongs to the wizard.
- **The wizard UI** (Gradio) is mounted under ``/wizard`` by :func:`main`.
- **Unmatched GET paths** outside ``/api`` receive the single-page
  application shell (``templates/index.html``).

Every error response has the shape ``{"error": "<message>"}``.

Endpoints
---------
========  ===========================  =====================================
Method    Path                         Purpose
========  ===========================  =====================================
POST      ``/api/generate-concept``    Concept prompt for a style and topic
POST      ``/api/remove-background``   Background analysis for an image
POST      ``/api/generate-image``      Image guidance for a prompt
GET       ``/api/test``                Liveness message
GET       ``/health``                  Health check and credential presence
GET       ``/*``                       SPA shell fallback
========  ===========================  =====================================

Usage
-----
CLI (installed entry point)::

    conceptcraft

Direct invocation::

    python -m conceptcraft.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from conceptcraft import __version__
from conceptcraft.api.models import BackgroundRemovalRequest, ConceptRequest, ImageGuidanceRequest
from conceptcraft.core.config import config
from conceptcraft.core.prompt_composer import (
    compose_background_messages,
    compose_concept_messages,
    compose_image_messages,
    enhance_prompt,
)
from conceptcraft.core.relay_client import RelayClient

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Resolve paths from the global configuration instance.
# ---------------------------------------------------------------------------
STATIC_DIR: Path = config.static_dir
TEMPLATES_DIR: Path = config.templates_dir

# Paths that never fall back to the SPA shell.
_API_PREFIXES = ("/api/", "/static/")
_API_PATHS = ("/api", "/health")


# ---------------------------------------------------------------------------
# Application lifecycle: relay client setup and teardown.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the relay client on startup and close it on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    app.state.relay_client = RelayClient.from_config(config)
    logger.info(
        f"RelayClient initialised (model={config.model_id}, "
        f"api_key={'set' if config.has_api_key else 'missing'})."
    )

    yield

    await app.state.relay_client.aclose()
    logger.info("RelayClient closed on shutdown.")


# ---------------------------------------------------------------------------
# FastAPI application instance.
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Conceptcraft",
    description="Relay API for concept prompts and image guidance.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


# ---------------------------------------------------------------------------
# Error handling: every failure becomes ``{"error": message}``.
# ---------------------------------------------------------------------------


def _render_shell() -> HTMLResponse:
    """Return the SPA shell, or raise 404 if the template is missing."""
    index_path = TEMPLATES_DIR / "index.html"
    if index_path.exists():
        return HTMLResponse(content=index_path.read_text(encoding="utf-8"))
    raise HTTPException(status_code=404, detail="index.html not found")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTP errors to JSON and serve the SPA shell for unknown pages.

    A ``GET`` that matched no route and is not under an API prefix is a
    client-side navigation, so the shell is returned instead of a 404.
    """
    path = request.url.path
    if (
        exc.status_code == 404
        and request.method == "GET"
        and path not in _API_PATHS
        and not path.startswith(_API_PREFIXES)
    ):
        try:
            return _render_shell()
        except HTTPException as shell_exc:
            exc = shell_exc

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors."""
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"
    logger.warning(f"Rejected malformed request to {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"error": f"Invalid request body: {message}"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ---------------------------------------------------------------------------
# Helpers.
# ---------------------------------------------------------------------------


def _relay(request: Request) -> RelayClient:
    return request.app.state.relay_client


def _truncate(text: str, limit: int) -> str:
    """Shorten *text* to *limit* characters, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@app.post("/api/generate-concept")
async def generate_concept(req: ConceptRequest, request: Request) -> dict:
    """Ask the provider for a detailed concept prompt.

    Args:
        req: Validated :class:`ConceptRequest` payload.

    Returns:
        Dictionary with a single ``concept`` key.

    Raises:
        HTTPException: 400 if ``style`` is missing, 500 if the relay call fails.
    """
    logger.info(
        f"Generating concept: style={req.style!r}, topic={req.topic!r}, "
        f"aspect_ratio={req.aspect_ratio!r}"
    )

    if not req.style:
        raise HTTPException(status_code=400, detail="Style is required")

    messages = compose_concept_messages(
        req.style,
        req.topic or "",
        req.aspect_ratio,
    )

    try:
        concept = await _relay(request).complete(messages)
    except Exception as e:
        logger.error(f"Concept generation error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return {"concept": concept}


@app.post("/api/remove-background")
async def remove_background(req: BackgroundRemovalRequest, request: Request) -> dict:
    """Ask the provider for background removal instructions.

    No image processing happens; the image is only checked for presence.

    Returns:
        Dictionary with ``result`` (relay text) and ``message``.

    Raises:
        HTTPException: 400 if ``imageData`` is missing, 500 if the relay call fails.
    """
    if not req.image_data:
        raise HTTPException(status_code=400, detail="Image data is required")

    logger.info(f"Analysing background ({len(req.image_data)} chars of image data)")

    try:
        result = await _relay(request).complete(compose_background_messages())
    except Exception as e:
        logger.error(f"Background removal error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return {"result": result, "message": "Background removal completed"}


@app.post("/api/generate-image")
async def generate_image(req: ImageGuidanceRequest, request: Request) -> dict:
    """Relay an enhanced prompt and return image guidance.

    The request's ``prompt``, ``style`` and ``aspectRatio`` are echoed
    unchanged; the prompt actually sent upstream is returned as
    ``enhancedPrompt``.

    Raises:
        HTTPException: 400 if ``prompt`` is missing, 500 if the relay call fails.
    """
    logger.info(f"Generating image guidance: style={req.style!r}, aspect_ratio={req.aspect_ratio!r}")

    if not req.prompt:
        raise HTTPException(status_code=400, detail="Prompt is required")

    messages = compose_image_messages(req.prompt, req.style, req.aspect_ratio)

    try:
        guidance = await _relay(request).complete(messages)
    except Exception as e:
        logger.error(f"Image generation error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return {
        "success": True,
        "message": "Image generation completed successfully",
        "prompt": req.prompt,
        "enhancedPrompt": enhance_prompt(req.prompt, req.style, req.aspect_ratio),
        "aspectRatio": req.aspect_ratio,
        "style": req.style,
        "guidance": _truncate(guidance, config.guidance_preview_chars),
    }


@app.get("/api/test")
async def api_test() -> dict:
    """Report that the API is reachable."""
    return {
        "status": "Server is running!",
        "message": "API endpoints are working",
        "timestamp": _timestamp(),
    }


@app.get("/health")
async def health(request: Request) -> dict:
    """Return service health and whether the upstream credential is set."""
    return {
        "status": "OK",
        "timestamp": _timestamp(),
        "apiKey": "Set" if _relay(request).is_configured else "Not set",
        "version": __version__,
    }


@app.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    """Serve the single-page application shell."""
    return _render_shell()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server with the wizard mounted.

    Reads host and port from :data:`~conceptcraft.core.config.config`
    (``CONCEPTCRAFT_SERVER_HOST``, and ``PORT`` or
    ``CONCEPTCRAFT_SERVER_PORT``).  Defaults to ``0.0.0.0:3000``.

    This function is registered as the ``conceptcraft`` console script in
    ``pyproject.toml``.
    """
    import gradio as gr
    import uvicorn

    from conceptcraft.ui.app import create_ui

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    blocks = create_ui()
    server_app = gr.mount_gradio_app(app, blocks, path="/wizard")

    logger.info(f"Server running on port {config.server_port}")
    logger.info(f"Health: http://{config.server_host}:{config.server_port}/health")
    logger.info(f"API Key: {'Set' if config.has_api_key else 'Missing'}")

    uvicorn.run(
        server_app,
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
