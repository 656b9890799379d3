"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from scalar_fastapi import get_scalar_api_reference

from chat_proxy.api.router import api_router
from chat_proxy.config.settings import Settings, get_settings
from chat_proxy.middleware.error_handler import ErrorHandlerMiddleware
from chat_proxy.middleware.gateway import OllamaGatewayMiddleware
from chat_proxy.observability import RequestContextMiddleware, configure_logging
from chat_proxy.services.health import HealthProber
from chat_proxy.services.ollama import OllamaClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup...")

    settings: Settings = app.state.settings

    ollama_client = OllamaClient(settings=settings)
    await ollama_client.startup()
    app.state.ollama_client = ollama_client

    health_prober = HealthProber(ollama_client, settings.ollama_model)
    app.state.health_prober = health_prober

    connected = await health_prober.check_connection()
    if not connected and settings.is_production:
        logger.warning("Ollama is not connected; the server keeps starting anyway")

    logger.info("=== Server listening on port %d ===", settings.port)
    logger.info("Ollama host: %s", settings.ollama_host)
    logger.info("Model: %s", settings.ollama_model)
    logger.info("Environment: %s", settings.node_env)
    logger.info("Mode: %s", "connected to Ollama" if connected else "no Ollama connection")

    try:
        yield
    finally:
        logger.info("Application shutdown...")
        if getattr(app.state, "health_prober", None) is not None:
            app.state.health_prober = None
        if getattr(app.state, "ollama_client", None) is not None:
            await app.state.ollama_client.shutdown()
            app.state.ollama_client = None


def mount_frontend(application: FastAPI, build_dir: Path) -> bool:
    """Serve a built single-page frontend, falling back to ``index.html``.

    Returns False (and logs a warning) when the build directory is missing.
    """
    build_root = build_dir.resolve()
    index_file = build_root / "index.html"
    if not index_file.is_file():
        logger.warning("Frontend build directory not found: %s", build_root)
        logger.warning("Static frontend files will not be served")
        return False

    static_dir = build_root / "static"
    if static_dir.is_dir():
        application.mount("/static", StaticFiles(directory=static_dir), name="static")

    @application.get("/{full_path:path}", include_in_schema=False)
    async def serve_frontend(full_path: str) -> FileResponse:
        candidate = (build_root / full_path).resolve()
        if full_path and candidate.is_file() and candidate.is_relative_to(build_root):
            return FileResponse(candidate)
        return FileResponse(index_file)

    logger.info("Serving frontend production files from %s", build_root)
    return True


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    configure_logging(settings)

    docs_url = None if settings.use_scalar_docs else settings.docs_url
    redoc_url = None if settings.use_scalar_docs else "/redoc"

    application = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=docs_url,
        redoc_url=redoc_url,
        openapi_url=settings.openapi_url,
        description=(
            "Chat backend that relays prompts to a local Ollama server.\n\n"
            "- `POST /api/generate` - single-shot text generation\n"
            "- `GET /api/health` - proxy, Ollama and model status"
        ),
    )
    application.state.settings = settings

    # Added innermost first: gateway, error handler, request context, CORS.
    application.add_middleware(OllamaGatewayMiddleware)
    application.add_middleware(ErrorHandlerMiddleware, debug=settings.debug_errors)
    application.add_middleware(RequestContextMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(api_router)

    if settings.use_scalar_docs:
        @application.get(settings.docs_url, include_in_schema=False)
        async def scalar_html():
            return get_scalar_api_reference(
                openapi_url=application.openapi_url,
                title=application.title,
            )

    if settings.is_production:
        mount_frontend(application, settings.frontend_build_dir)

    return application


app = create_app()
