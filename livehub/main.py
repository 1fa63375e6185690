import time
import traceback
import uuid
from contextlib import asynccontextmanager
from os import environ

import logfire
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from granian import Granian
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from livehub.api import health
from livehub.api.errors import app_error_handler, app_validation_exception_handler
from livehub.api.v1.routers import streams
from livehub.api.webhooks import ingest
from livehub.api.ws import dashboard
from livehub.app_config import AppEnvironConfig, get_app_environ_config
from livehub.runtime import LiveRuntime, resolve_obs_host
from livehub.services.network import get_host_address
from livehub.shared.api.utils import api_failure, init_logger, log_routes
from livehub.utils.app_errors import AppError, AppErrorCode, HttpStatusCode


class HTTPLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore
        start_time = time.time()
        request_id = str(uuid.uuid4())[:8]

        logger.info(f"[{request_id}] {request.method} {request.url.path}")

        try:
            response = await call_next(request)

            process_time = (time.time() - start_time) * 1000
            logger.info(
                f"[{request_id}] {request.method} {request.url.path} - "
                f"Status: {response.status_code} - "
                f"Duration: {process_time:.2f}ms"
            )

            return response

        except Exception as exc:
            process_time = (time.time() - start_time) * 1000
            logger.error(
                f"[{request_id}] Unhandled exception in {request.method} {request.url.path} - "
                f"Duration: {process_time:.2f}ms - "
                f"Error: {type(exc).__name__}: {exc}\n"
                f"Traceback:\n{traceback.format_exc()}"
            )

            failure = api_failure(
                errcode=AppErrorCode.E_INTERNAL_ERROR.value,
                errmesg=f"Internal server error (request_id: {request_id})",
            )
            return ORJSONResponse(
                status_code=HttpStatusCode.INTERNAL_SERVER_ERROR,
                content=failure.model_dump(),
            )


def log_banner(cfg: AppEnvironConfig) -> None:
    local_ip = get_host_address()
    app_name = cfg.STREAM_APP

    logger.info("🚀 Live stream hub started!")
    logger.info(f"📡 RTMP ingest: rtmp://{local_ip}:{cfg.RTMP_PORT}/{app_name}")
    logger.info(f"🌐 Ingest HTTP: http://{local_ip}:{cfg.HTTP_PORT}")
    logger.info(f"🖥️  Dashboard WebSocket: ws://{local_ip}:{cfg.API_PORT}/ws/streams")
    if cfg.OBS_ENABLED:
        logger.info(
            f"🎬 OBS WebSocket: ws://{resolve_obs_host(cfg)}:{cfg.OBS_WEBSOCKET_PORT} "
            "(attempting connection)"
        )
    else:
        logger.info("🎬 OBS automation disabled")
    logger.info(
        f"📱 Point encoders at: rtmp://{local_ip}:{cfg.RTMP_PORT}/{app_name}/your_stream_key"
    )


def create_app(
    runtime: LiveRuntime | None = None,
    cfg: AppEnvironConfig | None = None,
) -> FastAPI:
    """Build the API application.

    Args:
        runtime: Pre-built runtime (tests inject one with a fake scene client);
            built from configuration at startup when omitted
        cfg: Configuration; defaults to the environment
    """
    cfg = cfg or (runtime.cfg if runtime is not None else get_app_environ_config())

    @asynccontextmanager
    async def lifespan(server: FastAPI):
        init_logger(debug=cfg.DEBUG)

        logger.info("Application startup...")

        server.state.runtime = runtime or LiveRuntime(cfg)
        server.state.runtime.start()

        if cfg.LOGFIRE_ENABLE:
            logger.info("Logfire initializing")

            logfire.configure(
                token=cfg.LOGFIRE_TOKEN,
                service_name="livehub",
                service_version=environ.get("BUILD_COMMIT") or "dev",
            )

            logger.info("Logfire instrument fastapi")
            logfire.instrument_fastapi(server, capture_headers=True)

            logger.info("Logfire instrument pydantic")
            logfire.instrument_pydantic()

        log_routes(server)
        log_banner(cfg)

        yield

        logger.info("Application shutdown...")

        await server.state.runtime.shutdown()

    app = FastAPI(
        version="1.0",
        title="Live Stream Hub API",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    app.add_middleware(HTTPLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,  # type: ignore
        allow_origins=cfg.API_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, app_validation_exception_handler)  # type: ignore
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore

    app.include_router(health.router)
    app.include_router(streams.router, prefix="/api/v1")
    app.include_router(ingest.router)
    app.include_router(dashboard.router)

    return app


app = create_app()


def build_granian_kwargs(cfg: AppEnvironConfig):
    kwargs = {
        "interface": "asgi",
        "address": cfg.API_HOST,
        "port": cfg.API_PORT,
        # Registry and observers are per-process state
        "workers": 1,
        "reload": cfg.DEBUG,
    }

    return kwargs


if __name__ == "__main__":
    app_cfg = get_app_environ_config()
    if app_cfg.API_WORKERS != 1:
        logger.warning(f"API_WORKERS={app_cfg.API_WORKERS} ignored, the registry is per-process")
    Granian("livehub.main:app", **build_granian_kwargs(app_cfg)).serve()
