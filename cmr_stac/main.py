import sys
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from cmr_stac import __version__
from cmr_stac.api.endpoints import router as api_router
from cmr_stac.api.services.error_handling import (
    ErrorResponseBuilder,
    register_exception_handlers,
)
from cmr_stac.api.services.stac_service import StacService
from cmr_stac.conversion.pipeline import ExtensionPipelineFactory
from cmr_stac.core.cmr_client import CmrClient
from cmr_stac.core.config import config
from cmr_stac.core.logging import RequestLogger, log_level, logger
from cmr_stac.core.provider_cache import ProviderCache
from cmr_stac.validation import SchemaValidator

REQUEST_ID_HEADER = "X-Request-Id"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the CMR client and provider cache for the lifetime of the app."""
    client = CmrClient(config.cmr)
    provider_cache = ProviderCache(client, refresh_interval=config.provider_refresh_interval)

    app.state.provider_cache = provider_cache
    app.state.stac_service = StacService(
        client=client,
        validator=SchemaValidator(enabled=config.validate_responses),
        pipeline=ExtensionPipelineFactory.create_default(),
        stac_config=config.stac,
    )

    await provider_cache.start()
    logger.info(f"CMR-STAC {__version__} serving {config.cmr_url}")
    try:
        yield
    finally:
        await provider_cache.stop()
        await client.aclose()


async def correlation_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Tag every log line of a request with one request id."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    with RequestLogger.correlation_context(request_id):
        response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


async def handle_starlette_http_error(
    request: Request, exc: StarletteHTTPException
) -> Response:
    if exc.status_code == 404:
        return ErrorResponseBuilder.not_found(f"Path [{request.url.path}] not found")
    return ErrorResponseBuilder.client_error(exc.status_code, str(exc.detail))


def create_app() -> FastAPI:
    app = FastAPI(title="CMR-STAC", version=__version__, lifespan=lifespan)
    app.include_router(api_router)
    app.middleware("http")(correlation_middleware)
    register_exception_handlers(app)
    app.add_exception_handler(StarletteHTTPException, handle_starlette_http_error)
    return app


app = create_app()


def main() -> None:
    if len(sys.argv) > 1 and sys.argv[1] == "--help":
        print(f"CMR-STAC v{__version__}")
        print("")
        print("Usage: python -m cmr_stac.main")
        print("       or: cmr-stac start")
        print("")
        print("Run `cmr-stac config docs` for the environment variables.")
        sys.exit(0)

    print(f"CMR-STAC v{__version__}")
    print(f"   CMR URL : {config.cmr_url}")
    print(f"   STAC    : {config.stac_version}")
    print(f"   Server  : {config.host}:{config.port}")
    print("")

    uvicorn.run(
        "cmr_stac.main:app",
        host=config.host,
        port=config.port,
        log_level=log_level.lower(),
        access_log=log_level == "DEBUG",
        reload=False,
    )


if __name__ == "__main__":
    main()
