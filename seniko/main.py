"""
SeNiko API application.

Assembles the FastAPI app and its per-app components from settings.
"""
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from seniko import __version__
from seniko.auth.jwt import TokenIssuer
from seniko.auth.passwords import PasswordHasher
from seniko.auth.rate_limit import create_limiter
from seniko.auth.router import create_router
from seniko.base_microservice import BaseMicroservice, configure_logging, create_session_factory, init_models
from seniko.config import Settings
from seniko.errors import ConfigurationError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI.
    Creates missing tables on startup and releases the engine on shutdown.
    """
    service = BaseMicroservice(app.state.logger)
    try:
        await init_models(app.state.engine)
    except Exception as e:
        service.log_error(e, context="Database initialization")
        raise
    service.log_event("service.startup", {"service": app.state.settings.service_name})

    yield

    service.log_event("service.shutdown", {"service": app.state.settings.service_name})
    await app.state.engine.dispose()


async def health_check():
    """Overall system health check."""
    return {"status": "ok", "version": __version__}


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies in the same shape as service validation errors."""
    errors = []
    for error in exc.errors():
        names = [part for part in error.get("loc", ()) if isinstance(part, str) and part != "body"]
        errors.append({
            "field": names[-1] if names else "body",
            "message": error.get("msg", "Invalid value"),
        })
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": errors})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the SeNiko application.

    Args:
        settings: Explicit settings, loaded from the environment (and .env) when omitted

    Returns:
        Configured FastAPI application

    Raises:
        ConfigurationError: If required configuration is missing
    """
    if settings is None:
        load_dotenv()
        try:
            settings = Settings.from_env()
        except ConfigurationError as e:
            logging.getLogger("seniko").critical(f"Invalid configuration: {e}")
            raise

    configure_logging(settings.log_level)
    logger = logging.getLogger(settings.service_name)

    engine, session_factory = create_session_factory(settings.database_url)
    limiter = create_limiter(settings)

    app = FastAPI(
        title="SeNiko API",
        description="User registration and login issuing JWT access tokens",
        version=__version__,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.logger = logger
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.token_issuer = TokenIssuer(settings.jwt)
    app.state.password_hasher = PasswordHasher(settings.password_hash_rounds)
    app.state.limiter = limiter

    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"HTTP {request.method} {request.url.path} responded {response.status_code} in {elapsed_ms:.4f} ms"
        )
        return response

    app.include_router(create_router(limiter, settings.rate_limit), prefix="/auth", tags=["auth"])
    app.add_api_route("/health", health_check, methods=["GET"], tags=["health"])

    return app


# For running directly with uvicorn
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("seniko.main:create_app", factory=True, host="0.0.0.0", port=8000)
