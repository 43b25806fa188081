import uvicorn as uvicorn
from fastapi import FastAPI, Request, Depends, status
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
import logging

from contact_api.config.settings import Settings, settings
from contact_api.commonUtils.emailUtil import build_mail_transport
from contact_api.commonUtils.errorUtil import ContactAPIError, ErrorCode
from contact_api.commonUtils.rateLimiter import RateLimiter
from contact_api.dependencies.contactDependencies import enforce_rate_limit
from contact_api.routes import contactRoute, healthRoute

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DOCS_PATHS = ("/docs", "/redoc", "/openapi.json")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-site",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
}
API_CONTENT_SECURITY_POLICY = "default-src 'none'; frame-ancestors 'none'"


def error_response(code: ErrorCode, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": code.value})


async def contact_api_error_handler(request: Request, exc: ContactAPIError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_response(), headers=exc.headers)


async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all, never leaks internal details"""
    logger.error(f"Unexpected error on {request.url.path}: {str(exc)}", exc_info=True)
    return error_response(ErrorCode.INTERNAL_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_app(app_settings: Settings = settings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Contact API running on port {app_settings.PORT}")
        if app.state.mail_transport is None:
            logger.warning("⚠️ SMTP transport unavailable - contact submissions will fail until configured")

        yield

        # Shutdown logic
        await app.state.rate_limiter.reset()
        logger.info("Contact API stopped")

    is_production = app_settings.ENVIRONMENT.lower() == "production"
    app = FastAPI(
        title="Contact API",
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
    )

    # Owned per application instance, handed to routes through dependencies
    app.state.settings = app_settings
    app.state.rate_limiter = RateLimiter(
        points=app_settings.RATE_LIMIT_POINTS,
        window_seconds=app_settings.RATE_LIMIT_WINDOW,
        storage_uri=app_settings.RATE_LIMIT_STORAGE_URI,
    )
    app.state.mail_transport = build_mail_transport(app_settings)

    app.add_exception_handler(ContactAPIError, contact_api_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    allowed_origins = app_settings.allowed_origins

    async def body_size_middleware(request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > app_settings.MAX_BODY_BYTES:
            logger.warning(f"⛔ Rejected {content_length} byte body on {request.url.path}")
            return error_response(ErrorCode.PAYLOAD_TOO_LARGE, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)
        return await call_next(request)

    async def origin_guard_middleware(request: Request, call_next):
        # Requests without an Origin header (curl, server-to-server) pass through
        origin = request.headers.get("origin")
        if origin is None or origin in allowed_origins:
            return await call_next(request)

        logger.warning(f"⛔ Blocked origin {origin} → {request.url.path}")
        return error_response(ErrorCode.ORIGIN_NOT_ALLOWED, status.HTTP_403_FORBIDDEN)

    async def security_headers_middleware(request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        if not request.url.path.startswith(DOCS_PATHS):
            response.headers.setdefault("Content-Security-Policy", API_CONTENT_SECURITY_POLICY)
        return response

    # Last added runs first: security headers → CORS → origin guard → body size → routes
    app.middleware("http")(body_size_middleware)
    app.middleware("http")(origin_guard_middleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.middleware("http")(security_headers_middleware)

    app.include_router(healthRoute.router, tags=['health'], prefix='/api')
    app.include_router(contactRoute.router, tags=['contact'], prefix='/api',
                       dependencies=[Depends(enforce_rate_limit)])

    return app


app = create_app(settings)


def run():
    # uvicorn finishes in-flight requests and closes the listener on SIGINT/SIGTERM
    uvicorn.run("contact_api.main:app", host=settings.HOST, port=settings.PORT,
                log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
