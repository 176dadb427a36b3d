"""FastAPI application factory for Bundle-Engine."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bundle_engine.common.config import get_settings
from bundle_engine.common.exceptions import BundleEngineError
from bundle_engine.common.schemas import ErrorResponse, HealthResponse


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BundleEngineError)
    async def bundle_engine_error_handler(request: Request, exc: BundleEngineError):
        body = ErrorResponse(error=type(exc).__name__, code=exc.code, detail=exc.message)
        return JSONResponse(status_code=409, content=body.model_dump())

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(version=settings.api_version)

    # Mount routers
    from bundle_engine.entitlements.router import router as entitlements_router
    from bundle_engine.progress.router import router as progress_router
    from bundle_engine.subscriptions.router import router as subscriptions_router

    prefix = settings.api_prefix
    app.include_router(entitlements_router, prefix=prefix, tags=["bundles"])
    app.include_router(progress_router, prefix=prefix, tags=["progress"])
    app.include_router(subscriptions_router, prefix=prefix, tags=["subscriptions"])

    return app
