import time
import uuid
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from sanad import __version__
from sanad.api.endpoints import receipts, verify
from sanad.api.state import AppContext
from sanad.common.config import Settings, load_settings
from sanad.common.logging_config import get_logger, set_request_id, setup_logging

logger = get_logger("api.main")

# CORS Setup - Enable dashboard access
ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
]


def create_app(settings: Optional[Settings] = None, context: Optional[AppContext] = None) -> FastAPI:
    """
    Builds the API application.

    Args:
        settings: Runtime settings; loaded from config/settings.yaml when omitted
        context: Prebuilt context (tests inject repositories and stores this way)
    """
    if context is None:
        settings = settings or load_settings()
        setup_logging(settings.log_level_value, settings.log_file)
        context = AppContext.build(settings)

    app = FastAPI(title="Sanad Voucher API", version=__version__)
    app.state.context = context

    # Middleware for Request ID and Logging
    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        set_request_id(request_id)

        start_time = time.time()

        logger.info(
            f"Request started: {request.method} {request.url.path}",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else "unknown",
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed: {str(e)}",
                error=str(e),
                process_time_ms=round((time.time() - start_time) * 1000, 2),
                exc_info=True,
            )
            raise

        logger.info(
            f"Request completed: {request.method} {request.url.path} - Status: {response.status_code}",
            status_code=response.status_code,
            process_time_ms=round((time.time() - start_time) * 1000, 2),
        )

        # Add request ID to response headers for tracking
        response.headers["X-Request-ID"] = request_id
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(verify.router, prefix="/api/receipts", tags=["Verify"])
    app.include_router(receipts.router, prefix="/api/receipts", tags=["Receipts"])

    @app.get("/api/health")
    def health_check():
        return {"status": "ok", "version": __version__}

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="127.0.0.1", port=8010)
