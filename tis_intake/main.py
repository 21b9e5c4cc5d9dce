from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tis_intake.errors import IntakeError
from tis_intake.routes.health import router as health_router
from tis_intake.routes.submissions import router as submissions_router
from tis_intake.services.submission_service import SubmissionService
from tis_intake.services.submission_store import InMemorySubmissionStore, SubmissionStore
from tis_intake.services.supabase_client import SupabaseSubmissionStore, supabase
from tis_intake.utils.config import HOST, PORT, Settings
from tis_intake.utils.logger import get_logger
from tis_intake.utils.middleware import (
    BodySizeLimitMiddleware, RateLimitMiddleware, RequestTooLarge, too_large_response,
)


logger = get_logger("server")


def build_store(settings: Settings) -> SubmissionStore:
    client = supabase(settings.supabase_url, settings.supabase_key)
    if client is None:
        logger.warning("Supabase not configured; submissions are kept in memory only")
        return InMemorySubmissionStore()
    logger.info("Using Supabase table %s", settings.supabase_table)
    return SupabaseSubmissionStore(client, settings.supabase_table)


async def intake_error_handler(request: Request, exc: IntakeError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Only the raw body can fail here; field rules run in the service.
    logger.info("Malformed request on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"success": False, "message": "Malformed request body"})


async def request_too_large_handler(request: Request, exc: RequestTooLarge):
    return too_large_response()


def create_app(store: Optional[SubmissionStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    app = FastAPI(title="TIS Intake Service", version="1.0.0")
    app.state.settings = settings
    app.state.submission_service = SubmissionService(store or build_store(settings))

    app.add_middleware(
        RateLimitMiddleware,
        limit=settings.rate_limit_requests,
        window=settings.rate_limit_window,
        path_prefix="/api",
    )
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
    # Added last so CORS headers also reach 413/429 responses.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(IntakeError, intake_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(RequestTooLarge, request_too_large_handler)

    app.include_router(submissions_router)
    app.include_router(health_router)

    @app.get("/")
    def root():
        return {"service": "tis-intake", "env": settings.app_env}

    return app


app = create_app()


def run(host: str = HOST, port: int = PORT) -> None:
    import uvicorn
    logger.info("Starting TIS intake service on %s:%s", host, port)
    uvicorn.run("tis_intake.main:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    run()
