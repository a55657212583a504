from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from venuebook.api.router import api_router
from venuebook.core.config import get_settings
from venuebook.core.errors import BookingValidationError
from venuebook.core.logging_config import get_logger, setup_logging

settings = get_settings()
setup_logging()
logger = get_logger()

app = FastAPI(
    title=settings.app_name,
    version="1.0.0",
    description="Availability, slot conflicts and booking administration for a single venue",
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"REQUEST: {request.method} {request.url.path}")
    try:
        response = await call_next(request)
        logger.info(f"RESPONSE: {response.status_code} {request.url.path}")
        return response
    except Exception as e:
        logger.error(f"ERROR: {request.url.path} -> {e}")
        raise


@app.exception_handler(BookingValidationError)
async def booking_validation_handler(request: Request, exc: BookingValidationError):
    logger.bind(log_type="booking").info(f"Booking rejected | {exc.code} | {exc.message}")
    return JSONResponse(
        status_code=400,
        content={"detail": exc.message, "code": exc.code, "errors": [e.as_dict() for e in exc.errors]},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok", "environment": settings.environment}
