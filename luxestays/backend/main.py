"""FastAPI application entry point."""
import logging
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from luxestays.backend.core.config import settings
from luxestays.backend.core.logging import setup_logging
from luxestays.backend.db.init_db import init_db
from luxestays.backend.api import resorts, stay_options, bookings, payments, reviews, admin, website
from luxestays.backend.services.payment_flow import payment_sessions
from luxestays.backend.services.record_store import RecordStoreError


setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

init_db()

app = FastAPI(
    title="LuxeStays API",
    description="Resort search, booking and UPI payments",
    version="1.0.0"
)

# The Streamlit client runs on its own port
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module, tag in (
    (resorts, "resorts"),
    (stay_options, "stay-options"),
    (bookings, "bookings"),
    (payments, "payments"),
    (reviews, "reviews"),
    (admin, "admin"),
    (website, "website"),
):
    app.include_router(module.router, prefix="/api", tags=[tag])


@app.exception_handler(RecordStoreError)
async def record_store_error_handler(request: Request, exc: RecordStoreError):
    """Any record-store failure not handled by a route is a 503."""
    logger.error(f"Record store failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)}
    )


@app.get("/")
async def root():
    return {"message": "LuxeStays API", "version": "1.0.0"}


@app.get("/health")
async def health():
    """Health check with payment provider status."""
    return {
        "status": "healthy",
        "payment_provider": settings.payment_provider,
        "open_payments": len(payment_sessions)
    }
