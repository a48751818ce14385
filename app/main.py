"""
Receipt upload service - FastAPI application entry-point.
"""
import logging
import os
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool

from app.config import settings
from app.database import engine, ensure_schema, ping, wait_for_database
from app.errors import ConnectivityError, ReceiptError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(name)-30s  %(levelname)-5s  %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: ensure data dir + tables exist
    os.makedirs(settings.DATA_DIR, exist_ok=True)
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    try:
        await run_in_threadpool(wait_for_database)
    except ConnectivityError as e:
        logger.error("%s; tables will be created once it answers", e.message)
    else:
        await run_in_threadpool(ensure_schema)
    logger.info("Upload directory: %s", os.path.abspath(settings.UPLOAD_DIR))
    logger.info("Environment: %s", settings.ENVIRONMENT)
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Receipt Upload API",
    description="Receipt form → validation → file storage → metadata record",
    version=settings.VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["Content-Length", "X-Requested-With"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = uuid.uuid4().hex[:7]
    start = time.perf_counter()
    logger.info(
        "Incoming %s request to %s [%s]", request.method, request.url.path, request_id
    )
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "Request completed [%s] %s %s -> %d in %.0fms",
        request_id,
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


@app.exception_handler(ReceiptError)
async def receipt_error_handler(request: Request, exc: ReceiptError):
    if exc.status_code >= 500:
        logger.error("Request error on %s: %s (%s)", request.url.path, exc.code, exc.__cause__)
    else:
        logger.info("Rejected %s: %s %s", request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/")
async def root():
    return {
        "status": "online",
        "message": "Receipt Management API is running",
        "version": settings.VERSION,
        "endpoints": {
            "health": {
                "url": "/health",
                "method": "GET",
                "description": "Check API health status",
            },
            "uploadReceipt": {
                "url": "/api/receipts",
                "method": "POST",
                "description": "Upload a new receipt",
                "accepts": "multipart/form-data",
                "fields": {
                    "employeeName": "string (required)",
                    "department": "string (required)",
                    "purchaseDate": "date (required)",
                    "vendor": "string (required)",
                    "amount": "number (required)",
                    "paymentMethod": "string (required)",
                    "category": "string (required)",
                    "projectCode": "string (optional)",
                    "description": "string (optional)",
                    "receipt": "file (required, max 5MB, formats: JPEG, PNG, GIF, PDF)",
                },
            },
            "listReceipts": {
                "url": "/api/receipts",
                "method": "GET",
                "description": "List receipts, optionally filtered with ?q=",
            },
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health")
def health_check():
    connected = ping(engine) and ensure_schema(engine)
    return {
        "status": "ok",
        "database": "connected" if connected else "disconnected",
        "environment": settings.ENVIRONMENT,
        "uploadsDir": os.path.abspath(settings.UPLOAD_DIR),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.VERSION,
    }


# ── Register API router + static uploads ─────────────────────────────────
from app.routers.receipts import router as receipts_router  # noqa: E402

app.include_router(receipts_router, prefix="/api", tags=["Receipts"])

# StaticFiles checks the directory when mounted, before lifespan runs
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT)
