"""Main FastAPI application."""
import logging
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from stockllm.api import reports
from stockllm.config import DEFAULT_CORS_ORIGINS, get_settings
from stockllm.models.schemas import HealthStatus

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="StockLLM API",
    description="Portfolio report generation API",
    version="1.0.0",
    debug=settings.debug,
)

allowed_origins = settings.cors_origins or DEFAULT_CORS_ORIGINS.copy()
cors_allow_all = settings.cors_allow_all or "*" in allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if cors_allow_all else allowed_origins,
    allow_credentials=not cors_allow_all,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rendered PDFs are downloaded from /reports/<filename>
reports_dir = Path(settings.reports_dir)
reports_dir.mkdir(parents=True, exist_ok=True)
app.mount("/reports", StaticFiles(directory=str(reports_dir)), name="reports")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "StockLLM API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/health", response_model=HealthStatus)
async def health():
    """Health check endpoint."""
    return HealthStatus(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        gemini_configured=bool(settings.gemini_api_key),
    )


@app.get("/favicon.ico")
async def favicon():
    """Favicon endpoint to prevent 404 errors."""
    return Response(status_code=204)


# Include routers
app.include_router(
    reports.router,
    prefix=f"/api/{settings.api_version}/reports",
    tags=["reports"]
)
