"""FastAPI application entry point."""

import logging
import traceback
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ridejob.api.routes import applicants, coupang, jobs_count, location
from ridejob.api.schemas import HealthResponse
from ridejob.config import settings
from ridejob.integrations.postcode import get_postcode_table

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup: load the postcode table once so the first lookup is fast
    get_postcode_table(settings.postcode_data_path).load()
    logger.info(f"RIDE JOB form API started ({settings.app_env.value})")
    yield


app = FastAPI(
    title="RIDE JOB Form API",
    description="Driver recruitment application form backend",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log and handle all unhandled exceptions."""
    logger.error(f"Unhandled error: {type(exc).__name__}: {exc}")
    logger.error(traceback.format_exc())
    return JSONResponse(status_code=500, content={"message": "Internal Server Error"})


# CORS middleware
_dev_origins = [
    "http://localhost:3000",
    "http://localhost:8000",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:8000",
]
_prod_origins = [settings.frontend_url] if settings.frontend_url else []
app.add_middleware(
    CORSMiddleware,
    allow_origins=_dev_origins if settings.is_development else _prod_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "RIDE JOB Form API",
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check endpoint."""
    return HealthResponse(status="ok", environment=settings.app_env.value)


app.include_router(applicants.router, prefix="/api/applicants", tags=["applicants"])
app.include_router(jobs_count.router, prefix="/api/jobs-count", tags=["jobs"])
app.include_router(location.router, prefix="/api/location", tags=["location"])
app.include_router(coupang.router, prefix="/api/coupang", tags=["coupang"])
