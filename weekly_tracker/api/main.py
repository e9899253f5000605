"""FastAPI main application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from weekly_tracker.api import catalog, manager, reports
from weekly_tracker.config import settings
from weekly_tracker.core.exceptions import (
    InvalidStatusTransition,
    InvalidValue,
    LineNotFound,
    ReportNotEditable,
    ReportNotFound,
    SubmissionNotAllowed,
)
from weekly_tracker.database import Base, engine

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(title=settings.app_name, version="1.0.0", lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ReportNotFound)
@app.exception_handler(LineNotFound)
async def not_found_handler(request: Request, exc: LookupError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ReportNotEditable)
@app.exception_handler(InvalidStatusTransition)
async def conflict_handler(request: Request, exc: Exception):
    logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(SubmissionNotAllowed)
async def submission_handler(request: Request, exc: SubmissionNotAllowed):
    return JSONResponse(status_code=409, content={"detail": exc.reason})


@app.exception_handler(InvalidValue)
async def invalid_value_handler(request: Request, exc: InvalidValue):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# Include routers
app.include_router(catalog.router, prefix="/api", tags=["catalog"])
app.include_router(reports.router, prefix="/api/reports", tags=["reports"])
app.include_router(manager.router, prefix="/api/manager", tags=["manager"])


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok"}
