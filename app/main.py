"""
Modforge API - Main Application
HTTP interface for compiling Fortran sources against selected libraries.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from compiler_adapter.config import settings
from app.routers import compilation

_log = logging.getLogger(__name__)


# =============================================================================
# Lifespan Event Handler
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events"""
    _log.info("Using compiler %s, library root %s", settings.FORTRAN_COMPILER, settings.LIB_ROOT)
    yield


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title=settings.API_TITLE,
    description="Compile Fortran sources with selected libraries",
    version=settings.API_VERSION,
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return 422 with structured error details."""
    body = await request.body()
    _log.warning(
        "422 on %s %s  body[:200]=%s  errors=%s",
        request.method, request.url.path, body[:200], exc.errors()[:3],
    )
    return JSONResponse(status_code=422, content={"detail": exc.errors()})


# =============================================================================
# Health Check
# =============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "modforge-api",
        "version": settings.API_VERSION
    }


# =============================================================================
# Register Routers
# =============================================================================

app.include_router(compilation.router, prefix="/compile", tags=["compile"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
    )
