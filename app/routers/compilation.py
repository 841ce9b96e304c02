"""
Compile Router

Fortran compilation requests.  Each request gets its own workspace and
its own compiler process; nothing is shared between requests.

A program that fails to compile is a normal 200 response with a nonzero
``exit_code``.  A compiler that cannot be started is a 503.
"""
import logging
from functools import lru_cache
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from compiler_adapter.adapters.base import CompilerAdapter
from compiler_adapter.config import get_settings
from compiler_adapter.errors import CompilerSpawnError
from compiler_adapter.io.schema import CompilationResult, SelectedLibrary
from compiler_adapter.runner import compile_source, make_adapter

_log = logging.getLogger(__name__)


# =============================================================================
# Dependencies
# =============================================================================

@lru_cache(maxsize=1)
def get_fortran_adapter() -> CompilerAdapter:
    """Adapter for the configured Fortran compiler (built once)."""
    return make_adapter(get_settings(), key="fortran")


# =============================================================================
# Request Models
# =============================================================================

class CompileRequest(BaseModel):
    """A single Fortran source file to compile."""
    source: str = Field(..., description="Fortran source text")
    filename: str = Field("example.f90", description="Name to give the source file")
    options: List[str] = Field(default_factory=list, description="Extra compiler options")
    libraries: List[SelectedLibrary] = Field(
        default_factory=list,
        description="Selected libraries in link order (dependents first)",
    )


# =============================================================================
# Router
# =============================================================================

router = APIRouter()


@router.post("/fortran", response_model=CompilationResult)
async def compile_fortran(
    request: CompileRequest,
    adapter: CompilerAdapter = Depends(get_fortran_adapter),
):
    """
    Compile a Fortran source file.

    The compiler runs inside the request's workspace so that module
    (.mod) files are generated beside the source.  Diagnostics refer to
    the file as ``./<filename>``.
    """
    settings = get_settings()
    try:
        return await compile_source(
            adapter,
            request.source,
            filename=request.filename,
            libraries=request.libraries,
            lib_root=settings.LIB_ROOT,
            user_options=request.options,
            build_root=settings.BUILD_ROOT,
        )
    except CompilerSpawnError as e:
        _log.error("Compiler spawn failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Compiler unavailable: {e.reason}",
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
