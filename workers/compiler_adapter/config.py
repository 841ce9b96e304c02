"""
Adapter configuration
"""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Adapter settings, read from MODFORGE_* environment variables."""

    # Toolchain
    FORTRAN_COMPILER: str = "gfortran"
    INCLUDE_FLAG: Optional[str] = None

    # Libraries
    LIB_ROOT: str = "/opt/modforge/libs"
    LIB_PATHS: List[str] = []
    CATALOG_PATH: Optional[str] = None

    # Builds
    BUILD_ROOT: str = "/tmp/modforge_builds"

    # Execution defaults
    EXEC_TIMEOUT: float = 10.0  # seconds
    MAX_OUTPUT: int = 64 * 1024  # bytes per stream

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8080
    API_TITLE: str = "Modforge API"
    API_VERSION: str = "0.1.0"

    model_config = SettingsConfigDict(
        env_prefix="MODFORGE_",
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
