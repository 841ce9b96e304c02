"""
API Routers
Separate router modules for each domain.
"""

from app.routers import compilation

__all__ = ["compilation"]
