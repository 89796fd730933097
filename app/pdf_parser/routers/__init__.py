"""
Routers package for FastAPI endpoints.

- upload: PDF upload and parsing
"""

from . import upload

__all__ = ["upload"]
