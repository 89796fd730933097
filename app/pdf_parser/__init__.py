"""
PDF Parser API.

A small FastAPI service that accepts an uploaded PDF and returns
its text and document metadata, parsed with pypdf.
"""

__version__ = "1.0.0"
