"""
Services package for the PDF parser API.

Contains:
- pdf_service: pypdf-backed text and metadata extraction
"""

from .pdf_service import PDFExtractionError, PDFService, get_pdf_service

__all__ = ["PDFService", "PDFExtractionError", "get_pdf_service"]
