"""
PDF processing service using pypdf.

Extracts plain text and document metadata from in-memory PDF bytes.
"""

import io
import logging
from typing import Any, BinaryIO

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from ..models import ExtractionOutcome, ParsedResult

logger = logging.getLogger(__name__)

EMPTY_PDF_MESSAGE = "PDF file is empty"


class PDFExtractionError(Exception):
    """Raised when text or metadata cannot be extracted from a PDF."""

    pass


class PDFService:
    """
    Service for PDF text and metadata extraction.

    Every public method takes the raw PDF bytes as uploaded; nothing is
    cached between calls.
    """

    page_separator = "\n\n"

    def extract_text(self, file_bytes: bytes | BinaryIO) -> str:
        """
        Extract the plain text of every page.

        Args:
            file_bytes: PDF file as bytes or file-like object.

        Returns:
            Page texts joined by a blank line. Pages without a text layer
            contribute an empty string.

        Raises:
            PDFExtractionError: If the document cannot be read.
        """
        return self._text_from_reader(self._open(file_bytes))

    def extract_info(
        self, file_bytes: bytes | BinaryIO, with_page_info: bool = True
    ) -> dict[str, Any]:
        """
        Extract document metadata.

        Args:
            file_bytes: PDF file as bytes or file-like object.
            with_page_info: Also include per-page number, label and size.

        Returns:
            Mapping with the page count under ``total``, header version,
            encryption and form flags, the document information dictionary
            under ``info`` and, if requested, a ``pages`` list.

        Raises:
            PDFExtractionError: If the document cannot be read.
        """
        return self._info_from_reader(self._open(file_bytes), with_page_info)

    def parse(self, file_bytes: bytes | BinaryIO) -> ParsedResult:
        """
        Extract text and metadata (with page info) in one pass.

        Raises:
            PDFExtractionError: If the document cannot be read.
        """
        reader = self._open(file_bytes)
        text = self._text_from_reader(reader)
        info = self._info_from_reader(reader, with_page_info=True)
        return ParsedResult(
            text=text or "",
            info=info,
            numpages=info.get("total") or 0,
        )

    def try_parse(self, file_bytes: bytes | BinaryIO) -> ExtractionOutcome:
        """Parse the PDF, returning failures as a value instead of raising."""
        try:
            return ExtractionOutcome.ok(self.parse(file_bytes))
        except Exception as e:
            return ExtractionOutcome.failed(str(e))

    def _open(self, file_bytes: bytes | BinaryIO) -> PdfReader:
        # Ensure we have bytes
        if hasattr(file_bytes, "read"):
            pdf_bytes = file_bytes.read()
        else:
            pdf_bytes = file_bytes

        if not pdf_bytes:
            raise PDFExtractionError(EMPTY_PDF_MESSAGE)

        try:
            return PdfReader(io.BytesIO(pdf_bytes))
        except PyPdfError as e:
            logger.error("Could not read PDF: %s", e)
            raise PDFExtractionError(str(e)) from e

    def _text_from_reader(self, reader: PdfReader) -> str:
        try:
            texts = [_clean_text(page.extract_text() or "") for page in reader.pages]
        except PyPdfError as e:
            logger.error("Text extraction failed: %s", e)
            raise PDFExtractionError(str(e)) from e

        logger.debug("Extracted text from %d page(s)", len(texts))
        return self.page_separator.join(texts)

    def _info_from_reader(
        self, reader: PdfReader, with_page_info: bool
    ) -> dict[str, Any]:
        try:
            total = len(reader.pages)
            header = reader.pdf_header
            root = reader.trailer["/Root"]

            info: dict[str, Any] = {
                "total": total,
                "PDFFormatVersion": header[5:] if header.startswith("%PDF-") else None,
                "IsEncrypted": reader.is_encrypted,
                "IsAcroFormPresent": "/AcroForm" in root,
                "info": _document_info(reader),
            }

            if with_page_info:
                labels = reader.page_labels
                info["pages"] = [
                    {
                        "pageNumber": index + 1,
                        "pageLabel": (
                            _clean_text(labels[index])
                            if index < len(labels)
                            else str(index + 1)
                        ),
                        "width": float(page.mediabox.width),
                        "height": float(page.mediabox.height),
                    }
                    for index, page in enumerate(reader.pages)
                ]
        except PyPdfError as e:
            logger.error("Metadata extraction failed: %s", e)
            raise PDFExtractionError(str(e)) from e

        return info


def _document_info(reader: PdfReader) -> dict[str, str]:
    """Flatten the document information dictionary to plain strings."""
    metadata = reader.metadata
    if metadata is None:
        return {}
    # Indexing resolves indirect objects
    return {
        _clean_text(str(key).lstrip("/")): _clean_text(str(metadata[key]))
        for key in metadata
    }


def _clean_text(value: str) -> str:
    """
    Replace characters that cannot be encoded as UTF-8.

    pypdf decodes ToUnicode maps with ``surrogatepass``, so a broken map can
    yield lone surrogates that would fail later when the response is encoded.
    """
    return value.encode("utf-8", "replace").decode("utf-8")


# Singleton instance for convenience
_pdf_service: PDFService | None = None


def get_pdf_service() -> PDFService:
    """Get or create the PDF service singleton."""
    global _pdf_service
    if _pdf_service is None:
        _pdf_service = PDFService()
    return _pdf_service
