"""
Pydantic models for the PDF parser API.

Defines the parsed document result, the JSON envelopes returned by
the upload endpoint and the explicit extraction outcome used by the
handler.
"""

from typing import Any

from pydantic import BaseModel, Field, model_validator

UNKNOWN_ERROR_MESSAGE = "Failed to process PDF due to an unknown error."
MISSING_FILE_MESSAGE = "No PDF file shared."


class ParsedResult(BaseModel):
    """
    Text and metadata extracted from a single PDF.

    Attributes:
        text: Plain text of the document, possibly empty.
        info: Document metadata as produced by the extractor. Its keys
            depend on the document and are not validated further.
        numpages: Number of pages, 0 when the extractor reports none.
    """

    text: str = Field(default="", description="Extracted plain text")
    info: dict[str, Any] = Field(
        default_factory=dict,
        description="Document metadata (page count, info dictionary, page sizes)",
    )
    numpages: int = Field(default=0, ge=0, description="Number of pages")


class ExtractionOutcome(BaseModel):
    """Result of one extraction attempt: either a parsed result or an error message."""

    success: bool
    result: ParsedResult | None = None
    error: str | None = None

    @model_validator(mode="after")
    def check_exclusive(self) -> "ExtractionOutcome":
        """Exactly one of result/error is set, matching success."""
        if self.success and (self.result is None or self.error is not None):
            raise ValueError("successful outcome requires a result and no error")
        if not self.success and (self.error is None or self.result is not None):
            raise ValueError("failed outcome requires an error and no result")
        return self

    @classmethod
    def ok(cls, result: ParsedResult) -> "ExtractionOutcome":
        return cls(success=True, result=result)

    @classmethod
    def failed(cls, message: str | None) -> "ExtractionOutcome":
        # Failures without a description fall back to the generic message
        return cls(success=False, error=message or UNKNOWN_ERROR_MESSAGE)


# =============================================================================
# API Response Models
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    message: str = Field(default="PDF Parser API is running")


class UploadSuccessResponse(BaseModel):
    """Response for a successfully parsed upload."""

    result: ParsedResult
    success: bool = True


class UploadErrorResponse(BaseModel):
    """Response for an upload that could not be parsed."""

    error: str
    success: bool = False


class MissingFileResponse(UploadErrorResponse):
    """Response for an upload request without a `file` field."""

    error: str = MISSING_FILE_MESSAGE
    body: str = Field(..., description="Echo of the non-file form fields")
