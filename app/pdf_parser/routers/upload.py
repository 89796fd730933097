"""
Router for the PDF upload endpoint.

Handles:
- Multipart PDF upload, text and metadata extraction
"""

import json
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException

from ..models import (
    MissingFileResponse,
    UploadErrorResponse,
    UploadSuccessResponse,
)
from ..services.pdf_service import PDFService, get_pdf_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["upload"])

FILE_FIELD = "file"


@router.post(
    "/upload",
    response_model=UploadSuccessResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": MissingFileResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": UploadErrorResponse},
    },
)
async def upload_pdf(
    request: Request,
    pdf_service: PDFService = Depends(get_pdf_service),
) -> JSONResponse:
    """
    Upload a PDF and return its text and metadata.

    The multipart body must carry the document in a field named `file`.
    Extraction is attempted once; any failure is reported as a 500
    envelope with the failure's message.
    """
    try:
        form = await request.form()
    except HTTPException as e:
        # Malformed multipart bodies are treated as carrying no file
        logger.warning("Could not parse upload form: %s", e.detail)
        form = FormData()

    upload = form.get(FILE_FIELD)

    if not isinstance(upload, UploadFile):
        fields = {
            key: value
            for key, value in form.multi_items()
            if not isinstance(value, UploadFile)
        }
        logger.info("Upload rejected: no '%s' field in request", FILE_FIELD)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=MissingFileResponse(
                body=f"Body is {json.dumps(fields, separators=(',', ':'))}",
            ).model_dump(),
        )

    try:
        file_bytes = await upload.read()
    finally:
        await upload.close()

    logger.info("Processing PDF: %s (%d bytes)", upload.filename, len(file_bytes))

    # pypdf is synchronous; keep the event loop free while it runs
    outcome = await run_in_threadpool(pdf_service.try_parse, file_bytes)

    if not outcome.success:
        logger.error("Error processing PDF: %s", outcome.error)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=UploadErrorResponse(error=outcome.error).model_dump(),
        )

    logger.info("PDF parsed successfully: %s", outcome.result.model_dump())
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=UploadSuccessResponse(result=outcome.result).model_dump(),
    )
