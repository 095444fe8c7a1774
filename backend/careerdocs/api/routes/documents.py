from fastapi import APIRouter, UploadFile, File, HTTPException
from starlette import status

from careerdocs.config import settings
from careerdocs.core.document_parser import SUPPORTED_EXTENSIONS, extract_text, is_supported
from careerdocs.models.schemas import ParsedDocumentResponse
from careerdocs.utils.prometheus_metrics import track_request_metrics

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("/parse", response_model=ParsedDocumentResponse)
@track_request_metrics("parse_document")
async def parse_document(file: UploadFile = File(...)):
    """Turn an uploaded CV or job description into plain text for the generator."""
    filename = file.filename or ""

    if not is_supported(filename):
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"Only {', '.join(SUPPORTED_EXTENSIONS)} files are supported.",
        )

    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Max size is {settings.max_upload_bytes // (1024 * 1024)}MB.",
        )

    try:
        text = extract_text(content, filename=filename)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ParsedDocumentResponse(filename=filename, text=text, characters=len(text))
