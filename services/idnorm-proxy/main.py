"""FastAPI idnorm proxy: forwards ID document images to the extraction API.

Returns the raw extraction response together with a reconciled summary and a
display-ready view. Images stay in memory and are never logged or written to disk.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, FastAPI, File, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from extraction import extract_document, summarize
from idex_client import IdexClient
from models import ExtractPayload, ExtractRequest, ExtractResponse
from preprocessing import InvalidImageError, decode_base64_image

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_idex_client: IdexClient | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the extraction API client on startup if configured."""
    global _idex_client

    if not settings.IDEX_SERVER_URL:
        logger.info("Extraction API not configured (IDEX_SERVER_URL is empty), extraction disabled")
    else:
        logger.info("Using extraction API at %s", settings.IDEX_SERVER_URL)
        logger.info("License key present: %s", bool(settings.IDNORM_LICENSE_KEY))
        _idex_client = IdexClient()

    yield

    if _idex_client is not None:
        _idex_client.close()
        _idex_client = None


app = FastAPI(title="idnorm proxy", version="1.0.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ExtractResponse(success=False, message=message).model_dump(by_alias=True),
    )


def _run_extraction(image_bytes: bytes) -> JSONResponse:
    if _idex_client is None:
        return _error(503, "Document extraction is not available - no extraction API configured")

    # Log byte count only, never image content
    logger.info("Processing extraction: size=%d bytes", len(image_bytes))

    result = extract_document(image_bytes, _idex_client)
    return JSONResponse(
        status_code=200 if result.success else 500,
        content=result.model_dump(by_alias=True),
    )


@app.post("/api/extract", response_model=ExtractResponse)
async def extract_base64(request: ExtractRequest):
    """Extract data from a base64-encoded document image."""
    if not request.base64_image:
        return _error(400, "No image provided.")

    try:
        image_bytes = decode_base64_image(request.base64_image)
    except InvalidImageError as e:
        logger.warning("Rejected upload: %s", e)
        return _error(400, "Image is not valid base64.")

    if not image_bytes:
        return _error(400, "No image provided.")

    return _run_extraction(image_bytes)


@app.post("/api/v1/extract", response_model=ExtractResponse)
async def extract_upload(file: UploadFile = File(...)):
    """Extract data from an uploaded document image file."""
    image_bytes = await file.read()

    if not image_bytes:
        return _error(400, "Empty file uploaded")

    return _run_extraction(image_bytes)


@app.post("/api/v1/reconcile", response_model=ExtractPayload)
async def reconcile_response(payload: dict[str, Any] = Body(...)):
    """Summarize an extraction response that the caller already holds."""
    return summarize(payload)


@app.get("/health")
async def health():
    """Return service status and extraction API reachability."""
    base = {
        "status": "healthy",
        "extraction_configured": _idex_client is not None,
    }

    if _idex_client is not None:
        base["extraction_api"] = _idex_client.health()

    return base


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
