"""Extraction orchestrator: fit image, call the extraction API, reconcile fields."""

import logging
import secrets
import time
from typing import Any

from idex_client import IdexClient, IdexServiceError, IdexServiceUnavailable
from models import ExtractPayload, ExtractResponse
from presentation import build_result_view
from preprocessing import fit_image
from reconciler import to_raw_extraction

logger = logging.getLogger(__name__)

STATUS_OK = "STATUS_OK"


def new_error_id() -> str:
    """Short id tying a client-facing error message to the server log line."""
    return secrets.token_hex(4)


def summarize(response: dict[str, Any]) -> ExtractPayload:
    """Reconcile an already received extraction response."""
    raw = to_raw_extraction(response)
    view = build_result_view(raw)
    return ExtractPayload(response=response, summary=view.summary, view=view)


def extract_document(image_bytes: bytes, client: IdexClient) -> ExtractResponse:
    """Run the pipeline: fit image -> extraction API -> reconcile."""
    start = time.monotonic()
    error_id = new_error_id()

    try:
        jpeg = fit_image(image_bytes)
        response = client.extract(jpeg)
    except (IdexServiceUnavailable, IdexServiceError) as e:
        logger.error("[%s] Extraction API request failed: %s", error_id, e)
        return ExtractResponse(
            success=False,
            message=f"[{error_id}] Failed to get valid response for data processing!",
            error=str(e),
        )
    except Exception as e:
        logger.exception("[%s] Unexpected error while processing image", error_id)
        return ExtractResponse(
            success=False,
            message=f"[{error_id}] Error while processing provided image!",
            error=str(e),
        )

    status = response.get("status")
    if status != STATUS_OK:
        logger.warning("[%s] Extraction finished with status %s", error_id, status)

    payload = summarize(response)
    elapsed_ms = int((time.monotonic() - start) * 1000)
    logger.info("[%s] Extraction completed in %dms (status=%s)", error_id, elapsed_ms, status)

    return ExtractResponse(success=True, message="", data=payload)
