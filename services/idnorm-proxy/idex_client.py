"""HTTP client for the document-data-extraction API.

Uses httpx with configurable timeouts. Each request is sent once; callers
decide how to report failures.
"""

import base64
import logging

import httpx

from config import settings

logger = logging.getLogger(__name__)

LICENSE_KEY_HEADER = "idnorm-license-key"
VISUAL_FIELD_TYPES = ["VISUAL_FIELD_TYPE_FACE_PHOTO", "VISUAL_FIELD_TYPE_SIGNATURE"]


class IdexServiceUnavailable(Exception):
    """Extraction API could not be reached (connection error, timeout, 503)."""


class IdexServiceError(Exception):
    """Extraction API answered with an error or an unreadable body."""


class IdexClient:
    """HTTP client for the extraction API."""

    def __init__(
        self,
        base_url: str | None = None,
        license_key: str | None = None,
        timeout: int | None = None,
        connect_timeout: int | None = None,
    ):
        self._url = base_url or settings.IDEX_SERVER_URL
        self._license_key = license_key if license_key is not None else settings.IDNORM_LICENSE_KEY

        read_timeout = timeout if timeout is not None else settings.IDEX_TIMEOUT_SECONDS
        conn_timeout = connect_timeout if connect_timeout is not None else settings.IDEX_CONNECT_TIMEOUT

        self._client = httpx.Client(
            timeout=httpx.Timeout(
                connect=float(conn_timeout),
                read=float(read_timeout),
                write=30.0,
                pool=30.0,
            ),
        )

    def close(self):
        self._client.close()

    @staticmethod
    def build_request(jpeg_bytes: bytes) -> dict:
        """Request body asking for the document image and face/signature crops."""
        return {
            "config": {
                "returnDocumentImage": {},
                "returnVisualFields": {"typeFilter": list(VISUAL_FIELD_TYPES)},
            },
            "imageJpeg": base64.b64encode(jpeg_bytes).decode(),
        }

    def extract(self, jpeg_bytes: bytes) -> dict:
        """Send a JPEG to the extraction API and return its JSON response.

        Raises IdexServiceUnavailable or IdexServiceError.
        """
        headers = {LICENSE_KEY_HEADER: self._license_key}
        try:
            resp = self._client.post(self._url, json=self.build_request(jpeg_bytes), headers=headers)
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            logger.warning("Extraction API connection failed: %s", e)
            raise IdexServiceUnavailable(f"Cannot connect to extraction API: {e}") from e
        except httpx.ReadTimeout as e:
            logger.warning("Extraction API read timeout: %s", e)
            raise IdexServiceUnavailable(f"Extraction API read timeout: {e}") from e
        except httpx.HTTPError as e:
            logger.error("Extraction API HTTP error: %s", e)
            raise IdexServiceError(f"Extraction API HTTP error: {e}") from e

        if resp.status_code == 503:
            logger.warning("Extraction API returned 503: %s", resp.text[:200])
            raise IdexServiceUnavailable(resp.text or "Service unavailable")

        if not resp.is_success:
            logger.error("Extraction API error %d: %s", resp.status_code, resp.text[:200])
            raise IdexServiceError(resp.text or f"HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise IdexServiceError(f"Extraction API returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise IdexServiceError("Extraction API returned a non-object JSON body")
        return data

    def health(self) -> dict:
        """Probe the extraction API. Never raises."""
        try:
            resp = self._client.get(self._url, timeout=10.0)
            return {"status": "reachable", "status_code": resp.status_code}
        except Exception as e:
            logger.warning("Extraction API health check failed: %s", e)
            return {"status": "unreachable", "error": str(e)}
