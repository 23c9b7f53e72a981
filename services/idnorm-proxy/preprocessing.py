"""Image preparation before forwarding to the extraction API.

The API accepts a single JPEG. Uploads are decoded, re-encoded as JPEG and
shrunk in 10% steps until the encoded size fits the configured byte budget.
If the image cannot be decoded the original bytes are forwarded unchanged and
the extraction API reports the problem.
"""

import base64
import binascii
import logging

import cv2
import numpy as np

from config import settings

logger = logging.getLogger(__name__)

SHRINK_FACTOR = 0.9


class InvalidImageError(ValueError):
    """Uploaded image payload is not valid base64."""


def decode_base64_image(text: str) -> bytes:
    """Decode a base64 image, accepting a ``data:image/...;base64,`` prefix."""
    if text.startswith("data:"):
        _, _, text = text.partition(",")
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError(f"Image is not valid base64: {e}") from e


def fit_image(
    image_bytes: bytes,
    max_bytes: int | None = None,
    quality: int | None = None,
) -> bytes:
    """Return JPEG bytes no larger than ``max_bytes`` (or as small as 1px allows)."""
    max_bytes = max_bytes if max_bytes is not None else settings.MAX_IMAGE_BYTES
    quality = quality if quality is not None else settings.JPEG_QUALITY

    img = _decode(image_bytes)
    if img is None:
        logger.warning("preprocessing: could not decode image, forwarding original")
        return image_bytes

    h, w = img.shape[:2]
    width, height = float(w), float(h)
    encoded = _encode(img, quality, fallback=image_bytes)

    while len(encoded) > max_bytes and width > 1 and height > 1:
        width *= SHRINK_FACTOR
        height *= SHRINK_FACTOR
        encoded = _encode(_resize(img, width, height), quality, fallback=encoded)

    logger.info(
        "preprocessing: %d bytes -> %d bytes (%dx%d -> %dx%d)",
        len(image_bytes), len(encoded), w, h, max(int(width), 1), max(int(height), 1),
    )
    return encoded


def _decode(image_bytes: bytes) -> np.ndarray | None:
    """Decode raw bytes into an OpenCV BGR array."""
    arr = np.frombuffer(image_bytes, dtype=np.uint8)
    if arr.size == 0:
        return None
    return cv2.imdecode(arr, cv2.IMREAD_COLOR)


def _resize(img: np.ndarray, width: float, height: float) -> np.ndarray:
    target = (max(int(width), 1), max(int(height), 1))
    try:
        return cv2.resize(img, target, interpolation=cv2.INTER_AREA)
    except cv2.error as e:
        logger.warning("preprocessing: resize failed: %s", e)
        return img


def _encode(img: np.ndarray, quality: int, fallback: bytes) -> bytes:
    """Encode image as JPEG bytes."""
    try:
        success, buf = cv2.imencode(".jpg", img, [cv2.IMWRITE_JPEG_QUALITY, quality])
        if success:
            return buf.tobytes()
    except cv2.error as e:
        logger.warning("preprocessing: JPEG encode failed: %s", e)

    return fallback
