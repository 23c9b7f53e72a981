"""Tests for the image fitting step."""

import base64
import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from preprocessing import InvalidImageError, _decode, _encode, decode_base64_image, fit_image

JPEG_MAGIC = b"\xff\xd8\xff"


class TestDecodeBase64:
    def test_plain_base64(self):
        assert decode_base64_image(base64.b64encode(b"abc").decode()) == b"abc"

    def test_data_uri_prefix(self):
        text = "data:image/jpeg;base64," + base64.b64encode(b"abc").decode()
        assert decode_base64_image(text) == b"abc"

    def test_invalid_base64(self):
        with pytest.raises(InvalidImageError):
            decode_base64_image("not base64!!")


class TestDecode:
    def test_valid_jpeg(self, sample_image_bytes: bytes):
        img = _decode(sample_image_bytes)
        assert img is not None
        assert img.shape[2] == 3

    def test_invalid_bytes(self, invalid_bytes: bytes):
        assert _decode(invalid_bytes) is None

    def test_empty_bytes(self):
        assert _decode(b"") is None


class TestEncode:
    def test_encode_success(self):
        img = np.ones((100, 100, 3), dtype=np.uint8) * 128
        assert _encode(img, 90, fallback=b"fallback")[:3] == JPEG_MAGIC

    def test_encode_fallback_on_failure(self):
        img = np.array([], dtype=np.uint8)
        assert _encode(img, 90, fallback=b"fallback") == b"fallback"


class TestFitImage:
    def test_small_image_reencoded_as_jpeg(self, sample_image_bytes: bytes):
        result = fit_image(sample_image_bytes, max_bytes=512 * 1024, quality=90)
        assert result[:3] == JPEG_MAGIC
        img = _decode(result)
        assert img.shape[:2] == (300, 200)

    def test_large_image_shrunk_under_budget(self, large_image_bytes: bytes):
        budget = 200 * 1024
        result = fit_image(large_image_bytes, max_bytes=budget, quality=90)
        assert result[:3] == JPEG_MAGIC
        assert len(result) <= budget
        h, w = _decode(result).shape[:2]
        assert w < 1600 and h < 1200

    def test_invalid_bytes_returned_unchanged(self, invalid_bytes: bytes):
        assert fit_image(invalid_bytes) == invalid_bytes
