"""Shared test fixtures for idnorm proxy tests."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add parent directory to path so we can import the modules
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Generate a small valid JPEG image for testing."""
    import cv2

    img = np.zeros((300, 200, 3), dtype=np.uint8)
    img[:] = (240, 240, 240)

    # Dark rectangles to simulate text regions
    cv2.rectangle(img, (20, 30), (180, 50), (30, 30, 30), -1)
    cv2.rectangle(img, (20, 70), (160, 90), (30, 30, 30), -1)

    _, buf = cv2.imencode(".jpg", img, [cv2.IMWRITE_JPEG_QUALITY, 90])
    return buf.tobytes()


@pytest.fixture
def large_image_bytes() -> bytes:
    """Generate a noisy PNG that is far above the default byte budget."""
    import cv2

    rng = np.random.default_rng(42)
    img = rng.integers(0, 256, size=(1200, 1600, 3), dtype=np.uint8)
    _, buf = cv2.imencode(".png", img)
    return buf.tobytes()


@pytest.fixture
def invalid_bytes() -> bytes:
    """Non-image bytes for testing graceful degradation."""
    return b"this is not an image file at all"


@pytest.fixture
def driving_licence_response() -> dict:
    """Extraction API response for a driving licence with a PDF417 barcode."""
    return {
        "status": "STATUS_OK",
        "documentImage": "ZG9jdW1lbnQ=",
        "classification": {
            "documentClass": "DOCUMENT_TYPE_DRIVING_LICENSE",
            "countryCode": "COUNTRY_USA",
            "documentType": "NOT_AVAILABLE",
        },
        "data": {
            "textField": [
                {"type": "TYPE_FULL_NAME", "value": "JANE SAMPLE"},
                {"type": "TYPE_DOCUMENT_NUMBER", "value": "D1234567"},
                {"type": "TYPE_ADDRESS", "value": "1 MAIN ST"},
                {"type": "TYPE_ISSUING_AUTHORITY", "value": "DMV"},
            ],
            "dateField": [
                {
                    "type": "TYPE_DATE_OF_BIRTH",
                    "value": "01/02/1980",
                    "date": {"day": 2, "month": 1, "year": 1980},
                },
                {
                    "type": "TYPE_EXPIRY_DATE",
                    "value": "01/02/2030",
                    "date": {"day": 2, "month": 1, "year": 2030},
                },
            ],
            "sexField": {"value": "F", "sex": "FEMALE"},
            "visualField": [
                {"type": "TYPE_FACE_PHOTO", "image": "ZmFjZQ=="},
                {"type": "TYPE_SIGNATURE", "image": "c2lnbg=="},
            ],
            "pdf417Barcode": {
                "firstName": "JANE",
                "lastName": "SAMPLE",
                "customerId": "D1234567",
                "countryIdentification": "USA",
                "gender": 2,
                "postalCode": "",
            },
        },
        "detection": {"status": "STATUS_OK"},
    }


@pytest.fixture
def passport_response() -> dict:
    """Extraction API response for a passport with an MRZ."""
    return {
        "status": "STATUS_OK",
        "documentImage": "",
        "classification": {
            "documentClass": "DOCUMENT_TYPE_PASSPORT",
            "countryCode": "COUNTRY_FIN",
        },
        "data": {
            "textField": [
                {"type": "TYPE_FIRST_NAME", "value": "MATTI"},
                {"type": "TYPE_LAST_NAME", "value": "MEIKALAINEN"},
                {"type": "TYPE_DOCUMENT_NUMBER", "value": "XP8271602"},
                {"type": "TYPE_PLACE_OF_BIRTH", "value": "HELSINKI"},
            ],
            "dateField": [
                {"type": "TYPE_DATE_OF_BIRTH", "value": "01 JAN 1970"},
                {"type": "TYPE_EXPIRY_DATE", "value": "01 JAN 2030"},
            ],
            "sexField": [{"value": "M", "sex": "MALE"}],
            "visualField": [],
            "mrz": {
                "status": "STATUS_OK",
                "fields": {
                    "documentCode": "P",
                    "issuingState": "FIN",
                    "documentNumber": "XP8271602",
                    "nationality": "FIN",
                    "sex": "M",
                    "surnames": "MEIKALAINEN",
                    "givenNames": "MATTI",
                    "optional": "",
                },
            },
        },
        "detection": {"status": "STATUS_OK"},
    }


@pytest.fixture
def error_response() -> dict:
    """Extraction API response when no document was detected."""
    return {
        "status": "STATUS_ERROR",
        "detection": {"status": "STATUS_ERROR"},
    }
