"""Field reconciliation: raw extraction response -> canonical summary.

The extraction API reports the same attribute in several places (printed text
fields, the MRZ, the PDF417 barcode). Each canonical attribute is resolved by
trying those sources in a fixed order and skipping placeholder tokens such as
``UNKNOWN``. All functions here are pure: they only read their argument.
"""

import logging
import re
from typing import Any

from pydantic import ValidationError

from models import CanonicalSummary, ClassificationTag, ExtractionData, RawExtraction, SexField, SexSegment

logger = logging.getLogger(__name__)

SENTINEL_VALUES = {"", "UNKNOWN", "UNSPECIFIED"}
NOT_AVAILABLE = "NOT_AVAILABLE"

DOCUMENT_NUMBER_TYPES = ("TYPE_DOCUMENT_NUMBER", "TYPE_ID_NUMBER", "TYPE_PERSONAL_NUMBER")
DOCUMENT_NUMBER_PATTERN = re.compile(r"^[A-Z]{1,2}\d{6,8}$")

SEX_TEXT_TYPES = {"type_sex", "sex", "type_gender", "gender"}

# Barcode keys differ between issuing authorities
BARCODE_NATIONALITY_KEYS = (
    "nationality",
    "countryIdentification",
    "issuingCountry",
    "countryCode",
    "country",
)

# AAMVA-style numeric sex codes
BARCODE_GENDER_CODES = {1: "M", 2: "F"}

CLASSIFICATION_PREFIXES = ("COUNTRY_", "DOCUMENT_TYPE_", "TERRITORY_")


def clean_value(value: Any) -> str | None:
    """Return the trimmed string, or None for non-strings and sentinel tokens."""
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    if stripped.upper() in SENTINEL_VALUES:
        return None
    return stripped


def _first_valid(*candidates: Any) -> str | None:
    for candidate in candidates:
        cleaned = clean_value(candidate)
        if cleaned is not None:
            return cleaned
    return None


def _data(raw: RawExtraction) -> ExtractionData:
    return raw.data if raw.data is not None else ExtractionData()


def _as_text(value: Any) -> Any:
    """Numeric MRZ / barcode scalars read as their string form; anything else unchanged."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return value


def _mrz_field(raw: RawExtraction, key: str) -> Any:
    mrz = _data(raw).mrz
    return _as_text(mrz.fields.get(key)) if mrz is not None else None


def _barcode_value(raw: RawExtraction, key: str) -> Any:
    barcode = _data(raw).pdf417_barcode
    return barcode.get(key) if barcode is not None else None


def _barcode_field(raw: RawExtraction, key: str) -> Any:
    return _as_text(_barcode_value(raw, key))


def _text_value(raw: RawExtraction, field_type: str) -> str | None:
    """First valid value of a text field with the given type."""
    for field in _data(raw).text_field:
        if field.type == field_type:
            cleaned = clean_value(field.value)
            if cleaned is not None:
                return cleaned
    return None


def _date_value(raw: RawExtraction, field_type: str) -> str | None:
    """First valid display value of a date-typed field (date fields, then text fields)."""
    for field in _data(raw).date_field:
        if field.type == field_type:
            cleaned = clean_value(field.value)
            if cleaned is not None:
                return cleaned
    return _text_value(raw, field_type)


def extract_document_number(raw: RawExtraction) -> str | None:
    """Resolve the document number: MRZ, barcode, typed text field, then pattern scan."""
    found = _first_valid(
        _mrz_field(raw, "documentNumber"),
        _barcode_field(raw, "customerId"),
    )
    if found is not None:
        return found

    text_fields = _data(raw).text_field
    for field in text_fields:
        if field.type in DOCUMENT_NUMBER_TYPES:
            cleaned = clean_value(field.value)
            if cleaned is not None:
                return cleaned

    for field in text_fields:
        cleaned = clean_value(field.value)
        if cleaned is not None and DOCUMENT_NUMBER_PATTERN.match(cleaned):
            return cleaned

    return None


def _segment_value(segments: list[SexSegment]) -> str | None:
    return _first_valid(*(segment.value for segment in segments))


def _sex_field_value(field: SexField) -> str | None:
    """Enum, then raw token, then segments.

    An explicit UNKNOWN / UNSPECIFIED enum marks the printed token (often ``X``)
    as carrying no sex, so the token is only used when the enum is missing.
    """
    found = clean_value(field.sex)
    if found is not None:
        return found
    if not (field.sex or "").strip():
        found = clean_value(field.value)
        if found is not None:
            return found
    return _segment_value(field.segments)


def _gender_code(value: Any) -> str | None:
    """Map a barcode gender entry; numeric codes use the 1=M / 2=F convention."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if value == 0:
            return None
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return BARCODE_GENDER_CODES.get(value, str(value))
    return clean_value(value)


def extract_sex_value(raw: RawExtraction) -> str | None:
    """Resolve the sex attribute, preferring the normalised enum of the sex field."""
    data = _data(raw)

    if data.sex_field:
        found = _sex_field_value(data.sex_field[0])
        if found is not None:
            return found

    for field in data.text_field:
        if (field.type or "").lower() in SEX_TEXT_TYPES:
            found = _first_valid(field.sex, field.value)
            if found is not None:
                return found

    for field in data.text_field:
        found = clean_value(field.sex)
        if found is not None:
            return found

    found = clean_value(_mrz_field(raw, "sex"))
    if found is not None:
        return found

    return _gender_code(_barcode_value(raw, "gender"))


def extract_raw_sex(raw: RawExtraction) -> str | None:
    """Raw token (e.g. ``M``) of the first sex field, for display next to the enum."""
    sex_fields = _data(raw).sex_field
    if not sex_fields:
        return None
    first = sex_fields[0]
    return clean_value(first.value) or _segment_value(first.segments)


def extract_nationality(raw: RawExtraction) -> str | None:
    found = _first_valid(
        _text_value(raw, "TYPE_NATIONALITY"),
        _mrz_field(raw, "nationality"),
    )
    if found is not None:
        return found
    return _first_valid(*(_barcode_field(raw, key) for key in BARCODE_NATIONALITY_KEYS))


def extract_full_name(raw: RawExtraction) -> str | None:
    full_name = _text_value(raw, "TYPE_FULL_NAME")
    if full_name is not None:
        return full_name

    parts = [
        part
        for part in (_text_value(raw, "TYPE_FIRST_NAME"), _text_value(raw, "TYPE_LAST_NAME"))
        if part is not None
    ]
    return " ".join(parts) if parts else None


def extract_date_of_birth(raw: RawExtraction) -> str | None:
    return _first_valid(
        _date_value(raw, "TYPE_DATE_OF_BIRTH"),
        _mrz_field(raw, "birthdate"),
        _barcode_field(raw, "dateOfBirth"),
    )


def extract_expiry_date(raw: RawExtraction) -> str | None:
    return _date_value(raw, "TYPE_EXPIRY_DATE")


def format_classification(classification: dict[str, Any] | None) -> list[ClassificationTag]:
    """Human-readable classification tags; ``NOT_AVAILABLE`` entries are dropped."""
    tags = []
    for key, value in (classification or {}).items():
        if not isinstance(value, str) or not value or value == NOT_AVAILABLE:
            continue
        for prefix in CLASSIFICATION_PREFIXES:
            value = value.replace(prefix, "")
        tags.append(ClassificationTag(key=key, value=value))
    return tags


def to_raw_extraction(payload: RawExtraction | dict | None) -> RawExtraction:
    """Validate a response body; anything unusable becomes an empty extraction."""
    if isinstance(payload, RawExtraction):
        return payload
    if not isinstance(payload, dict):
        return RawExtraction()
    try:
        return RawExtraction.model_validate(payload)
    except ValidationError as e:
        logger.warning("Unusable extraction response, treating as empty: %d errors", e.error_count())
        return RawExtraction()


def reconcile(payload: RawExtraction | dict | None) -> CanonicalSummary:
    """Resolve every canonical attribute of one extraction response."""
    raw = to_raw_extraction(payload)
    return CanonicalSummary(
        full_name=extract_full_name(raw),
        date_of_birth=extract_date_of_birth(raw),
        nationality=extract_nationality(raw),
        sex=extract_sex_value(raw),
        document_number=extract_document_number(raw),
        expiry_date=extract_expiry_date(raw),
        document_type_tags=[tag.value for tag in format_classification(raw.classification)],
    )
