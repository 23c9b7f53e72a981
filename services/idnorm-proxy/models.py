"""Pydantic models for the extraction API response and the proxy's own output.

Inbound models mirror the camelCase JSON of the extraction API and are lenient:
unknown keys are kept, numbers are read as strings, and ``null`` sequences
become empty lists. Sequence entries that still fail validation are dropped
(and logged) instead of failing the whole response. ``sexField`` arrives
either as a single object or as an array depending on the API version; it is
always stored as a list.
"""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


def _as_list(value: Any) -> Any:
    """Turn ``None`` into ``[]`` and a lone object into a one-element list."""
    if value is None:
        return []
    if isinstance(value, (dict, BaseModel)):
        return [value]
    if isinstance(value, list):
        return [item for item in value if isinstance(item, (dict, BaseModel))]
    return value


def _valid_items(value: Any, model: type[BaseModel]) -> Any:
    """Validate sequence entries one by one, dropping the ones that do not fit."""
    items = _as_list(value)
    if not isinstance(items, list):
        return items

    valid = []
    for item in items:
        try:
            valid.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning("Dropping unreadable %s entry: %d errors", model.__name__, e.error_count())
    return valid


def _optional_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value)
    return None


class ApiModel(BaseModel):
    """Base for models exchanged with the extraction API."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        coerce_numbers_to_str=True,
    )


class TextField(ApiModel):
    type: str | None = None
    value: str | None = None
    # Some document kinds carry a normalised sex next to the raw value
    sex: str | None = None


class FieldDate(ApiModel):
    day: int | None = None
    month: int | None = None
    year: int | None = None

    @field_validator("day", "month", "year", mode="before")
    @classmethod
    def _normalize_parts(cls, value: Any) -> int | None:
        return _optional_int(value)


class DateField(ApiModel):
    type: str | None = None
    value: str | None = None
    date: FieldDate | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, FieldDate)) else None


class SexSegment(ApiModel):
    value: str | None = None


class SexField(ApiModel):
    value: str | None = None
    sex: str | None = None
    segments: list[SexSegment] = Field(default_factory=list)

    @field_validator("segments", mode="before")
    @classmethod
    def _normalize_segments(cls, value: Any) -> Any:
        return _valid_items(value, SexSegment)


class VisualField(ApiModel):
    type: str | None = None
    image: str | None = None


class MrzResult(ApiModel):
    status: str | None = None
    fields: dict[str, Any] = Field(default_factory=dict)

    @field_validator("fields", mode="before")
    @classmethod
    def _normalize_fields(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}


class ExtractionData(ApiModel):
    text_field: list[TextField] = Field(default_factory=list)
    date_field: list[DateField] = Field(default_factory=list)
    sex_field: list[SexField] = Field(default_factory=list)
    visual_field: list[VisualField] = Field(default_factory=list)
    mrz: MrzResult | None = None
    pdf417_barcode: dict[str, Any] | None = Field(default=None, alias="pdf417Barcode")

    @field_validator("text_field", mode="before")
    @classmethod
    def _normalize_text_fields(cls, value: Any) -> Any:
        return _valid_items(value, TextField)

    @field_validator("date_field", mode="before")
    @classmethod
    def _normalize_date_fields(cls, value: Any) -> Any:
        return _valid_items(value, DateField)

    @field_validator("sex_field", mode="before")
    @classmethod
    def _normalize_sex_fields(cls, value: Any) -> Any:
        return _valid_items(value, SexField)

    @field_validator("visual_field", mode="before")
    @classmethod
    def _normalize_visual_fields(cls, value: Any) -> Any:
        return _valid_items(value, VisualField)

    @field_validator("mrz", mode="before")
    @classmethod
    def _normalize_mrz(cls, value: Any) -> Any:
        if not isinstance(value, (dict, MrzResult)):
            return None
        try:
            return MrzResult.model_validate(value)
        except ValidationError as e:
            logger.warning("Dropping unreadable MRZ result: %d errors", e.error_count())
            return None

    @field_validator("pdf417_barcode", mode="before")
    @classmethod
    def _normalize_barcode(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None


class RawExtraction(ApiModel):
    """Response body of the document-data-extraction API."""

    status: str | None = None
    classification: dict[str, Any] | None = None
    data: ExtractionData | None = None
    document_image: str | None = None

    @field_validator("classification", mode="before")
    @classmethod
    def _normalize_classification(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    @field_validator("data", mode="before")
    @classmethod
    def _normalize_data(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, ExtractionData)) else None


class OutputModel(BaseModel):
    """Base for models returned to the UI layer (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CanonicalSummary(OutputModel):
    full_name: str | None = None
    date_of_birth: str | None = None
    nationality: str | None = None
    sex: str | None = None
    document_number: str | None = None
    expiry_date: str | None = None
    document_type_tags: list[str] = []


class ClassificationTag(OutputModel):
    key: str
    value: str


class DisplayField(OutputModel):
    label: str
    value: str


class ResultView(OutputModel):
    """Display-ready reshaping of one extraction (summary card and tabs)."""

    summary: CanonicalSummary
    sex_display: str | None = None
    fields: list[DisplayField] = []
    mrz: list[DisplayField] = []
    barcode: list[DisplayField] = []
    classifications: list[ClassificationTag] = []
    face_photo: str | None = None
    signature: str | None = None
    document_image: str | None = None


class ExtractRequest(OutputModel):
    base64_image: str | None = None


class ExtractPayload(OutputModel):
    response: dict[str, Any]
    summary: CanonicalSummary
    view: ResultView


class ExtractResponse(OutputModel):
    success: bool
    message: str = ""
    data: ExtractPayload | None = None
    error: str | None = None
