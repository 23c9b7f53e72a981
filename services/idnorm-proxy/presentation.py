"""Display-ready view of an extraction: summary card, field list, MRZ and barcode tabs."""

from typing import Any

from models import DisplayField, RawExtraction, ResultView
from reconciler import (
    clean_value,
    extract_raw_sex,
    format_classification,
    reconcile,
    to_raw_extraction,
)

MRZ_STATUS_OK = "STATUS_OK"
FACE_PHOTO = "TYPE_FACE_PHOTO"
SIGNATURE = "TYPE_SIGNATURE"
JPEG_DATA_URI = "data:image/jpeg;base64,"

# Field list order; each label lists the (lower-cased) text field types it accepts
FIELD_ORDER: list[tuple[str, tuple[str, ...]]] = [
    ("id number", (
        "type_document_identity_number",
        "type_document_id_number",
        "type_document_number",
        "type_id_number",
        "type_personal_identity_number",
    )),
    ("last_name", ("type_last_name",)),
    ("first_name", ("type_first_name",)),
    ("nationality", ("type_nationality",)),
    ("sex", ()),
    ("place of birth", ("type_place_of_birth",)),
    ("issuing authority", ("type_issuing_authority",)),
]


def display_sex(normalized: str | None, raw_token: str | None) -> str | None:
    """Compact form ``MALE (M)`` when the enum and the printed token differ."""
    if not normalized:
        return None
    if raw_token and normalized != raw_token:
        return f"{normalized} ({raw_token})"
    return normalized


def ordered_fields(raw: RawExtraction) -> list[DisplayField]:
    text_fields: dict[str, str] = {}
    if raw.data is not None:
        for field in raw.data.text_field:
            key = (field.type or "").lower()
            value = clean_value(field.value)
            if key and value is not None:
                text_fields.setdefault(key, value)

    fields = []
    for label, types in FIELD_ORDER:
        if label == "sex":
            value = extract_raw_sex(raw)
        else:
            value = next((text_fields[t] for t in types if t in text_fields), None)
        if value is not None:
            fields.append(DisplayField(label=label, value=value))
    return fields


def _entries(mapping: dict[str, Any]) -> list[DisplayField]:
    return [
        DisplayField(label=key, value=str(value))
        for key, value in mapping.items()
        if value is not None and value != ""
    ]


def mrz_entries(raw: RawExtraction) -> list[DisplayField]:
    mrz = raw.data.mrz if raw.data is not None else None
    if mrz is None or mrz.status != MRZ_STATUS_OK:
        return []
    return _entries(mrz.fields)


def barcode_entries(raw: RawExtraction) -> list[DisplayField]:
    barcode = raw.data.pdf417_barcode if raw.data is not None else None
    return _entries(barcode or {})


def visual_image(raw: RawExtraction, field_type: str) -> str | None:
    if raw.data is None:
        return None
    for field in raw.data.visual_field:
        if field.type == field_type and field.image:
            return field.image
    return None


def build_result_view(payload: RawExtraction | dict | None) -> ResultView:
    raw = to_raw_extraction(payload)
    summary = reconcile(raw)
    return ResultView(
        summary=summary,
        sex_display=display_sex(summary.sex, extract_raw_sex(raw)),
        fields=ordered_fields(raw),
        mrz=mrz_entries(raw),
        barcode=barcode_entries(raw),
        classifications=format_classification(raw.classification),
        face_photo=visual_image(raw, FACE_PHOTO),
        signature=visual_image(raw, SIGNATURE),
        document_image=JPEG_DATA_URI + raw.document_image if raw.document_image else None,
    )
