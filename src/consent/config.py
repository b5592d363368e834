from __future__ import annotations

from dataclasses import dataclass, field


EXTRACTION_PROMPT = """Extract the following information from this insurance slip and return ONLY valid JSON with no preamble or markdown:

{
  "fullName": "customer full name",
  "address": "full address",
  "year": "vehicle year",
  "makeModel": "vehicle make and model",
  "vin": "vehicle identification number"
}

If any field is not found, use an empty string. Ensure the response is valid JSON only."""


@dataclass(frozen=True)
class FormConfig:
    accepted_media_types: frozenset[str] = frozenset(
        {"application/pdf", "image/jpeg", "image/jpg", "image/png"}
    )
    document_media_type: str = "application/pdf"
    extraction_model: str = "claude-sonnet-4-20250514"
    extraction_max_tokens: int = 1000
    extraction_prompt: str = EXTRACTION_PROMPT
    vin_length: int = 17
    vin_placeholder: str = "Not Applicable"
    canvas_size: tuple[int, int] = (850, 1100)
    jpeg_quality: int = 95
    default_export_name: str = "Authorization_Letter"
    month_names: tuple[str, ...] = field(
        default_factory=lambda: (
            "January",
            "February",
            "March",
            "April",
            "May",
            "June",
            "July",
            "August",
            "September",
            "October",
            "November",
            "December",
        )
    )


DEFAULT_FORM_CONFIG = FormConfig()
