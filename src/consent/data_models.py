from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


# Wire names used by the form and by the extraction prompt.
FIELD_ALIASES: dict[str, str] = {
    "full_name": "fullName",
    "address": "address",
    "year": "year",
    "make_model": "makeModel",
    "vin": "vin",
}

TEXT_FIELDS: tuple[str, ...] = tuple(FIELD_ALIASES)


class FormStatus(str, Enum):
    IDLE = "idle"
    EXTRACTING = "extracting"
    EXTRACTED = "extracted"
    EXTRACTION_FAILED = "extraction_failed"
    RENDERED = "rendered"


@dataclass
class FormRecord:
    full_name: str = ""
    address: str = ""
    year: str = ""
    make_model: str = ""
    vin: str = ""
    date: dt.date = field(default_factory=dt.date.today)

    def to_wire(self) -> dict[str, str]:
        payload = {alias: getattr(self, name) for name, alias in FIELD_ALIASES.items()}
        payload["date"] = self.date.isoformat()
        return payload


def _coerce_text(value: Any) -> str:
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return ""


@dataclass(frozen=True)
class ExtractionResult:
    full_name: str = ""
    address: str = ""
    year: str = ""
    make_model: str = ""
    vin: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> ExtractionResult:
        """Build a result from a parsed model response keyed by wire names.

        Unknown or malformed values collapse to an empty string so a single
        bad field never fails the whole extraction.
        """
        return cls(**{name: _coerce_text(payload.get(alias)) for name, alias in FIELD_ALIASES.items()})

    def as_updates(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in TEXT_FIELDS}


@dataclass(frozen=True)
class VinLookupResult:
    vin: str
    make: str = ""
    model: str = ""
    model_year: str = ""

    @property
    def make_model(self) -> str:
        return " ".join(part for part in (self.make, self.model) if part)

    def as_updates(self) -> dict[str, str]:
        return {"vin": self.vin, "make_model": self.make_model, "year": self.model_year}
