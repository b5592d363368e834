from __future__ import annotations

from typing import Any, Iterable, Mapping

from consent.config import DEFAULT_FORM_CONFIG, FormConfig
from consent.data_models import VinLookupResult

MODEL_CANDIDATES: tuple[str, ...] = ("Model", "Series", "Trim")


def index_results(rows: Iterable[Any]) -> dict[str, str]:
    """Map ``Variable`` to ``Value`` for a DecodeVin ``Results`` list.

    The first row for a variable wins; null values become empty strings.
    """
    values: dict[str, str] = {}
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        variable = row.get("Variable")
        if not isinstance(variable, str) or variable in values:
            continue
        value = row.get("Value")
        values[variable] = value.strip() if isinstance(value, str) else ""
    return values


def _present(value: str, config: FormConfig) -> str:
    return "" if value == config.vin_placeholder else value


def derive_vin_fields(vin: str, rows: Iterable[Any], config: FormConfig = DEFAULT_FORM_CONFIG) -> VinLookupResult:
    values = index_results(rows)
    model = ""
    for variable in MODEL_CANDIDATES:
        model = _present(values.get(variable, ""), config)
        if model:
            break
    return VinLookupResult(
        vin=vin,
        make=_present(values.get("Make", ""), config),
        model=model,
        model_year=_present(values.get("Model Year", ""), config),
    )
