from __future__ import annotations

from typing import Mapping

from consent.data_models import TEXT_FIELDS, FormRecord


def fill_if_present(record: FormRecord, updates: Mapping[str, str]) -> list[str]:
    """Copy non-empty values from ``updates`` onto ``record``.

    Empty incoming values never clear what is already on the form, and the
    date is not an enrichable field. Returns the names of fields that changed.
    """
    changed: list[str] = []
    for name, value in updates.items():
        if name not in TEXT_FIELDS:
            continue
        if not value:
            continue
        if getattr(record, name) != value:
            setattr(record, name, value)
            changed.append(name)
    return changed
