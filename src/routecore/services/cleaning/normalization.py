"""Region/city spelling normalisation."""

from __future__ import annotations

import dataclasses
from typing import Mapping, Sequence

from ...models.domain import GeoRecord
from ...schemas.cleaning import NormalizationEdit

REGION_FIELD = "region_description"

CITY_ALIASES: dict[str, str] = {
    "jedda": "Jeddah",
    "jeddah consumer": "Jeddah",
    "jeddah-consumer": "Jeddah",
    "ryadh": "Riyadh",
    "riyadh consumer": "Riyadh",
    "dammad": "Dammam",
    "dammam consumer": "Dammam",
    "khobar": "Al Khobar",
    "alkhobar": "Al Khobar",
    "makkah region": "Makkah",
    "makkah consumer": "Makkah",
    "madina": "Madinah",
    "medina": "Madinah",
    "taif consumer": "Taif",
}


def canonical_region(value: str | None, aliases: Mapping[str, str] | None = None) -> str | None:
    """Return the standard spelling for ``value`` or None if it has no alias."""

    aliases = CITY_ALIASES if aliases is None else aliases
    key = (value or "").strip().lower()
    return aliases.get(key)


def normalize_regions(
    records: Sequence[GeoRecord],
    aliases: Mapping[str, str] | None = None,
) -> tuple[list[GeoRecord], list[NormalizationEdit]]:
    """Rewrite aliased region names. Returns copies; inputs are untouched."""

    cleaned: list[GeoRecord] = []
    edits: list[NormalizationEdit] = []
    for record in records:
        standard = canonical_region(record.region_description, aliases)
        if standard is not None and record.region_description != standard:
            edits.append(
                NormalizationEdit(
                    id=record.id,
                    field=REGION_FIELD,
                    old_value=record.region_description or "",
                    new_value=standard,
                )
            )
            record = dataclasses.replace(record, region_description=standard)
        cleaned.append(record)
    return cleaned, edits
