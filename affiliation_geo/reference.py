"""
Reference data loading.
Reads the country and institution lists from JSON (array) or JSONL files,
validates every row with Pydantic, and builds an immutable snapshot holding
the country catalog and both indexes.

Any malformed row is a hard failure (ReferenceDataError naming the file and
row); the resolver relies on well-formed reference data.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, ValidationError

from affiliation_geo.config import get_settings
from affiliation_geo.countries import CountryCatalog
from affiliation_geo.indexes import CityIndex, InstitutionIndex, ReferenceDataError, build_indexes
from affiliation_geo.models import CountryRecord, InstitutionRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferenceData:
    """One immutable reference snapshot, safe to share across threads."""
    countries: CountryCatalog
    institutions: tuple[InstitutionRecord, ...]
    institution_index: InstitutionIndex
    city_index: CityIndex

    @classmethod
    def build(
        cls,
        countries: Iterable[CountryRecord | dict],
        institutions: Iterable[InstitutionRecord | dict],
    ) -> "ReferenceData":
        country_records = _validate_rows(countries, CountryRecord, "countries")
        institution_records = _validate_rows(institutions, InstitutionRecord, "institutions")
        if not country_records:
            raise ReferenceDataError("country list is empty")

        institution_index, city_index = build_indexes(institution_records)
        return cls(
            countries=CountryCatalog(country_records),
            institutions=tuple(institution_records),
            institution_index=institution_index,
            city_index=city_index,
        )

    def summary(self) -> dict:
        return {
            "countries": len(self.countries),
            "institutions": len(self.institutions),
            "institution_keys": len(self.institution_index),
            "city_keys": len(self.city_index),
            "multi_country_institution_keys": len(self.institution_index.multi_country_keys()),
            "multi_country_city_keys": len(self.city_index.multi_country_keys()),
        }


def _validate_rows(rows: Iterable, model: type[BaseModel], label: str) -> list:
    out = []
    for i, row in enumerate(rows):
        if isinstance(row, model):
            out.append(row)
            continue
        try:
            out.append(model.model_validate(row))
        except ValidationError as e:
            raise ReferenceDataError(f"{label} row {i} is malformed: {e}") from e
    return out


def read_rows(path: Path) -> list[dict]:
    """Read a JSON array file or a JSONL file (one object per line)."""
    if not path.exists():
        raise ReferenceDataError(f"Missing reference file: {path}")

    text = path.read_text(encoding="utf-8")
    if path.suffix == ".jsonl":
        rows: list[dict] = []
        for lineno, line in enumerate(text.splitlines(), 1):
            if not line.strip():
                continue
            try:
                rows.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise ReferenceDataError(f"{path}:{lineno}: invalid JSON: {e}") from e
        return rows

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ReferenceDataError(f"{path}: invalid JSON: {e}") from e
    if not isinstance(data, list):
        raise ReferenceDataError(f"{path}: expected a JSON array, got {type(data).__name__}")
    return data


def _load_file(path: Path, model: type[BaseModel]) -> list:
    return _validate_rows(read_rows(path), model, str(path))


def load_reference_data(
    countries_path: Optional[str | Path] = None,
    institutions_path: Optional[str | Path] = None,
) -> ReferenceData:
    """Load and index the reference lists (paths default to the configured ones)."""
    settings = get_settings().reference
    cpath = Path(countries_path or settings.countries_path)
    ipath = Path(institutions_path or settings.institutions_path)

    countries = _load_file(cpath, CountryRecord)
    institutions = _load_file(ipath, InstitutionRecord)
    reference = ReferenceData.build(countries, institutions)

    logger.info(
        "Loaded reference data: %d countries from %s, %d institutions from %s",
        len(countries), cpath, len(institutions), ipath,
    )
    collisions = reference.institution_index.multi_country_keys()
    if collisions:
        logger.info("%d institution keys span several countries (e.g. %s)", len(collisions), collisions[:3])
    return reference
