"""
Institution-name and city indexes over the reference institution list.

Both are normalized-key multi-maps built once and read-only afterwards:
buckets are tuples behind a MappingProxyType, so an index can be shared
across threads without locking. Keys are never deduplicated across
countries; a key holding records from several countries is what later
produces the "confusion" outcomes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Generic, Iterable, Iterator, Mapping, TypeVar

from pydantic import ValidationError

from affiliation_geo.models import InstitutionRecord
from affiliation_geo.normalize import city_key, normalize_key

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReferenceDataError(ValueError):
    """Reference data (country or institution lists) is malformed."""


@dataclass(frozen=True)
class CityEntry:
    country: str
    institution_name: str


class _KeyedIndex(Generic[T]):
    """Immutable mapping of normalized key -> ordered tuple of values."""

    def __init__(self, buckets: Mapping[str, Iterable[T]]):
        self._buckets: Mapping[str, tuple[T, ...]] = MappingProxyType(
            {k: tuple(v) for k, v in buckets.items()}
        )

    def _key(self, text: str) -> str:
        raise NotImplementedError

    def get(self, key: str) -> tuple[T, ...]:
        """Bucket for an already-normalized key (empty tuple when absent)."""
        return self._buckets.get(key, ())

    def lookup(self, text: str) -> tuple[T, ...]:
        """Normalize `text` the same way keys were built, then fetch."""
        return self.get(self._key(text))

    def __contains__(self, key: object) -> bool:
        return key in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)

    def __iter__(self) -> Iterator[str]:
        return iter(self._buckets)

    def keys(self):
        return self._buckets.keys()

    def items(self):
        return self._buckets.items()

    @property
    def entry_count(self) -> int:
        return sum(len(v) for v in self._buckets.values())


class InstitutionIndex(_KeyedIndex[InstitutionRecord]):
    def _key(self, text: str) -> str:
        return normalize_key(text)

    def multi_country_keys(self) -> list[str]:
        """Keys whose records belong to more than one country."""
        return [k for k, recs in self._buckets.items() if len({r.country for r in recs}) > 1]


class CityIndex(_KeyedIndex[CityEntry]):
    def _key(self, text: str) -> str:
        return city_key(text)

    def multi_country_keys(self) -> list[str]:
        return [k for k, entries in self._buckets.items() if len({e.country for e in entries}) > 1]


def distinct_countries(entries: Iterable[CityEntry | InstitutionRecord]) -> list[str]:
    """Distinct countries in first-seen order."""
    return list(dict.fromkeys(e.country for e in entries))


def _coerce_institutions(institutions: Iterable) -> list[InstitutionRecord]:
    out: list[InstitutionRecord] = []
    for i, inst in enumerate(institutions):
        if isinstance(inst, InstitutionRecord):
            out.append(inst)
            continue
        try:
            out.append(InstitutionRecord.model_validate(inst))
        except ValidationError as e:
            raise ReferenceDataError(f"institution #{i} is malformed: {e}") from e
    return out


def build_institution_index(institutions: Iterable) -> InstitutionIndex:
    """Index every institution under its normalized name and each alias."""
    buckets: dict[str, list[InstitutionRecord]] = {}
    for inst in _coerce_institutions(institutions):
        for variant in (inst.name, *inst.aliases):
            key = normalize_key(variant)
            if key:
                buckets.setdefault(key, []).append(inst)
    return InstitutionIndex(buckets)


def build_city_index(institutions: Iterable) -> CityIndex:
    """Index {country, institution} under the normalized city of each institution."""
    buckets: dict[str, list[CityEntry]] = {}
    for inst in _coerce_institutions(institutions):
        if not inst.city or not inst.country:
            continue
        key = city_key(inst.city)
        if key:
            buckets.setdefault(key, []).append(CityEntry(country=inst.country, institution_name=inst.name))
    return CityIndex(buckets)


def build_indexes(institutions: Iterable) -> tuple[InstitutionIndex, CityIndex]:
    records = _coerce_institutions(institutions)
    institution_index = build_institution_index(records)
    city_index = build_city_index(records)
    logger.info(
        "Built indexes: %d institution keys (%d records), %d city keys",
        len(institution_index), institution_index.entry_count, len(city_index),
    )
    return institution_index, city_index
