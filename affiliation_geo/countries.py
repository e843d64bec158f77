"""
Country list wrapper: direct-name matching, alpha-3 matching and alias
canonicalization.

Matching is a full scan in list order (first match wins), so the order of
the reference country list is significant. Patterns are compiled once per
catalog; build one catalog per reference snapshot and reuse it.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Sequence

from pydantic import ValidationError

from affiliation_geo.indexes import ReferenceDataError
from affiliation_geo.models import CountryRecord
from affiliation_geo.normalize import normalize_text

_TRAILING_SEPARATOR_RE = re.compile(r"[.,;:]$")


def direct_form(text: str) -> str:
    """Lowercase, then normalize (the form both patterns and pieces are compared in)."""
    return normalize_text(text.lower())


def strip_trailing_separator(piece: str) -> str:
    return _TRAILING_SEPARATOR_RE.sub("", piece.strip())


def _coerce_countries(countries: Iterable) -> list[CountryRecord]:
    out: list[CountryRecord] = []
    for i, c in enumerate(countries):
        if isinstance(c, CountryRecord):
            out.append(c)
            continue
        try:
            out.append(CountryRecord.model_validate(c))
        except ValidationError as e:
            raise ReferenceDataError(f"country #{i} is malformed: {e}") from e
    return out


class CountryCatalog:
    def __init__(self, countries: Iterable[CountryRecord | dict]):
        self.records: tuple[CountryRecord, ...] = tuple(_coerce_countries(countries))

        self._canonical: dict[str, str] = {}
        self._name_patterns: list[tuple[re.Pattern, str]] = []
        self._alpha3_patterns: list[tuple[re.Pattern, str]] = []
        for c in self.records:
            self._canonical.setdefault(c.name, c.name)
            for alias in c.aliases:
                self._canonical.setdefault(alias, c.name)
            for pattern in (c.name, *c.aliases):
                form = direct_form(pattern)
                if form:
                    rx = re.compile(r"(?<!\w)" + re.escape(form) + r"(?!\w)\s*$")
                    self._name_patterns.append((rx, c.name))
            if c.alpha3:
                rx = re.compile(r"\b" + re.escape(c.alpha3) + r"\b[.,;:]?$")
                self._alpha3_patterns.append((rx, c.name))

        self.names = frozenset(c.name for c in self.records)

    @classmethod
    def coerce(cls, countries: "CountryCatalog | Sequence[CountryRecord | dict]") -> "CountryCatalog":
        if isinstance(countries, CountryCatalog):
            return countries
        if countries is None or isinstance(countries, (str, bytes, dict)) or not isinstance(countries, Iterable):
            raise ReferenceDataError("country list must be a sequence of {name, aliases?, alpha3?} rows")
        return cls(countries)

    def __len__(self) -> int:
        return len(self.records)

    def canonical(self, name: str) -> str:
        """Map a canonical name or exact alias to the canonical name; unknown names pass through."""
        return self._canonical.get(name, name)

    def direct_match(self, piece: str) -> Optional[str]:
        """Country whose name/alias ends `piece` as a whole word."""
        if not piece:
            return None
        text = direct_form(piece)
        for rx, name in self._name_patterns:
            if rx.search(text):
                return name
        return None

    def alpha3_match(self, piece: str) -> Optional[str]:
        """Country whose uppercase alpha-3 code ends `piece` (case-sensitive)."""
        if not piece:
            return None
        for rx, name in self._alpha3_patterns:
            if rx.search(piece):
                return name
        return None
