"""
Reference records, resolution output and API payloads.
Validation and serialization only; nothing here reads files or the network.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field, field_validator


# ── Enums ──────────────────────────────────────────────────────────────

class ResolutionSource(str, Enum):
    DIRECT_MATCH = "DirectMatch"
    ALPHA3 = "Alpha3"
    US_STATE_NAME = "USStateName"
    US_STATE_ABBR = "USStateAbbr"
    INSTITUTION_NAME = "InstitutionName"
    INSTITUTION_CITY = "InstitutionCity"
    INSTITUTION_NAME_CONFUSION = "InstitutionNameConfusion"
    INSTITUTION_CITY_CONFUSION = "InstitutionCityConfusion"
    US_GEORGIA_TO_CHECK = "USGeorgiaToCheck"
    CONTRIBUTION_NOTE = "ContributionNote"
    FILTERED_STRING = "FilteredString"
    UNRESOLVED = "UNRESOLVED"


# Sources that never count as a resolved country when summarising results
NON_COUNTRY_SOURCES = frozenset({
    ResolutionSource.UNRESOLVED,
    ResolutionSource.INSTITUTION_NAME_CONFUSION,
    ResolutionSource.INSTITUTION_CITY_CONFUSION,
    ResolutionSource.US_GEORGIA_TO_CHECK,
    ResolutionSource.CONTRIBUTION_NOTE,
    ResolutionSource.FILTERED_STRING,
})

CONFUSION_SOURCES = frozenset({
    ResolutionSource.INSTITUTION_NAME_CONFUSION,
    ResolutionSource.INSTITUTION_CITY_CONFUSION,
})

_ALPHA3_RE = re.compile(r"^[A-Z]{3}$")


def _clean_aliases(v):
    if v is None:
        return ()
    if isinstance(v, str):
        v = [v]
    return tuple(a.strip() for a in v if isinstance(a, str) and a.strip())


# ── Reference records ─────────────────────────────────────────────────

class CountryRecord(BaseModel):
    """A country as supplied by the reference loader."""
    name: str = Field(..., min_length=1)
    aliases: tuple[str, ...] = ()
    alpha3: Optional[str] = None

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("aliases", mode="before")
    @classmethod
    def drop_empty_aliases(cls, v):
        return _clean_aliases(v)

    @field_validator("alpha3", mode="before")
    @classmethod
    def check_alpha3(cls, v):
        """alpha3 is optional, but when present it must be an ISO 3166 code."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        if not isinstance(v, str) or not _ALPHA3_RE.match(v.strip()):
            raise ValueError(f"alpha3 must be three uppercase letters, got {v!r}")
        return v.strip()


class InstitutionRecord(BaseModel):
    """An institution with its location, as supplied by the reference loader."""
    name: str = Field(..., min_length=1)
    aliases: tuple[str, ...] = ()
    city: Optional[str] = None
    country: str = Field(..., min_length=1)

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("name", "country", mode="before")
    @classmethod
    def strip_required(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("aliases", mode="before")
    @classmethod
    def drop_empty_aliases(cls, v):
        return _clean_aliases(v)

    @field_validator("city", mode="before")
    @classmethod
    def blank_city_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v


# ── Resolution output ─────────────────────────────────────────────────

class ResolutionEntry(BaseModel):
    """One resolved (country, source) pair for one affiliation segment."""
    country: str = ""
    source: ResolutionSource
    # Matched institution or city display name for InstitutionName/InstitutionCity
    detail: Optional[str] = None

    model_config = {"frozen": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def label(self) -> str:
        """Display tag, e.g. 'Tokyo - InstitutionCity'."""
        if self.detail:
            return f"{self.detail} - {self.source.value}"
        return self.source.value

    @property
    def is_country(self) -> bool:
        return bool(self.country.strip()) and self.source not in NON_COUNTRY_SOURCES


# ── API request / response models ─────────────────────────────────────

class ResolveRequest(BaseModel):
    affiliation: str = Field(..., max_length=10_000)


class ResolveResponse(BaseModel):
    affiliation: str
    entries: list[ResolutionEntry]


class BatchRequest(BaseModel):
    lines: list[str] = Field(default_factory=list)


class LineResult(BaseModel):
    affiliation: str
    entries: list[ResolutionEntry]


class BatchReport(BaseModel):
    total_lines: int = 0
    results: list[LineResult] = Field(default_factory=list)
    countries: list[str] = Field(default_factory=list)
    source_counts: dict[str, int] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    status: str = "ok"
    countries: int = 0
    institutions: int = 0
    institution_keys: int = 0
    city_keys: int = 0
