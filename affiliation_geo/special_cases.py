"""
Special-case rules for place names that collide with country names.

Each rule is a pure function `(state, ctx) -> state` where `state` is the
current `Resolution` (or None while unresolved). A rule that is not
triggered returns `state` unchanged. `apply_special_cases` folds them in
order, so every rule can be tested on its own.

This module also defines the per-segment state shared with the cascade in
`affiliation_geo.resolver`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import reduce
from typing import Any, Callable, Optional

from affiliation_geo import gazetteer as gz
from affiliation_geo.countries import CountryCatalog
from affiliation_geo.indexes import CityIndex, InstitutionIndex, distinct_countries
from affiliation_geo.models import ResolutionEntry, ResolutionSource
from affiliation_geo.normalize import city_key
from affiliation_geo.segments import Segment

logger = logging.getLogger(__name__)

DEFAULT_DISAMBIGUATION_WINDOW = 2

_TRAILING_WORD_PUNCT_RE = re.compile(r"[.,;]$")


# ── Segment state ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class Resolution:
    country: str
    source: ResolutionSource
    detail: Optional[str] = None

    def to_entry(self) -> ResolutionEntry:
        return ResolutionEntry(country=self.country, source=self.source, detail=self.detail)


@dataclass(frozen=True)
class TraceEvent:
    step: str
    segment: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)


TraceHook = Callable[[TraceEvent], None]


@dataclass(frozen=True)
class SegmentContext:
    segment: Segment
    countries: CountryCatalog
    institution_index: InstitutionIndex
    city_index: CityIndex
    window: int = DEFAULT_DISAMBIGUATION_WINDOW
    trace: Optional[TraceHook] = None

    @property
    def last_lower(self) -> str:
        return self.segment.last.lower()

    def context_text(self) -> str:
        """Lowercased pieces in the window just before the last piece."""
        pieces = self.segment.pieces[:-1]
        return " ".join(pieces[-self.window:] if self.window > 0 else ()).lower()

    def emit(self, step: str, message: str, **data: Any) -> None:
        logger.debug("[%s] %s %s", step, message, data)
        if self.trace is not None:
            self.trace(TraceEvent(step=step, segment=self.segment.text.strip(), message=message, data=data))


State = Optional[Resolution]
Rule = Callable[[State, SegmentContext], State]


def title_case(text: str) -> str:
    return " ".join(w[:1].upper() + w[1:] for w in text.split(" "))


def city_resolution(key: str, countries: list[str], catalog: CountryCatalog) -> Resolution:
    """Unique country -> InstitutionCity; several -> InstitutionCityConfusion on the city."""
    if len(countries) == 1:
        return Resolution(catalog.canonical(countries[0]), ResolutionSource.INSTITUTION_CITY, title_case(key))
    return Resolution(key.upper(), ResolutionSource.INSTITUTION_CITY_CONFUSION)


def _is_direct(state: State, country: Optional[str] = None) -> bool:
    if state is None or state.source is not ResolutionSource.DIRECT_MATCH:
        return False
    return country is None or state.country == country


# ── Rules ─────────────────────────────────────────────────────────────

def georgia_rule(state: State, ctx: SegmentContext) -> State:
    """Georgia the country vs. the US state, decided from nearby context."""
    if not _is_direct(state, gz.GEORGIA):
        return state

    words = ctx.segment.text.split()
    last_word = _TRAILING_WORD_PUNCT_RE.sub("", words[-1]).upper() if words else ""
    if last_word in ("USA", "U.S.A"):
        return Resolution(gz.UNITED_STATES, ResolutionSource.ALPHA3)

    context = ctx.context_text()
    if any(city in context for city in gz.GEORGIA_US_CITIES):
        ctx.emit("georgia", "US city context", context=context)
        return Resolution(gz.UNITED_STATES, ResolutionSource.US_STATE_NAME)
    if any(city in context for city in gz.GEORGIA_COUNTRY_CITIES):
        return Resolution(gz.GEORGIA, ResolutionSource.DIRECT_MATCH)

    ctx.emit("georgia", "no context city, deferring to city/institution lookup")
    return Resolution(gz.US_GEORGIA, ResolutionSource.US_GEORGIA_TO_CHECK)


def georgia_city_rule(state: State, ctx: SegmentContext) -> State:
    """Settle a deferred Georgia from the piece before the last via the city index."""
    if state is None or state.source is not ResolutionSource.US_GEORGIA_TO_CHECK:
        return state
    if not ctx.segment.second_last:
        return state

    key = city_key(ctx.segment.second_last)
    entries = ctx.city_index.get(key)
    if not entries:
        return state

    result = city_resolution(key, distinct_countries(entries), ctx.countries)
    if result.country in (gz.UNITED_STATES, gz.GEORGIA):
        ctx.emit("georgia_city", "city settles Georgia", city=key, country=result.country)
        return result
    return state


def mexico_rule(state: State, ctx: SegmentContext) -> State:
    if _is_direct(state, gz.MEXICO) and gz.NEW_MEXICO in ctx.last_lower:
        return Resolution(gz.UNITED_STATES, ResolutionSource.US_STATE_NAME)
    return state


def ireland_rule(state: State, ctx: SegmentContext) -> State:
    if _is_direct(state, gz.IRELAND) and gz.NORTHERN_IRELAND in ctx.last_lower:
        return Resolution(gz.UNITED_KINGDOM, ResolutionSource.DIRECT_MATCH)
    return state


def samoa_rule(state: State, ctx: SegmentContext) -> State:
    if _is_direct(state, gz.SAMOA) and gz.AMERICAN_SAMOA_PHRASE in ctx.last_lower:
        return Resolution(gz.AMERICAN_SAMOA, ResolutionSource.DIRECT_MATCH)
    return state


def _longest_alias_rule(aliases: tuple[tuple[str, str], ...]) -> Rule:
    ordered = sorted(aliases, key=lambda a: len(a[0]), reverse=True)

    def rule(state: State, ctx: SegmentContext) -> State:
        if not _is_direct(state):
            return state
        text = ctx.last_lower
        for alias, country in ordered:
            if alias in text:
                return Resolution(country, state.source)
        return state

    return rule


korea_rule = _longest_alias_rule(gz.KOREA_ALIASES)
korea_rule.__name__ = "korea_rule"
korea_rule.__doc__ = "Republic of Korea vs. DPRK by the longest alias found."

congo_rule = _longest_alias_rule(gz.CONGO_ALIASES)
congo_rule.__name__ = "congo_rule"
congo_rule.__doc__ = "Congo-Brazzaville vs. Congo-Kinshasa by the longest alias found."


def china_rule(state: State, ctx: SegmentContext) -> State:
    if not _is_direct(state, gz.CHINA):
        return state
    if gz.PRC_PHRASE in ctx.last_lower:
        return Resolution(gz.CHINA, ResolutionSource.DIRECT_MATCH)
    if gz.ROC_PHRASE in ctx.last_lower:
        return Resolution(gz.TAIWAN, ResolutionSource.DIRECT_MATCH)
    return state


SPECIAL_CASE_RULES: tuple[Rule, ...] = (
    georgia_rule,
    georgia_city_rule,
    mexico_rule,
    ireland_rule,
    samoa_rule,
    korea_rule,
    china_rule,
    congo_rule,
)


def apply_special_cases(state: State, ctx: SegmentContext, rules: tuple[Rule, ...] = SPECIAL_CASE_RULES) -> State:
    result = reduce(lambda acc, rule: rule(acc, ctx), rules, state)
    if result != state:
        ctx.emit("special_case", "override", before=state, after=result)
    return result
