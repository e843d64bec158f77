"""
Country resolution engine for free-text affiliation strings.

Pipeline per call:
  raw -> normalize_text -> strip_non_affiliation_content -> split_segments
      -> cascade per segment -> aggregate -> fallback classifier (if nothing resolved)

Cascade per segment (a later step only runs while the segment is
unresolved, except the special cases and the two city checks, which may
override an earlier result under their own conditions):
  A  direct country name / alias at the end of the last piece, else alpha-3
  B  special cases (Georgia, Mexico, Ireland, Samoa, Korea, China, Congo)
  C  US state name
  D  US state abbreviation
  E  institution lookup (exact piece, joined pieces, whole segment)
  F  institution-city double-check
  G  city inference
  H  Ontario / VIC overrides

The engine is pure: no I/O, no caching, same inputs give the same output.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, Optional, Sequence

from affiliation_geo import gazetteer as gz
from affiliation_geo.countries import CountryCatalog, strip_trailing_separator
from affiliation_geo.indexes import (
    CityIndex,
    InstitutionIndex,
    ReferenceDataError,
    distinct_countries,
)
from affiliation_geo.models import CountryRecord, InstitutionRecord, ResolutionEntry, ResolutionSource
from affiliation_geo.normalize import city_key, clean_affiliation, normalize_key
from affiliation_geo.segments import Segment, split_pieces, split_segments
from affiliation_geo.special_cases import (
    DEFAULT_DISAMBIGUATION_WINDOW,
    Resolution,
    SegmentContext,
    State,
    TraceHook,
    apply_special_cases,
    city_resolution,
    title_case,
)

logger = logging.getLogger(__name__)

_BOTH_ALL_IN_RE = re.compile(r"- (both|all)\s+in\s+(.+)$", re.IGNORECASE)
_STATE_WORD_PUNCT_RE = re.compile(r"[.,;]")
_ABBR_RE = re.compile(r"^[A-Z]{2}$")
_HAYSTACK_PUNCT_RE = re.compile(r"[.,;]")


# ── A: direct match / alpha-3 ─────────────────────────────────────────

def match_country_at_end(segment: Segment, countries: CountryCatalog) -> State:
    cleaned = strip_trailing_separator(segment.last)
    if not cleaned:
        return None

    name = countries.direct_match(cleaned)
    if name is not None:
        # Attribution only: a bare "USA" is an alpha-3 code
        if name == gz.UNITED_STATES and cleaned.upper() in ("USA", "U.S.A"):
            return Resolution(name, ResolutionSource.ALPHA3)
        return Resolution(name, ResolutionSource.DIRECT_MATCH)

    name = countries.alpha3_match(cleaned)
    if name is not None:
        return Resolution(name, ResolutionSource.ALPHA3)
    return None


# ── C: US state name ──────────────────────────────────────────────────

def is_us_state(text: str) -> bool:
    """True when the trailing 1-3 words of `text` name a US state."""
    if text.lower().strip() in gz.DISTRICT_OF_COLUMBIA_FORMS:
        return True

    words = [w for w in (_STATE_WORD_PUNCT_RE.sub("", w).strip() for w in text.split()) if w]
    for n in (3, 2, 1):
        if len(words) >= n and title_case(" ".join(words[-n:]).lower()) in gz.US_STATES:
            return True
    return False


def infer_us_from_state_name(segment: Segment, ctx: Optional[SegmentContext] = None) -> bool:
    clause = _BOTH_ALL_IN_RE.search(segment.text)
    candidate = clause.group(2).strip() if clause else segment.last
    if not candidate:
        return False
    if is_us_state(candidate):
        return True
    if ctx is not None and gz.is_institution_shaped(candidate):
        ctx.emit("us_state_name", "institution-shaped, not a state", text=candidate)
    return False


# ── D: US state abbreviation ──────────────────────────────────────────

def infer_us_from_state_abbreviation(segment: Segment) -> bool:
    words = _STATE_WORD_PUNCT_RE.sub("", segment.last).split()
    if not words:
        return False

    last = words[-1]
    if not _ABBR_RE.match(last):
        return False
    # "... MA and NY" style lists are rejected outright
    if len(words) > 1 and words[-2] in gz.ABBREVIATION_CONJUNCTIONS:
        return False
    return last in gz.US_STATE_ABBREVIATIONS


# ── E: institution lookup ─────────────────────────────────────────────

def _own_keys(record: InstitutionRecord) -> set[str]:
    return {normalize_key(v) for v in (record.name, *record.aliases)}


def _candidate_passes(segment: Segment, index: InstitutionIndex) -> Iterator[tuple[str, str, tuple[InstitutionRecord, ...]]]:
    """Yield (pass, key, candidates) for each lookup pass that finds anything."""
    keys = [normalize_key(p) for p in segment.pieces]

    for key in reversed(keys):
        exact = tuple(r for r in index.get(key) if key in _own_keys(r))
        if exact:
            yield "exact_piece", key, exact
            break

    joined: tuple[str, tuple[InstitutionRecord, ...]] | None = None
    for n in range(min(2, len(keys)), 0, -1):
        key = ", ".join(keys[-n:])
        bucket = index.get(key)
        if bucket:
            joined = (key, bucket)
            break
    if joined is None and len(keys) >= 2:
        bucket = index.get(keys[-2])
        if bucket:
            joined = (keys[-2], bucket)
    if joined is not None:
        yield "joined_pieces", joined[0], joined[1]

    key = normalize_key(segment.text)
    bucket = index.get(key)
    if bucket:
        yield "full_segment", key, bucket


def disambiguate_institutions(
    candidates: Sequence[InstitutionRecord],
    matched_key: str,
    haystack: str,
    countries: CountryCatalog,
) -> Resolution:
    """Pick one institution's country, or report confusion on the matched key."""
    if len(candidates) == 1 or len(distinct_countries(candidates)) == 1:
        first = candidates[0]
        return Resolution(countries.canonical(first.country), ResolutionSource.INSTITUTION_NAME, first.name)

    for inst in candidates:
        if inst.city and normalize_key(inst.city) in haystack:
            return Resolution(countries.canonical(inst.country), ResolutionSource.INSTITUTION_NAME, inst.name)

    return Resolution(matched_key.upper(), ResolutionSource.INSTITUTION_NAME_CONFUSION)


def infer_country_from_institution(ctx: SegmentContext) -> State:
    """
    Three passes over the institution index; the first pass that resolves
    wins. A pass that only yields a confusion lets the next one try, and
    the last confusion stands if nothing resolves.
    """
    haystack = _HAYSTACK_PUNCT_RE.sub(" ", normalize_key(ctx.segment.text))
    confusion: State = None
    for pass_name, key, candidates in _candidate_passes(ctx.segment, ctx.institution_index):
        result = disambiguate_institutions(candidates, key, haystack, ctx.countries)
        ctx.emit("institution", pass_name, key=key, candidates=len(candidates), result=result)
        if result.source is ResolutionSource.INSTITUTION_NAME:
            return result
        confusion = result
    return confusion


# ── F / G: city checks ────────────────────────────────────────────────

def double_check_city(state: Resolution, ctx: SegmentContext) -> Resolution:
    """An unambiguous trailing city outweighs an institution-name match."""
    key = city_key(ctx.segment.last)
    countries = distinct_countries(ctx.city_index.get(key))
    if len(countries) != 1:
        return state

    result = city_resolution(key, countries, ctx.countries)
    if result.country != state.country:
        ctx.emit("city_double_check", "trailing city overrides institution", city=key, before=state, after=result)
        return result
    return state


def infer_country_from_city(ctx: SegmentContext) -> State:
    for piece in (ctx.segment.last, ctx.segment.second_last):
        if not piece:
            continue
        key = city_key(piece)
        entries = ctx.city_index.get(key)
        if entries:
            result = city_resolution(key, distinct_countries(entries), ctx.countries)
            ctx.emit("city", "matched city", city=key, result=result)
            return result
    return None


# ── H: place-name overrides ───────────────────────────────────────────

def apply_place_name_overrides(state: State, ctx: SegmentContext) -> State:
    if len(ctx.segment.pieces) < 2:
        return state

    last = city_key(ctx.segment.last)
    previous = city_key(ctx.segment.second_last)
    if last == gz.ONTARIO:
        if previous in gz.ONTARIO_CITIES:
            return Resolution(ctx.countries.canonical(gz.CANADA), ResolutionSource.INSTITUTION_CITY)
        return Resolution(gz.ONTARIO.upper(), ResolutionSource.INSTITUTION_CITY_CONFUSION)
    if last == gz.VICTORIA_ABBR:
        if previous in gz.VICTORIA_CITIES:
            return Resolution(ctx.countries.canonical(gz.AUSTRALIA), ResolutionSource.INSTITUTION_CITY)
        return Resolution(gz.VICTORIA_ABBR.upper(), ResolutionSource.INSTITUTION_CITY_CONFUSION)
    return state


# ── Segment cascade ───────────────────────────────────────────────────

def _is_pending(state: State) -> bool:
    return state is None or state.source is ResolutionSource.US_GEORGIA_TO_CHECK


def resolve_segment(ctx: SegmentContext) -> Optional[ResolutionEntry]:
    segment = ctx.segment
    if segment.is_empty:
        return None

    state = match_country_at_end(segment, ctx.countries)
    state = apply_special_cases(state, ctx)

    if state is None and infer_us_from_state_name(segment, ctx):
        state = Resolution(gz.UNITED_STATES, ResolutionSource.US_STATE_NAME)

    if state is None and infer_us_from_state_abbreviation(segment):
        state = Resolution(gz.UNITED_STATES, ResolutionSource.US_STATE_ABBR)

    if _is_pending(state):
        # Second chance for a deferred Georgia
        state = infer_country_from_institution(ctx) or state

    if state is not None and state.source is ResolutionSource.INSTITUTION_NAME:
        state = double_check_city(state, ctx)

    if _is_pending(state) or state.source is ResolutionSource.INSTITUTION_NAME_CONFUSION:
        state = infer_country_from_city(ctx) or state

    state = apply_place_name_overrides(state, ctx)

    if _is_pending(state):
        return None
    return state.to_entry()


# ── Fallback classifier ───────────────────────────────────────────────

def classify_unresolved(text: str) -> ResolutionEntry:
    """Classify text that produced no country: filtered, contribution note, or unresolved."""
    pieces = split_pieces(text or "")
    if not pieces or not any(s.pieces for s in split_segments(text)):
        return ResolutionEntry(country="", source=ResolutionSource.FILTERED_STRING)

    last = pieces[-1]
    if gz.CONTRIBUTION_NOTE_RE.search(last):
        return ResolutionEntry(country="", source=ResolutionSource.CONTRIBUTION_NOTE)

    return ResolutionEntry(country=" ".join(last.split()).upper(), source=ResolutionSource.UNRESOLVED)


# ── Entry point ───────────────────────────────────────────────────────

def _check_indexes(institution_index, city_index) -> None:
    if not isinstance(institution_index, InstitutionIndex):
        raise ReferenceDataError(
            f"institution_index must be an InstitutionIndex, got {type(institution_index).__name__}"
        )
    if not isinstance(city_index, CityIndex):
        raise ReferenceDataError(f"city_index must be a CityIndex, got {type(city_index).__name__}")


def resolve(
    affiliation,
    country_list: CountryCatalog | Sequence[CountryRecord | dict],
    institution_index: InstitutionIndex,
    city_index: CityIndex,
    *,
    trace: Optional[TraceHook] = None,
    window: int = DEFAULT_DISAMBIGUATION_WINDOW,
) -> list[ResolutionEntry]:
    """
    Resolve one affiliation string to an ordered list of entries.

    One entry per resolved segment, in segment order. When at least one
    segment resolves, each other non-empty segment is classified in place
    (contribution note or unresolved). When none resolves, a single entry
    classifies the whole cleaned affiliation. Never returns an empty list.

    Raises ReferenceDataError when the reference arguments are not the
    record/index types built by this package.
    """
    countries = CountryCatalog.coerce(country_list)
    _check_indexes(institution_index, city_index)

    cleaned = clean_affiliation(affiliation)
    segments = split_segments(cleaned)

    outcomes: list[tuple[Segment, Optional[ResolutionEntry]]] = []
    for segment in segments:
        ctx = SegmentContext(
            segment=segment,
            countries=countries,
            institution_index=institution_index,
            city_index=city_index,
            window=window,
            trace=trace,
        )
        outcomes.append((segment, resolve_segment(ctx)))

    if not any(entry is not None for _, entry in outcomes):
        return [classify_unresolved(cleaned)]

    entries: list[ResolutionEntry] = []
    for segment, entry in outcomes:
        if entry is not None:
            entries.append(entry)
        elif not segment.is_empty:
            entries.append(classify_unresolved(segment.text))
    return entries
