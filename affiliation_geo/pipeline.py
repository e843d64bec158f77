"""
Batch orchestration over many affiliation lines.
Resolves each non-empty line against one reference snapshot and collects
the distinct resolved countries plus per-source counts.
Called by the CLI `batch` command and the /resolve/batch endpoint.
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from typing import Iterable, Optional

from affiliation_geo.models import BatchReport, LineResult, ResolutionEntry
from affiliation_geo.reference import ReferenceData
from affiliation_geo.resolver import resolve
from affiliation_geo.special_cases import DEFAULT_DISAMBIGUATION_WINDOW, TraceEvent, TraceHook

logger = logging.getLogger(__name__)


def log_trace_hook(event: TraceEvent) -> None:
    """Trace hook that forwards engine events to the log at INFO."""
    logger.info("[%s] %s | %s | %s", event.step, event.segment, event.message, event.data)


def resolve_one(
    affiliation: str,
    reference: ReferenceData,
    *,
    trace: Optional[TraceHook] = None,
    window: int = DEFAULT_DISAMBIGUATION_WINDOW,
) -> list[ResolutionEntry]:
    return resolve(
        affiliation,
        reference.countries,
        reference.institution_index,
        reference.city_index,
        trace=trace,
        window=window,
    )


def distinct_resolved_countries(entries: Iterable[ResolutionEntry]) -> list[str]:
    """Countries in first-seen order, skipping confusion/unresolved/note entries and empty countries."""
    return list(dict.fromkeys(e.country for e in entries if e.is_country))


def resolve_lines(
    lines: Iterable[str],
    reference: ReferenceData,
    *,
    trace: Optional[TraceHook] = None,
    window: int = DEFAULT_DISAMBIGUATION_WINDOW,
) -> BatchReport:
    """
    Resolve every non-empty line independently.
    Line order is preserved in `results`; `countries` lists each resolved
    country once, in the order it was first seen.
    """
    start = time.monotonic()
    results: list[LineResult] = []
    sources: Counter[str] = Counter()

    for line in lines:
        affiliation = line.rstrip("\r\n")
        if not affiliation.strip():
            continue
        entries = resolve_one(affiliation, reference, trace=trace, window=window)
        results.append(LineResult(affiliation=affiliation, entries=entries))
        sources.update(e.source.value for e in entries)

    countries = distinct_resolved_countries(e for r in results for e in r.entries)
    logger.info(
        "Resolved %d lines -> %d distinct countries in %.3fs",
        len(results), len(countries), time.monotonic() - start,
    )
    return BatchReport(
        total_lines=len(results),
        results=results,
        countries=countries,
        source_counts=dict(sources),
    )


def format_report(report: BatchReport) -> str:
    """Plain-text rendering: one line per affiliation, then the country summary."""
    out = [f"=== PROCESSED {report.total_lines} AFFILIATION(S) ==="]
    for r in report.results:
        rendered = ", ".join(f"{e.country} ({e.label})" for e in r.entries)
        out.append(f"{r.affiliation} → {rendered}")

    out.append("")
    out.append("=== COUNTRIES ===")
    if report.countries:
        out.extend(f"• {c}" for c in report.countries)
    else:
        out.append("No countries resolved")
    return "\n".join(out)
