"""
FastAPI service exposing the affiliation country resolver.

Endpoints:
  POST /resolve        - Resolve one affiliation string
  POST /resolve/batch  - Resolve many lines and summarise distinct countries
  GET  /health         - Reference data status
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from affiliation_geo.config import get_settings
from affiliation_geo.indexes import ReferenceDataError
from affiliation_geo.models import (
    BatchReport,
    BatchRequest,
    HealthResponse,
    ResolveRequest,
    ResolveResponse,
)
from affiliation_geo.pipeline import log_trace_hook, resolve_lines, resolve_one
from affiliation_geo.reference import ReferenceData, load_reference_data

logger = logging.getLogger(__name__)


def create_app(reference: Optional[ReferenceData] = None) -> FastAPI:
    """Build the app; reference data is loaded at startup unless injected."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.reference is None:
            logger.info("Loading reference data...")
            try:
                app.state.reference = load_reference_data()
            except ReferenceDataError as e:
                logger.error("Reference data could not be loaded: %s", e)
        yield
        logger.info("API server shut down.")

    app = FastAPI(
        title="Affiliation Geo API",
        description="Resolve countries of origin from bibliographic affiliation strings",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.reference = reference

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Helpers ───────────────────────────────────────────────────────

    def _reference(request: Request) -> ReferenceData:
        ref = request.app.state.reference
        if ref is None:
            raise HTTPException(503, "Reference data not loaded")
        return ref

    def _resolver_options() -> dict:
        settings = get_settings().resolver
        return {
            "trace": log_trace_hook if settings.trace_city_matches else None,
            "window": settings.disambiguation_window,
        }

    # ── Endpoints ─────────────────────────────────────────────────────

    @app.post("/resolve", response_model=ResolveResponse)
    def resolve_affiliation(body: ResolveRequest, request: Request):
        """Resolve a single affiliation string into (country, source) entries."""
        entries = resolve_one(body.affiliation, _reference(request), **_resolver_options())
        return ResolveResponse(affiliation=body.affiliation, entries=entries)

    @app.post("/resolve/batch", response_model=BatchReport)
    def resolve_batch(body: BatchRequest, request: Request):
        """
        Resolve one affiliation per line.
        Empty lines are skipped; `countries` excludes confusion, unresolved,
        contribution-note and filtered entries.
        """
        max_lines = get_settings().api.max_batch_lines
        if len(body.lines) > max_lines:
            raise HTTPException(422, f"at most {max_lines} lines per batch")
        return resolve_lines(body.lines, _reference(request), **_resolver_options())

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        ref = request.app.state.reference
        if ref is None:
            return HealthResponse(status="error")
        summary = ref.summary()
        return HealthResponse(
            status="ok",
            countries=summary["countries"],
            institutions=summary["institutions"],
            institution_keys=summary["institution_keys"],
            city_keys=summary["city_keys"],
        )

    return app


app = create_app()
