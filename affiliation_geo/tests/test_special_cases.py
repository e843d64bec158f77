"""
Tests for the special-case rules.
Each rule is exercised on its own with a hand-built segment context.
"""

from __future__ import annotations

import pytest

from affiliation_geo.models import ResolutionSource as S
from affiliation_geo.normalize import clean_affiliation
from affiliation_geo.segments import split_segments
from affiliation_geo.special_cases import (
    Resolution,
    SegmentContext,
    apply_special_cases,
    china_rule,
    congo_rule,
    georgia_city_rule,
    georgia_rule,
    ireland_rule,
    korea_rule,
    mexico_rule,
    samoa_rule,
)


def make_ctx(reference, text: str, window: int = 2, trace=None) -> SegmentContext:
    segment = split_segments(clean_affiliation(text))[0]
    return SegmentContext(
        segment=segment,
        countries=reference.countries,
        institution_index=reference.institution_index,
        city_index=reference.city_index,
        window=window,
        trace=trace,
    )


def direct(country: str) -> Resolution:
    return Resolution(country, S.DIRECT_MATCH)


class TestGeorgiaRule:
    def test_us_city_context(self, reference):
        ctx = make_ctx(reference, "Emory University School of Medicine, Atlanta, Georgia")
        assert georgia_rule(direct("Georgia"), ctx) == Resolution("United States", S.US_STATE_NAME)

    def test_country_city_context(self, reference):
        ctx = make_ctx(reference, "Tbilisi State Medical University, Tbilisi, Georgia")
        assert georgia_rule(direct("Georgia"), ctx) == direct("Georgia")

    def test_trailing_usa(self, reference):
        ctx = make_ctx(reference, "Medical College, Augusta, Georgia USA")
        assert georgia_rule(direct("Georgia"), ctx) == Resolution("United States", S.ALPHA3)

    def test_no_context_defers(self, reference):
        ctx = make_ctx(reference, "Research Park, Savannah, Georgia")
        assert georgia_rule(direct("Georgia"), ctx) == Resolution("US-Georgia", S.US_GEORGIA_TO_CHECK)

    def test_window_limits_context(self, reference):
        text = "Emory University, Atlanta, Dept of Surgery, Vascular Lab, Georgia"
        narrow = georgia_rule(direct("Georgia"), make_ctx(reference, text, window=2))
        wide = georgia_rule(direct("Georgia"), make_ctx(reference, text, window=4))
        assert narrow.source is S.US_GEORGIA_TO_CHECK
        assert wide == Resolution("United States", S.US_STATE_NAME)

    def test_other_states_untouched(self, reference):
        ctx = make_ctx(reference, "Emory University, Atlanta, Georgia")
        assert georgia_rule(None, ctx) is None
        assert georgia_rule(direct("France"), ctx) == direct("France")


class TestGeorgiaCityRule:
    def test_city_settles_us(self, reference):
        ctx = make_ctx(reference, "Research Park, Savannah, Georgia")
        pending = Resolution("US-Georgia", S.US_GEORGIA_TO_CHECK)
        assert georgia_city_rule(pending, ctx) == Resolution("United States", S.INSTITUTION_CITY, "Savannah")

    def test_unknown_city_stays_pending(self, reference):
        ctx = make_ctx(reference, "Institute of Something, Georgia")
        pending = Resolution("US-Georgia", S.US_GEORGIA_TO_CHECK)
        assert georgia_city_rule(pending, ctx) == pending

    def test_city_in_other_country_ignored(self, reference):
        ctx = make_ctx(reference, "Clinic, Paris, Georgia")
        pending = Resolution("US-Georgia", S.US_GEORGIA_TO_CHECK)
        assert georgia_city_rule(pending, ctx) == pending


class TestPlaceNameRules:
    def test_new_mexico(self, reference):
        ctx = make_ctx(reference, "University of New Mexico, Albuquerque, New Mexico")
        assert mexico_rule(direct("Mexico"), ctx) == Resolution("United States", S.US_STATE_NAME)

    def test_mexico_city_untouched(self, reference):
        ctx = make_ctx(reference, "UNAM, Mexico City, Mexico")
        assert mexico_rule(direct("Mexico"), ctx) == direct("Mexico")

    def test_northern_ireland(self, reference):
        ctx = make_ctx(reference, "Queen's University Belfast, Belfast, Northern Ireland")
        assert ireland_rule(direct("Ireland"), ctx) == direct("United Kingdom")

    def test_american_samoa(self, reference):
        ctx = make_ctx(reference, "LBJ Tropical Medical Center, Pago Pago, American Samoa")
        assert samoa_rule(direct("Samoa"), ctx) == direct("American Samoa")

    @pytest.mark.parametrize("text,expected", [
        ("Kim Il Sung University, Pyongyang, North Korea", "Democratic People's Republic of Korea"),
        ("Pyongyang, Democratic People's Republic of Korea", "Democratic People's Republic of Korea"),
        ("Seoul National University, Seoul, South Korea", "Republic of Korea"),
        ("Seoul National University, Seoul, Korea", "Republic of Korea"),
    ])
    def test_korea(self, reference, text, expected):
        ctx = make_ctx(reference, text)
        assert korea_rule(direct("Republic of Korea"), ctx) == direct(expected)

    @pytest.mark.parametrize("text,expected", [
        ("University of Kinshasa, Kinshasa, Democratic Republic of the Congo", "Congo (Congo-Kinshasa)"),
        ("Kinshasa, DR Congo", "Congo (Congo-Kinshasa)"),
        ("Marien Ngouabi University, Brazzaville, Republic of Congo", "Congo (Congo-Brazzaville)"),
        ("Brazzaville, Congo", "Congo (Congo-Brazzaville)"),
    ])
    def test_congo(self, reference, text, expected):
        ctx = make_ctx(reference, text)
        assert congo_rule(direct("Congo (Congo-Brazzaville)"), ctx) == direct(expected)

    def test_china_and_taiwan(self, reference):
        prc = make_ctx(reference, "Tsinghua University, Beijing, People's Republic of China")
        roc = make_ctx(reference, "National Taiwan University, Taipei, Republic of China")
        assert china_rule(direct("China"), prc) == direct("China")
        assert china_rule(direct("China"), roc) == direct("Taiwan")

    def test_rules_only_touch_direct_matches(self, reference):
        ctx = make_ctx(reference, "Seoul National University, Seoul, North Korea")
        alpha3 = Resolution("Republic of Korea", S.ALPHA3)
        assert korea_rule(alpha3, ctx) == alpha3
        assert korea_rule(None, ctx) is None


class TestApplySpecialCases:
    def test_unresolved_passes_through(self, reference):
        assert apply_special_cases(None, make_ctx(reference, "Some Lab, Somewhere")) is None

    def test_fold_emits_override_event(self, reference):
        events = []
        ctx = make_ctx(reference, "Emory University, Atlanta, Georgia", trace=events.append)
        result = apply_special_cases(direct("Georgia"), ctx)
        assert result == Resolution("United States", S.US_STATE_NAME)
        assert any(e.step == "special_case" for e in events)
        assert all(e.segment == "Emory University, Atlanta, Georgia" for e in events)
