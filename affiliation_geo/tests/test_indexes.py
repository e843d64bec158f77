"""
Tests for the institution/city indexes, the country catalog and segment splitting.
"""

from __future__ import annotations

import pytest

from affiliation_geo.countries import CountryCatalog
from affiliation_geo.indexes import (
    CityEntry,
    ReferenceDataError,
    build_city_index,
    build_indexes,
    build_institution_index,
    distinct_countries,
)
from affiliation_geo.models import CountryRecord, InstitutionRecord
from affiliation_geo.segments import split_pieces, split_segments


class TestInstitutionIndex:
    def test_name_and_aliases_indexed(self, reference):
        index = reference.institution_index
        assert [r.name for r in index.get("emory university")] == ["Emory University"]
        assert [r.name for r in index.get("emory university school of medicine")] == ["Emory University"]
        assert [r.name for r in index.get("mit")] == ["Massachusetts Institute of Technology"]

    def test_keys_are_normalized(self, reference):
        index = reference.institution_index
        assert "universitat heidelberg" in index
        assert index.lookup("Universität  Heidelberg") == index.get("universitat heidelberg")

    def test_collisions_kept_in_insertion_order(self, reference):
        bucket = reference.institution_index.get("trinity college")
        assert [r.city for r in bucket] == ["Dublin", "Hartford", "Cambridge"]
        assert "trinity college" in reference.institution_index.multi_country_keys()

    def test_missing_key_is_empty(self, reference):
        assert reference.institution_index.get("nowhere institute") == ()

    def test_buckets_are_immutable(self, reference):
        with pytest.raises(TypeError):
            reference.institution_index._buckets["new"] = ()

    def test_dicts_are_validated(self):
        index = build_institution_index([{"name": "Institut Pasteur", "city": "Paris", "country": "France"}])
        (record,) = index.get("institut pasteur")
        assert isinstance(record, InstitutionRecord)
        assert record.country == "France"

    def test_malformed_row_raises(self):
        with pytest.raises(ReferenceDataError, match="institution #1"):
            build_institution_index([
                {"name": "Institut Pasteur", "country": "France"},
                {"name": "No Country"},
            ])


class TestCityIndex:
    def test_city_entries(self, reference):
        assert reference.city_index.get("tokyo") == (CityEntry(country="Japan", institution_name="University of Tokyo"),)

    def test_city_collision(self, reference):
        entries = reference.city_index.get("cambridge")
        assert distinct_countries(entries) == ["United Kingdom", "United States"]
        assert "cambridge" in reference.city_index.multi_country_keys()
        assert "london" in reference.city_index.multi_country_keys()

    def test_institutions_without_city_skipped(self):
        index = build_city_index([{"name": "Max Planck Society", "country": "Germany"}])
        assert len(index) == 0

    def test_lookup_drops_punctuation(self, reference):
        assert reference.city_index.lookup("Tokyo.") == reference.city_index.get("tokyo")

    def test_build_indexes_pair(self):
        institution_index, city_index = build_indexes([
            {"name": "University of Tokyo", "city": "Tokyo", "country": "Japan"},
        ])
        assert len(institution_index) == 1
        assert institution_index.entry_count == 1
        assert list(city_index) == ["tokyo"]


class TestCountryCatalog:
    def test_direct_match_name_and_alias(self, reference):
        countries = reference.countries
        assert countries.direct_match("Paris France") == "France"
        assert countries.direct_match("USA") == "United States"
        assert countries.direct_match("united states of america") == "United States"

    def test_direct_match_whole_word_only(self, reference):
        assert reference.countries.direct_match("Nowhereland") is None
        assert reference.countries.direct_match("France Street") is None

    def test_direct_match_uses_list_order(self, reference):
        # "republic of korea" (earlier in the list) also ends the DPRK name
        assert reference.countries.direct_match("Democratic People's Republic of Korea") == "Republic of Korea"

    def test_alpha3_is_case_sensitive(self, reference):
        assert reference.countries.alpha3_match("Tokyo JPN") == "Japan"
        assert reference.countries.alpha3_match("JPN.") == "Japan"
        assert reference.countries.alpha3_match("Jpn") is None

    def test_canonical(self, reference):
        assert reference.countries.canonical("South Korea") == "Republic of Korea"
        assert reference.countries.canonical("USA") == "United States"
        assert reference.countries.canonical("Atlantis") == "Atlantis"

    def test_coerce_rejects_bad_input(self):
        with pytest.raises(ReferenceDataError):
            CountryCatalog.coerce(None)
        with pytest.raises(ReferenceDataError):
            CountryCatalog.coerce("France")
        with pytest.raises(ReferenceDataError, match="country #1"):
            CountryCatalog.coerce([{"name": "France"}, {"name": "Spain", "alpha3": "es"}])
        with pytest.raises(ReferenceDataError):
            CountryCatalog.coerce(["France"])

    def test_coerce_accepts_plain_rows(self):
        catalog = CountryCatalog.coerce([
            {"name": "France", "alpha3": "FRA"},
            {"name": "United Kingdom", "aliases": ["UK"]},
        ])
        assert len(catalog) == 2
        assert catalog.direct_match("London, UK") == "United Kingdom"
        assert catalog.alpha3_match("Paris FRA") == "France"

    def test_coerce_accepts_records(self):
        catalog = CountryCatalog.coerce([CountryRecord(name="France", alpha3="FRA")])
        assert len(catalog) == 1
        assert CountryCatalog.coerce(catalog) is catalog


class TestSegments:
    def test_pieces_trimmed_and_non_empty(self):
        assert split_pieces(" Harvard Medical School ,, Boston , ") == ("Harvard Medical School", "Boston")

    def test_segments_keep_empty_slices(self):
        segments = split_segments("Institut Pasteur, Paris, France;; Unknown Place")
        assert len(segments) == 3
        assert segments[1].is_empty
        assert segments[0].last == "France"
        assert segments[0].second_last == "Paris"
        assert segments[2].second_last == ""

    def test_empty_text(self):
        (segment,) = split_segments("")
        assert segment.is_empty
        assert segment.last == ""
