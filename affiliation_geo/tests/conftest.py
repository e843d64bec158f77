"""
Shared reference snapshot for the resolver tests.
Small on purpose: every country/institution below exists to exercise a
specific cascade step or collision.
"""

from __future__ import annotations

import pytest

from affiliation_geo.reference import ReferenceData

COUNTRIES = [
    {"name": "American Samoa", "alpha3": "ASM"},
    {"name": "Australia", "alpha3": "AUS"},
    {"name": "Canada", "alpha3": "CAN"},
    {"name": "China", "aliases": ["People's Republic of China", "PR China"], "alpha3": "CHN"},
    {"name": "Congo (Congo-Brazzaville)", "aliases": ["Republic of the Congo", "Congo"], "alpha3": "COG"},
    {"name": "Congo (Congo-Kinshasa)", "aliases": ["Democratic Republic of the Congo", "DR Congo"], "alpha3": "COD"},
    {"name": "Cote d'Ivoire", "aliases": ["Ivory Coast"], "alpha3": "CIV"},
    {"name": "France", "alpha3": "FRA"},
    {"name": "Georgia", "alpha3": "GEO"},
    {"name": "Germany", "aliases": ["Deutschland"], "alpha3": "DEU"},
    {"name": "Greece", "alpha3": "GRC"},
    {"name": "India", "alpha3": "IND"},
    {"name": "Ireland", "aliases": ["Republic of Ireland"], "alpha3": "IRL"},
    {"name": "Japan", "alpha3": "JPN"},
    {"name": "Lebanon", "alpha3": "LBN"},
    {"name": "Mexico", "alpha3": "MEX"},
    {"name": "Republic of Korea", "aliases": ["South Korea", "Korea"], "alpha3": "KOR"},
    {"name": "Democratic People's Republic of Korea", "aliases": ["North Korea", "DPRK"], "alpha3": "PRK"},
    {"name": "Samoa", "alpha3": "WSM"},
    {"name": "Taiwan", "aliases": ["Republic of China"], "alpha3": "TWN"},
    {"name": "United Kingdom", "aliases": ["UK", "England", "Scotland", "Wales", "Great Britain"], "alpha3": "GBR"},
    {"name": "United States", "aliases": ["USA", "United States of America"], "alpha3": "USA"},
]

INSTITUTIONS = [
    {"name": "Harvard Medical School", "city": "Boston", "country": "United States"},
    {"name": "Emory University", "aliases": ["Emory University School of Medicine"], "city": "Atlanta", "country": "United States"},
    {"name": "University of Georgia", "aliases": ["UGA"], "city": "Athens", "country": "United States"},
    {"name": "National and Kapodistrian University of Athens", "city": "Athens", "country": "Greece"},
    {"name": "Savannah State University", "city": "Savannah", "country": "USA"},
    {"name": "Tbilisi State Medical University", "city": "Tbilisi", "country": "Georgia"},
    {"name": "University of Toronto", "city": "Toronto", "country": "Canada"},
    {"name": "Western University", "city": "London", "country": "Canada"},
    {"name": "Imperial College London", "city": "London", "country": "United Kingdom"},
    {"name": "Institut Pasteur", "city": "Paris", "country": "France"},
    {"name": "National Cancer Center Hospital", "city": "Goyang", "country": "South Korea"},
    {"name": "University of Tokyo", "city": "Tokyo", "country": "Japan"},
    {"name": "Trinity College", "aliases": ["Trinity College Dublin"], "city": "Dublin", "country": "Ireland"},
    {"name": "Trinity College", "city": "Hartford", "country": "United States"},
    {"name": "Trinity College", "city": "Cambridge", "country": "United Kingdom"},
    {"name": "University of Cambridge", "city": "Cambridge", "country": "United Kingdom"},
    {"name": "Massachusetts Institute of Technology", "aliases": ["MIT"], "city": "Cambridge", "country": "United States"},
    {"name": "University of California, Berkeley", "aliases": ["UC Berkeley"], "city": "Berkeley", "country": "United States"},
    {"name": "Monash University", "city": "Melbourne", "country": "Australia"},
    {"name": "Universität Heidelberg", "aliases": ["Heidelberg University"], "city": "Heidelberg", "country": "Germany"},
    {"name": "Max Planck Society", "country": "Germany"},
]


@pytest.fixture(scope="session")
def reference() -> ReferenceData:
    return ReferenceData.build(COUNTRIES, INSTITUTIONS)


@pytest.fixture
def country_rows() -> list[dict]:
    return [dict(row) for row in COUNTRIES]


@pytest.fixture
def institution_rows() -> list[dict]:
    return [dict(row) for row in INSTITUTIONS]
