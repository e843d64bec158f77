"""
Static place-name and vocabulary lists used by the resolution cascade.

Everything here is immutable module data:
  - US state names (title case) and postal abbreviations.
  - Context cities used to split the Georgia / Ontario / Victoria collisions.
  - Canonical display names the special-case rules resolve to. These must
    match the `name` field of the reference country list.
  - Alias tables for the Korea and Congo rules (matched longest-first).
  - Authorship / editorial vocabulary that marks a contribution note.
  - Institution-shaped name patterns that look like a state name but are not.

Georgia is deliberately absent from US_STATES: it is handled by the
Georgia special-case rule.
"""

from __future__ import annotations

import re

# ── Canonical country names produced by special cases ─────────────────

UNITED_STATES = "United States"
UNITED_KINGDOM = "United Kingdom"
GEORGIA = "Georgia"
US_GEORGIA = "US-Georgia"
MEXICO = "Mexico"
IRELAND = "Ireland"
SAMOA = "Samoa"
AMERICAN_SAMOA = "American Samoa"
CHINA = "China"
TAIWAN = "Taiwan"
REPUBLIC_OF_KOREA = "Republic of Korea"
DPRK = "Democratic People's Republic of Korea"
CONGO_BRAZZAVILLE = "Congo (Congo-Brazzaville)"
CONGO_KINSHASA = "Congo (Congo-Kinshasa)"
CANADA = "Canada"
AUSTRALIA = "Australia"

# ── Trigger phrases (lowercase, matched against the last comma-piece) ─

NEW_MEXICO = "new mexico"
NORTHERN_IRELAND = "northern ireland"
AMERICAN_SAMOA_PHRASE = "american samoa"
PRC_PHRASE = "people's republic of china"
ROC_PHRASE = "republic of china"

KOREA_ALIASES: tuple[tuple[str, str], ...] = (
    ("democratic people's republic of korea", DPRK),
    ("democratic republic of korea", DPRK),
    ("north korea", DPRK),
    ("republic of korea", REPUBLIC_OF_KOREA),
    ("south korea", REPUBLIC_OF_KOREA),
    ("korea", REPUBLIC_OF_KOREA),
)

CONGO_ALIASES: tuple[tuple[str, str], ...] = (
    ("democratic republic of the congo", CONGO_KINSHASA),
    ("democratic republic of congo", CONGO_KINSHASA),
    ("dr congo", CONGO_KINSHASA),
    ("congo-kinshasa", CONGO_KINSHASA),
    ("republic of the congo", CONGO_BRAZZAVILLE),
    ("republic of congo", CONGO_BRAZZAVILLE),
    ("congo-brazzaville", CONGO_BRAZZAVILLE),
    ("congo", CONGO_BRAZZAVILLE),
)

# ── Context cities ────────────────────────────────────────────────────

GEORGIA_US_CITIES: tuple[str, ...] = ("atlanta", "athens", "augusta")
GEORGIA_COUNTRY_CITIES: tuple[str, ...] = ("tbilisi", "kutaisi", "zugdidi", "batumi", "rustavi")

ONTARIO = "ontario"
ONTARIO_CITIES = frozenset({"toronto", "ottawa", "waterloo", "brampton"})

VICTORIA_ABBR = "vic"
VICTORIA_CITIES = frozenset({"melbourne"})

# ── United States ─────────────────────────────────────────────────────

US_STATES = frozenset({
    "Alabama", "Alaska", "Arizona", "Arkansas", "California", "Colorado",
    "Connecticut", "Delaware", "Florida", "Hawaii", "Idaho", "Illinois",
    "Indiana", "Iowa", "Kansas", "Kentucky", "Louisiana", "Maine", "Maryland",
    "Massachusetts", "Michigan", "Minnesota", "Mississippi", "Missouri",
    "Montana", "Nebraska", "Nevada", "New Hampshire", "New Jersey",
    "New Mexico", "New York", "North Carolina", "North Dakota", "Ohio",
    "Oklahoma", "Oregon", "Pennsylvania", "Rhode Island", "South Carolina",
    "South Dakota", "Tennessee", "Texas", "Utah", "Vermont", "Virginia",
    "West Virginia", "Wisconsin", "Wyoming",
})

# Lowercase forms accepted verbatim as the District of Columbia
DISTRICT_OF_COLUMBIA_FORMS = frozenset({
    "district of columbia",
    "both in district of columbia",
    "all in district of columbia",
})

US_STATE_ABBREVIATIONS = frozenset({
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DC", "DE", "FL", "GA", "HI",
    "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD", "MA", "MI", "MN",
    "MS", "MO", "MT", "NE", "NV", "NH", "NJ", "NM", "NY", "NC", "ND", "OH",
    "OK", "OR", "PA", "RI", "SC", "SD", "TN", "TX", "UT", "VT", "VA", "WA",
    "WV", "WI", "WY",
})

# A state abbreviation right after one of these is treated as part of a list
ABBREVIATION_CONJUNCTIONS = frozenset({"and", "or", "And", "Or"})

# Names that end like a state but describe an institution
INSTITUTION_SHAPE_PATTERNS: tuple[re.Pattern, ...] = tuple(
    re.compile(p, re.IGNORECASE) for p in (
        r"\bUniversity\s+of\s+.+$",
        r"\bCollege\s+of\s+.+$",
        r"\bInstitute\s+of\s+.+$",
        r"\bSchool\s+of\s+.+$",
        r"\bAcademy\s+of\s+.+$",
        r"\b\w+\s+University$",
        r"\b\w+\s+College$",
        r"\b\w+\s+Institute$",
        r"\b\w+\s+School$",
        r"\b\w+\s+Academy$",
        r"\b.+\s+State\s+University$",
        r"\b.+\s+State\s+College$",
        r"\b.+\s+Medical\s+Center$",
        r"\b.+\s+Hospital$",
        r"\b.+\s+Health\s+System$",
        r"\bMedical\s+Center\s+of\s+.+$",
        r"\b.+\s+Institute\s+of\s+Technology$",
        r"\b.+\s+Research\s+Institute$",
    )
)

# ── Contribution notes ────────────────────────────────────────────────

CONTRIBUTION_KEYWORDS: tuple[str, ...] = (
    # Authorship roles
    "first author", "last author", "joint first author", "joint senior author",
    "co-first author", "cofirst author", "co-senior author", "cosenior author",
    "senior author", "shared first author", "shared senior author",
    "equal contribution", "equal authorship", "contributed equally",
    "equally contributed", "lead author", "lead contact",
    "principal investigator", "guarantor",
    # Correspondence
    "corresponding author", "co-corresponding author", "correspondence",
    "contact author", "author for correspondence", "reprint author",
    "reprint requests", "author to whom correspondence should be addressed",
    # Group / consortium / collaboration
    "on behalf of", "writing committee", "steering committee", "investigators",
    "study group", "consortium", "collaborator", "working group", "task force",
    "research network", "trial investigators", "collaborative group",
    # Editorial roles
    "editorial board", "associate editor", "chief editor", "editor-in-chief",
    "handling editor", "guest editor", "academic editor", "section editor",
    "reviewer", "peer reviewer",
    # Special notes
    "deceased", "technical contact", "posthumous authorship",
)

CONTRIBUTION_NOTE_RE = re.compile(
    r"\b(" + "|".join(re.escape(k) for k in CONTRIBUTION_KEYWORDS) + r")\b",
    re.IGNORECASE,
)


def is_institution_shaped(text: str) -> bool:
    return any(p.search(text) for p in INSTITUTION_SHAPE_PATTERNS)
