"""
Text normalization and non-geographic content stripping.

`normalize_text` is the one canonicalization function used for both the
affiliation string and every index/lookup key. `strip_non_affiliation_content`
removes identifiers, contact details and other noise while leaving the
geography tokens in place. Both are total: they never raise.
"""

from __future__ import annotations

import re
import unicodedata

# ── Normalizer patterns ───────────────────────────────────────────────

_COTE_DIVOIRE_RE = re.compile(r"\bC[oô]te\s*d['‘’´`]Ivoire\b", re.IGNORECASE)
_DIACRITICS_RE = re.compile(r"[\u0300-\u036f]")
_USA_VARIANTS_RE = re.compile(r"\bu[.\-\s]*s[.\-\s]*a\.?\b", re.IGNORECASE)
_UK_VARIANTS_RE = re.compile(r"\bu[.\-\s]*k\.?\b", re.IGNORECASE)
_QUOTES_RE = re.compile(r"[\u2018\u2019\u00b4`]")
_WHITESPACE_RE = re.compile(r"\s+")
_MULTIPLE_SPACES_RE = re.compile(r"\s{2,}")
_CITY_PUNCT_RE = re.compile(r"[.,;()]")

# ── Stripper patterns (applied in this order) ─────────────────────────

_ID_URLS_RE = re.compile(r"\b(https?://)?(orcid\.org|ror\.org|isni\.org)/\S+\.?\s*", re.IGNORECASE)
_CORRESPONDING_AUTHOR_RE = re.compile(
    r"\bCorresponding author[:\-]?\s*[^,;]*(?=,|\bEmail\b|$)\s*,?\s*", re.IGNORECASE
)
_EMAIL_LABELS_RE = re.compile(
    r"(Electronic\s+address|Email|E[-\s]?mail|Correspondence|"
    r"Corresponding author's email|Corresponding author)[:\-]?\s*",
    re.IGNORECASE,
)
_EMAILS_RE = re.compile(r"\b\S+@\S+\.\S+\b[.,;]?\s*")
# A label only counts when a number (or its punctuation) follows, so
# "Cell Biology" and "Telethon" survive.
_PHONE_LABELS_RE = re.compile(
    r"\b(Phone|Tel|Telephone|Fax|Mobile|Cell)\b(?=\s*[:\-.+(\d])[.:\-]*\s*", re.IGNORECASE
)
_PHONE_NUMBERS_RE = re.compile(r"\+?\d[\d\s\-/().]*")
_UK_POSTCODES_RE = re.compile(r"\b([A-Z]{1,2}\d{1,2}[A-Z]?)\s?(\d[A-Z]{2})\b", re.IGNORECASE)
_POSTAL_CODES_RE = re.compile(r"[,.\s]*(\d{3,}(-\d{3,})?|[A-Z]\d[A-Z]\s?\d[A-Z]\d)?\.?\s*$", re.IGNORECASE)
_ISNI_RE = re.compile(r"[.,;\s]*ISNI:\s*\d[\d\s]*\.?\s*", re.IGNORECASE)
_GRID_RE = re.compile(r"[.,;\s]*GRID:\s*grid\.[\w.\-]*\.?\s*", re.IGNORECASE)
_RINGGOLD_RE = re.compile(
    r"[.,;\s]*RINGGOLD(?:\s*ID|\s*Identifier|\s*Organization\s*ID)?[:\s]*\d+\.?\s*", re.IGNORECASE
)
_IDENTIFIER_LABELS_RE = re.compile(r"\b(ROR|ORCID|ISNI|GRID|RINGGOLD)\b[:\s]*", re.IGNORECASE)
_COMPANY_SUFFIX_RE = re.compile(
    r",\s*\b(CO\.?\s*(LTD|LIMITED)|Co\.?\s*(Ltd\.?|Limited)|Inc\.?|Corp\.?|LLC|PLC|GmbH|"
    r"S\.?A\.?|P\.?T\.?Y\.?\s*LTD|PTY|LTD\.?|LIMITED)\b(?=\s*,|$)",
    re.IGNORECASE,
)
_AND_RE = re.compile(r"\b(and|And)\b(?=\s|,|$)")
_PARENTHESES_RE = re.compile(r"\([^()]*\)")
_TRAILING_PUNCT_RE = re.compile(r"[.,;]+$")
_WORD_END_RE = re.compile(r"\w$")
_WORD_START_RE = re.compile(r"^\w")


def strip_diacritics(text: str) -> str:
    return _DIACRITICS_RE.sub("", unicodedata.normalize("NFD", text))


def normalize_text(value) -> str:
    """
    Canonicalize an affiliation or key string.
    Rules (in order):
      1. Côte d'Ivoire spellings -> "Cote d'Ivoire"
      2. NFD decomposition, combining marks removed
      3. U.S.A / U.K style abbreviations -> USA / UK
      4. Curly, acute and back-tick quotes -> straight quote
      5. Whitespace runs collapsed, ends trimmed
    Non-string input is treated as the empty string.
    """
    if not isinstance(value, str) or not value:
        return ""

    text = _COTE_DIVOIRE_RE.sub("Cote d'Ivoire", value)
    text = strip_diacritics(text)
    text = _USA_VARIANTS_RE.sub("USA", text)
    text = _UK_VARIANTS_RE.sub("UK", text)
    text = _QUOTES_RE.sub("'", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def normalize_key(value) -> str:
    """Key used for every InstitutionIndex build and lookup."""
    return normalize_text(value).lower()


def city_key(value) -> str:
    """Key used for every CityIndex build and lookup (drops .,;() as well)."""
    return normalize_key(_CITY_PUNCT_RE.sub("", normalize_text(value)))


def _drop_standalone_and(match: re.Match) -> str:
    # Kept when it joins two words, e.g. "Trinidad and Tobago"
    before = match.string[:match.start()].strip()
    after = match.string[match.end():].strip()
    if _WORD_END_RE.search(before) and _WORD_START_RE.search(after):
        return match.group(0)
    return ""


def strip_non_affiliation_content(text: str) -> str:
    """
    Remove identifiers, contact details, postcodes, corporate suffixes,
    stray conjunctions and parentheticals from a normalized affiliation.
    Each step assumes the previous ones already ran.
    """
    if not text:
        return ""

    result = _ID_URLS_RE.sub(" ", text)
    result = _CORRESPONDING_AUTHOR_RE.sub("", result)
    result = _EMAIL_LABELS_RE.sub("", result)
    result = _EMAILS_RE.sub("", result)
    result = _PHONE_LABELS_RE.sub("", result)
    result = _PHONE_NUMBERS_RE.sub("", result)
    result = _UK_POSTCODES_RE.sub("", result)
    result = _POSTAL_CODES_RE.sub("", result)
    result = _ISNI_RE.sub(" ", result)
    result = _GRID_RE.sub(" ", result)
    result = _RINGGOLD_RE.sub(" ", result)
    result = _IDENTIFIER_LABELS_RE.sub(" ", result)
    result = _COMPANY_SUFFIX_RE.sub("", result)
    result = _AND_RE.sub(_drop_standalone_and, result)
    # Also removes a parenthesised country such as "(USA)"
    result = _PARENTHESES_RE.sub("", result)
    result = strip_diacritics(result)
    result = _QUOTES_RE.sub("'", result)
    result = _MULTIPLE_SPACES_RE.sub(" ", result)
    result = _TRAILING_PUNCT_RE.sub("", result)
    result = _WHITESPACE_RE.sub(" ", result)
    return result.strip()


def clean_affiliation(raw) -> str:
    """normalize_text followed by strip_non_affiliation_content."""
    return strip_non_affiliation_content(normalize_text(raw))
