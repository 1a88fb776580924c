"""
Racecard Parser - Normalizer Module

Text cleaning and pattern matching shared by the racecard and schedule
parsers. Every function here is pure and returns None when its pattern is not
present, leaving sentinel handling to the serialization layer.
"""

import re
from typing import Optional, Tuple
from urllib.parse import urlparse

_DECIMAL_REGEX = re.compile(r"(\d+)[.,](\d{1,2})")
_IDENTITY_REGEX = re.compile(r"^(\d+)\. (.+)$")
_JOCKEY_REGEX = re.compile(r"J:\s*(.+)")
_CLOCK_TOKEN_REGEX = re.compile(r"^\d{1,2}:\d{2}$")
_RESULT_REGEX = re.compile(r"^\d+,\d+,\d+$")
_RACE_PATH_REGEX = re.compile(r"/horse-racing/([^/]+)/([^/]+)/race-(\d+)-(\d+)")


def normalize_whitespace(text: Optional[str]) -> str:
    if not text:
        return ""
    return " ".join(text.split())


def extract_decimal(text: Optional[str]) -> Optional[str]:
    """
    Pulls the first decimal price out of text, e.g. "$12,50" -> "12.50".
    """
    if not text:
        return None
    match = _DECIMAL_REGEX.search(text)
    if not match:
        return None
    return f"{match.group(1)}.{match.group(2)}"


def parse_identity(text: Optional[str]) -> Optional[Tuple[str, str]]:
    """Splits "3. Thunder Bolt" into ("3", "Thunder Bolt")."""
    if not text:
        return None
    match = _IDENTITY_REGEX.match(text.strip())
    if not match:
        return None
    name = match.group(2).strip()
    if not name:
        return None
    return match.group(1), name


def parse_jockey(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    match = _JOCKEY_REGEX.search(text)
    if not match:
        return None
    return normalize_whitespace(match.group(1)) or None


def find_clock_time(text: Optional[str]) -> Optional[str]:
    """Returns the first bare H:MM or HH:MM token in text."""
    if not text:
        return None
    for token in text.split():
        if _CLOCK_TOKEN_REGEX.match(token):
            return token
    return None


def is_race_result(text: Optional[str]) -> bool:
    """True for finishing-order strings such as "4,5,3"."""
    return bool(text) and bool(_RESULT_REGEX.match(text.strip()))


def parse_race_path(url: Optional[str]) -> Optional[dict]:
    """
    Breaks a race URL into its region, track slug, race number and event id.
    Works for absolute and site-relative links.
    """
    if not url:
        return None
    match = _RACE_PATH_REGEX.search(urlparse(url).path)
    if not match:
        return None
    return {
        "region": match.group(1),
        "track_slug": match.group(2),
        "race_number": int(match.group(3)),
        "event_id": match.group(4),
    }


def canonical_track_key(name: str) -> str:
    """Generates a standardized, URL-safe key for a racetrack."""
    if not name:
        return "unknown_track"
    name = name.lower().strip()
    name = re.sub(r"[^a-z0-9\s-]", "", name)
    name = re.sub(r"[\s_]+", "-", name)
    return name
