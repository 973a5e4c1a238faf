# backend/venuefinder/services/search/location_parser.py
"""
Free-text location parser for venue search.

Turns what a user typed into the location box into a small set of typed
column conditions. Two shapes are recognised:

- "City, State [Zip]" -> city contains X AND state contains Y [AND zipcode = Z]
- a single term        -> city contains X OR state contains X [OR its abbreviation]
                          [OR zipcode = X when it is a 5-digit code]

Parsing is best effort and never raises: anything it cannot make sense of
degrades to "no location constraint".
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import re
from typing import List, Literal, Optional, Pattern, Tuple

from venuefinder.core.constants import US_STATE_ABBREVIATIONS
from venuefinder.core.exceptions import LocationParseError

logger = logging.getLogger(__name__)

LocationField = Literal["city", "state", "zipcode"]
LocationOperator = Literal["contains", "equals"]

# Everything except letters, digits and whitespace is stripped from a segment
DISALLOWED_CHARS: Pattern[str] = re.compile(r"[^a-z0-9\s]")
WHITESPACE_RUN: Pattern[str] = re.compile(r"\s+")
ZIP_IN_SEGMENT: Pattern[str] = re.compile(r"\b(\d{5})\b")
ZIP_ONLY: Pattern[str] = re.compile(r"^\d{5}$")


@dataclass(frozen=True)
class LocationTerm:
    """One column condition; `value` is already lowercased and sanitized."""

    field: LocationField
    operator: LocationOperator
    value: str


@dataclass(frozen=True)
class LocationFilter:
    """Terms combined with a single boolean joiner."""

    terms: Tuple[LocationTerm, ...]
    joiner: Literal["AND", "OR"]


def _sanitize(segment: str) -> str:
    cleaned = DISALLOWED_CHARS.sub("", segment)
    return WHITESPACE_RUN.sub(" ", cleaned).strip()


def _state_term(value: str) -> str:
    """Map a full state name to its postal abbreviation; pass anything else through."""
    return US_STATE_ABBREVIATIONS.get(value, value)


class LocationQueryParser:
    """Best-effort parser from a raw location string to a LocationFilter."""

    def parse(self, raw: object) -> Optional[LocationFilter]:
        """
        Parse a raw location string.

        Returns:
            A LocationFilter, or None when the input yields no usable term.
        """
        try:
            return self._parse(raw)
        except LocationParseError as exc:
            logger.debug("Ignoring unparseable location %r: %s", raw, exc)
            return None

    def _parse(self, raw: object) -> Optional[LocationFilter]:
        if raw is None:
            return None
        if not isinstance(raw, str):
            raise LocationParseError(f"expected text, got {type(raw).__name__}")

        text = raw.lower()
        if "," in text:
            return self._parse_city_state(text)
        return self._parse_single_term(text)

    def _parse_city_state(self, text: str) -> Optional[LocationFilter]:
        segments = [seg for seg in (_sanitize(part) for part in text.split(",")) if seg]
        if not segments:
            return None
        if len(segments) == 1:
            # "austin," or ", tx": too little structure for AND, match either column
            only = segments[0]
            return LocationFilter(
                terms=(
                    LocationTerm("city", "contains", only),
                    LocationTerm("state", "contains", only),
                ),
                joiner="OR",
            )

        # Anything after the second segment is ignored
        city, state_segment = segments[0], segments[1]
        zipcode: Optional[str] = None
        zip_match = ZIP_IN_SEGMENT.search(state_segment)
        if zip_match:
            zipcode = zip_match.group(1)
            state_segment = _sanitize(ZIP_IN_SEGMENT.sub(" ", state_segment, count=1))

        terms: List[LocationTerm] = [LocationTerm("city", "contains", city)]
        if state_segment:
            terms.append(LocationTerm("state", "contains", _state_term(state_segment)))
        if zipcode:
            terms.append(LocationTerm("zipcode", "equals", zipcode))
        return LocationFilter(terms=tuple(terms), joiner="AND")

    def _parse_single_term(self, text: str) -> Optional[LocationFilter]:
        term = _sanitize(text)
        if not term:
            return None

        terms: List[LocationTerm] = [
            LocationTerm("city", "contains", term),
            LocationTerm("state", "contains", term),
        ]
        abbreviation = US_STATE_ABBREVIATIONS.get(term)
        if abbreviation:
            terms.append(LocationTerm("state", "contains", abbreviation))
        if ZIP_ONLY.match(term):
            terms.append(LocationTerm("zipcode", "equals", term))
        return LocationFilter(terms=tuple(terms), joiner="OR")
