"""
Query Processor

Turns raw search-bar input into a NormalizedQuery: sanitized, trimmed,
whitespace-collapsed, lowercased, accent-folded and tokenized.
An empty result is "no signal", not an error.
"""

import re
import string
import logging
import unicodedata
from dataclasses import dataclass
from typing import Optional, Tuple

logger = logging.getLogger("cafe_finder.search.query_processor")

# Control characters except tab/newline/carriage return
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class NormalizedQuery:
    """Structured form of a query; immutable once built"""
    raw: str
    normalized: str
    terms: Tuple[str, ...] = ()

    @property
    def has_signal(self) -> bool:
        return bool(self.terms)


class QueryProcessor:
    """
    Normalizes user queries for the answer engine.

    Responsibilities:
    1. Strip control characters and cap the query length
    2. Trim, collapse whitespace, lowercase, fold accents
    3. Tokenize on whitespace, trim edge punctuation, dedupe in first-seen order
    """

    # Markup-looking input is logged, never rejected
    SUSPICIOUS_PATTERNS = [
        re.compile(r"<script", re.IGNORECASE),
        re.compile(r"javascript:", re.IGNORECASE),
        re.compile(r"on\w+=", re.IGNORECASE),
        re.compile(r"data:", re.IGNORECASE),
    ]

    def __init__(self, max_query_length: int = 500):
        """Initialize query processor.

        Args:
            max_query_length: Longer input is truncated to this many characters
        """
        self._max_length = max_query_length

    def normalize(self, raw: Optional[str]) -> NormalizedQuery:
        """
        Normalize a raw query string.

        Args:
            raw: Text typed into the search bar (None is treated as empty)

        Returns:
            NormalizedQuery; `terms` is empty for blank input
        """
        if raw is None:
            raw = ""
        if not isinstance(raw, str):
            raise TypeError(f"Query must be a string, got {type(raw).__name__}")

        sanitized = self._sanitize(raw)
        if not sanitized:
            return NormalizedQuery(raw=raw, normalized="", terms=())

        normalized = self._clean_query(sanitized)
        terms = self._tokenize(normalized)

        return NormalizedQuery(raw=raw, normalized=normalized, terms=terms)

    def _sanitize(self, raw: str) -> str:
        """Remove control characters, enforce the length cap, flag markup"""
        sanitized = _CONTROL_CHARS_RE.sub("", raw).strip()

        if len(sanitized) > self._max_length:
            logger.warning(
                "Query of %d characters truncated to %d", len(sanitized), self._max_length
            )
            sanitized = sanitized[:self._max_length].strip()

        if any(p.search(sanitized) for p in self.SUSPICIOUS_PATTERNS):
            logger.warning("Suspicious pattern in query: %r", sanitized[:50])

        return sanitized

    def _clean_query(self, query: str) -> str:
        """Lowercase, fold accents, collapse whitespace"""
        cleaned = query.lower().strip()

        # Fold accents: café -> cafe
        decomposed = unicodedata.normalize("NFD", cleaned)
        cleaned = "".join(ch for ch in decomposed if not unicodedata.combining(ch))

        return _WHITESPACE_RE.sub(" ", cleaned)

    def _tokenize(self, normalized: str) -> Tuple[str, ...]:
        """Whitespace tokens with edge punctuation trimmed, deduplicated"""
        tokens = (t.strip(string.punctuation) for t in normalized.split(" "))
        return tuple(dict.fromkeys(t for t in tokens if t))
