"""
Vocabulary Index

Domain synonym tables and the canonicalization/expansion built from them.
The index is constructed once and is read-only afterwards; the pipeline
receives it by reference.
"""

import re
import logging
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger("cafe_finder.common.vocabulary")

TOOLS = "tools"
TOPICS = "topics"
ACTIONS = "actions"
RESOURCE_TYPES = "resource_types"
TEAMS = "teams"


# ============================================================================
# Synonym tables
# ============================================================================

TOOL_SYNONYMS: Dict[str, List[str]] = {
    "jira": ["atlassian", "issue tracker", "ticket system", "bug tracker", "issue management"],
    "confluence": ["wiki", "knowledge base", "docs", "confluence wiki"],
    "smartsheet": ["spreadsheet", "project tracker", "timeline", "gantt"],
    "slack": ["messaging", "chat", "im", "instant message"],
    "teams": ["microsoft teams", "ms teams", "video call", "meeting"],
    "outlook": ["mail", "calendar", "microsoft outlook"],
    "sharepoint": ["microsoft sharepoint", "file storage", "document library"],
    "figma": ["prototype", "mockup", "ui design", "wireframe"],
    "miro": ["whiteboard", "brainstorm", "diagram", "flowchart"],
    "notion": ["notes", "workspace", "notion wiki"],
    "github": ["git", "code", "repository", "repo", "source control", "version control"],
    "azure": ["azure devops", "ado", "microsoft azure", "cloud"],
    "servicenow": ["itsm", "it service", "service desk", "snow"],
}

TOPIC_SYNONYMS: Dict[str, List[str]] = {
    "cob": ["coordination of benefits", "coordination", "multiple coverage", "dual coverage"],
    "rcm": ["revenue cycle management", "revenue cycle", "billing", "collections"],
    "claims": ["claim", "claim processing", "claim adjudication", "claims management"],
    "eligibility": ["member eligibility", "coverage verification"],
    "enrollment": ["member enrollment", "signup", "registration", "onboarding"],
    "compliance": ["regulatory", "regulation", "audit"],
    "hipaa": ["privacy", "security", "phi", "protected health information"],
    "medicare": ["cms", "government program", "senior", "part a", "part b", "part d"],
    "medicaid": ["state program", "magi", "low income"],
    "subrogation": ["recovery", "third party liability", "tpl", "accident"],
    "eob": ["explanation of benefits", "benefit explanation", "member statement"],
    "era": ["electronic remittance advice", "remittance", "835"],
    "edi": ["electronic data interchange", "837", "270", "271", "x12"],
    "npi": ["national provider identifier", "provider id", "provider number"],
    "prd": ["product requirements", "product spec", "requirements document", "spec"],
    "okr": ["objectives key results", "objectives", "goals", "kpi"],
    "lop": ["love of product", "product talk", "product talks", "session", "sessions"],
}

ACTION_SYNONYMS: Dict[str, List[str]] = {
    "access": ["get access", "permission", "permissions", "login", "account", "request access"],
    "request": ["submit", "apply", "ask for", "get"],
    "find": ["search", "look for", "locate", "discover", "where is"],
    "learn": ["understand", "study", "know about", "read about"],
    "contact": ["reach out", "message", "email", "talk to", "connect with"],
    "help": ["assist", "support", "guidance"],
    "create": ["make", "new", "add", "start", "build"],
    "update": ["edit", "modify", "change", "revise"],
    "delete": ["remove", "cancel", "revoke"],
    "approve": ["accept", "sign off", "confirm", "authorize"],
    "review": ["check", "look at", "examine", "assess"],
}

RESOURCE_TYPE_SYNONYMS: Dict[str, List[str]] = {
    "template": ["boilerplate", "starter", "example", "sample"],
    "guide": ["how to", "tutorial", "walkthrough", "instructions", "documentation"],
    "faq": ["frequently asked", "common questions", "q&a", "questions"],
    "video": ["recording", "watch", "tutorial video", "demo"],
    "presentation": ["slides", "deck", "ppt", "powerpoint", "keynote"],
    "document": ["doc", "file", "paper", "article"],
    "checklist": ["list", "steps", "procedure", "process"],
    "playbook": ["runbook", "handbook", "manual"],
}

TEAM_SYNONYMS: Dict[str, List[str]] = {
    "platform": ["platform team", "infrastructure", "core platform"],
    "rcm": ["rcm team", "billing team"],
    "analytics": ["data", "data team", "bi", "business intelligence", "reporting"],
    "product": ["product team", "pm", "product management"],
    "design": ["ux", "ui", "design team", "user experience"],
    "engineering": ["development", "dev", "developers", "software"],
    "it": ["information technology", "tech support", "helpdesk", "it support"],
    "hr": ["human resources", "people team", "people ops"],
    "legal": ["legal team", "counsel"],
}

# Iteration order matters: later tables win reverse-lookup collisions.
DEFAULT_TABLES: Dict[str, Dict[str, List[str]]] = {
    TOOLS: TOOL_SYNONYMS,
    TOPICS: TOPIC_SYNONYMS,
    ACTIONS: ACTION_SYNONYMS,
    RESOURCE_TYPES: RESOURCE_TYPE_SYNONYMS,
    TEAMS: TEAM_SYNONYMS,
}


def _phrase_pattern(phrase: str) -> "re.Pattern[str]":
    """Match a phrase on word boundaries (phrases may contain '&' or digits)."""
    return re.compile(r"(?<![\w])" + re.escape(phrase) + r"(?![\w])")


class SynonymTable:
    """
    A single concern's synonyms (tools, topics, ...) with a scoped reverse lookup.

    Lookups here never consult other tables, so a word that another table
    claims still resolves inside this one.
    """

    def __init__(self, name: str, entries: Mapping[str, Sequence[str]]):
        self.name = name
        forward: Dict[str, Tuple[str, ...]] = {}
        reverse: Dict[str, str] = {}

        for canonical, synonyms in entries.items():
            key = canonical.lower()
            forward[key] = tuple(s.lower() for s in synonyms)
            for synonym in forward[key]:
                previous = reverse.get(synonym)
                if previous is not None and previous != key:
                    logger.debug(
                        "Synonym %r listed under %r and %r in table %s; keeping %r",
                        synonym, previous, key, name, key,
                    )
                reverse[synonym] = key

        self._forward = MappingProxyType(forward)
        self._reverse = MappingProxyType(reverse)
        self._phrases = [
            (_phrase_pattern(phrase), canonical)
            for phrase, canonical in list(reverse.items()) + [(k, k) for k in forward]
            if " " in phrase
        ]

    @property
    def canonicals(self) -> Tuple[str, ...]:
        """Canonical terms in insertion order"""
        return tuple(self._forward)

    def items(self):
        return self._forward.items()

    def synonyms(self, canonical: str) -> Tuple[str, ...]:
        return self._forward.get(canonical.lower(), ())

    def canonical_of(self, term: str) -> Optional[str]:
        """Canonical form of `term` within this table, or None if the table doesn't know it."""
        key = term.lower()
        if key in self._forward:
            return key
        return self._reverse.get(key)

    def contains(self, term: str) -> bool:
        return self.canonical_of(term) is not None

    def find_phrases(self, text: str) -> List[str]:
        """Canonicals whose multi-word forms occur in `text`, first-seen order."""
        lowered = text.lower()
        found: List[str] = []
        for pattern, canonical in self._phrases:
            if canonical not in found and pattern.search(lowered):
                found.append(canonical)
        return found


class VocabularyIndex:
    """
    Canonicalization and expansion over all synonym tables.

    Construction:
    1. Merge the tables into one forward table (canonical -> synonyms).
       A canonical present in several tables keeps the union of its synonyms.
    2. Flatten into a reverse table (lowercased synonym -> canonical).
       A synonym listed under two canonicals resolves to the later one.

    Every operation is total over strings.
    """

    def __init__(self, tables: Mapping[str, Mapping[str, Sequence[str]]]):
        self._tables: Dict[str, SynonymTable] = {
            name: SynonymTable(name, entries) for name, entries in tables.items()
        }

        forward: Dict[str, List[str]] = {}
        reverse: Dict[str, str] = {}
        for table in self._tables.values():
            for canonical, synonyms in table.items():
                merged = forward.setdefault(canonical, [])
                for synonym in synonyms:
                    if synonym not in merged:
                        merged.append(synonym)
                    previous = reverse.get(synonym)
                    if previous is not None and previous != canonical:
                        logger.debug(
                            "Synonym %r remapped from %r to %r by table %s",
                            synonym, previous, canonical, table.name,
                        )
                    reverse[synonym] = canonical

        self._forward = MappingProxyType({c: tuple(s) for c, s in forward.items()})
        self._reverse = MappingProxyType(reverse)
        self._phrases = [
            (_phrase_pattern(phrase), self.canonicalize(phrase))
            for phrase in list(self._reverse) + list(self._forward)
            if " " in phrase
        ]

        logger.debug(
            "Vocabulary index built: %d tables, %d canonical terms, %d synonyms",
            len(self._tables), len(self._forward), len(self._reverse),
        )

    @property
    def table_names(self) -> Tuple[str, ...]:
        return tuple(self._tables)

    @property
    def canonicals(self) -> Tuple[str, ...]:
        return tuple(self._forward)

    def table(self, name: str) -> SynonymTable:
        """Per-table scoped lookup (raises KeyError for unknown table names)."""
        return self._tables[name]

    def synonyms(self, canonical: str) -> Tuple[str, ...]:
        return self._forward.get(canonical.lower(), ())

    def is_known(self, term: str) -> bool:
        key = term.lower()
        return key in self._forward or key in self._reverse

    def expand(self, term: str) -> List[str]:
        """
        Expand a term to its synonym group.

        Canonical key -> [term, *synonyms]; known synonym -> [canonical, *synonyms];
        anything else is returned unchanged as a single-element list.
        """
        key = term.lower()
        if key in self._forward:
            return [key, *self._forward[key]]

        canonical = self._reverse.get(key)
        if canonical is not None:
            return [canonical, *self._forward[canonical]]

        return [term]

    def canonicalize(self, term: str) -> str:
        """Canonical form if known, else the lowercased input."""
        key = term.lower()
        if key in self._forward:
            return key
        return self._reverse.get(key, key)

    def are_synonyms(self, term1: str, term2: str) -> bool:
        return self.canonicalize(term1) == self.canonicalize(term2)

    def find_phrases(self, text: str) -> List[str]:
        """Canonicals of multi-word synonyms occurring in `text`, across all tables."""
        lowered = text.lower()
        found: List[str] = []
        for pattern, canonical in self._phrases:
            if canonical not in found and pattern.search(lowered):
                found.append(canonical)
        return found


@lru_cache(maxsize=None)
def default_vocabulary() -> VocabularyIndex:
    """The process-wide index over DEFAULT_TABLES, built on first use."""
    return VocabularyIndex(DEFAULT_TABLES)
