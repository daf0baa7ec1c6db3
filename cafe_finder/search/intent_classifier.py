"""
Intent Classifier

Assigns one IntentKind to a NormalizedQuery with a priority-ordered rule
cascade. The first rule that matches wins and carries a fixed confidence,
so every classification can be explained by naming the rule that fired.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, FrozenSet, List, Optional, Tuple

from ..common.config import ClassifierConfig
from ..common.vocabulary import ACTIONS, TOOLS, TOPICS, VocabularyIndex
from .query_processor import NormalizedQuery

logger = logging.getLogger("cafe_finder.search.intent_classifier")


class IntentKind(str, Enum):
    """What the user wants"""
    PERSON_LOOKUP = "person_lookup"  # "contact natasha", "who is my manager"
    TOOL_ACCESS = "tool_access"  # "request access to jira"
    TOOL_INFO = "tool_info"  # "figma"
    CONCEPT_EXPLANATION = "concept_explanation"  # "what is cob"
    SESSION_NEXT = "session_next"  # "when is the next lop"
    SESSION_LOOKUP = "session_lookup"  # "lop about roadmaps"
    RESOURCE_BROWSE = "resource_browse"  # some signal, nothing domain-specific
    UNKNOWN = "unknown"  # no terms at all


@dataclass(frozen=True)
class Intent:
    """Classified intent; derived from the normalized query only"""
    primary: IntentKind
    confidence: float
    rule: str = ""


@dataclass(frozen=True)
class QuerySignals:
    """Canonical terms the query hits in each vocabulary concern"""
    terms: FrozenSet[str]
    tools: FrozenSet[str]
    topics: FrozenSet[str]
    actions: FrozenSet[str]


class IntentClassifier:
    """
    Rule cascade over vocabulary signals.

    Rules (first match wins):
    1. tool_access: access/request action + tool
    2. tool_info: tool
    3. person_lookup: contact action, or possessive marker + role cue
    4. session_next: next/upcoming marker + session term
    5. session_lookup: session term
    6. concept_explanation: healthcare/product topic
    7. resource_browse: any terms
    8. unknown: nothing at all
    """

    def __init__(
        self,
        vocabulary: VocabularyIndex,
        config: Optional[ClassifierConfig] = None,
    ):
        """
        Initialize classifier.

        Args:
            vocabulary: Shared read-only vocabulary index
            config: Marker lists and confidence tiers (defaults if omitted)
        """
        self._vocabulary = vocabulary
        self._config = config or ClassifierConfig()

        self._rules: List[Tuple[str, IntentKind, Callable[[QuerySignals], bool]]] = [
            ("tool_access", IntentKind.TOOL_ACCESS, self._is_tool_access),
            ("tool_info", IntentKind.TOOL_INFO, self._is_tool_info),
            ("person_lookup", IntentKind.PERSON_LOOKUP, self._is_person_lookup),
            ("session_next", IntentKind.SESSION_NEXT, self._is_session_next),
            ("session_lookup", IntentKind.SESSION_LOOKUP, self._is_session_lookup),
            ("concept_explanation", IntentKind.CONCEPT_EXPLANATION, self._is_concept),
            ("resource_browse", IntentKind.RESOURCE_BROWSE, self._has_terms),
        ]

    def classify(self, query: NormalizedQuery) -> Intent:
        """
        Classify a normalized query.

        Args:
            query: Output of QueryProcessor.normalize

        Returns:
            Intent with the tier confidence of the winning rule
        """
        signals = self.extract_signals(query)

        for rule_name, kind, predicate in self._rules:
            if predicate(signals):
                return self._intent(kind, rule_name)

        return self._intent(IntentKind.UNKNOWN, "unknown")

    def extract_signals(self, query: NormalizedQuery) -> QuerySignals:
        """Collect per-table canonicals from single terms and multi-word phrases"""
        return QuerySignals(
            terms=frozenset(query.terms),
            tools=self._table_hits(TOOLS, query),
            topics=self._table_hits(TOPICS, query),
            actions=self._table_hits(ACTIONS, query),
        )

    def _table_hits(self, table_name: str, query: NormalizedQuery) -> FrozenSet[str]:
        table = self._vocabulary.table(table_name)
        hits = {table.canonical_of(t) for t in query.terms}
        hits.discard(None)
        hits.update(table.find_phrases(query.normalized))
        return frozenset(hits)

    def _intent(self, kind: IntentKind, rule_name: str) -> Intent:
        confidence = self._config.tier_confidence.get(rule_name, 0.0)
        logger.debug("Intent %s (rule %s, confidence %.2f)", kind.value, rule_name, confidence)
        return Intent(primary=kind, confidence=confidence, rule=rule_name)

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _is_tool_access(self, s: QuerySignals) -> bool:
        return bool(s.tools) and bool(s.actions & set(self._config.access_actions))

    def _is_tool_info(self, s: QuerySignals) -> bool:
        return bool(s.tools)

    def _is_person_lookup(self, s: QuerySignals) -> bool:
        if s.actions & set(self._config.contact_actions):
            return True
        has_possessive = bool(s.terms & set(self._config.possessive_markers))
        return has_possessive and bool(s.terms & set(self._config.role_cues))

    def _session_hits(self, s: QuerySignals) -> bool:
        return bool(s.topics & set(self._config.session_canonicals))

    def _is_session_next(self, s: QuerySignals) -> bool:
        return self._session_hits(s) and bool(s.terms & set(self._config.next_markers))

    def _is_session_lookup(self, s: QuerySignals) -> bool:
        return self._session_hits(s)

    def _is_concept(self, s: QuerySignals) -> bool:
        return bool(s.topics - set(self._config.session_canonicals))

    def _has_terms(self, s: QuerySignals) -> bool:
        return bool(s.terms)
