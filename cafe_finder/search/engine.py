"""
Finder Engine

Wires the pipeline: normalize -> classify -> retrieve -> synthesize.
`answer_query` is the strict entry point; `search` wraps it for the UI with
grouped results, suggestions and timings, and turns engine errors into a
"search unavailable" response instead of raising.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from ..common.collaborators import DomainCollaborator
from ..common.config import FinderConfig, load_config
from ..common.errors import FinderError
from ..common.schemas import ResultKind, SynthesizedAnswer
from ..common.vocabulary import TOPICS, VocabularyIndex, default_vocabulary
from .intent_classifier import Intent, IntentClassifier
from .query_processor import NormalizedQuery, QueryProcessor
from .retriever import Candidate, DomainRetriever
from .synthesizer import AnswerSynthesizer

logger = logging.getLogger("cafe_finder.search.engine")

ERROR_SUGGESTIONS = ("Try a different search", "Browse all resources")


@dataclass
class SearchMetrics:
    """Per-stage timings in milliseconds"""
    normalize_ms: float = 0.0
    retrieve_ms: float = 0.0
    synthesize_ms: float = 0.0
    total_ms: float = 0.0


@dataclass
class SearchResponse:
    """Everything the results page needs for one query"""
    query: NormalizedQuery
    intent: Intent
    answer: Optional[SynthesizedAnswer]
    results: Dict[ResultKind, List[Candidate]] = field(default_factory=dict)
    total_count: int = 0
    suggestions: List[str] = field(default_factory=list)
    metrics: SearchMetrics = field(default_factory=SearchMetrics)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def group_by_kind(candidates: List[Candidate]) -> Dict[ResultKind, List[Candidate]]:
    """Group candidates by domain, keeping rank order inside each group"""
    grouped: Dict[ResultKind, List[Candidate]] = {}
    for c in candidates:
        grouped.setdefault(c.kind, []).append(c)
    return grouped


class FinderEngine:
    """
    Query understanding and answer synthesis over pluggable collaborators.

    The vocabulary is shared read-only; no other state survives a query.
    """

    def __init__(
        self,
        collaborators: Mapping[ResultKind, DomainCollaborator],
        vocabulary: Optional[VocabularyIndex] = None,
        config: Optional[FinderConfig] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        """
        Initialize engine.

        Args:
            collaborators: Search backend per result domain
            vocabulary: Synonym index (built-in tables if omitted)
            config: Engine configuration (defaults if omitted)
            today: Clock for upcoming-session selection
        """
        self._config = config or FinderConfig()
        self._vocabulary = vocabulary or default_vocabulary()

        self._processor = QueryProcessor(self._config.query.max_query_length)
        self._classifier = IntentClassifier(self._vocabulary, self._config.classifier)
        self._retriever = DomainRetriever(collaborators, self._vocabulary, self._config.retriever)
        self._synthesizer = AnswerSynthesizer(self._config.synthesizer, today=today)

    @classmethod
    def from_config_file(
        cls,
        collaborators: Mapping[ResultKind, DomainCollaborator],
        **kwargs,
    ) -> "FinderEngine":
        """Build an engine from ~/.cafe_finder/config.json and FINDER_* env vars"""
        return cls(collaborators, config=load_config(), **kwargs)

    @property
    def vocabulary(self) -> VocabularyIndex:
        return self._vocabulary

    async def answer_query(self, raw: Optional[str]) -> SynthesizedAnswer:
        """
        Answer a raw query.

        Raises:
            RetrievalError: every queried domain failed
            SynthesisError: the top candidate cannot fill its template
        """
        query = self._processor.normalize(raw)
        intent = self._classifier.classify(query)
        candidates = await self._retriever.retrieve(intent, query)
        return self._synthesizer.synthesize(query, intent, candidates)

    async def search(self, raw: Optional[str]) -> SearchResponse:
        """
        Full search for the results page. Engine errors are reported in
        `error` with `answer=None`; an empty result set is not an error.
        """
        start = time.perf_counter()
        metrics = SearchMetrics()

        query = self._processor.normalize(raw)
        intent = self._classifier.classify(query)
        metrics.normalize_ms = _elapsed_ms(start)

        try:
            stage = time.perf_counter()
            candidates = await self._retriever.retrieve(intent, query)
            metrics.retrieve_ms = _elapsed_ms(stage)

            stage = time.perf_counter()
            answer = self._synthesizer.synthesize(query, intent, candidates)
            metrics.synthesize_ms = _elapsed_ms(stage)
        except FinderError as e:
            logger.error("Search failed for %r: %s", query.raw, e)
            metrics.total_ms = _elapsed_ms(start)
            return SearchResponse(
                query=query,
                intent=intent,
                answer=None,
                suggestions=list(ERROR_SUGGESTIONS),
                metrics=metrics,
                error=str(e),
            )

        metrics.total_ms = _elapsed_ms(start)
        response = SearchResponse(
            query=query,
            intent=intent,
            answer=answer,
            results=group_by_kind(candidates),
            total_count=len(candidates),
            suggestions=self.suggestions(query, candidates),
            metrics=metrics,
        )

        logger.debug(
            "Search %r -> %d results in %.1fms (%s, %s)",
            query.raw, response.total_count, metrics.total_ms,
            intent.primary.value, answer.type.value,
        )
        return response

    def suggestions(self, query: NormalizedQuery, candidates: List[Candidate]) -> List[str]:
        """Follow-up queries offered when nothing matched"""
        if candidates:
            return []

        suggestions = []
        topic = self._first_topic(query)
        if topic:
            suggestions.extend([f"{topic} guide", f"{topic} faq", f"{topic} expert"])

        suggestions.extend(["Browse all resources", "Start a discussion"])
        return suggestions

    def _first_topic(self, query: NormalizedQuery) -> Optional[str]:
        topics = self._vocabulary.table(TOPICS)
        for term in query.terms:
            canonical = topics.canonical_of(term)
            if canonical:
                return canonical
        return None

    def classify(self, raw: Optional[str]) -> Tuple[NormalizedQuery, Intent]:
        """Normalize and classify without retrieving (for debugging and tests)"""
        query = self._processor.normalize(raw)
        return query, self._classifier.classify(query)


def _elapsed_ms(since: float) -> float:
    return (time.perf_counter() - since) * 1000
