"""
Domain Retriever

Queries the domain collaborators implied by the intent, unions their rows
across synonym expansions, and scores each row by term overlap.
Collaborator calls are the only await points in the pipeline.
"""

import asyncio
import logging
import string
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from ..common.collaborators import DomainCollaborator
from ..common.config import RetrieverConfig
from ..common.errors import RetrievalError
from ..common.schemas import RESULT_MODELS, BaseResult, ResultKind
from ..common.vocabulary import VocabularyIndex
from .intent_classifier import Intent, IntentKind
from .query_processor import NormalizedQuery

logger = logging.getLogger("cafe_finder.search.retriever")

# Merge order when several domains are queried
ALL_DOMAINS: Tuple[ResultKind, ...] = (
    ResultKind.PERSON,
    ResultKind.TOOL,
    ResultKind.FAQ,
    ResultKind.SESSION,
    ResultKind.RESOURCE,
    ResultKind.DISCUSSION,
)

DOMAINS_BY_INTENT: Dict[IntentKind, Tuple[ResultKind, ...]] = {
    IntentKind.PERSON_LOOKUP: (ResultKind.PERSON,),
    IntentKind.TOOL_ACCESS: (ResultKind.TOOL,),
    IntentKind.TOOL_INFO: (ResultKind.TOOL,),
    IntentKind.CONCEPT_EXPLANATION: (ResultKind.FAQ,),
    IntentKind.SESSION_NEXT: (ResultKind.SESSION,),
    IntentKind.SESSION_LOOKUP: (ResultKind.SESSION,),
    IntentKind.RESOURCE_BROWSE: ALL_DOMAINS,
    IntentKind.UNKNOWN: ALL_DOMAINS,
}

# Row keys that may carry the display title, in preference order
_TITLE_KEYS = ("name", "title", "question")


@dataclass(frozen=True)
class Candidate:
    """A scored, domain-tagged search hit. Produced per query, never mutated."""
    kind: ResultKind
    record_id: str
    title: str
    match_score: float
    tags: Tuple[str, ...] = ()
    payload: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def to_result(self, model: Optional[Type[BaseResult]] = None) -> BaseResult:
        """
        Build the typed domain result for this candidate.

        Raises:
            pydantic.ValidationError: the payload lacks fields the model requires
        """
        model = model or RESULT_MODELS[self.kind]
        data = dict(self.payload)
        data.pop("type", None)
        data.pop("matchScore", None)
        data["id"] = self.record_id
        data["tags"] = list(self.tags)
        data["match_score"] = self.match_score
        return model.model_validate(data)


class DomainRetriever:
    """
    Fetches candidates for a classified query.

    Features:
    - Intent-scoped domain selection
    - Synonym expansion per original term
    - Per-domain graceful degradation (a failing domain contributes nothing)
    - Term-overlap scoring with a stable sort
    """

    def __init__(
        self,
        collaborators: Mapping[ResultKind, DomainCollaborator],
        vocabulary: VocabularyIndex,
        config: Optional[RetrieverConfig] = None,
    ):
        """
        Initialize retriever.

        Args:
            collaborators: One search backend per result domain; missing
                domains are simply not queried
            vocabulary: Shared read-only vocabulary index
            config: Result cap and collaborator timeout
        """
        self._collaborators = dict(collaborators)
        self._vocabulary = vocabulary
        self._config = config or RetrieverConfig()

    def domains_for(self, intent: Intent) -> List[ResultKind]:
        """Domains this intent queries that have a registered collaborator"""
        return [
            d for d in DOMAINS_BY_INTENT[intent.primary]
            if d in self._collaborators
        ]

    async def retrieve(
        self,
        intent: Intent,
        query: NormalizedQuery,
    ) -> List[Candidate]:
        """
        Retrieve scored candidates.

        Args:
            intent: Classified intent (selects the domains)
            query: Normalized query (terms are expanded before searching)

        Returns:
            Candidates sorted by match_score, highest first; may be empty

        Raises:
            RetrievalError: every queried domain failed
        """
        if not query.terms:
            return []

        domains = self.domains_for(intent)
        if not domains:
            logger.debug("No collaborators registered for intent %s", intent.primary.value)
            return []

        outcomes = await asyncio.gather(
            *(self._search_domain(domain, query) for domain in domains)
        )

        failed = [d.value for d, rows in zip(domains, outcomes) if rows is None]
        if len(failed) == len(domains):
            logger.error("All queried domains failed: %s", ", ".join(failed))
            raise RetrievalError(failed)

        candidates: List[Candidate] = []
        for domain, rows in zip(domains, outcomes):
            for row in rows or []:
                candidate = self._to_candidate(domain, row, query)
                if candidate is not None:
                    candidates.append(candidate)

        # list.sort is stable: ties keep collaborator order
        candidates.sort(key=lambda c: c.match_score, reverse=True)

        return candidates[:self._config.max_results]

    async def _search_domain(
        self,
        domain: ResultKind,
        query: NormalizedQuery,
    ) -> Optional[List[Dict[str, Any]]]:
        """Union of rows for every expanded term; None if the domain failed."""
        collaborator = self._collaborators[domain]
        batches: List[List[Any]] = []

        try:
            for term in query.terms:
                expanded = self._vocabulary.expand(term)
                results = await asyncio.wait_for(
                    collaborator.search(expanded),
                    timeout=self._config.collaborator_timeout,
                )
                batches.append(list(results or []))
        except asyncio.TimeoutError:
            logger.warning(
                "%s search timed out after %.1fs", domain.value, self._config.collaborator_timeout
            )
            return None
        except Exception as e:
            logger.warning("%s search failed: %s", domain.value, e, exc_info=True)
            return None

        rows: List[Dict[str, Any]] = []
        seen_ids = set()
        for raw in (r for batch in batches for r in batch):
            try:
                row = self._as_dict(raw)
            except Exception as e:
                logger.warning("Skipping malformed %s row %r: %s", domain.value, raw, e)
                continue
            if row is None or row.get("id") is None:
                logger.warning("Skipping %s row without an id: %r", domain.value, raw)
                continue
            record_id = str(row["id"])
            if record_id not in seen_ids:
                seen_ids.add(record_id)
                rows.append(row)

        return rows

    @staticmethod
    def _as_dict(raw: Any) -> Optional[Dict[str, Any]]:
        """Rows may be dicts or model objects"""
        if isinstance(raw, Mapping):
            return dict(raw)
        for attr in ("model_dump", "dict", "to_dict"):
            method = getattr(raw, attr, None)
            if callable(method):
                return dict(method())
        return None

    def _to_candidate(
        self,
        domain: ResultKind,
        row: Dict[str, Any],
        query: NormalizedQuery,
    ) -> Optional[Candidate]:
        """Convert a collaborator row to a Candidate (None if it has no title)"""
        title = next((row[k] for k in _TITLE_KEYS if row.get(k)), None)
        if title is None:
            logger.warning("Skipping %s row %r without a title or name", domain.value, row.get("id"))
            return None

        tags = tuple(str(t) for t in row.get("tags") or ())
        indexed = [str(row[k]) for k in _TITLE_KEYS if row.get(k)] + list(tags)

        return Candidate(
            kind=domain,
            record_id=str(row["id"]),
            title=str(title),
            match_score=self.score(query, indexed),
            tags=tags,
            payload=MappingProxyType(dict(row)),
        )

    def score(self, query: NormalizedQuery, indexed_fields: List[str]) -> float:
        """
        Fraction of the query's original terms whose canonical form appears
        among the canonical forms of the indexed fields.
        """
        if not query.terms:
            return 0.0

        field_terms = set()
        for text in indexed_fields:
            lowered = text.lower()
            for word in lowered.split():
                word = word.strip(string.punctuation)
                if word:
                    field_terms.add(self._vocabulary.canonicalize(word))
            field_terms.update(self._vocabulary.find_phrases(lowered))

        hits = sum(
            1 for term in query.terms
            if self._vocabulary.canonicalize(term) in field_terms
        )
        return round(hits / len(query.terms), 4)
