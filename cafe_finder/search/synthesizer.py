"""
Answer Synthesizer

Picks exactly one answer template for (query, intent, candidates).
Template selection is ordered and the first applicable template wins:

- no candidates                         -> ZERO_RESULTS
- person lookup + person on top         -> PERSON_CARD
- tool access/info + tool on top        -> TOOL_CARD
- concept + FAQ on top                  -> CONCEPT_EXPLANATION
- session next/lookup + session on top  -> LOP_SESSION
- near-exact match on top, any intent:
    person                              -> PERSON_CARD
    tool                                -> TOOL_CARD
    FAQ                                 -> INSTANT_ANSWER
    session                             -> LOP_SESSION
- anything else                         -> RESOURCE_LIST

Confidence belongs to the template, never to the match score.
"""

import logging
from datetime import date
from typing import Callable, Optional, Sequence

from ..common.config import SynthesizerConfig
from ..common.schemas import ResultKind, SessionResult, SynthesizedAnswer
from . import templates
from .intent_classifier import Intent, IntentKind
from .query_processor import NormalizedQuery
from .retriever import Candidate

logger = logging.getLogger("cafe_finder.search.synthesizer")

_TOOL_INTENTS = (IntentKind.TOOL_ACCESS, IntentKind.TOOL_INFO)
_SESSION_INTENTS = (IntentKind.SESSION_NEXT, IntentKind.SESSION_LOOKUP)


class AnswerSynthesizer:
    """
    Deterministic template dispatch.

    Raises SynthesisError when the chosen template cannot be built from the
    candidate; a malformed record is never downgraded to zero-results.
    """

    def __init__(
        self,
        config: Optional[SynthesizerConfig] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        """
        Initialize synthesizer.

        Args:
            config: Source cap, instant-answer threshold, portal name
            today: Clock used to pick the next upcoming session
        """
        self._config = config or SynthesizerConfig()
        self._today = today or date.today

    def synthesize(
        self,
        query: NormalizedQuery,
        intent: Intent,
        candidates: Sequence[Candidate],
    ) -> SynthesizedAnswer:
        """
        Build the answer for a query.

        Args:
            query: Normalized query
            intent: Classified intent
            candidates: Retriever output, best first

        Returns:
            SynthesizedAnswer

        Raises:
            SynthesisError: the selected template's required fields are missing
        """
        if not candidates:
            return templates.zero_results(query)

        top = candidates[0]
        kind = intent.primary

        if kind == IntentKind.PERSON_LOOKUP and top.kind == ResultKind.PERSON:
            return templates.person_card(top)

        if kind in _TOOL_INTENTS and top.kind == ResultKind.TOOL:
            return templates.tool_card(intent, top, self._config.access_portal_name)

        if kind == IntentKind.CONCEPT_EXPLANATION and top.kind == ResultKind.FAQ:
            return templates.concept_explanation(top)

        if kind in _SESSION_INTENTS and top.kind == ResultKind.SESSION:
            featured = top
            if kind == IntentKind.SESSION_NEXT:
                featured = self._next_session(candidates) or top
            return templates.lop_session(query, intent, featured)

        if top.match_score >= self._config.instant_answer_threshold:
            if top.kind == ResultKind.PERSON:
                return templates.person_card(top)
            if top.kind == ResultKind.TOOL:
                return templates.tool_card(intent, top, self._config.access_portal_name)
            if top.kind == ResultKind.FAQ:
                return templates.instant_answer(top)
            if top.kind == ResultKind.SESSION:
                return templates.lop_session(query, intent, top)

        return templates.resource_list(query, candidates, self._config.max_sources)

    def _next_session(self, candidates: Sequence[Candidate]) -> Optional[Candidate]:
        """Earliest session dated today or later, if any"""
        today = self._today()
        upcoming = []

        for c in candidates:
            if c.kind != ResultKind.SESSION:
                continue
            session = templates.load_result("lop_session", c, SessionResult)
            if session.session_date.date() >= today:
                upcoming.append((session.session_date.date(), c))

        if not upcoming:
            logger.debug("No upcoming session among %d candidates", len(candidates))
            return None

        # min keeps the first of equal dates, i.e. the better match
        return min(upcoming, key=lambda pair: pair[0])[1]


def format_answer_for_display(answer: SynthesizedAnswer) -> str:
    """Plain-text rendering for logs and consoles"""
    lines = [f"[{answer.type.value}] ({answer.confidence:.0%}) {answer.text}"]

    if answer.key_points:
        lines.append("Key points: " + ", ".join(answer.key_points))

    if answer.steps:
        lines.append("Suggestions:")
        lines.extend(f"  - {step}" for step in answer.steps)

    for action in answer.actions:
        marker = "*" if action.primary else "-"
        lines.append(f"  {marker} {action.label}: {action.url}")

    if answer.sources:
        lines.append("Sources:")
        for i, source in enumerate(answer.sources, 1):
            lines.append(f"  {i}. {source.title} <{source.url}>")

    return "\n".join(lines)
