"""
Synthesized Answer Schema

The single artifact handed to the presentation layer per query.
Field names and AnswerType values are a stable contract with the renderer.
"""

from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import Field

from .results import DomainResult, ResultKind, WireModel


class AnswerType(str, Enum):
    """Template that produced the answer"""
    PERSON_CARD = "PERSON_CARD"
    TOOL_CARD = "TOOL_CARD"
    INSTANT_ANSWER = "INSTANT_ANSWER"
    CONCEPT_EXPLANATION = "CONCEPT_EXPLANATION"
    LOP_SESSION = "LOP_SESSION"
    RESOURCE_LIST = "RESOURCE_LIST"
    ZERO_RESULTS = "ZERO_RESULTS"


class AnswerAction(WireModel):
    """A call-to-action button"""
    label: str
    url: str
    icon: Optional[str] = None
    primary: bool = False


class AnswerSource(WireModel):
    """A citation backing the answer"""
    title: str
    url: str
    type: ResultKind


class SynthesizedAnswer(WireModel):
    """
    Typed instant answer.

    `confidence` says how sure the engine is that this is the right *kind*
    of answer, not how well the data matched.
    """
    type: AnswerType
    confidence: float = Field(ge=0.0, le=1.0)
    text: str
    actions: Tuple[AnswerAction, ...] = ()
    sources: Tuple[AnswerSource, ...] = ()
    steps: Optional[Tuple[str, ...]] = None
    key_points: Optional[Tuple[str, ...]] = None
    featured_result: Optional[DomainResult] = None

    @property
    def primary_action(self) -> Optional[AnswerAction]:
        for action in self.actions:
            if action.primary:
                return action
        return None

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict in the renderer's camelCase shape"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
