"""
Café Finder Schemas

Domain result variants and the synthesized answer contract.
"""

from .results import (
    ResultKind,
    ToolStatus,
    BaseResult,
    PersonResult,
    ToolResult,
    FAQResult,
    ResourceResult,
    DiscussionResult,
    SessionResult,
    DomainResult,
    RESULT_MODELS,
)
from .answer import AnswerType, AnswerAction, AnswerSource, SynthesizedAnswer

__all__ = [
    "ResultKind",
    "ToolStatus",
    "BaseResult",
    "PersonResult",
    "ToolResult",
    "FAQResult",
    "ResourceResult",
    "DiscussionResult",
    "SessionResult",
    "DomainResult",
    "RESULT_MODELS",
    "AnswerType",
    "AnswerAction",
    "AnswerSource",
    "SynthesizedAnswer",
]
