"""
Search - Query Understanding and Answer Synthesis

Turns a search-bar query into one typed instant answer.

Key Components:
- QueryProcessor: Normalizes and tokenizes raw input
- IntentClassifier: Rule cascade over vocabulary signals
- DomainRetriever: Queries domain collaborators with synonym expansion
- AnswerSynthesizer: Picks and fills one answer template

Pipeline:
1. Normalize the raw query
2. Classify intent
3. Retrieve and score candidates from the domains the intent implies
4. Synthesize a single answer for the presentation layer
"""

from .query_processor import QueryProcessor, NormalizedQuery
from .intent_classifier import IntentClassifier, Intent, IntentKind
from .retriever import DomainRetriever, Candidate
from .synthesizer import AnswerSynthesizer, format_answer_for_display
from .engine import FinderEngine, SearchResponse, SearchMetrics

__all__ = [
    "QueryProcessor",
    "NormalizedQuery",
    "IntentClassifier",
    "Intent",
    "IntentKind",
    "DomainRetriever",
    "Candidate",
    "AnswerSynthesizer",
    "format_answer_for_display",
    "FinderEngine",
    "SearchResponse",
    "SearchMetrics",
]
