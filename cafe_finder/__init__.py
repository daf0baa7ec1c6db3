"""
Café Finder

The answer engine behind the portal search bar.

Philosophy:
- Deterministic, explainable rules over learned ranking
- One typed answer per query, never a partially built one
- Unknown vocabulary degrades gracefully, it is never dropped
- "Nothing found" and "search is down" are different outcomes

Usage:
    from cafe_finder.common import load_config, default_vocabulary, InMemoryCollaborator
    from cafe_finder.common.schemas import SynthesizedAnswer, AnswerType
    from cafe_finder.search import FinderEngine
"""

__version__ = "0.1.0"
