"""
Café Finder Common Module

Shared infrastructure for the search pipeline.
"""

from .config import FinderConfig, load_config
from .vocabulary import VocabularyIndex, SynonymTable, default_vocabulary
from .collaborators import DomainCollaborator, InMemoryCollaborator
from .errors import FinderError, RetrievalError, SynthesisError

__all__ = [
    "FinderConfig",
    "load_config",
    "VocabularyIndex",
    "SynonymTable",
    "default_vocabulary",
    "DomainCollaborator",
    "InMemoryCollaborator",
    "FinderError",
    "RetrievalError",
    "SynthesisError",
]
