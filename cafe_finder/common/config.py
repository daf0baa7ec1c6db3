"""
Configuration Management for Café Finder

Loads configuration from ~/.cafe_finder/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, Tuple

from dotenv import load_dotenv

logger = logging.getLogger("cafe_finder.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".cafe_finder"
CONFIG_PATH = CONFIG_DIR / "config.json"

# Rule name -> confidence. Static on purpose: the cascade is explainable, not learned.
DEFAULT_TIER_CONFIDENCE = {
    "tool_access": 0.9,
    "tool_info": 0.8,
    "person_lookup": 0.7,
    "session_next": 0.9,
    "session_lookup": 0.8,
    "concept_explanation": 0.8,
    "resource_browse": 0.4,
    "unknown": 0.0,
}


@dataclass
class QueryConfig:
    """Query normalizer configuration"""
    max_query_length: int = 500


@dataclass
class ClassifierConfig:
    """Intent rule cascade configuration"""
    access_actions: Tuple[str, ...] = ("access", "request")
    contact_actions: Tuple[str, ...] = ("contact",)
    possessive_markers: Tuple[str, ...] = ("my",)
    role_cues: Tuple[str, ...] = (
        "manager", "lead", "boss", "mentor", "buddy", "director", "expert",
        "owner", "person", "colleague", "teammate", "hrbp", "who",
    )
    next_markers: Tuple[str, ...] = ("next", "upcoming")
    session_canonicals: Tuple[str, ...] = ("lop",)
    tier_confidence: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_TIER_CONFIDENCE)
    )


@dataclass
class RetrieverConfig:
    """Domain retriever configuration"""
    max_results: int = 10
    collaborator_timeout: float = 5.0  # seconds per collaborator call


@dataclass
class SynthesizerConfig:
    """Answer synthesizer configuration"""
    max_sources: int = 5
    instant_answer_threshold: float = 0.9
    access_portal_name: str = "the Identity Portal"


@dataclass
class FinderConfig:
    """Main Café Finder configuration"""
    query: QueryConfig = field(default_factory=QueryConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    retriever: RetrieverConfig = field(default_factory=RetrieverConfig)
    synthesizer: SynthesizerConfig = field(default_factory=SynthesizerConfig)


def _parse_query_config(data: dict) -> QueryConfig:
    """Parse query section from config dict"""
    query_data = data.get("query", {})
    return QueryConfig(
        max_query_length=query_data.get("max_query_length", 500),
    )


def _parse_classifier_config(data: dict) -> ClassifierConfig:
    """Parse classifier section from config dict.

    Marker lists are stored as JSON arrays; missing keys keep their defaults.
    Tier overrides are merged over the default tiers so a partial table is valid.
    """
    classifier_data = data.get("classifier", {})
    defaults = ClassifierConfig()

    def _markers(key: str) -> Tuple[str, ...]:
        values = classifier_data.get(key)
        if values is None:
            return getattr(defaults, key)
        return tuple(str(v).lower() for v in values)

    tiers = dict(DEFAULT_TIER_CONFIDENCE)
    tiers.update(classifier_data.get("tier_confidence", {}))

    return ClassifierConfig(
        access_actions=_markers("access_actions"),
        contact_actions=_markers("contact_actions"),
        possessive_markers=_markers("possessive_markers"),
        role_cues=_markers("role_cues"),
        next_markers=_markers("next_markers"),
        session_canonicals=_markers("session_canonicals"),
        tier_confidence=tiers,
    )


def _parse_retriever_config(data: dict) -> RetrieverConfig:
    """Parse retriever section from config dict"""
    retriever_data = data.get("retriever", {})
    return RetrieverConfig(
        max_results=retriever_data.get("max_results", 10),
        collaborator_timeout=retriever_data.get("collaborator_timeout", 5.0),
    )


def _parse_synthesizer_config(data: dict) -> SynthesizerConfig:
    """Parse synthesizer section from config dict"""
    synthesizer_data = data.get("synthesizer", {})
    return SynthesizerConfig(
        max_sources=synthesizer_data.get("max_sources", 5),
        instant_answer_threshold=synthesizer_data.get("instant_answer_threshold", 0.9),
        access_portal_name=synthesizer_data.get("access_portal_name", "the Identity Portal"),
    )


def load_config() -> FinderConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (a local .env file is read first)
    2. Config file (~/.cafe_finder/config.json)
    3. Default values
    """
    load_dotenv()
    config = FinderConfig()

    # Load from config file if exists
    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            config.query = _parse_query_config(data)
            config.classifier = _parse_classifier_config(data)
            config.retriever = _parse_retriever_config(data)
            config.synthesizer = _parse_synthesizer_config(data)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load config file %s: %s", CONFIG_PATH, e)

    # Environment variable overrides
    if os.getenv("FINDER_MAX_QUERY_LENGTH"):
        config.query.max_query_length = int(os.getenv("FINDER_MAX_QUERY_LENGTH"))
    if os.getenv("FINDER_MAX_RESULTS"):
        config.retriever.max_results = int(os.getenv("FINDER_MAX_RESULTS"))
    if os.getenv("FINDER_COLLABORATOR_TIMEOUT"):
        config.retriever.collaborator_timeout = float(os.getenv("FINDER_COLLABORATOR_TIMEOUT"))
    if os.getenv("FINDER_MAX_SOURCES"):
        config.synthesizer.max_sources = int(os.getenv("FINDER_MAX_SOURCES"))
    if os.getenv("FINDER_INSTANT_ANSWER_THRESHOLD"):
        config.synthesizer.instant_answer_threshold = float(
            os.getenv("FINDER_INSTANT_ANSWER_THRESHOLD")
        )

    return config
