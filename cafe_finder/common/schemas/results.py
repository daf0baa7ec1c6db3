"""
Domain Result Schemas

Typed shapes of the hits each domain collaborator returns.
The variants form a tagged union keyed by `type`, so the answer templates
dispatch on the tag instead of probing for attributes.
"""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# ============================================================================
# Enums
# ============================================================================

class ResultKind(str, Enum):
    """Result domains, one per collaborator"""
    PERSON = "person"
    TOOL = "tool"
    FAQ = "faq"
    SESSION = "lop_session"
    RESOURCE = "resource"
    DISCUSSION = "discussion"


class ToolStatus(str, Enum):
    """Availability of a tool"""
    AVAILABLE = "available"
    LIMITED = "limited"
    UNAVAILABLE = "unavailable"
    COMING_SOON = "coming_soon"


# ============================================================================
# Base
# ============================================================================

class WireModel(BaseModel):
    """
    Base for everything handed to the presentation layer.

    Frozen, accepts snake_case or camelCase input, dumps camelCase on the wire.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class BaseResult(WireModel):
    """Fields every domain result carries"""
    id: str
    tags: List[str] = Field(default_factory=list)
    match_score: float = Field(ge=0.0, le=1.0, default=0.0)


# ============================================================================
# Variants
# ============================================================================

class PersonResult(BaseResult):
    type: Literal["person"] = "person"
    name: str
    email: str
    title: str = ""
    team: str = ""
    location: str = ""
    avatar_url: Optional[str] = None
    expertise_areas: List[str] = Field(default_factory=list)
    teams_deep_link: Optional[str] = None
    slack_handle: Optional[str] = None


class ToolResult(BaseResult):
    type: Literal["tool"] = "tool"
    name: str
    description: str
    access_url: str
    category: str = ""
    request_url: Optional[str] = None
    guide_url: Optional[str] = None
    status: ToolStatus = ToolStatus.AVAILABLE
    turnaround: Optional[str] = None


class FAQResult(BaseResult):
    type: Literal["faq"] = "faq"
    question: str
    answer: str
    answer_summary: str = ""
    category: str = ""
    view_count: int = 0
    helpful_count: int = 0
    expert_id: Optional[str] = None


class ResourceResult(BaseResult):
    type: Literal["resource"] = "resource"
    title: str
    description: str = ""
    url: Optional[str] = None
    pillar: str = ""
    category: str = ""
    resource_type: str = ""
    author_id: Optional[str] = None


class DiscussionResult(BaseResult):
    type: Literal["discussion"] = "discussion"
    title: str
    body_preview: str = ""
    author_name: str = ""
    author_id: str = ""
    status: Literal["open", "resolved", "stale"] = "open"
    reply_count: int = 0
    has_accepted_answer: bool = False


class SessionResult(BaseResult):
    """A Love of Product session"""
    type: Literal["lop_session"] = "lop_session"
    title: str
    session_date: datetime
    session_number: Optional[int] = None
    description: str = ""
    speaker_name: str = ""
    speaker_id: str = ""
    duration: str = ""
    topics: List[str] = Field(default_factory=list)
    video_url: Optional[str] = None
    slides_url: Optional[str] = None
    notes_url: Optional[str] = None
    thumbnail_url: Optional[str] = None

    @field_validator("session_date", mode="before")
    @classmethod
    def _parse_session_date(cls, value):
        """Accept bare dates and ISO strings with a trailing Z"""
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        if isinstance(value, str):
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        return value


DomainResult = Annotated[
    Union[
        PersonResult,
        ToolResult,
        FAQResult,
        ResourceResult,
        DiscussionResult,
        SessionResult,
    ],
    Field(discriminator="type"),
]

RESULT_MODELS: Dict[ResultKind, Type[BaseResult]] = {
    ResultKind.PERSON: PersonResult,
    ResultKind.TOOL: ToolResult,
    ResultKind.FAQ: FAQResult,
    ResultKind.SESSION: SessionResult,
    ResultKind.RESOURCE: ResourceResult,
    ResultKind.DISCUSSION: DiscussionResult,
}
