"""
Answer Templates

One pure function per answer shape. Each validates the candidate payload
into its typed domain result first, so a template never renders from a row
that lacks the fields it needs.
"""

from typing import Sequence, Type, TypeVar
from urllib.parse import quote

from pydantic import ValidationError

from ..common.errors import SynthesisError
from ..common.schemas import (
    AnswerAction,
    AnswerSource,
    AnswerType,
    BaseResult,
    FAQResult,
    PersonResult,
    ResultKind,
    SessionResult,
    SynthesizedAnswer,
    ToolResult,
    ToolStatus,
)
from .intent_classifier import Intent, IntentKind
from .query_processor import NormalizedQuery
from .retriever import Candidate

R = TypeVar("R", bound=BaseResult)

LIBRARY_URL = "/library"

ZERO_RESULTS_STEPS = (
    "Try checking your spelling",
    "Try simpler keywords",
    "Browse by category in the Library",
)

# English regardless of the process locale
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def load_result(template: str, candidate: Candidate, model: Type[R]) -> R:
    """Validate a candidate into `model`, raising SynthesisError on bad data"""
    try:
        return candidate.to_result(model)
    except ValidationError as exc:
        raise SynthesisError(template, candidate.record_id, str(exc)) from exc


def format_session_date(session: SessionResult) -> str:
    """March 1, 2025"""
    d = session.session_date
    return f"{MONTH_NAMES[d.month - 1]} {d.day}, {d.year}"


def source_url(candidate: Candidate) -> str:
    """Best link for citing a candidate of any domain"""
    payload = candidate.payload
    rid = candidate.record_id
    if candidate.kind == ResultKind.PERSON:
        return f"/profile/{rid}"
    if candidate.kind == ResultKind.TOOL:
        return payload.get("access_url") or payload.get("accessUrl") or f"/tools/{rid}"
    if candidate.kind == ResultKind.FAQ:
        return f"/support/faq/{rid}"
    if candidate.kind == ResultKind.SESSION:
        return payload.get("video_url") or payload.get("videoUrl") or f"/lop/{rid}"
    if candidate.kind == ResultKind.DISCUSSION:
        return f"/discuss/{rid}"
    return payload.get("url") or f"{LIBRARY_URL}/{rid}"


# ============================================================================
# Templates
# ============================================================================

def zero_results(query: NormalizedQuery) -> SynthesizedAnswer:
    topic = quote(query.raw, safe="-_.!~*'()")
    return SynthesizedAnswer(
        type=AnswerType.ZERO_RESULTS,
        confidence=1.0,
        text=f'I couldn\'t find any exact matches for "{query.raw}".',
        actions=(
            AnswerAction(
                label="Start a Discussion",
                url=f"/discuss/new?topic={topic}",
                icon="message-square",
                primary=True,
            ),
            AnswerAction(
                label="Browse Resource Library",
                url=LIBRARY_URL,
                icon="book-open",
            ),
        ),
        steps=ZERO_RESULTS_STEPS,
    )


def person_card(candidate: Candidate) -> SynthesizedAnswer:
    person = load_result("person_card", candidate, PersonResult)
    return SynthesizedAnswer(
        type=AnswerType.PERSON_CARD,
        confidence=0.95,
        text=f"Here is the contact information for {person.name}.",
        featured_result=person,
        actions=(
            AnswerAction(
                label="Start Chat",
                url=person.teams_deep_link or "#",
                icon="message",
                primary=True,
            ),
            AnswerAction(label="View Profile", url=f"/profile/{person.id}", icon="user"),
            AnswerAction(label="Email", url=f"mailto:{person.email}", icon="mail"),
        ),
    )


def tool_card(
    intent: Intent,
    candidate: Candidate,
    portal_name: str = "the Identity Portal",
) -> SynthesizedAnswer:
    """
    Access requests get the request flow; everything else gets a launcher.
    A tool under maintenance says so whatever was asked.
    """
    tool = load_result("tool_card", candidate, ToolResult)

    if intent.primary == IntentKind.TOOL_ACCESS:
        text = f"You can request access to {tool.name} through {portal_name}."
        actions = [
            AnswerAction(
                label="Request Access",
                url=tool.request_url or "#",
                icon="key",
                primary=True,
            ),
        ]
        if tool.guide_url:
            actions.append(AnswerAction(label="Access Guide", url=tool.guide_url, icon="book"))
    else:
        text = f"{tool.name}: {tool.description}"
        actions = [
            AnswerAction(
                label="Launch Tool",
                url=tool.access_url,
                icon="external-link",
                primary=True,
            ),
        ]

    if tool.status == ToolStatus.UNAVAILABLE:
        text = f"{tool.name} is currently undergoing maintenance."

    return SynthesizedAnswer(
        type=AnswerType.TOOL_CARD,
        confidence=0.9,
        text=text,
        featured_result=tool,
        actions=tuple(actions),
    )


def concept_explanation(candidate: Candidate) -> SynthesizedAnswer:
    faq = load_result("concept_explanation", candidate, FAQResult)
    return SynthesizedAnswer(
        type=AnswerType.CONCEPT_EXPLANATION,
        confidence=0.9,
        text=faq.answer,
        key_points=tuple(faq.tags),
        sources=(
            AnswerSource(
                title=faq.question,
                url=f"{LIBRARY_URL}/concept/{faq.id}",
                type=ResultKind.FAQ,
            ),
        ),
    )


def lop_session(
    query: NormalizedQuery,
    intent: Intent,
    candidate: Candidate,
) -> SynthesizedAnswer:
    session = load_result("lop_session", candidate, SessionResult)

    if intent.primary == IntentKind.SESSION_NEXT:
        text = (
            f'The next Love of Product session is "{session.title}" '
            f"on {format_session_date(session)}."
        )
    else:
        text = f'Searching for LOP sessions about "{query.normalized}".'

    return SynthesizedAnswer(
        type=AnswerType.LOP_SESSION,
        confidence=0.95,
        text=text,
        featured_result=session,
        actions=(
            AnswerAction(
                label="Watch Recording",
                url=session.video_url or "#",
                icon="video",
                primary=True,
            ),
            AnswerAction(
                label="View Slides",
                url=session.slides_url or "#",
                icon="presentation",
            ),
        ),
    )


def instant_answer(candidate: Candidate) -> SynthesizedAnswer:
    """Direct FAQ answer for a near-exact match"""
    faq = load_result("instant_answer", candidate, FAQResult)
    faq_url = f"/support/faq/{faq.id}"
    return SynthesizedAnswer(
        type=AnswerType.INSTANT_ANSWER,
        confidence=0.85,
        text=faq.answer_summary or faq.answer,
        actions=(
            AnswerAction(label="Read Full FAQ", url=faq_url, icon="help-circle"),
        ),
        sources=(
            AnswerSource(title=faq.question, url=faq_url, type=ResultKind.FAQ),
        ),
    )


def resource_list(
    query: NormalizedQuery,
    candidates: Sequence[Candidate],
    max_sources: int = 5,
) -> SynthesizedAnswer:
    """Fallback: cite the top candidates and let the result list do the rest"""
    top = list(candidates[:max_sources])
    noun = "result" if len(candidates) == 1 else "results"
    return SynthesizedAnswer(
        type=AnswerType.RESOURCE_LIST,
        confidence=0.5,
        text=f'Found {len(candidates)} {noun} for "{query.raw}".',
        actions=(
            AnswerAction(label="Browse Resource Library", url=LIBRARY_URL, icon="book-open"),
        ),
        sources=tuple(
            AnswerSource(title=c.title, url=source_url(c), type=c.kind)
            for c in top
        ),
    )
