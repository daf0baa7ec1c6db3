"""
Shared fixtures: a small directory of people, tools, FAQs and sessions.
"""

import pytest


PEOPLE = [
    {
        "id": "p-natasha",
        "name": "Natasha Romanoff",
        "email": "natasha.romanoff@example.com",
        "title": "Product Manager",
        "team": "Product",
        "teams_deep_link": "https://teams.example.com/l/chat/natasha",
        "tags": ["roadmaps", "okr"],
    },
    {
        "id": "p-bruce",
        "name": "Bruce Banner",
        "email": "bruce.banner@example.com",
        "title": "Data Scientist",
        "team": "Analytics",
        "tags": ["analytics"],
    },
]

TOOLS = [
    {
        "id": "t-jira",
        "name": "Jira",
        "description": "Issue and project tracking",
        "access_url": "https://jira.example.com",
        "request_url": "https://identity.example.com/request/jira",
        "guide_url": "https://wiki.example.com/jira-access",
        "category": "project",
        "tags": ["atlassian", "tickets"],
    },
    {
        "id": "t-figma",
        "name": "Figma",
        "description": "Collaborative interface design",
        "access_url": "https://figma.example.com",
        "status": "unavailable",
        "tags": ["prototype", "mockup"],
    },
]

FAQS = [
    {
        "id": "f-cob",
        "question": "What is COB?",
        "answer": "Coordination of benefits decides which plan pays first when a member has dual coverage.",
        "answer_summary": "Which plan pays first.",
        "tags": ["cob", "benefits"],
    },
    {
        "id": "f-timesheet",
        "question": "Timesheet deadline",
        "answer": "Timesheets are due every Friday by 5pm.",
        "answer_summary": "Fridays, 5pm.",
        "tags": ["timesheet"],
    },
]

SESSIONS = [
    {
        "id": "s-42",
        "title": "Discovery Habits",
        "session_date": "2024-11-12T17:00:00Z",
        "speaker_name": "Tony Stark",
        "video_url": "https://video.example.com/lop/42",
        "tags": ["lop", "discovery"],
    },
    {
        "id": "s-43",
        "title": "Roadmapping 101",
        "session_date": "2025-03-01",
        "speaker_name": "Natasha Romanoff",
        "video_url": "https://video.example.com/lop/43",
        "slides_url": "https://slides.example.com/lop/43",
        "tags": ["lop", "roadmap"],
    },
]


@pytest.fixture
def vocabulary():
    from cafe_finder.common.vocabulary import default_vocabulary
    return default_vocabulary()


@pytest.fixture
def collaborators():
    from cafe_finder.common.collaborators import InMemoryCollaborator
    from cafe_finder.common.schemas import ResultKind

    return {
        ResultKind.PERSON: InMemoryCollaborator("people", PEOPLE),
        ResultKind.TOOL: InMemoryCollaborator("tools", TOOLS),
        ResultKind.FAQ: InMemoryCollaborator("faqs", FAQS, fields=("question", "tags")),
        ResultKind.SESSION: InMemoryCollaborator("sessions", SESSIONS),
    }
