"""
Tests for DomainRetriever

Tests domain selection, synonym expansion, scoring and failure handling.
"""

import asyncio
import logging

import pytest
from unittest.mock import AsyncMock, Mock


def _query(raw):
    from cafe_finder.search.query_processor import QueryProcessor
    return QueryProcessor().normalize(raw)


def _intent(kind):
    from cafe_finder.search.intent_classifier import Intent
    return Intent(primary=kind, confidence=0.5, rule=kind.value)


def _mock_collaborator(rows=None, side_effect=None):
    collaborator = Mock()
    collaborator.search = AsyncMock(return_value=rows or [], side_effect=side_effect)
    return collaborator


class TestDomainRetriever:
    """Tests for DomainRetriever"""

    @pytest.fixture
    def retriever(self, collaborators, vocabulary):
        from cafe_finder.search.retriever import DomainRetriever
        return DomainRetriever(collaborators, vocabulary)

    @pytest.mark.asyncio
    async def test_person_lookup_queries_people_only(self, vocabulary):
        from cafe_finder.common.schemas import ResultKind
        from cafe_finder.search.intent_classifier import IntentKind
        from cafe_finder.search.retriever import DomainRetriever

        people = _mock_collaborator([{"id": "p1", "name": "Natasha Romanoff"}])
        tools = _mock_collaborator()
        retriever = DomainRetriever(
            {ResultKind.PERSON: people, ResultKind.TOOL: tools}, vocabulary
        )

        results = await retriever.retrieve(_intent(IntentKind.PERSON_LOOKUP), _query("contact natasha"))

        assert [c.record_id for c in results] == ["p1"]
        assert results[0].kind == ResultKind.PERSON
        tools.search.assert_not_called()

    @pytest.mark.asyncio
    async def test_searches_each_term_with_its_expansion(self, vocabulary):
        from cafe_finder.common.schemas import ResultKind
        from cafe_finder.search.intent_classifier import IntentKind
        from cafe_finder.search.retriever import DomainRetriever

        tools = _mock_collaborator()
        retriever = DomainRetriever({ResultKind.TOOL: tools}, vocabulary)

        await retriever.retrieve(_intent(IntentKind.TOOL_INFO), _query("wiki zorp"))

        calls = [c.args[0] for c in tools.search.call_args_list]
        assert calls[0] == vocabulary.expand("wiki")
        assert calls[0][0] == "confluence"
        assert calls[1] == ["zorp"]

    @pytest.mark.asyncio
    async def test_rows_unioned_by_id(self, vocabulary):
        from cafe_finder.common.schemas import ResultKind
        from cafe_finder.search.intent_classifier import IntentKind
        from cafe_finder.search.retriever import DomainRetriever

        row = {"id": "t1", "name": "Jira", "tags": ["atlassian"]}
        tools = _mock_collaborator([row])
        retriever = DomainRetriever({ResultKind.TOOL: tools}, vocabulary)

        results = await retriever.retrieve(_intent(IntentKind.TOOL_INFO), _query("jira atlassian"))

        assert len(results) == 1
        assert tools.search.await_count == 2

    @pytest.mark.asyncio
    async def test_match_score_uses_canonical_overlap(self, retriever):
        from cafe_finder.search.intent_classifier import IntentKind

        results = await retriever.retrieve(
            _intent(IntentKind.TOOL_ACCESS), _query("request access to jira")
        )

        assert results[0].record_id == "t-jira"
        assert results[0].match_score == 0.25
        assert all(0.0 <= c.match_score <= 1.0 for c in results)

    @pytest.mark.asyncio
    async def test_synonym_query_scores_canonical_row(self, retriever):
        from cafe_finder.search.intent_classifier import IntentKind

        # Scored through the shared canonical, not the literal word
        results = await retriever.retrieve(_intent(IntentKind.TOOL_INFO), _query("atlassian"))

        assert results[0].record_id == "t-jira"
        assert results[0].match_score == 1.0

    @pytest.mark.asyncio
    async def test_sorted_and_stable(self, vocabulary):
        from cafe_finder.common.schemas import ResultKind
        from cafe_finder.search.intent_classifier import IntentKind
        from cafe_finder.search.retriever import DomainRetriever

        rows = [
            {"id": "a", "title": "Intro", "tags": ["cob"]},
            {"id": "b", "title": "COB deep dive", "tags": ["cob", "claims"]},
            {"id": "c", "title": "Other intro", "tags": ["cob"]},
        ]
        faqs = _mock_collaborator(rows)
        retriever = DomainRetriever({ResultKind.FAQ: faqs}, vocabulary)

        results = await retriever.retrieve(
            _intent(IntentKind.CONCEPT_EXPLANATION), _query("cob claims")
        )

        assert [c.record_id for c in results] == ["b", "a", "c"]

    @pytest.mark.asyncio
    async def test_max_results_cap(self, vocabulary):
        from cafe_finder.common.config import RetrieverConfig
        from cafe_finder.common.schemas import ResultKind
        from cafe_finder.search.intent_classifier import IntentKind
        from cafe_finder.search.retriever import DomainRetriever

        rows = [{"id": str(i), "title": f"Resource {i}"} for i in range(20)]
        resources = _mock_collaborator(rows)
        retriever = DomainRetriever(
            {ResultKind.RESOURCE: resources}, vocabulary, RetrieverConfig(max_results=3)
        )

        results = await retriever.retrieve(_intent(IntentKind.RESOURCE_BROWSE), _query("resource"))

        assert len(results) == 3

    @pytest.mark.asyncio
    async def test_empty_query_makes_no_calls(self, vocabulary):
        from cafe_finder.common.schemas import ResultKind
        from cafe_finder.search.intent_classifier import IntentKind
        from cafe_finder.search.retriever import DomainRetriever

        people = _mock_collaborator(side_effect=RuntimeError("down"))
        retriever = DomainRetriever({ResultKind.PERSON: people}, vocabulary)

        assert await retriever.retrieve(_intent(IntentKind.UNKNOWN), _query("  ")) == []
        people.search.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_domain_contributes_nothing(self, vocabulary, caplog):
        from cafe_finder.common.schemas import ResultKind
        from cafe_finder.search.intent_classifier import IntentKind
        from cafe_finder.search.retriever import DomainRetriever

        people = _mock_collaborator(side_effect=RuntimeError("directory down"))
        faqs = _mock_collaborator([{"id": "f1", "question": "Banana policy"}])
        retriever = DomainRetriever({ResultKind.PERSON: people, ResultKind.FAQ: faqs}, vocabulary)

        with caplog.at_level(logging.WARNING, logger="cafe_finder.search.retriever"):
            results = await retriever.retrieve(_intent(IntentKind.RESOURCE_BROWSE), _query("banana"))

        assert [c.record_id for c in results] == ["f1"]
        assert "person search failed" in caplog.text

    @pytest.mark.asyncio
    async def test_all_domains_failed_raises(self, vocabulary):
        from cafe_finder.common.errors import RetrievalError
        from cafe_finder.common.schemas import ResultKind
        from cafe_finder.search.intent_classifier import IntentKind
        from cafe_finder.search.retriever import DomainRetriever

        retriever = DomainRetriever(
            {
                ResultKind.PERSON: _mock_collaborator(side_effect=RuntimeError("down")),
                ResultKind.TOOL: _mock_collaborator(side_effect=ConnectionError("down")),
            },
            vocabulary,
        )

        with pytest.raises(RetrievalError) as exc_info:
            await retriever.retrieve(_intent(IntentKind.RESOURCE_BROWSE), _query("banana"))

        assert set(exc_info.value.failed_domains) == {"person", "tool"}

    @pytest.mark.asyncio
    async def test_timeout_counts_as_failure(self, vocabulary):
        from cafe_finder.common.collaborators import DomainCollaborator
        from cafe_finder.common.config import RetrieverConfig
        from cafe_finder.common.errors import RetrievalError
        from cafe_finder.common.schemas import ResultKind
        from cafe_finder.search.intent_classifier import IntentKind
        from cafe_finder.search.retriever import DomainRetriever

        class SlowCollaborator(DomainCollaborator):
            async def search(self, terms):
                await asyncio.sleep(1)
                return []

        retriever = DomainRetriever(
            {ResultKind.TOOL: SlowCollaborator("tools")},
            vocabulary,
            RetrieverConfig(collaborator_timeout=0.01),
        )

        with pytest.raises(RetrievalError):
            await retriever.retrieve(_intent(IntentKind.TOOL_INFO), _query("jira"))

    @pytest.mark.asyncio
    async def test_unregistered_domains_skipped(self, vocabulary):
        from cafe_finder.search.intent_classifier import IntentKind
        from cafe_finder.search.retriever import DomainRetriever

        retriever = DomainRetriever({}, vocabulary)

        assert await retriever.retrieve(_intent(IntentKind.TOOL_INFO), _query("jira")) == []

    @pytest.mark.asyncio
    async def test_rows_without_id_or_title_skipped(self, vocabulary):
        from cafe_finder.common.schemas import ResultKind
        from cafe_finder.search.intent_classifier import IntentKind
        from cafe_finder.search.retriever import DomainRetriever

        rows = [
            {"title": "No id"},
            {"id": "no-title", "tags": ["jira"]},
            {"id": 7, "name": "Jira"},
        ]
        retriever = DomainRetriever({ResultKind.TOOL: _mock_collaborator(rows)}, vocabulary)

        results = await retriever.retrieve(_intent(IntentKind.TOOL_INFO), _query("jira"))

        assert [c.record_id for c in results] == ["7"]

    @pytest.mark.asyncio
    async def test_model_rows_accepted(self, vocabulary):
        from cafe_finder.common.schemas import ResourceResult, ResultKind
        from cafe_finder.search.intent_classifier import IntentKind
        from cafe_finder.search.retriever import DomainRetriever

        row = ResourceResult(id="r1", title="COB playbook", tags=["cob"])
        retriever = DomainRetriever({ResultKind.RESOURCE: _mock_collaborator([row])}, vocabulary)

        results = await retriever.retrieve(_intent(IntentKind.RESOURCE_BROWSE), _query("cob"))

        assert results[0].record_id == "r1"
        assert results[0].match_score == 1.0

    @pytest.mark.asyncio
    async def test_unreadable_row_skipped_domain_kept(self, vocabulary, caplog):
        from cafe_finder.common.schemas import ResultKind
        from cafe_finder.search.intent_classifier import IntentKind
        from cafe_finder.search.retriever import DomainRetriever

        class CorruptRow:
            def to_dict(self):
                raise ValueError("truncated record")

        tools = _mock_collaborator([CorruptRow(), {"id": "t1", "name": "Jira"}])
        retriever = DomainRetriever({ResultKind.TOOL: tools}, vocabulary)

        with caplog.at_level(logging.WARNING, logger="cafe_finder.search.retriever"):
            results = await retriever.retrieve(_intent(IntentKind.TOOL_INFO), _query("jira"))

        assert [c.record_id for c in results] == ["t1"]
        assert "Skipping malformed tool row" in caplog.text
        assert "tool search failed" not in caplog.text

    @pytest.mark.asyncio
    async def test_numeric_tags_survive_conversion(self, vocabulary):
        from cafe_finder.common.schemas import FAQResult, ResultKind
        from cafe_finder.search.intent_classifier import IntentKind
        from cafe_finder.search.retriever import DomainRetriever

        row = {
            "id": "f-era", "question": "What is an ERA?",
            "answer": "An electronic remittance advice.", "tags": ["era", 835],
        }
        retriever = DomainRetriever({ResultKind.FAQ: _mock_collaborator([row])}, vocabulary)

        results = await retriever.retrieve(_intent(IntentKind.CONCEPT_EXPLANATION), _query("835"))
        faq = results[0].to_result(FAQResult)

        assert results[0].tags == ("era", "835")
        assert results[0].match_score == 1.0
        assert faq.tags == ["era", "835"]


class TestCandidate:
    """Tests for Candidate conversion"""

    def test_to_result(self):
        from types import MappingProxyType
        from cafe_finder.common.schemas import PersonResult, ResultKind
        from cafe_finder.search.retriever import Candidate

        candidate = Candidate(
            kind=ResultKind.PERSON,
            record_id="p1",
            title="Natasha Romanoff",
            match_score=0.5,
            payload=MappingProxyType({
                "id": "p1",
                "name": "Natasha Romanoff",
                "email": "natasha@example.com",
                "teamsDeepLink": "https://teams.example.com/natasha",
            }),
        )

        result = candidate.to_result()

        assert isinstance(result, PersonResult)
        assert result.match_score == 0.5
        assert result.teams_deep_link == "https://teams.example.com/natasha"

    def test_payload_is_read_only(self):
        from types import MappingProxyType
        from cafe_finder.common.schemas import ResultKind
        from cafe_finder.search.retriever import Candidate

        candidate = Candidate(
            kind=ResultKind.TOOL, record_id="t1", title="Jira", match_score=1.0,
            payload=MappingProxyType({"id": "t1"}),
        )

        with pytest.raises(TypeError):
            candidate.payload["id"] = "t2"
