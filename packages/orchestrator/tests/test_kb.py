"""Tests for KB retrieval."""

from __future__ import annotations

import json
import sys

import pytest

from domain_kb_common import KnowledgeBaseError, RpcTimeoutError, TransportStartError
from domain_kb_orchestrator.kb import (
    CONTENT_TOOL,
    EMPTY_CONTENT,
    NO_CONTENT_TOOL,
    NOT_CONFIGURED,
    SEARCH_TOOL,
    KbRetriever,
    select_tool,
    snippet_from_text,
    tool_arguments,
)
from domain_kb_orchestrator.results import KbSuccess, KbUnavailable, KbUnreachable

pytestmark = pytest.mark.unit


def _text_reply(text: str) -> dict:
    return {"content": [{"type": "text", "text": text}]}


class TestSelectTool:
    """Tool preference."""

    def test_prefers_content_tool(self):
        assert select_tool([SEARCH_TOOL, "get_kb_info", CONTENT_TOOL]) == CONTENT_TOOL

    def test_falls_back_to_search(self):
        assert select_tool(["get_kb_info", SEARCH_TOOL]) == SEARCH_TOOL

    def test_none_recognized(self):
        assert select_tool(["get_kb_info"]) is None
        assert select_tool([]) is None


class TestToolArguments:
    def test_search_gets_query_and_limit(self):
        assert tool_arguments(SEARCH_TOOL, "dashboards?", 3) == {
            "query": "dashboards?",
            "max_results": 3,
        }

    def test_content_tool_takes_no_arguments(self):
        assert tool_arguments(CONTENT_TOOL, "dashboards?", 3) == {}


class TestSnippetFromText:
    """Reducing tool replies to snippet text."""

    def test_plain_text_passes_through(self):
        assert snippet_from_text("just text") == "just text"

    def test_content_field(self):
        assert snippet_from_text(json.dumps({"status": "ok", "content": "abc"})) == "abc"

    def test_search_results_joined(self):
        payload = {
            "results": [{"content": "first"}, {"content": "second"}, {"matchInfo": "no content"}],
            "totalMatches": 3,
        }
        assert snippet_from_text(json.dumps(payload)) == "first\n\nsecond"

    def test_empty_results(self):
        assert snippet_from_text(json.dumps({"results": [], "totalMatches": 0})) == ""

    def test_zero_matches_is_empty(self):
        """The search error placeholder is not treated as content."""
        payload = {
            "results": [{"content": "Search error occurred. Please try again.", "matchInfo": "Error"}],
            "totalMatches": 0,
            "query": "dashboards",
        }
        assert snippet_from_text(json.dumps(payload)) == ""

    def test_error_status_raises(self):
        with pytest.raises(KnowledgeBaseError, match="file unreadable"):
            snippet_from_text(json.dumps({"status": "error", "error": "file unreadable"}))

    def test_json_non_object_passes_through(self):
        assert snippet_from_text("[1, 2]") == "[1, 2]"

    def test_unrecognized_object_passes_through(self):
        text = json.dumps({"something": "else"})
        assert snippet_from_text(text) == text


class TestKbRetrieverResolution:
    """Outcomes decided before any process is launched."""

    @pytest.mark.asyncio
    async def test_not_configured(self, make_context, transport_factory):
        outcome = await KbRetriever(make_context()).fetch("What is Grafana?", 2)

        assert outcome == KbUnavailable(NOT_CONFIGURED)
        transport_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_not_found_reports_probe_count(self, make_context, transport_factory):
        context = make_context(kb_executable_path="missing-server")
        outcome = await KbRetriever(context).fetch("What is Grafana?", 2)

        assert isinstance(outcome, KbUnavailable)
        assert outcome.reason == "KB server executable not found (probed 3 paths)"
        transport_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_launches_resolved_script(self, make_context, transport_factory, kb_script):
        context = make_context(kb_executable_path="kb-server", kb_timeout=4.0)
        await KbRetriever(context).fetch("What is Grafana?", 2)

        transport_factory.assert_awaited_once()
        args, kwargs = transport_factory.call_args
        assert args == (sys.executable, [str(kb_script)])
        assert kwargs["default_timeout"] == 4.0


class TestKbRetrieverFetch:
    """Handshake, tool call and reply handling."""

    @pytest.fixture
    def retriever(self, make_context, kb_script):
        return KbRetriever(make_context(kb_executable_path="kb-server"))

    @pytest.mark.asyncio
    async def test_success_with_content_tool(self, retriever, fake_transport, kb_content):
        outcome = await retriever.fetch("What is Grafana?", 2)

        assert outcome == KbSuccess(snippet=kb_content, tool=CONTENT_TOOL)

        methods = [c.args[0] for c in fake_transport.send.await_args_list]
        assert methods == ["initialize", "tools/list", "tools/call"]
        fake_transport.notify.assert_awaited_once_with("notifications/initialized")
        fake_transport.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_handshake_identifies_client(self, retriever, fake_transport):
        await retriever.fetch("What is Grafana?", 2)

        params = fake_transport.send.await_args_list[0].args[1]
        assert params["clientInfo"]["name"] == "domain-kb-orchestrator"

    @pytest.mark.asyncio
    async def test_search_tool_receives_question(self, retriever, fake_transport, kb_replies):
        kb_replies["tools/list"] = {"tools": [{"name": SEARCH_TOOL}]}
        kb_replies["tools/call"] = _text_reply(
            json.dumps({"results": [{"content": "match one"}], "totalMatches": 1, "query": "q"})
        )

        outcome = await retriever.fetch("What is Grafana?", 3)

        assert outcome == KbSuccess(snippet="match one", tool=SEARCH_TOOL)
        call_params = fake_transport.send.await_args_list[-1].args[1]
        assert call_params == {
            "name": SEARCH_TOOL,
            "arguments": {"query": "What is Grafana?", "max_results": 3},
        }

    @pytest.mark.asyncio
    async def test_no_recognized_tool(self, retriever, fake_transport, kb_replies):
        kb_replies["tools/list"] = {"tools": [{"name": "get_kb_info"}]}

        outcome = await retriever.fetch("What is Grafana?", 2)

        assert outcome == KbUnavailable(NO_CONTENT_TOOL)
        fake_transport.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_content(self, retriever, kb_replies):
        kb_replies["tools/call"] = _text_reply(
            json.dumps({"status": "empty", "contentLength": 0, "content": ""})
        )

        assert await retriever.fetch("What is Grafana?", 2) == KbUnavailable(EMPTY_CONTENT)

    @pytest.mark.asyncio
    async def test_search_error_placeholder_is_unavailable(self, retriever, kb_replies):
        kb_replies["tools/list"] = {"tools": [{"name": SEARCH_TOOL}]}
        kb_replies["tools/call"] = _text_reply(
            json.dumps(
                {
                    "results": [{"content": "Search error occurred.", "matchInfo": "Error"}],
                    "totalMatches": 0,
                    "query": "What is Grafana?",
                }
            )
        )

        assert await retriever.fetch("What is Grafana?", 2) == KbUnavailable(EMPTY_CONTENT)

    @pytest.mark.asyncio
    async def test_tool_error_payload(self, retriever, kb_replies):
        kb_replies["tools/call"] = _text_reply(json.dumps({"status": "error", "error": "boom"}))

        outcome = await retriever.fetch("What is Grafana?", 2)

        assert isinstance(outcome, KbUnreachable)
        assert "boom" in outcome.error

    @pytest.mark.asyncio
    async def test_is_error_reply(self, retriever, kb_replies):
        kb_replies["tools/call"] = {
            "content": [{"type": "text", "text": "internal failure"}],
            "isError": True,
        }

        outcome = await retriever.fetch("What is Grafana?", 2)

        assert isinstance(outcome, KbUnreachable)
        assert "internal failure" in outcome.error

    @pytest.mark.asyncio
    async def test_timeout(self, retriever, fake_transport, kb_replies):
        kb_replies["tools/list"] = RpcTimeoutError(2, 15.0)

        outcome = await retriever.fetch("What is Grafana?", 2)

        assert isinstance(outcome, KbUnreachable)
        fake_transport.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unexpected_exception(self, retriever, fake_transport, kb_replies):
        kb_replies["initialize"] = RuntimeError("surprise")

        outcome = await retriever.fetch("What is Grafana?", 2)

        assert outcome == KbUnreachable("surprise")
        fake_transport.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_launch_failure(self, retriever, transport_factory):
        transport_factory.side_effect = TransportStartError("Failed to start: denied")

        outcome = await retriever.fetch("What is Grafana?", 2)

        assert outcome == KbUnreachable("Failed to start: denied")

    @pytest.mark.asyncio
    async def test_snippet_truncated(self, make_context, kb_script, kb_replies):
        kb_replies["tools/call"] = _text_reply("x" * 500)
        context = make_context(kb_executable_path="kb-server", kb_snippet_max_chars=100)

        outcome = await KbRetriever(context).fetch("What is Grafana?", 2)

        assert isinstance(outcome, KbSuccess)
        assert outcome.snippet == "x" * 100
