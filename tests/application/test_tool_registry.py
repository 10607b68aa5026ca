"""Tests for the per-run tool registry and AgentContext.use_tool()."""

from collections.abc import Callable
from typing import Any

import pytest

from missionguard.agents.base import BaseAgent
from missionguard.application.mission_workflow import MissionWorkflow
from missionguard.application.tool_registry import (
    ToolRegistry,
    build_default_tools,
    build_tool_registry,
)
from missionguard.domain.agents import AgentRole
from missionguard.domain.context import AgentContext
from missionguard.domain.exceptions import MissionCancelled
from missionguard.domain.models import (
    Tool,
    ToolCategory,
    ToolExecutionResult,
    ToolParameter,
)
from missionguard.domain.phases import MissionPhase
from missionguard.infrastructure.sandbox import LocalSandbox

ContextFactory = Callable[..., AgentContext]


async def _echo(arguments: dict[str, Any]) -> Any:
    return arguments


async def _explode(arguments: dict[str, Any]) -> Any:
    raise RuntimeError("disk on fire")


ECHO = Tool(
    "echo",
    "Return the arguments",
    ToolCategory.UTILITY,
    _echo,
    (ToolParameter("text", "string"),),
)


class TestRegistration:
    """Tests for register / unregister / list."""

    def test_starts_with_builtin_tools(self) -> None:
        registry = ToolRegistry()
        names = {t.name for t in registry.list_tools()}
        assert names == {t.name for t in build_default_tools()}
        assert {"format_json", "calculate_hash", "analyze_code"} <= names

    def test_filter_by_category(self) -> None:
        analysis = ToolRegistry().list_tools(ToolCategory.ANALYSIS)
        assert [t.name for t in analysis] == ["analyze_code"]

    def test_register_replaces_and_unregister_removes(self) -> None:
        registry = ToolRegistry(tools=())
        registry.register(ECHO)
        replacement = Tool("echo", "Other", ToolCategory.UTILITY, _echo)
        registry.register(replacement)

        assert registry.get("echo") is replacement
        assert registry.unregister("echo")
        assert not registry.unregister("echo")
        assert registry.get("echo") is None

    def test_registries_are_independent(self) -> None:
        first, second = ToolRegistry(), ToolRegistry()
        first.register(ECHO)
        assert second.get("echo") is None


class TestExecute:
    """Tool calls always return a structured result."""

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        registry = ToolRegistry(tools=(ECHO,))

        result = await registry.execute("echo", {"text": "hi"})

        assert result.success
        assert result.output == {"text": "hi"}
        assert result.error is None

    @pytest.mark.asyncio
    async def test_unknown_tool(self) -> None:
        result = await ToolRegistry().execute("search_web", {"query": "x"})
        assert result == ToolExecutionResult(
            success=False, error="Tool not found: search_web"
        )

    @pytest.mark.asyncio
    async def test_missing_required_parameter(self) -> None:
        result = await ToolRegistry(tools=(ECHO,)).execute("echo", {})
        assert not result.success
        assert result.error == "Missing required parameter: text"

    @pytest.mark.asyncio
    async def test_wrong_parameter_type(self) -> None:
        result = await ToolRegistry(tools=(ECHO,)).execute("echo", {"text": 3})
        assert not result.success
        assert result.error == "Parameter 'text' must be of type string"

    @pytest.mark.asyncio
    async def test_handler_error_is_reported(self) -> None:
        registry = ToolRegistry(
            tools=(Tool("explode", "Fails", ToolCategory.CODE, _explode),)
        )

        result = await registry.execute("explode", {})

        assert not result.success
        assert result.error == "disk on fire"
        [entry] = registry.execution_log()
        assert entry.tool_name == "explode"
        assert entry.result is result

    @pytest.mark.asyncio
    async def test_execution_log_is_bounded(self) -> None:
        registry = ToolRegistry(tools=(ECHO,), log_size=2)
        for text in ("a", "b", "c"):
            await registry.execute("echo", {"text": text})

        assert [e.arguments["text"] for e in registry.execution_log()] == ["b", "c"]
        registry.clear_log()
        assert registry.execution_log() == []


class TestBuiltinTools:
    """Tests for the tools every run starts with."""

    @pytest.mark.asyncio
    async def test_format_json(self) -> None:
        registry = ToolRegistry()

        ok = await registry.execute("format_json", {"json": '{"a":1}', "indent": 4})
        bad = await registry.execute("format_json", {"json": "{nope"})

        assert ok.output == {"valid": True, "formatted": '{\n    "a": 1\n}'}
        assert bad.success
        assert bad.output["valid"] is False

    @pytest.mark.asyncio
    async def test_calculate_hash(self) -> None:
        result = await ToolRegistry().execute("calculate_hash", {"content": "abc"})
        assert result.output == {
            "hash": "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad",
            "length": 3,
        }

    @pytest.mark.asyncio
    async def test_generate_uuid(self) -> None:
        registry = ToolRegistry()
        first = await registry.execute("generate_uuid", {})
        second = await registry.execute("generate_uuid", {})
        assert first.output["uuid"] != second.output["uuid"]

    @pytest.mark.asyncio
    async def test_analyze_code_reports_findings(self) -> None:
        code = 'API_KEY = "abc123"\n'

        result = await ToolRegistry().execute(
            "analyze_code", {"code": code, "path": "backend/main.py"}
        )

        assert result.success
        assert result.output["lines"] == 1
        assert result.output["characters"] == len(code)
        [issue] = result.output["issues"]
        assert issue["severity"] == "critical"
        assert issue["artifact"] == "backend/main.py"


class TestSandboxTools:
    """Tests for the tools bound to a sandbox."""

    @pytest.mark.asyncio
    async def test_write_then_read(self, tmp_path) -> None:
        registry = build_tool_registry(LocalSandbox(root_dir=str(tmp_path)))

        written = await registry.execute(
            "write_file", {"path": "notes/a.txt", "content": "hello"}
        )
        read = await registry.execute("read_file", {"path": "notes/a.txt"})

        assert written.output == {"path": "notes/a.txt", "size": 5, "written": True}
        assert read.output == {"path": "notes/a.txt", "content": "hello"}
        assert (tmp_path / "notes" / "a.txt").read_text() == "hello"

    @pytest.mark.asyncio
    async def test_sandbox_errors_become_results(self, tmp_path) -> None:
        registry = build_tool_registry(LocalSandbox(root_dir=str(tmp_path)))

        missing = await registry.execute("read_file", {"path": "missing.txt"})
        escape = await registry.execute("read_file", {"path": "../../etc/passwd"})

        assert not missing.success
        assert not escape.success
        assert "escapes sandbox root" in (escape.error or "")

    def test_without_sandbox_there_are_no_file_tools(self) -> None:
        assert build_tool_registry().list_tools(ToolCategory.FILE) == []


class TestAgentContextTools:
    """Tests for AgentContext.use_tool()."""

    @pytest.mark.asyncio
    async def test_use_tool_counts_a_step(self, make_context: ContextFactory) -> None:
        context = make_context(
            "architect", MissionPhase.PLAN, tools=ToolRegistry(tools=(ECHO,))
        )

        result = await context.use_tool("echo", {"text": "hi"})

        assert result.success
        assert context.steps == 1

    @pytest.mark.asyncio
    async def test_without_registry(self, make_context: ContextFactory) -> None:
        context = make_context("architect", MissionPhase.PLAN)
        with pytest.raises(RuntimeError, match="no tool registry"):
            await context.use_tool("echo", {"text": "hi"})

    @pytest.mark.asyncio
    async def test_cancelled_context(self, make_context: ContextFactory) -> None:
        context = make_context("architect", MissionPhase.PLAN, tools=ToolRegistry())
        context.token.cancel("stop")
        with pytest.raises(MissionCancelled):
            await context.use_tool("generate_uuid")


class TestWorkflowTools:
    """The workflow hands its registry to every agent call."""

    @pytest.mark.asyncio
    async def test_agents_share_the_run_registry(self, mission, team_factory) -> None:
        outcomes: list[ToolExecutionResult] = []

        class HashingDesigner(BaseAgent):
            async def execute(self, context: AgentContext) -> Any:
                outcomes.append(
                    await context.use_tool("calculate_hash", {"content": "home"})
                )
                context.put("ui_spec", {"pages": [{"name": "home"}]})

        team = team_factory()
        team[AgentRole.DESIGNER] = HashingDesigner(AgentRole.DESIGNER)
        workflow = MissionWorkflow(mission, team.values())

        result = await workflow.run()

        assert result.success
        assert [o.success for o in outcomes] == [True]
        assert [e.tool_name for e in workflow.tools.execution_log()] == [
            "calculate_hash"
        ]
        assert team[AgentRole.ARCHITECT].contexts[0].tools is workflow.tools

    def test_each_workflow_builds_its_own_registry(
        self, mission, team_factory
    ) -> None:
        first = MissionWorkflow(mission, team_factory().values())
        second = MissionWorkflow(mission, team_factory().values())
        assert first.tools is not second.tools
