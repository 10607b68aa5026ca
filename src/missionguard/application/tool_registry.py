"""
Tool registry for the agents of one mission run.

A registry is constructed per run, like the ownership contracts, and handed
to every agent through its context. Tool calls never raise: unknown tools,
bad arguments and handler errors come back as unsuccessful
ToolExecutionResults and are kept in a bounded execution log.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
import uuid
from collections import deque
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from missionguard.domain.interfaces import SandboxInterface, ToolRegistryInterface
from missionguard.domain.models import (
    Tool,
    ToolCategory,
    ToolExecution,
    ToolExecutionResult,
    ToolParameter,
)
from missionguard.guards.static_scan import security_scan, syntax_check

logger = logging.getLogger(__name__)

DEFAULT_LOG_SIZE = 100

_JSON_TYPES: dict[str, type | tuple[type, ...]] = {
    "string": str,
    "number": (int, float),
    "boolean": bool,
    "object": dict,
    "array": list,
}


class ToolRegistry(ToolRegistryInterface):
    """In-process registry; starts with the built-in tools unless told not to."""

    def __init__(
        self,
        tools: Iterable[Tool] | None = None,
        log_size: int = DEFAULT_LOG_SIZE,
    ) -> None:
        """
        Args:
            tools: Initial tools (defaults to ``build_default_tools()``)
            log_size: Number of executions kept in the log
        """
        self._tools: dict[str, Tool] = {}
        self._log: deque[ToolExecution] = deque(maxlen=log_size)
        for tool in build_default_tools() if tools is None else tools:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            logger.debug(f"Replacing tool '{tool.name}'")
        self._tools[tool.name] = tool

    def unregister(self, name: str) -> bool:
        return self._tools.pop(name, None) is not None

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def list_tools(self, category: ToolCategory | None = None) -> list[Tool]:
        tools = list(self._tools.values())
        if category is None:
            return tools
        return [t for t in tools if t.category is category]

    async def execute(
        self, name: str, arguments: dict[str, Any]
    ) -> ToolExecutionResult:
        tool = self._tools.get(name)
        if tool is None:
            return ToolExecutionResult(success=False, error=f"Tool not found: {name}")

        start = time.monotonic()
        problem = _argument_problem(tool, arguments)
        if problem is not None:
            result = ToolExecutionResult(success=False, error=problem)
        else:
            try:
                output = await tool.handler(arguments)
            except Exception as e:
                logger.warning(f"Tool '{name}' failed: {e}")
                result = ToolExecutionResult(
                    success=False,
                    error=str(e) or type(e).__name__,
                    duration=time.monotonic() - start,
                )
            else:
                result = ToolExecutionResult(
                    success=True, output=output, duration=time.monotonic() - start
                )

        self._log.append(
            ToolExecution(
                tool_name=name,
                arguments=dict(arguments),
                result=result,
                timestamp=datetime.now(UTC).isoformat(),
            )
        )
        return result

    def execution_log(self) -> list[ToolExecution]:
        return list(self._log)

    def clear_log(self) -> None:
        self._log.clear()


def _argument_problem(tool: Tool, arguments: dict[str, Any]) -> str | None:
    for param in tool.parameters:
        if param.name not in arguments:
            if param.required:
                return f"Missing required parameter: {param.name}"
            continue
        expected = _JSON_TYPES.get(param.type)
        if expected is not None and not isinstance(arguments[param.name], expected):
            return f"Parameter '{param.name}' must be of type {param.type}"
    return None


# =============================================================================
# Built-in tools
# =============================================================================


async def _format_json(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        parsed = json.loads(arguments["json"])
    except json.JSONDecodeError as e:
        return {"valid": False, "error": str(e)}
    indent = arguments.get("indent", 2)
    return {"valid": True, "formatted": json.dumps(parsed, indent=indent)}


async def _calculate_hash(arguments: dict[str, Any]) -> dict[str, Any]:
    content: str = arguments["content"]
    digest = hashlib.sha256(content.encode("utf-8")).hexdigest()
    return {"hash": digest, "length": len(content)}


async def _generate_uuid(arguments: dict[str, Any]) -> dict[str, Any]:
    return {"uuid": str(uuid.uuid4())}


async def _analyze_code(arguments: dict[str, Any]) -> dict[str, Any]:
    code: str = arguments["code"]
    files = [(arguments["path"], code)]
    issues = [
        issue.to_dict()
        for check in (syntax_check(files), security_scan(files))
        for issue in check.issues
    ]
    return {
        "lines": len(code.splitlines()),
        "characters": len(code),
        "issues": issues,
    }


def build_default_tools() -> tuple[Tool, ...]:
    """Tools every run starts with. None of them touch the filesystem."""
    return (
        Tool(
            "format_json",
            "Validate and pretty-print a JSON document",
            ToolCategory.UTILITY,
            _format_json,
            (
                ToolParameter("json", "string", "JSON text to format"),
                ToolParameter("indent", "number", "Indentation", required=False),
            ),
        ),
        Tool(
            "calculate_hash",
            "SHA-256 of a string",
            ToolCategory.UTILITY,
            _calculate_hash,
            (ToolParameter("content", "string", "Content to hash"),),
        ),
        Tool(
            "generate_uuid",
            "Generate a unique identifier",
            ToolCategory.UTILITY,
            _generate_uuid,
        ),
        Tool(
            "analyze_code",
            "Size metrics plus syntax and security findings for one file",
            ToolCategory.ANALYSIS,
            _analyze_code,
            (
                ToolParameter("code", "string", "Source text"),
                ToolParameter("path", "string", "File path, selects the checks"),
            ),
        ),
    )


def build_sandbox_tools(sandbox: SandboxInterface) -> tuple[Tool, ...]:
    """File and command tools bound to one sandbox."""

    async def read_file(arguments: dict[str, Any]) -> dict[str, Any]:
        path = arguments["path"]
        return {"path": path, "content": await sandbox.read_file(path)}

    async def write_file(arguments: dict[str, Any]) -> dict[str, Any]:
        path, content = arguments["path"], arguments["content"]
        await sandbox.write_files({path: content})
        return {"path": path, "size": len(content), "written": True}

    async def run_command(arguments: dict[str, Any]) -> dict[str, Any]:
        result = await sandbox.execute(arguments["command"], arguments.get("cwd"))
        return {
            "stdout": result.stdout,
            "stderr": result.stderr,
            "exit_code": result.exit_code,
        }

    return (
        Tool(
            "read_file",
            "Read a file from the sandbox",
            ToolCategory.FILE,
            read_file,
            (ToolParameter("path", "string", "Path relative to the sandbox root"),),
        ),
        Tool(
            "write_file",
            "Write a file into the sandbox",
            ToolCategory.FILE,
            write_file,
            (
                ToolParameter("path", "string", "Path relative to the sandbox root"),
                ToolParameter("content", "string", "File content"),
            ),
        ),
        Tool(
            "run_command",
            "Run a shell command in the sandbox",
            ToolCategory.CODE,
            run_command,
            (
                ToolParameter("command", "string", "Shell command"),
                ToolParameter("cwd", "string", "Working directory", required=False),
            ),
        ),
    )


def build_tool_registry(sandbox: SandboxInterface | None = None) -> ToolRegistry:
    """Fresh registry for one run: the built-ins plus, given a sandbox, its tools."""
    tools = build_default_tools()
    if sandbox is not None:
        tools += build_sandbox_tools(sandbox)
    return ToolRegistry(tools)
