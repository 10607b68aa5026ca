"""
Application layer for mission orchestration.

Contains the mission workflow and the services it coordinates: run store,
contract validation, tools, message bus, agent runtime, checkpoints and
events.
"""

from missionguard.application.agent_runtime import AgentRuntime
from missionguard.application.checkpoint_service import CheckpointService
from missionguard.application.contract_validator import ContractValidator
from missionguard.application.message_bus import MessageBus, MessageChannel
from missionguard.application.mission_event_emitter import MissionEventEmitter
from missionguard.application.mission_workflow import MissionWorkflow
from missionguard.application.run_store import RunStore
from missionguard.application.tool_registry import (
    ToolRegistry,
    build_default_tools,
    build_sandbox_tools,
    build_tool_registry,
)

__all__ = [
    "AgentRuntime",
    "CheckpointService",
    "ContractValidator",
    "MessageBus",
    "MessageChannel",
    "MissionEventEmitter",
    "MissionWorkflow",
    "RunStore",
    "ToolRegistry",
    "build_default_tools",
    "build_sandbox_tools",
    "build_tool_registry",
]
