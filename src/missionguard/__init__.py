"""
MissionGuard: guarded orchestration for multi-agent software missions.

Sequences a fixed set of phases durably, mediates agent communication,
keeps a versioned artifact store with enforced ownership, and gates every
phase on verification results with a bounded repair loop.

Example:
    import asyncio

    from missionguard import MissionInput, MissionWorkflow, build_default_agents
    from missionguard.infrastructure import LocalSandbox, OpenAICompatibleProvider

    agents = build_default_agents(OpenAICompatibleProvider(), LocalSandbox())
    workflow = MissionWorkflow(MissionInput("m-1", "Build a todo app"), agents)
    result = asyncio.run(workflow.run())
"""

# Application layer (orchestration)
from missionguard.agents import ScriptedAgent, build_default_agents
from missionguard.application.message_bus import MessageBus
from missionguard.application.mission_workflow import MissionWorkflow
from missionguard.application.run_store import RunStore
from missionguard.application.tool_registry import ToolRegistry
from missionguard.config import MissionConfig, load_mission_config

# Domain
from missionguard.domain.agents import AgentRole
from missionguard.domain.exceptions import (
    ConfigurationError,
    OwnershipViolation,
    RepairExhausted,
    RequestTimeout,
    SchemaViolation,
    ServiceUnavailable,
)
from missionguard.domain.interfaces import (
    AgentInterface,
    DurableEngineInterface,
    GateInterface,
    LLMProviderInterface,
    SandboxInterface,
    ToolRegistryInterface,
)
from missionguard.domain.models import (
    FeedbackSignal,
    Issue,
    MissionInput,
    MissionProgress,
    MissionResult,
    Severity,
    VerificationResult,
)
from missionguard.domain.phases import MissionPhase

# Guards
from missionguard.guards import CompositeGate, ManualGate, VerificationGate

# Infrastructure (explicit import encouraged for dependency injection)
from missionguard.infrastructure import (
    InMemoryMissionCheckpointStore,
    InMemoryMissionEventStore,
    LocalMissionEngine,
    MockLLMProvider,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Domain
    "AgentRole",
    "FeedbackSignal",
    "Issue",
    "MissionInput",
    "MissionPhase",
    "MissionProgress",
    "MissionResult",
    "Severity",
    "VerificationResult",
    # Domain interfaces
    "AgentInterface",
    "DurableEngineInterface",
    "GateInterface",
    "LLMProviderInterface",
    "SandboxInterface",
    "ToolRegistryInterface",
    # Domain exceptions
    "ConfigurationError",
    "OwnershipViolation",
    "RepairExhausted",
    "RequestTimeout",
    "SchemaViolation",
    "ServiceUnavailable",
    # Application layer
    "MessageBus",
    "MissionWorkflow",
    "RunStore",
    "ToolRegistry",
    "MissionConfig",
    "load_mission_config",
    # Agents
    "ScriptedAgent",
    "build_default_agents",
    # Guards
    "CompositeGate",
    "ManualGate",
    "VerificationGate",
    # Infrastructure
    "InMemoryMissionCheckpointStore",
    "InMemoryMissionEventStore",
    "LocalMissionEngine",
    "MockLLMProvider",
]
