"""
Infrastructure layer: adapters behind the domain ports.

Contains LLM providers, persistence, the local sandbox and the in-process
mission engine.
"""

from missionguard.infrastructure.engine import LocalMissionEngine
from missionguard.infrastructure.llm import (
    FallbackLLMProvider,
    MockLLMProvider,
    OpenAICompatibleProvider,
    provider_from_config,
)
from missionguard.infrastructure.persistence import (
    FilesystemMissionCheckpointStore,
    FilesystemMissionEventStore,
    InMemoryMissionCheckpointStore,
    InMemoryMissionEventStore,
)
from missionguard.infrastructure.sandbox import LocalSandbox

__all__ = [
    # Engine
    "LocalMissionEngine",
    # LLM
    "FallbackLLMProvider",
    "MockLLMProvider",
    "OpenAICompatibleProvider",
    "provider_from_config",
    # Persistence
    "FilesystemMissionCheckpointStore",
    "FilesystemMissionEventStore",
    "InMemoryMissionCheckpointStore",
    "InMemoryMissionEventStore",
    # Sandbox
    "LocalSandbox",
]
