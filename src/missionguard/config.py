"""
Typed configuration for missions.

Configuration is plain dataclasses so that unknown fields are rejected at
construction time. ``load_mission_config`` reads the same structure from a
JSON file and reports every problem as a ConfigurationError.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any

from missionguard.domain.exceptions import ConfigurationError

DEFAULT_OLLAMA_URL = "http://localhost:11434/v1"
ENV_PREFIX = "MISSIONGUARD_"


class FeedbackTimeoutPolicy(str, Enum):
    """What a mission does when no human feedback arrives in time."""

    REJECT = "reject"
    APPROVE = "approve"


@dataclass
class LLMProviderConfig:
    """Connection settings for an OpenAI-compatible endpoint."""

    model: str = "qwen2.5-coder:7b"
    base_url: str = DEFAULT_OLLAMA_URL
    api_key: str = "ollama"  # required by the client, unused by Ollama
    timeout: float = 120.0
    temperature: float = 0.2
    fallback: LLMProviderConfig | None = None


@dataclass
class SandboxConfig:
    root_dir: str = "./output"
    command_timeout: float = 120.0
    build_command: str | None = None


@dataclass
class MissionConfig:
    """
    Mission execution settings.

    Timeouts must nest: an agent call fits inside its phase, and a phase fits
    inside the mission.
    """

    agent_timeout_ms: int = 60000
    phase_timeout_ms: int = 300000
    mission_timeout_ms: int = 3600000
    max_repair_attempts: int = 3
    request_timeout_ms: int = 30000
    history_size: int = 100
    include_human_feedback: bool = False
    feedback_timeout_ms: int | None = None  # None waits indefinitely
    feedback_timeout_policy: FeedbackTimeoutPolicy = FeedbackTimeoutPolicy.REJECT
    parallel_generation: bool = True
    checkpoint_dir: str | None = None
    llm: LLMProviderConfig = field(default_factory=LLMProviderConfig)
    sandbox: SandboxConfig = field(default_factory=SandboxConfig)

    def __post_init__(self) -> None:
        if isinstance(self.feedback_timeout_policy, str):
            try:
                self.feedback_timeout_policy = FeedbackTimeoutPolicy(
                    self.feedback_timeout_policy
                )
            except ValueError as e:
                raise ConfigurationError(
                    f"Unknown feedback_timeout_policy '{self.feedback_timeout_policy}'"
                ) from e
        if not (
            0 < self.agent_timeout_ms < self.phase_timeout_ms < self.mission_timeout_ms
        ):
            raise ConfigurationError(
                "Timeouts must satisfy agent < phase < mission, got "
                f"{self.agent_timeout_ms} / {self.phase_timeout_ms} / "
                f"{self.mission_timeout_ms}ms"
            )
        if self.max_repair_attempts < 0:
            raise ConfigurationError("max_repair_attempts must be >= 0")
        if self.history_size < 1:
            raise ConfigurationError("history_size must be >= 1")
        if self.feedback_timeout_ms is not None and self.feedback_timeout_ms <= 0:
            raise ConfigurationError("feedback_timeout_ms must be positive")


def _build_llm_config(data: Mapping[str, Any]) -> LLMProviderConfig:
    values = dict(data)
    fallback = values.pop("fallback", None)
    config = LLMProviderConfig(**values)
    if fallback is not None:
        config.fallback = _build_llm_config(fallback)
    return config


def mission_config_from_dict(data: Mapping[str, Any]) -> MissionConfig:
    """Build a MissionConfig from a plain mapping.

    Raises:
        ConfigurationError: If fields are unknown or values are invalid
    """
    values = dict(data)
    try:
        if "llm" in values:
            values["llm"] = _build_llm_config(values["llm"])
        if "sandbox" in values:
            values["sandbox"] = SandboxConfig(**values["sandbox"])
        return MissionConfig(**values)
    except TypeError as e:
        raise ConfigurationError(f"Invalid mission configuration: {e}") from e


def apply_env_overrides(
    config: MissionConfig, environ: Mapping[str, str] | None = None
) -> MissionConfig:
    """Override provider settings from MISSIONGUARD_LLM_* variables."""
    env = os.environ if environ is None else environ
    overrides = {
        name: env[f"{ENV_PREFIX}LLM_{name.upper()}"]
        for name in ("api_key", "base_url", "model")
        if f"{ENV_PREFIX}LLM_{name.upper()}" in env
    }
    if not overrides:
        return config
    return replace(config, llm=replace(config.llm, **overrides))


def load_mission_config(path: Path | str) -> MissionConfig:
    """
    Load mission configuration from a JSON file.

    Args:
        path: Path to the config file

    Returns:
        Validated MissionConfig with environment overrides applied

    Raises:
        ConfigurationError: If file is missing or invalid
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected dict in {path}, got {type(data).__name__}")

    return apply_env_overrides(mission_config_from_dict(data))
