"""
Ownership policy and schema enforcement for artifact writes.

A validator is constructed per mission run from that run's contracts.
"""

from __future__ import annotations

from typing import Any

from missionguard.domain.exceptions import OwnershipViolation, SchemaViolation
from missionguard.domain.models import AgentContract, OwnershipLevel
from missionguard.schemas import get_artifact_schema, validate_against


class ContractValidator:
    """Decides whether an agent may write an artifact, and whether the data is valid."""

    def __init__(self, contracts: dict[str, AgentContract]) -> None:
        """
        Args:
            contracts: agent_id -> contract for this run
        """
        self._contracts = dict(contracts)
        self._schemas: dict[str, dict[str, Any] | None] = {}

    def has_ownership(self, agent_id: str, artifact_type: str) -> bool:
        """True only if the agent owns the type outright."""
        return self.get_ownership_level(agent_id, artifact_type) is OwnershipLevel.OWNER

    def get_ownership_level(self, agent_id: str, artifact_type: str) -> OwnershipLevel:
        """Ownership level; read-only for unknown agents and undeclared types."""
        contract = self._contracts.get(agent_id)
        if contract is None:
            return OwnershipLevel.READ_ONLY
        return contract.level_for(artifact_type)

    def enforce_ownership(
        self, agent_id: str, artifact_type: str, is_overwrite: bool
    ) -> None:
        """
        Raises:
            OwnershipViolation: If the write is not allowed
        """
        level = self.get_ownership_level(agent_id, artifact_type)
        if level is OwnershipLevel.READ_ONLY:
            raise OwnershipViolation(agent_id, artifact_type, "read-only access")
        if is_overwrite and not self.has_ownership(agent_id, artifact_type):
            raise OwnershipViolation(
                agent_id, artifact_type, "overwrite requires owner rights"
            )

    def contract_validate_artifact(self, artifact_type: str, data: Any) -> None:
        """
        Raises:
            SchemaViolation: Listing every violation found
        """
        if artifact_type not in self._schemas:
            self._schemas[artifact_type] = get_artifact_schema(artifact_type)
        schema = self._schemas[artifact_type]

        if schema is None:
            if not isinstance(data, dict):
                raise SchemaViolation(
                    artifact_type,
                    [("/", f"{type(data).__name__} is not of type 'object'")],
                )
            return

        errors = validate_against(schema, data)
        if errors:
            raise SchemaViolation(artifact_type, errors)
