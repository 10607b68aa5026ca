"""Shared base for concrete mission agents."""

from missionguard.domain.agents import AgentRole
from missionguard.domain.interfaces import AgentInterface


class BaseAgent(AgentInterface):
    """Binds an agent to a role and an identity.

    The agent_id defaults to the role value, which is also the ID the
    default ownership contracts are keyed by.
    """

    def __init__(self, role: AgentRole, agent_id: str | None = None) -> None:
        self._role = role
        self._agent_id = agent_id or role.value

    @property
    def agent_id(self) -> str:
        return self._agent_id

    @property
    def role(self) -> AgentRole:
        return self._role

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._agent_id!r})"
