"""Deploy agent: writes the generated application into the sandbox."""

import logging
from typing import Any

from missionguard.agents.base import BaseAgent
from missionguard.domain.agents import AgentRole
from missionguard.domain.context import AgentContext
from missionguard.domain.interfaces import SandboxInterface
from missionguard.guards.static_scan import bundle_files

logger = logging.getLogger(__name__)

MAX_BUILD_OUTPUT = 4000


class DeployAgent(BaseAgent):
    """
    Materializes code bundles and optionally builds them.

    A failed build is recorded in the deployment artifact and then raised,
    so the phase is rejected and repaired like any other failure. Sandbox
    outages propagate as SandboxUnavailable and fail the mission.
    """

    def __init__(
        self,
        sandbox: SandboxInterface,
        build_command: str | None = None,
        url: str | None = None,
        agent_id: str | None = None,
    ) -> None:
        super().__init__(AgentRole.DEVOPS_ENGINEER, agent_id)
        self.sandbox = sandbox
        self.build_command = build_command
        self.url = url

    async def execute(self, context: AgentContext) -> Any:
        files = dict(
            bundle_files(context.get("frontend_code"), context.get("backend_code"))
        )
        if not files:
            raise ValueError("Nothing to deploy: no generated files")

        context.step()
        await self.sandbox.write_files(files)
        deployment: dict[str, Any] = {
            "status": "deployed",
            "url": self.url,
            "files_written": len(files),
        }

        if self.build_command:
            context.step()
            result = await self.sandbox.execute(self.build_command)
            output = (result.stdout + result.stderr)[-MAX_BUILD_OUTPUT:]
            deployment["build_output"] = output
            if result.exit_code != 0:
                deployment["status"] = "failed"
                context.put("deployment", deployment)
                raise RuntimeError(
                    f"Build command exited with {result.exit_code}: {output[-500:]}"
                )
            deployment["status"] = "built" if self.url is None else "deployed"

        context.put("deployment", deployment)
        logger.info(f"Deployed {len(files)} file(s) for {context.mission.mission_id}")
        return deployment
