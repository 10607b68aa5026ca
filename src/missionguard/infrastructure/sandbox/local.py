"""
Local filesystem sandbox.

Runs commands as subprocesses inside a root directory. This isolates file
writes, not processes; use a container runtime behind SandboxInterface when
generated code is untrusted.
"""

import asyncio
import logging
import time
from pathlib import Path

from missionguard.config import SandboxConfig
from missionguard.domain.exceptions import SandboxUnavailable
from missionguard.domain.interfaces import SandboxInterface
from missionguard.domain.models import ExecutionResult

logger = logging.getLogger(__name__)


class LocalSandbox(SandboxInterface):
    """Executes commands and file I/O under ``root_dir``."""

    def __init__(self, config: SandboxConfig | None = None, **kwargs):
        if config is None:
            config = SandboxConfig(**kwargs)
        self.config = config
        self.root = Path(config.root_dir).resolve()

    def _resolve(self, path: str) -> Path:
        """Map a relative path into the sandbox root.

        Raises:
            ValueError: If the path escapes the root
        """
        target = (self.root / path).resolve()
        if target != self.root and self.root not in target.parents:
            raise ValueError(f"Path escapes sandbox root: {path}")
        return target

    async def execute(self, cmd: str, cwd: str | None = None) -> ExecutionResult:
        workdir = self._resolve(cwd) if cwd else self.root
        start = time.monotonic()
        try:
            workdir.mkdir(parents=True, exist_ok=True)
            proc = await asyncio.create_subprocess_shell(
                cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(workdir),
            )
        except OSError as e:
            logger.error(f"Failed to spawn '{cmd}': {e}")
            raise SandboxUnavailable(f"Cannot run commands in {workdir}: {e}") from e

        try:
            async with asyncio.timeout(self.config.command_timeout):
                stdout, stderr = await proc.communicate()
        except TimeoutError:
            proc.kill()
            await proc.wait()
            return ExecutionResult(
                stdout="",
                stderr=f"Command timed out after {self.config.command_timeout}s",
                exit_code=-1,
                duration=time.monotonic() - start,
            )

        return ExecutionResult(
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
            exit_code=proc.returncode if proc.returncode is not None else -1,
            duration=time.monotonic() - start,
        )

    async def write_files(self, files: dict[str, str]) -> None:
        targets = {self._resolve(path): content for path, content in files.items()}
        try:
            for target, content in targets.items():
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content)
        except OSError as e:
            raise SandboxUnavailable(f"Cannot write to {self.root}: {e}") from e

    async def read_file(self, path: str) -> str:
        return self._resolve(path).read_text()
