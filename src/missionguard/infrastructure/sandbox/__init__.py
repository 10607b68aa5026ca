"""
Sandbox adapters for executing generated code.
"""

from missionguard.infrastructure.sandbox.local import LocalSandbox

__all__ = ["LocalSandbox"]
