"""
Gates and static checks for mission phases.

Gates are deterministic: they turn a verification result into a pass/fail
admission decision. They can be composed using CompositeGate. Static scans
produce the check results that gates consume.
"""

from missionguard.guards.static_scan import (
    SECURITY_RULES,
    ScanRule,
    bundle_files,
    security_scan,
    syntax_check,
)
from missionguard.guards.verification import (
    CompositeGate,
    ManualGate,
    VerificationGate,
    always_fail_gate,
    always_pass_gate,
    gate_from_verification,
)

__all__ = [
    "gate_from_verification",
    "always_pass_gate",
    "always_fail_gate",
    "VerificationGate",
    "ManualGate",
    "CompositeGate",
    # Static scans
    "SECURITY_RULES",
    "ScanRule",
    "bundle_files",
    "security_scan",
    "syntax_check",
]
