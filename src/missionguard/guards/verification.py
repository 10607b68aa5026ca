"""
Verification gates.

The gate is the single admission-control point of a mission: a phase only
advances when the gate passes its verification result. High and critical
issues block; low and medium issues never do.
"""

from missionguard.domain.interfaces import GateInterface
from missionguard.domain.models import (
    GateDecision,
    GateStatus,
    VerificationResult,
)

PASS_MESSAGE = "All verification checks passed or had only low/medium severity issues"
BYPASS_MESSAGE = "Gate bypassed"
FORCED_FAIL_MESSAGE = "Gate forced to fail"


def gate_from_verification(result: VerificationResult) -> GateDecision:
    """Decide admission from a verification result."""
    blocking = tuple(
        issue for issue in result.all_issues() if issue.severity.is_blocking
    )
    if blocking:
        return GateDecision(
            status=GateStatus.FAIL,
            blocking=blocking,
            message=(
                f"Found {len(blocking)} blocking issue(s) "
                "with high or critical severity"
            ),
        )
    return GateDecision(status=GateStatus.PASS, message=PASS_MESSAGE)


def always_pass_gate() -> GateDecision:
    """Manual override that admits regardless of findings."""
    return GateDecision(status=GateStatus.PASS, message=BYPASS_MESSAGE)


def always_fail_gate(message: str = FORCED_FAIL_MESSAGE) -> GateDecision:
    """Manual override that rejects regardless of findings."""
    return GateDecision(status=GateStatus.FAIL, message=message)


class VerificationGate(GateInterface):
    """Default gate: blocks on high/critical issues."""

    def evaluate(self, result: VerificationResult) -> GateDecision:
        return gate_from_verification(result)


class ManualGate(GateInterface):
    """
    Operator override.

    Ignores the verification result and returns a fixed decision. Used to
    bypass a known-noisy check or to hold a mission back deliberately.
    """

    def __init__(self, approve: bool, message: str | None = None):
        """
        Args:
            approve: True to always pass, False to always fail
            message: Optional message for forced failures
        """
        self.approve = approve
        self.message = message

    def evaluate(self, result: VerificationResult) -> GateDecision:
        if self.approve:
            return always_pass_gate()
        return always_fail_gate(self.message or FORCED_FAIL_MESSAGE)


class CompositeGate(GateInterface):
    """
    Logical AND of multiple gates. All must pass.

    Evaluates gates in order and short-circuits on the first rejection.
    """

    def __init__(self, *gates: GateInterface):
        """
        Args:
            *gates: Gates to compose (evaluated in order)
        """
        self.gates = gates

    def evaluate(self, result: VerificationResult) -> GateDecision:
        for gate in self.gates:
            decision = gate.evaluate(result)
            if not decision.passed:
                return decision
        return GateDecision(status=GateStatus.PASS, message=PASS_MESSAGE)
