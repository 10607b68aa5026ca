"""
Mission workflow: the durable phase state machine.

Drives a mission through its fixed phase topology. Each working phase runs
its agents concurrently, verifies what they produced, and asks the gate for
admission. A rejected phase enters a bounded REPAIR loop; exhausting the
bound fails the mission. State is checkpointed after every transition so a
restarted mission resumes from its last committed phase.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Iterable
from typing import Any

from missionguard.application.agent_runtime import AgentRuntime
from missionguard.application.checkpoint_service import CheckpointService
from missionguard.application.contract_validator import ContractValidator
from missionguard.application.message_bus import MessageBus
from missionguard.application.mission_event_emitter import MissionEventEmitter
from missionguard.application.run_store import RunStore
from missionguard.application.tool_registry import ToolRegistry
from missionguard.config import FeedbackTimeoutPolicy, MissionConfig
from missionguard.domain.agents import HUMAN_PRINCIPAL, AgentRole, produces
from missionguard.domain.cancellation import CancellationToken
from missionguard.domain.context import AgentContext
from missionguard.domain.contracts import build_default_contracts
from missionguard.domain.exceptions import (
    ConfigurationError,
    InvalidTransition,
    RepairExhausted,
    SchemaViolation,
    ServiceUnavailable,
)
from missionguard.domain.interfaces import (
    AgentInterface,
    GateInterface,
    MissionCheckpointStoreInterface,
    MissionEventStoreInterface,
    ToolRegistryInterface,
)
from missionguard.domain.models import (
    AgentContract,
    AgentErrorKind,
    AgentResult,
    CheckResult,
    FeedbackSignal,
    GateDecision,
    GateStatus,
    GeneratedFile,
    Issue,
    MissionCheckpoint,
    MissionInput,
    MissionProgress,
    MissionResult,
    MissionState,
    MissionStats,
    OwnershipLevel,
    Severity,
    VerificationResult,
)
from missionguard.domain.phases import (
    PHASE_MESSAGES,
    PHASE_PROGRESS,
    MissionPhase,
    PhaseDefinition,
    RepairStrategy,
    build_phase_plan,
    compute_plan_ref,
    is_allowed,
    next_phase,
    required_artifact_types,
)
from missionguard.guards.verification import VerificationGate

logger = logging.getLogger(__name__)

ORCHESTRATOR_ID = "orchestrator"
CODE_ARTIFACTS = ("frontend_code", "backend_code")

SIGNAL_FEEDBACK = "feedback"
SIGNAL_CANCEL = "cancel"
QUERY_PROGRESS = "progress"

RoleResults = list[tuple[AgentRole, AgentResult]]


def _feedback_problem(feedback: FeedbackSignal) -> str | None:
    """Describe why a feedback signal cannot be recorded, or None if it can."""
    if not isinstance(feedback.approved, bool):
        return f"approved must be a boolean, got {feedback.approved!r}"
    if feedback.comment is not None and not isinstance(feedback.comment, str):
        return f"comment must be a string, got {feedback.comment!r}"
    if feedback.modifications is not None and not isinstance(
        feedback.modifications, dict
    ):
        return f"modifications must be an object, got {feedback.modifications!r}"
    return None


class MissionWorkflow:
    """
    Executes one mission.

    A workflow instance is single-use: construct it, await ``run()``, and
    deliver signals through ``signal()`` while it runs. ``query_progress()``
    never blocks.
    """

    def __init__(
        self,
        mission: MissionInput,
        agents: Iterable[AgentInterface],
        config: MissionConfig | None = None,
        gate: GateInterface | None = None,
        checkpoint_store: MissionCheckpointStoreInterface | None = None,
        event_store: MissionEventStoreInterface | None = None,
        bus: MessageBus | None = None,
        contracts: dict[str, AgentContract] | None = None,
        tools: ToolRegistryInterface | None = None,
    ) -> None:
        """
        Args:
            mission: What to build
            agents: One agent per role used by the phase plan
            config: Timeouts, repair bound and optional phases
            gate: Admission control (defaults to VerificationGate)
            checkpoint_store: Where to persist checkpoints (none if omitted)
            event_store: Where to record the execution trace (none if omitted)
            bus: Message bus shared by the agents
            contracts: Ownership contracts (defaults to a fresh default set)
            tools: Tool registry for this run (defaults to the built-in tools)

        Raises:
            ConfigurationError: If agents do not cover the phase plan
        """
        self.mission = mission
        self.config = config or MissionConfig()
        self.gate = gate or VerificationGate()
        self.bus = bus or MessageBus(
            history_size=self.config.history_size,
            request_timeout_ms=self.config.request_timeout_ms,
        )
        self.runtime = AgentRuntime(timeout_ms=self.config.agent_timeout_ms)
        self.plan = build_phase_plan(self.config.include_human_feedback)
        self.plan_ref = compute_plan_ref(self.plan)
        self._definitions = {d.phase: d for d in self.plan}

        self._validator = ContractValidator(contracts or build_default_contracts())
        self.tools = tools if tools is not None else ToolRegistry()
        self.run_store = RunStore(
            mission.mission_id, self._validator, required_artifact_types(self.plan)
        )
        self._agents = self._wire_agents(agents)

        self._checkpoints = (
            CheckpointService(checkpoint_store) if checkpoint_store else None
        )
        self._events = (
            MissionEventEmitter(event_store, mission.mission_id)
            if event_store
            else None
        )

        self.state = MissionState()
        self._token = CancellationToken()
        self._progress = self._progress_for(MissionPhase.INTAKE)
        self._feedback_event = asyncio.Event()
        self._feedback: FeedbackSignal | None = None
        self._modifications: dict[str, Any] | None = None
        self._prefetch: asyncio.Task[RoleResults] | None = None
        self._last_blocking: tuple[Issue, ...] = ()
        self._result: MissionResult | None = None

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def _wire_agents(
        self, agents: Iterable[AgentInterface]
    ) -> dict[AgentRole, AgentInterface]:
        by_role: dict[AgentRole, AgentInterface] = {}
        for agent in agents:
            if agent.role in by_role:
                raise ConfigurationError(
                    f"Duplicate agent for role '{agent.role.value}'"
                )
            by_role[agent.role] = agent

        needed: set[AgentRole] = set()
        for definition in self.plan:
            needed.update(definition.agents)
            if definition.repair_strategy is RepairStrategy.REPAIR_AGENT:
                needed.add(AgentRole.REPAIR)
            covered = {
                t
                for role in definition.agents
                for t in produces(role, definition.phase.value)
            }
            missing = set(definition.produces) - covered
            if definition.agents and missing:
                raise ConfigurationError(
                    f"Phase '{definition.phase.value}' produces {sorted(missing)} "
                    "but no assigned role declares them"
                )

        absent = sorted(r.value for r in needed - set(by_role))
        if absent:
            raise ConfigurationError(f"No agent registered for role(s): {absent}")

        phase_values = {d.phase.value for d in self.plan} | {MissionPhase.REPAIR.value}
        for role in needed:
            agent = by_role[role]
            for phase_value in phase_values:
                for artifact_type in produces(role, phase_value):
                    level = self._validator.get_ownership_level(
                        agent.agent_id, artifact_type
                    )
                    if level is OwnershipLevel.READ_ONLY:
                        raise ConfigurationError(
                            f"Agent '{agent.agent_id}' ({role.value}) produces "
                            f"'{artifact_type}' but its contract is read-only"
                        )
        return by_role

    # ------------------------------------------------------------------
    # Signals and queries
    # ------------------------------------------------------------------

    def query_progress(self) -> MissionProgress:
        return self._progress

    def query(self, name: str) -> Any:
        if name == QUERY_PROGRESS:
            return self.query_progress()
        raise KeyError(f"Unknown query '{name}'")

    def signal(self, name: str, payload: Any = None) -> None:
        """Deliver a named signal. Unknown names are logged and ignored."""
        if name == SIGNAL_FEEDBACK:
            if isinstance(payload, dict):
                payload = FeedbackSignal(
                    approved=bool(payload.get("approved")),
                    comment=payload.get("comment"),
                    modifications=payload.get("modifications"),
                )
            if not isinstance(payload, FeedbackSignal):
                logger.warning(
                    f"[{self.mission.mission_id}] Ignoring malformed feedback "
                    f"{payload!r}"
                )
                return
            self.feedback_signal(payload)
        elif name == SIGNAL_CANCEL:
            self.cancel_signal(payload if isinstance(payload, str) else None)
        else:
            logger.warning(
                f"[{self.mission.mission_id}] Ignoring unknown signal '{name}'"
            )
            if self._events:
                self._events.signal_ignored(
                    self.state.phase.value, name, "unknown signal"
                )

    def feedback_signal(self, feedback: FeedbackSignal) -> bool:
        """Deliver human feedback. Only honoured while parked at HUMAN_FEEDBACK.

        Returns:
            True if the feedback was accepted
        """
        problem = _feedback_problem(feedback)
        if problem is not None:
            logger.warning(
                f"[{self.mission.mission_id}] Ignoring malformed feedback: {problem}"
            )
            if self._events:
                self._events.signal_ignored(
                    self.state.phase.value, SIGNAL_FEEDBACK, "malformed feedback"
                )
            return False
        phase = self.state.phase
        if phase is not MissionPhase.HUMAN_FEEDBACK or self._feedback_event.is_set():
            logger.info(
                f"[{self.mission.mission_id}] Ignoring feedback in phase {phase.value}"
            )
            if self._events:
                self._events.signal_ignored(
                    phase.value, SIGNAL_FEEDBACK, "not awaiting feedback"
                )
            return False
        if self._events:
            self._events.signal(phase.value, SIGNAL_FEEDBACK)
        self._feedback = feedback
        self._feedback_event.set()
        return True

    def cancel_signal(self, reason: str | None = None) -> bool:
        """Cancel the mission immediately from any non-terminal phase."""
        if self.state.phase.is_terminal:
            return False
        reason = reason or "Cancelled by request"
        logger.info(f"[{self.mission.mission_id}] Cancelling: {reason}")
        if self._events:
            self._events.signal(self.state.phase.value, SIGNAL_CANCEL)
        self._token.cancel(reason)
        self.state.errors.append(reason)
        self.state.pending_signal = None
        self._transition(MissionPhase.CANCELLED)
        return True

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    @property
    def result(self) -> MissionResult | None:
        return self._result

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run(
        self, resume_from: MissionCheckpoint | None = None
    ) -> MissionResult:
        """
        Run the mission to a terminal phase.

        Args:
            resume_from: Checkpoint to continue from instead of starting at INTAKE

        Returns:
            MissionResult; failures are reported in the result, not raised

        Raises:
            ConfigurationError: If the checkpoint was taken under another phase plan
        """
        start = time.monotonic()
        if resume_from is not None:
            self._resume(resume_from)
        else:
            logger.info(
                f"[{self.mission.mission_id}] Mission started: {self.mission.request}"
            )
            self._checkpoint()

        try:
            async with asyncio.timeout(self.config.mission_timeout_ms / 1000):
                await self._drive()
        except TimeoutError:
            self._fail(f"Mission timed out after {self.config.mission_timeout_ms}ms")
        except ServiceUnavailable as e:
            self._fail(str(e))
        except RepairExhausted as e:
            self.state.errors.append(str(e))
            self.state.errors.extend(self.state.error_log)
            self._fail(None)
        finally:
            await self._discard_prefetch()

        self._result = self._build_result(time.monotonic() - start)
        if self._events:
            self._events.mission_end(
                self.state.phase.value,
                self._result.success,
                "; ".join(self.state.errors),
            )
        logger.info(
            f"[{self.mission.mission_id}] Mission ended in {self.state.phase.value} "
            f"after {self.state.iterations} iteration(s)"
        )
        return self._result

    def _resume(self, checkpoint: MissionCheckpoint) -> None:
        CheckpointService.verify_plan_ref(checkpoint, self.plan_ref)
        self.state = CheckpointService.restore_state(checkpoint, self.run_store)
        self._progress = self._progress_for(self.state.phase)
        logger.info(
            f"[{self.mission.mission_id}] Resuming at {self.state.phase.value} "
            f"from checkpoint {checkpoint.checkpoint_id}"
        )

    async def _drive(self) -> None:
        while not self.state.phase.is_terminal:
            phase = self.state.phase
            if phase is MissionPhase.REPAIR:
                await self._repair_loop()
            elif phase is MissionPhase.HUMAN_FEEDBACK:
                await self._await_feedback()
            else:
                await self._run_phase(self._definitions[phase])

    async def _run_phase(self, definition: PhaseDefinition) -> None:
        phase = definition.phase
        self.state.iterations += 1
        logger.info(f"[{self.mission.mission_id}] Phase {phase.value} started")
        if self._events:
            self._events.phase_start(phase.value)

        if phase is MissionPhase.GENERATE_FRONTEND:
            self._start_backend_prefetch()

        decision = await self._execute_and_gate(
            definition, self._run_phase_agents(definition, ())
        )
        if self.state.phase.is_terminal:
            return

        if decision.passed:
            self._advance(definition, decision)
            return

        self._record_rejection(definition, decision, attempt=0)
        self.state.repairing_phase = phase
        self.state.retry_count = 0
        self._transition(MissionPhase.REPAIR)

    async def _repair_loop(self) -> None:
        phase = self.state.repairing_phase
        if phase is None:
            raise InvalidTransition(MissionPhase.REPAIR.value, "unknown phase")
        definition = self._definitions[phase]
        bound = self.config.max_repair_attempts

        while not self.state.phase.is_terminal:
            if self.state.retry_count >= bound:
                raise RepairExhausted(
                    phase.value, self.state.retry_count, list(self._last_blocking)
                )
            self.state.retry_count += 1
            self.state.iterations += 1
            attempt = self.state.retry_count
            self._set_progress(
                MissionPhase.REPAIR,
                f"Repairing {phase.value} (attempt {attempt}/{bound})",
                PHASE_PROGRESS[phase],
            )
            logger.info(
                f"[{self.mission.mission_id}] Repair attempt {attempt}/{bound} "
                f"for {phase.value}"
            )

            decision = await self._repair_once(definition, attempt)
            if self.state.phase.is_terminal:
                return
            if decision.passed:
                self._advance(definition, decision)
                return
            self._record_rejection(definition, decision, attempt)
            self._checkpoint()

    async def _repair_once(
        self, definition: PhaseDefinition, attempt: int
    ) -> GateDecision:
        feedback = tuple(self.state.error_log)
        phase = definition.phase.value
        if definition.repair_strategy is RepairStrategy.REPAIR_AGENT:
            targets = tuple(
                t for t in definition.repair_targets if self.run_store.has(t)
            )
            if self._events:
                self._events.repair_attempt(phase, attempt, list(targets))
            return await self._execute_and_gate(
                definition,
                self._repair_and_rerun(definition, targets, feedback, attempt),
            )

        if self._events:
            self._events.repair_attempt(phase, attempt, list(definition.produces))
        return await self._execute_and_gate(
            definition, self._run_phase_agents(definition, feedback, attempt)
        )

    async def _repair_and_rerun(
        self,
        definition: PhaseDefinition,
        targets: tuple[str, ...],
        feedback: tuple[str, ...],
        attempt: int,
    ) -> RoleResults:
        repair_results = await self._invoke(
            AgentRole.REPAIR,
            MissionPhase.REPAIR,
            targets=targets,
            feedback=feedback,
            repairing=definition.phase,
            attempt=attempt,
        )
        if self.state.phase.is_terminal:
            return repair_results
        self._raise_if_unavailable(repair_results)
        return repair_results + await self._run_phase_agents(
            definition, feedback, attempt
        )

    def _advance(self, definition: PhaseDefinition, decision: GateDecision) -> None:
        logger.info(
            f"[{self.mission.mission_id}] Phase {definition.phase.value} passed: "
            f"{decision.message}"
        )
        if self._events:
            self._events.phase_pass(definition.phase.value, decision.message or "")
        self.state.retry_count = 0
        self.state.repairing_phase = None
        self.state.error_log = []
        self._transition(
            next_phase(definition.phase, self.config.include_human_feedback)
        )

    def _record_rejection(
        self, definition: PhaseDefinition, decision: GateDecision, attempt: int
    ) -> None:
        details = [str(issue) for issue in decision.blocking]
        if not details and decision.message:
            details = [decision.message]
        self.state.error_log = details
        self._last_blocking = decision.blocking
        logger.warning(
            f"[{self.mission.mission_id}] Phase {definition.phase.value} rejected "
            f"(attempt {attempt}): {decision.message}"
        )
        if self._events:
            self._events.phase_fail(definition.phase.value, attempt, "; ".join(details))

    # ------------------------------------------------------------------
    # Agent invocation and verification
    # ------------------------------------------------------------------

    async def _execute_and_gate(
        self, definition: PhaseDefinition, work: Awaitable[RoleResults]
    ) -> GateDecision:
        """Run one attempt of a phase under the phase timeout and gate it."""
        try:
            async with asyncio.timeout(self.config.phase_timeout_ms / 1000):
                results = await work
        except TimeoutError:
            if self.state.phase.is_terminal:
                return GateDecision(status=GateStatus.FAIL)
            timeout_issue = Issue(
                Severity.HIGH,
                f"Phase {definition.phase.value} timed out after "
                f"{self.config.phase_timeout_ms}ms",
            )
            verification = VerificationResult.from_checks(
                [CheckResult("phase_timeout", "fail", (timeout_issue,))]
            )
            return self.gate.evaluate(verification)

        if self.state.phase.is_terminal:
            return GateDecision(status=GateStatus.FAIL)

        self._raise_if_unavailable(results)
        return self.gate.evaluate(self._verify(definition, results))

    async def _run_phase_agents(
        self,
        definition: PhaseDefinition,
        feedback: tuple[str, ...],
        attempt: int = 0,
    ) -> RoleResults:
        if (
            definition.phase is MissionPhase.GENERATE_BACKEND
            and self._prefetch is not None
            and not feedback
        ):
            prefetch, self._prefetch = self._prefetch, None
            return await prefetch
        return await self._gather_agents(definition, feedback, attempt)

    async def _gather_agents(
        self,
        definition: PhaseDefinition,
        feedback: tuple[str, ...],
        attempt: int = 0,
    ) -> RoleResults:
        batches = await asyncio.gather(
            *(
                self._invoke(
                    role,
                    definition.phase,
                    targets=produces(role, definition.phase.value),
                    feedback=feedback,
                    attempt=attempt,
                )
                for role in definition.agents
            )
        )
        return [item for batch in batches for item in batch]

    async def _invoke(
        self,
        role: AgentRole,
        phase: MissionPhase,
        targets: tuple[str, ...],
        feedback: tuple[str, ...] = (),
        repairing: MissionPhase | None = None,
        attempt: int = 0,
    ) -> RoleResults:
        agent = self._agents[role]
        context = AgentContext(
            agent_id=agent.agent_id,
            mission=self.mission,
            phase=phase,
            store=self.run_store,
            token=self._token.child(),
            bus=self.bus,
            tools=self.tools,
            targets=targets,
            feedback=feedback,
            modifications=self._modifications,
            repairing_phase=repairing,
            attempt=attempt,
        )
        try:
            result = await self.runtime.run(agent, context)
        finally:
            context.token.detach()
        if not result.success:
            kind = result.error_kind.value if result.error_kind else "error"
            logger.warning(
                f"[{self.mission.mission_id}] {agent.agent_id} failed in "
                f"{phase.value} ({kind}): {result.error}"
            )
        return [(role, result)]

    def _start_backend_prefetch(self) -> None:
        backend = self._definitions.get(MissionPhase.GENERATE_BACKEND)
        if not self.config.parallel_generation or backend is None or self._prefetch:
            return
        if self.run_store.has("backend_code"):
            return
        self._prefetch = asyncio.create_task(self._gather_agents(backend, ()))

    async def _discard_prefetch(self) -> None:
        if self._prefetch is not None:
            self._prefetch.cancel()
            await asyncio.gather(self._prefetch, return_exceptions=True)
            self._prefetch = None

    def _raise_if_unavailable(self, results: RoleResults) -> None:
        for role, result in results:
            if result.error_kind is AgentErrorKind.UNAVAILABLE:
                raise ServiceUnavailable(
                    result.error or f"{role.value} dependency unavailable"
                )

    def _verify(
        self, definition: PhaseDefinition, results: RoleResults
    ) -> VerificationResult:
        """Merge agent outcomes, missing outputs and the phase report."""
        agent_issues = tuple(
            Issue(Severity.HIGH, f"{role.value}: {result.error}")
            for role, result in results
            if not result.success
        )
        missing = tuple(
            Issue(Severity.HIGH, f"Missing artifact '{t}'", artifact=t)
            for t in definition.produces
            if not self.run_store.has(t)
        )
        checks = [
            CheckResult("agents", "fail" if agent_issues else "pass", agent_issues),
            CheckResult("artifacts", "fail" if missing else "pass", missing),
        ]
        report_type = definition.verification_artifact
        if report_type and self.run_store.has(report_type):
            report = VerificationResult.from_dict(self.run_store.get(report_type))
            checks.extend(report.checks)
        return VerificationResult.from_checks(checks)

    # ------------------------------------------------------------------
    # Human feedback
    # ------------------------------------------------------------------

    async def _await_feedback(self) -> None:
        self.state.pending_signal = SIGNAL_FEEDBACK
        self._checkpoint()
        timeout_ms = self.config.feedback_timeout_ms

        waiter = asyncio.create_task(self._feedback_event.wait())
        canceller = asyncio.create_task(self._token.wait())
        try:
            await asyncio.wait(
                {waiter, canceller},
                timeout=None if timeout_ms is None else timeout_ms / 1000,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in (waiter, canceller):
                task.cancel()
            await asyncio.gather(waiter, canceller, return_exceptions=True)

        if self.state.phase.is_terminal:
            return
        self.state.pending_signal = None

        feedback = self._feedback
        timed_out = feedback is None
        if feedback is None:
            policy = self.config.feedback_timeout_policy
            logger.warning(
                f"[{self.mission.mission_id}] No feedback within {timeout_ms}ms, "
                f"applying policy '{policy.value}'"
            )
            if policy is FeedbackTimeoutPolicy.APPROVE:
                feedback = FeedbackSignal(
                    approved=True,
                    comment="Approved automatically after feedback timeout",
                )
            else:
                feedback = FeedbackSignal(
                    approved=False,
                    comment=f"No feedback received within {timeout_ms}ms",
                )

        try:
            self.run_store.put(
                "human_feedback",
                {
                    "approved": feedback.approved,
                    "comment": feedback.comment,
                    "modifications": feedback.modifications,
                    "timed_out": timed_out,
                },
                HUMAN_PRINCIPAL,
            )
        except SchemaViolation as e:
            self._fail(f"Human feedback rejected: {e}")
            return

        if feedback.approved:
            self._modifications = feedback.modifications
            self.state.iterations += 1
            self._transition(next_phase(MissionPhase.HUMAN_FEEDBACK))
        else:
            comment = feedback.comment or "no comment"
            self._fail(f"Rejected by human reviewer: {comment}")

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def _transition(self, target: MissionPhase) -> None:
        source = self.state.phase
        if not is_allowed(source, target):
            raise InvalidTransition(source.value, target.value)
        self.state.phase = target
        self.state.manifest = self.run_store.build_manifest()
        self._progress = self._progress_for(target, self._progress.progress)
        logger.info(f"[{self.mission.mission_id}] {source.value} -> {target.value}")
        if self._events:
            self._events.transition(source.value, target.value)
        self.bus.broadcast(
            ORCHESTRATOR_ID,
            {"type": "phase_changed", "from": source.value, "to": target.value},
        )
        self._checkpoint()

    def _fail(self, message: str | None) -> None:
        if self.state.phase.is_terminal:
            return
        if message:
            self.state.errors.append(message)
            logger.error(f"[{self.mission.mission_id}] Mission failed: {message}")
        self._token.cancel("mission failed")
        self._transition(MissionPhase.FAILED)

    def _checkpoint(self) -> None:
        if self._checkpoints is None:
            return
        self._checkpoints.create_checkpoint(
            self.mission, self.state, self.run_store, self.plan_ref
        )

    # ------------------------------------------------------------------
    # Progress and results
    # ------------------------------------------------------------------

    def _progress_for(
        self, phase: MissionPhase, previous: int = 0
    ) -> MissionProgress:
        # FAILED and CANCELLED keep the progress reached so far
        if phase is MissionPhase.REPAIR and self.state.repairing_phase is not None:
            percent = PHASE_PROGRESS[self.state.repairing_phase]
        else:
            percent = PHASE_PROGRESS.get(phase, previous)
        return MissionProgress(
            phase=phase, message=PHASE_MESSAGES[phase], progress=percent
        )

    def _set_progress(self, phase: MissionPhase, message: str, percent: int) -> None:
        self._progress = MissionProgress(
            phase=phase, message=message, progress=percent
        )

    def _collect_files(self) -> tuple[GeneratedFile, ...]:
        files: list[GeneratedFile] = []
        for artifact_type in CODE_ARTIFACTS:
            bundle = self.run_store.get(artifact_type) or {}
            for entry in bundle.get("files", ()):
                files.append(GeneratedFile(entry["path"], entry["content"]))
        return tuple(files)

    def _build_result(self, duration: float) -> MissionResult:
        files = self._collect_files()
        return MissionResult(
            mission_id=self.mission.mission_id,
            success=self.state.phase is MissionPhase.COMPLETE,
            phase=self.state.phase,
            files=files,
            stats=MissionStats(
                total_files=len(files),
                total_lines=sum(f.line_count for f in files),
                duration=duration,
                iterations=self.state.iterations,
            ),
            errors=tuple(self.state.errors),
            manifest=self.run_store.build_manifest(),
        )
