"""Session orchestrator — owns S(t), u(t), the dose preview and the error slot.

All operations run on one event loop; suspension happens only while the
transport is awaiting the network. Each operation kind has its own
RequestSlot holding a monotonically increasing generation. A result is
applied only if its generation is still the slot's latest when it arrives,
so completion order never overrides issue order. The commit slot is the
exception: the server has already applied any commit that succeeds, so a
superseded commit still lands unless a newer commit has landed first.
Teardown advances every slot and refuses new dispatches, so late responses
are dropped.

Goal policy: the automatic prescription refresh after a commit re-reads the
goal current at commit completion (latest goal), not the goal at commit start.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Literal, TypeVar

from loguru import logger
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from perflab.twin.errors import ValidationError, to_api_error, validation_error_from
from perflab.twin.goals_config import DEFAULT_GOAL
from perflab.twin.models import (
    ApiError,
    MetricsRequest,
    MetricsResponse,
    PingResponse,
    SessionSnapshot,
    StressDose,
    UnifiedStateVector,
    WorkoutLog,
    WorkoutPrescription,
)
from perflab.twin.transport import TwinTransport

T = TypeVar("T")
ModelT = TypeVar("ModelT", bound=BaseModel)

Listener = Callable[[SessionSnapshot], None]
SlotName = Literal["prescription", "commit", "simulate", "metrics", "ping"]


class SlotStatus(str, Enum):
    idle = "idle"
    pending = "pending"


class RequestSlot:
    """Generation counter for one logical request kind.

    Idle -> Pending on begin(). finish() with the current token returns the
    slot to Idle and tells the caller to apply the result. A newer begin(),
    cancel() or close() makes every older token stale. With
    `keep_late_success`, a stale token that succeeded is still applied as long
    as no newer token has been applied.
    """

    def __init__(self, name: str, keep_late_success: bool = False) -> None:
        self.name = name
        self.keep_late_success = keep_late_success
        self._generation = 0
        self._applied = 0
        self._inflight: int | None = None
        self._closed = False

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def status(self) -> SlotStatus:
        return SlotStatus.pending if self._inflight is not None else SlotStatus.idle

    @property
    def pending(self) -> bool:
        return self._inflight is not None

    def begin(self) -> int:
        self._generation += 1
        self._inflight = self._generation
        return self._generation

    def is_current(self, token: int) -> bool:
        return not self._closed and token == self._generation

    def finish(self, token: int, succeeded: bool = True) -> bool:
        """Settle a request. True if its result should be applied."""
        if self._closed:
            return False
        if token == self._generation:
            self._inflight = None
        elif not (self.keep_late_success and succeeded and token > self._applied):
            return False
        if succeeded:
            self._applied = max(self._applied, token)
        return True

    def release(self, token: int) -> None:
        """Drop the pending mark for an abandoned request without applying anything."""
        if self._inflight == token:
            self._inflight = None

    def cancel(self) -> None:
        self._generation += 1
        self._inflight = None

    def close(self) -> None:
        self.cancel()
        self._closed = True


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    value: T | None = None
    error: ApiError | None = None


def _validated(model: type[ModelT], payload: ModelT | Mapping[str, Any]) -> ModelT:
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise validation_error_from(exc) from exc


class TwinSession:
    """One logical dashboard session against a TwinTransport."""

    def __init__(self, transport: TwinTransport, goal: str = DEFAULT_GOAL) -> None:
        self._transport = transport
        self._goal = goal

        self._state: UnifiedStateVector | None = None
        self._prescription: WorkoutPrescription | None = None
        self._dose: StressDose | None = None
        self._metrics: MetricsResponse | None = None
        self._error: ApiError | None = None

        self._rx_slot = RequestSlot("prescription")
        self._commit_slot = RequestSlot("commit", keep_late_success=True)
        self._simulate_slot = RequestSlot("simulate")
        self._metrics_slot = RequestSlot("metrics")
        self._ping_slot = RequestSlot("ping")

        self._listeners: list[Listener] = []
        self._closed = False

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def goal(self) -> str:
        return self._goal

    @property
    def state(self) -> UnifiedStateVector | None:
        return self._state

    @property
    def prescription(self) -> WorkoutPrescription | None:
        return self._prescription

    @property
    def dose(self) -> StressDose | None:
        return self._dose

    @property
    def metrics(self) -> MetricsResponse | None:
        return self._metrics

    @property
    def error(self) -> ApiError | None:
        return self._error

    @property
    def closed(self) -> bool:
        return self._closed

    def slot_status(self, name: SlotName) -> SlotStatus:
        """Status of one request slot. Unknown names read as idle."""
        for slot in self._slots():
            if slot.name == name:
                return slot.status
        return SlotStatus.idle

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            goal=self._goal,
            state=self._state,
            prescription=self._prescription,
            dose=self._dose,
            metrics=self._metrics,
            error=self._error,
            prescription_pending=self._rx_slot.pending,
            commit_pending=self._commit_slot.pending,
            simulate_pending=self._simulate_slot.pending,
            metrics_pending=self._metrics_slot.pending,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a snapshot listener. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _slots(self) -> tuple[RequestSlot, ...]:
        return (self._rx_slot, self._commit_slot, self._simulate_slot, self._metrics_slot, self._ping_slot)

    def _publish(self) -> None:
        if self._closed or not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)

    def _fail(self, error: ApiError) -> None:
        self._error = error
        logger.info(f"Twin operation failed ({error.kind}, status={error.status}): {error.message}")
        self._publish()

    def _reset_transient(self) -> None:
        """New commit/simulate cycle: drop the old preview, error and any in-flight preview."""
        self._error = None
        self._dose = None
        self._simulate_slot.cancel()

    async def _dispatch(self, slot: RequestSlot, call: Callable[[], Awaitable[T]]) -> Outcome[T] | None:
        """Run one call in a slot. None means the result was superseded and dropped."""
        token = slot.begin()
        self._publish()
        try:
            value = await call()
        except asyncio.CancelledError:
            slot.release(token)
            raise
        except Exception as exc:
            outcome: Outcome[T] = Outcome(error=to_api_error(exc))
        else:
            outcome = Outcome(value=value)

        if not slot.finish(token, succeeded=outcome.error is None):
            logger.debug(f"Dropping superseded {slot.name} result (generation {token})")
            return None
        return outcome

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def refresh_prescription(self, goal: str | None = None) -> WorkoutPrescription | None:
        """Fetch u(t) for `goal` (or the current goal). Last-issued call wins.

        The previous prescription stays visible while the request is in flight.
        """
        if self._closed:
            return None
        if goal is not None:
            self._goal = goal
        target = self._goal

        self._error = None
        outcome = await self._dispatch(self._rx_slot, lambda: self._transport.get_next_session(target))
        if outcome is None:
            return None
        if outcome.error is not None:
            self._fail(outcome.error)
            return None

        self._prescription = outcome.value
        self._publish()
        return outcome.value

    async def commit_workout(self, log: WorkoutLog | Mapping[str, Any]) -> UnifiedStateVector | None:
        """Commit a log, replace S(t) wholesale, then refresh u(t) for the latest goal.

        On failure S(t) and u(t) are left untouched and no refresh is issued.
        """
        if self._closed:
            return None
        self._reset_transient()
        try:
            validated = _validated(WorkoutLog, log)
        except ValidationError as exc:
            self._fail(exc.to_api_error())
            return None

        outcome = await self._dispatch(self._commit_slot, lambda: self._transport.log_workout(validated))
        if outcome is None:
            return None
        if outcome.error is not None:
            self._fail(outcome.error)
            return None

        self._state = outcome.value
        logger.info(f"State advanced to {outcome.value.timestamp.isoformat()}")
        self._publish()

        await self.refresh_prescription()
        return outcome.value

    async def simulate_dose(self, log: WorkoutLog | Mapping[str, Any]) -> StressDose | None:
        """Preview D(t) for a log. Never touches S(t) or u(t)."""
        if self._closed:
            return None
        self._reset_transient()
        try:
            validated = _validated(WorkoutLog, log)
        except ValidationError as exc:
            self._fail(exc.to_api_error())
            return None

        outcome = await self._dispatch(self._simulate_slot, lambda: self._transport.simulate_dose(validated))
        if outcome is None:
            return None
        if outcome.error is not None:
            self._fail(outcome.error)
            return None

        self._dose = outcome.value
        self._publish()
        return outcome.value

    async def compute_metrics(self, req: MetricsRequest | Mapping[str, Any]) -> MetricsResponse | None:
        """1.5-mile field test metrics. A failure clears the previous metrics."""
        if self._closed:
            return None
        self._error = None
        try:
            validated = _validated(MetricsRequest, req)
        except ValidationError as exc:
            self._metrics = None
            self._fail(exc.to_api_error())
            return None

        outcome = await self._dispatch(self._metrics_slot, lambda: self._transport.compute_metrics(validated))
        if outcome is None:
            return None
        if outcome.error is not None:
            self._metrics = None
            self._fail(outcome.error)
            return None

        self._metrics = outcome.value
        self._publish()
        return outcome.value

    async def ping(self) -> PingResponse | None:
        if self._closed:
            return None
        self._error = None
        outcome = await self._dispatch(self._ping_slot, self._transport.ping)
        if outcome is None:
            return None
        if outcome.error is not None:
            self._fail(outcome.error)
            return None
        self._publish()
        return outcome.value

    def clear_prescription(self) -> None:
        self._prescription = None
        self._publish()

    def close(self) -> None:
        """Teardown: every outstanding generation becomes stale, later calls are no-ops."""
        if self._closed:
            return
        for slot in self._slots():
            slot.close()
        self._closed = True
        self._listeners.clear()
        logger.debug("Twin session closed")
