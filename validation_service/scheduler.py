"""
Debounced scheduling of validation work per entity.

Each entity key (e.g. an assessment id) moves through

    idle -> pending -> running -> idle
    pending -> superseded -> pending     (new request inside the window)

A new request while one is pending resets the window and replaces the
payload. A new request while one is running makes the in-flight result
stale: it is discarded when it completes and a fresh run is scheduled.
All callers of one settled burst receive the result of the last submitted
payload, and never a result for older input.

Cancellation is cooperative. Work is not interrupted; its result is dropped.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Set

from questionnaire_validation import ValidationResult

logger = logging.getLogger(__name__)

Work = Callable[[], ValidationResult]


class SchedulerState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    RUNNING = "running"
    SUPERSEDED = "superseded"


class ValidationCancelled(Exception):
    """Raised to waiters whose pending validation was cancelled."""

    def __init__(self, key: str):
        super().__init__(f"Validation for '{key}' was cancelled")
        self.key = key


@dataclass
class _Slot:
    state: SchedulerState = SchedulerState.IDLE
    generation: int = 0
    work: Optional[Work] = None
    timer: Optional[asyncio.TimerHandle] = None
    waiters: List[asyncio.Future] = field(default_factory=list)
    tasks: Set[asyncio.Task] = field(default_factory=set)


class ValidationScheduler:
    """
    Coalesces bursts of validation requests per entity key.

    Attributes:
        window_seconds: Quiescence window after the last request before work runs.
        offload: Run work in a worker thread so that new requests can arrive
            while it is running.
    """

    def __init__(self, window_seconds: float = 1.0, offload: bool = True):
        self.window_seconds = window_seconds
        self.offload = offload
        self._slots: Dict[str, _Slot] = {}
        self.runs_started = 0
        self.runs_discarded = 0

    def state(self, key: str) -> SchedulerState:
        slot = self._slots.get(key)
        return slot.state if slot is not None else SchedulerState.IDLE

    @property
    def active_count(self) -> int:
        """Entity keys with a pending or running validation."""
        return len(self._slots)

    def _transition(self, key: str, slot: _Slot, state: SchedulerState):
        logger.debug(f"Validation '{key}': {slot.state.value} -> {state.value}")
        slot.state = state

    async def submit(self, key: str, work: Work) -> ValidationResult:
        """
        Schedule `work` for `key` and wait for the settled result.

        Raises:
            ValidationCancelled: if cancel(key) is called before a result is delivered
        """
        loop = asyncio.get_running_loop()
        slot = self._slots.get(key)
        if slot is None:
            slot = self._slots[key] = _Slot()

        if slot.state == SchedulerState.PENDING:
            slot.timer.cancel()
            self._transition(key, slot, SchedulerState.SUPERSEDED)
        elif slot.state == SchedulerState.RUNNING:
            # The in-flight run sees a newer generation and drops its result
            self._transition(key, slot, SchedulerState.SUPERSEDED)

        slot.generation += 1
        slot.work = work
        slot.timer = loop.call_later(self.window_seconds, self._start_run, key, slot, slot.generation)
        self._transition(key, slot, SchedulerState.PENDING)

        future = loop.create_future()
        slot.waiters.append(future)
        return await future

    def _start_run(self, key: str, slot: _Slot, generation: int):
        if self._slots.get(key) is not slot or slot.generation != generation:
            return
        slot.timer = None
        self._transition(key, slot, SchedulerState.RUNNING)
        task = asyncio.ensure_future(self._run(key, slot, generation, slot.work))
        slot.tasks.add(task)
        task.add_done_callback(slot.tasks.discard)

    async def _run(self, key: str, slot: _Slot, generation: int, work: Work):
        self.runs_started += 1
        result: Optional[ValidationResult] = None
        error: Optional[BaseException] = None
        try:
            if self.offload:
                result = await asyncio.to_thread(work)
            else:
                result = work()
        except Exception as e:
            error = e

        if self._slots.get(key) is not slot or slot.generation != generation:
            self.runs_discarded += 1
            logger.debug(f"Discarded stale validation result for '{key}'")
            return

        waiters, slot.waiters = slot.waiters, []
        del self._slots[key]
        self._transition(key, slot, SchedulerState.IDLE)

        for future in waiters:
            if future.done():
                continue
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result)

    def cancel(self, key: str) -> bool:
        """
        Stop waiting for `key`. Pending work never starts; running work
        finishes but its result is dropped. Returns False if nothing was scheduled.
        """
        slot = self._slots.pop(key, None)
        if slot is None:
            return False

        if slot.timer is not None:
            slot.timer.cancel()
        slot.generation += 1
        self._transition(key, slot, SchedulerState.IDLE)

        for future in slot.waiters:
            if not future.done():
                future.set_exception(ValidationCancelled(key))
        slot.waiters = []
        logger.info(f"Cancelled scheduled validation for '{key}'")
        return True

    def cancel_all(self) -> int:
        keys = list(self._slots)
        for key in keys:
            self.cancel(key)
        return len(keys)
