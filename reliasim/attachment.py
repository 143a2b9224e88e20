"""Cooperative, tick-driven attachment of reliability modules.

A module cannot start until its host is fully constructed and a core has been
registered for that host. Neither is guaranteed at construction time, so the
module runs an `AttachmentTask`: a generator resumed once per scheduler tick
that re-checks its gate and yields until the gate opens.

    UNINITIALIZED -> WAITING_FOR_HOST -> WAITING_FOR_CORE -> STARTED

A task torn down before reaching STARTED (host destroyed) ends in TORN_DOWN
without having run its startup callback.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Callable, Generator, List, Optional

from reliasim.logging import get_logger

if TYPE_CHECKING:
    from reliasim.model.host import Host
    from reliasim.types import Core, CoreResolver

logger = get_logger(__name__)


class AttachState(Enum):
    UNINITIALIZED = "uninitialized"
    WAITING_FOR_HOST = "waiting_for_host"
    WAITING_FOR_CORE = "waiting_for_core"
    STARTED = "started"
    TORN_DOWN = "torn_down"


class TickScheduler:
    """Single-threaded driver for per-tick callbacks and cooperative tasks.

    Each `step()` first calls every update callback once, then resumes every
    live task once. Tasks that finish are dropped.
    """

    def __init__(self) -> None:
        self.tick_count = 0
        self._updates: List[Callable[[], None]] = []
        self._tasks: List["AttachmentTask"] = []

    def add_update(self, callback: Callable[[], None]) -> None:
        self._updates.append(callback)

    def remove_update(self, callback: Callable[[], None]) -> None:
        if callback in self._updates:
            self._updates.remove(callback)

    def start_task(self, task: "AttachmentTask") -> None:
        task.scheduler = self
        self._tasks.append(task)

    def cancel_task(self, task: "AttachmentTask") -> None:
        if task in self._tasks:
            self._tasks.remove(task)

    @property
    def tasks(self) -> List["AttachmentTask"]:
        return list(self._tasks)

    def step(self) -> None:
        self.tick_count += 1
        for callback in list(self._updates):
            callback()
        for task in list(self._tasks):
            if not task.resume():
                self.cancel_task(task)


class AttachmentTask:
    """Resumable gate in front of a module's startup.

    Args:
        get_host: Returns the module's current host (may still be None).
        resolver: Registry consulted for the host's core.
        on_started: Called exactly once with the resolved core when the gate opens.
        label: Name used in log messages.
    """

    def __init__(
        self,
        get_host: Callable[[], Optional["Host"]],
        resolver: "CoreResolver",
        on_started: Callable[["Core"], None],
        label: str = "module",
    ) -> None:
        self.state = AttachState.UNINITIALIZED
        self.scheduler: Optional[TickScheduler] = None
        self._get_host = get_host
        self._resolver = resolver
        self._on_started = on_started
        self._label = label
        self._steps: Generator[None, None, None] = self._run()
        self._transition(AttachState.WAITING_FOR_HOST)

    @property
    def done(self) -> bool:
        return self.state in (AttachState.STARTED, AttachState.TORN_DOWN)

    def _transition(self, new_state: AttachState) -> None:
        logger.debug("%s: attachment %s -> %s", self._label, self.state.value, new_state.value)
        self.state = new_state

    def _host_ready(self) -> bool:
        host = self._get_host()
        return host is not None and host.prototype is not None and host.modules is not None

    def _run(self) -> Generator[None, None, None]:
        while not self._host_ready():
            yield
        self._transition(AttachState.WAITING_FOR_CORE)

        host = self._get_host()
        while True:
            core = self._resolver.get_core(host)
            if core is not None:
                break
            yield

        self._transition(AttachState.STARTED)
        self._on_started(core)

    def resume(self) -> bool:
        """Run the task up to its next suspension point.

        Returns:
            True while the task still needs ticks, False once it has started
            or been torn down.
        """
        if self.done:
            return False
        host = self._get_host()
        if host is not None and host.destroyed:
            self.teardown()
            return False
        try:
            next(self._steps)
        except StopIteration:
            return False
        return True

    def teardown(self) -> None:
        """Abandon the task without running startup. No-op once started."""
        if self.done:
            return
        self._steps.close()
        self._transition(AttachState.TORN_DOWN)
        if self.scheduler is not None:
            self.scheduler.cancel_task(self)
