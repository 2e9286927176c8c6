"""Single-threaded event dispatcher with one-shot timers."""

import logging
import queue
import threading
from typing import Any, Callable, NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)


class DispatchTask(NamedTuple):
    """A call waiting to run on the dispatcher thread."""
    fn: Callable[..., Any]
    args: Tuple[Any, ...]


class ScheduledCall:
    """A one-shot call posted to the dispatcher after a delay.

    Expiry only posts the call; whether it actually runs is decided on the
    dispatcher thread, so a ``cancel()`` processed first always wins.
    """

    def __init__(self, dispatcher: "EventDispatcher", delay_seconds: float, fn: Callable[[], Any]):
        self.dispatcher = dispatcher
        self.delay_seconds = delay_seconds
        self.fn = fn
        self.cancelled = False
        self.fired = False
        self._timer = threading.Timer(delay_seconds, self._expire)
        self._timer.daemon = True
        self._timer.name = "ScheduledCallTimer"

    def start(self) -> "ScheduledCall":
        self._timer.start()
        return self

    def cancel(self) -> None:
        """Prevent the call from running. Safe to call more than once."""
        self.cancelled = True
        self._timer.cancel()

    def _expire(self) -> None:
        self.dispatcher.post(self._fire)

    def _fire(self) -> None:
        if self.cancelled:
            logger.debug("Dropping scheduled call cancelled before dispatch")
            return
        self.fired = True
        self.fn()


class EventDispatcher:
    """Runs posted calls one at a time, in posting order, on one worker thread."""

    def __init__(self, name: str = "dispatcher"):
        self.name = name
        self.task_queue: "queue.Queue[Optional[DispatchTask]]" = queue.Queue()
        self.worker_thread: Optional[threading.Thread] = None
        self.shutdown_event = threading.Event()

    @property
    def is_running(self) -> bool:
        return self.worker_thread is not None and self.worker_thread.is_alive()

    def post(self, fn: Callable[..., Any], *args: Any) -> None:
        """Queue ``fn(*args)`` to run on the dispatcher thread."""
        if self.shutdown_event.is_set():
            logger.debug(f"Dispatcher {self.name} stopped, dropping {fn}")
            return
        self.task_queue.put(DispatchTask(fn, args))

    def call_later(self, delay_seconds: float, fn: Callable[[], Any]) -> ScheduledCall:
        """Post ``fn`` after ``delay_seconds`` unless cancelled first."""
        return ScheduledCall(self, delay_seconds, fn).start()

    def start(self) -> None:
        """Start processing queued calls on a background thread."""
        if self.is_running:
            return
        self.shutdown_event.clear()
        self.worker_thread = threading.Thread(target=self._worker_loop, daemon=True)
        self.worker_thread.name = f"{self.name}_worker"
        self.worker_thread.start()
        logger.info(f"Dispatcher {self.name} started")

    def stop(self, timeout: float = 2.0) -> None:
        """Finish the calls already queued and stop the worker thread."""
        if not self.is_running:
            return
        self.task_queue.put(None)
        self.worker_thread.join(timeout=timeout)
        if self.worker_thread.is_alive():
            logger.warning(f"Dispatcher {self.name} did not stop cleanly")
        self.shutdown_event.set()
        self.worker_thread = None
        logger.info(f"Dispatcher {self.name} stopped")

    def run_pending(self) -> int:
        """Run every queued call on the current thread.

        Only for use when the worker thread is not running.

        Returns:
            Number of calls executed
        """
        executed = 0
        while True:
            try:
                task = self.task_queue.get_nowait()
            except queue.Empty:
                return executed
            if task is None:
                continue
            self._run(task)
            executed += 1

    def _worker_loop(self) -> None:
        while True:
            task = self.task_queue.get()
            if task is None:
                logger.debug(f"Dispatcher {self.name} received sentinel, exiting.")
                break
            self._run(task)

    def _run(self, task: DispatchTask) -> None:
        try:
            task.fn(*task.args)
        except Exception as e:
            logger.error(f"Unhandled exception in dispatched call {task.fn}: {e}", exc_info=True)
