import logging
import time
from typing import Callable, Optional


class TimerHandle:
    """A scheduled callback that can be cancelled before it fires."""

    def __init__(self, deadline: float, callback: Callable[[], None], label: str = ''):
        self.deadline = deadline
        self.callback = callback
        self.label = label
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def run(self) -> None:
        if not self.pending:
            return
        self.fired = True
        self.callback()

    def __repr__(self):
        state = 'cancelled' if self.cancelled else ('fired' if self.fired else 'pending')
        return f"<TimerHandle {self.label or '?'} deadline={self.deadline:.2f} {state}>"


class SocketIOScheduler:
    """Runs each timer as a Socket.IO background task.

    The task sleeps in steps of ``poll_interval`` until the deadline and runs the callback unless the
    handle was cancelled meanwhile. Works with every async mode supported by
    Flask-SocketIO since it only relies on ``start_background_task`` and
    ``sleep``.
    """

    def __init__(self, socketio, logger: Optional[logging.Logger] = None, poll_interval: float = 0.5):
        self._socketio = socketio
        self._log = logger or logging.getLogger(__name__)
        self.poll_interval = poll_interval

    def now(self) -> float:
        return time.time()

    def call_later(self, delay: float, callback: Callable[[], None], label: str = '') -> TimerHandle:
        handle = TimerHandle(self.now() + delay, callback, label)
        self._socketio.start_background_task(self._runner, handle)
        return handle

    def _runner(self, handle: TimerHandle) -> None:
        # Short steps so a cancelled handle releases its task promptly
        while not handle.cancelled:
            remaining = handle.deadline - time.time()
            if remaining <= 0:
                break
            self._socketio.sleep(min(self.poll_interval, remaining))
        if handle.cancelled:
            return
        try:
            handle.run()
        except Exception:
            self._log.exception(f"[timer-error] label={handle.label}")
