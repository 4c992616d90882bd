# docscan/loop/scheduler.py
from __future__ import annotations
from typing import Callable, Dict


class FrameScheduler:
    """
    Cooperative per-frame callback queue, the desktop stand-in for a browser's
    requestAnimationFrame. The host calls `pump()` once per display refresh.

    Callbacks requested while a pump is running wait for the next pump;
    callbacks cancelled while a pump is running do not fire.
    """

    def __init__(self):
        self._next_handle = 1
        self._pending: Dict[int, Callable[[], None]] = {}
        self._running: Dict[int, Callable[[], None]] = {}

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request(self, callback: Callable[[], None]) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel(self, handle: int) -> None:
        """Unknown or already-fired handles are ignored."""
        self._pending.pop(handle, None)
        self._running.pop(handle, None)

    def pump(self) -> int:
        """Run every callback pending when the pump began; return how many ran."""
        self._running, self._pending = self._pending, {}
        ran = 0
        try:
            while self._running:
                handle = next(iter(self._running))
                callback = self._running.pop(handle)
                callback()
                ran += 1
        finally:
            # a raising callback must not strand the rest of the batch
            self._pending = {**self._running, **self._pending}
            self._running = {}
        return ran
