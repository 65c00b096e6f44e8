import asyncio
import math
from enum import Enum
from typing import Callable, Optional


class ConfirmationStatus(str, Enum):
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class Countdown:
    """One-shot redirect timer plus a periodic tick refreshing the seconds left."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        delay: float,
        on_elapsed: Callable[[], None],
        tick_interval: float = 0.2,
    ):
        self.loop = loop
        self.delay = delay
        self.on_elapsed = on_elapsed
        self.tick_interval = tick_interval
        self.redirect_in = math.ceil(delay)
        self._deadline: Optional[float] = None
        self._redirect_handle: Optional[asyncio.TimerHandle] = None
        self._tick_handle: Optional[asyncio.TimerHandle] = None

    @property
    def active(self) -> bool:
        return self._redirect_handle is not None

    def remaining_seconds(self) -> int:
        if self._deadline is None:
            return math.ceil(self.delay)
        return math.ceil(max(0.0, self._deadline - self.loop.time()))

    def start(self):
        self._deadline = self.loop.time() + self.delay
        self.redirect_in = math.ceil(self.delay)
        self._redirect_handle = self.loop.call_later(self.delay, self._elapsed)
        self._tick_handle = self.loop.call_later(self.tick_interval, self._tick)

    def cancel(self):
        if self._redirect_handle is not None:
            self._redirect_handle.cancel()
            self._redirect_handle = None
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _tick(self):
        self.redirect_in = self.remaining_seconds()
        self._tick_handle = self.loop.call_later(self.tick_interval, self._tick)

    def _elapsed(self):
        self._redirect_handle = None
        self.redirect_in = 0
        self.cancel()
        self.on_elapsed()


class ConfirmationState:
    """loading -> success | error. The countdown belongs to the success state."""

    def __init__(self):
        self.status = ConfirmationStatus.LOADING
        self.error_message = ""
        self.countdown: Optional[Countdown] = None

    @property
    def redirect_in(self) -> Optional[int]:
        return self.countdown.redirect_in if self.countdown else None

    def succeed(self, countdown: Countdown):
        self._require_loading()
        self.status = ConfirmationStatus.SUCCESS
        self.countdown = countdown
        countdown.start()

    def fail(self, message: str):
        self._require_loading()
        self.status = ConfirmationStatus.ERROR
        self.error_message = message or "Failed to confirm email"

    def reset(self):
        self.release()
        self.status = ConfirmationStatus.LOADING
        self.error_message = ""
        self.countdown = None

    def release(self):
        if self.countdown is not None:
            self.countdown.cancel()

    def _require_loading(self):
        if self.status is not ConfirmationStatus.LOADING:
            raise RuntimeError(f"Confirmation already finished with status {self.status.value}")
