"""
Spinner

Fixed-interval frame ticker driving the live region animation.
"""

import asyncio
from typing import Callable, Optional

from rich.spinner import Spinner as RichSpinner


class Spinner:
    """
    Advances an animation frame on the running event loop and calls back
    so the owner can redraw.
    """

    def __init__(self, render_callback: Callable[[], None], enabled: bool = True, name: str = 'line'):
        """
        Args:
            render_callback: Called on every tick before the frame advances
            enabled: Start ticking immediately
            name: rich spinner name supplying frames and interval
        """
        spinner = RichSpinner(name)
        self.frames = list(spinner.frames)
        self.interval = spinner.interval / 1000

        self._render_callback = render_callback
        self._frame_index = 0
        self._enabled = False
        self._handle: Optional[asyncio.TimerHandle] = None

        self.is_enabled = enabled

    @property
    def frame(self) -> str:
        return self.frames[self._frame_index]

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @is_enabled.setter
    def is_enabled(self, value: bool) -> None:
        if self._enabled and not value:
            self._enabled = False
            if self._handle:
                self._handle.cancel()
                self._handle = None
        elif not self._enabled and value:
            self._enabled = True
            self._schedule()

    def _schedule(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # no loop yet: frames stay still until a tick can be scheduled
            self._handle = None
            return
        self._handle = loop.call_later(self.interval, self._tick)

    def _tick(self) -> None:
        if not self._enabled:
            return
        self._render_callback()
        self._frame_index = (self._frame_index + 1) % len(self.frames)
        self._schedule()
