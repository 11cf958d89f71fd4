"""
Terminal Display Surface

Multiplexes the live regions of several reporters into one rich Live
display, throttles redraws and prints permanent lines above it.
"""

import asyncio
import math
import time
from typing import Any, Dict, Optional, Union

from rich.console import Console
from rich.live import Live
from rich.text import Text

from ..config import WATCH_CONFIG

DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 24

Renderable = Union[str, Text]


class Tty:
    """
    Owns the terminal output for one or more reporters.

    Each reporter publishes its live region under its own key with
    display(); the surface redraws the concatenation of all regions at most
    once per frame interval. Permanent lines go through interrupt().
    """

    def __init__(self, fps: Optional[int] = None, console: Optional[Console] = None):
        """
        Args:
            fps: Maximum redraws per second (default from WATCH_CONFIG)
            console: rich Console to write to (default stdout)
        """
        self.console = console or Console(highlight=False)
        self.render_interval = math.floor(1000 / (fps or WATCH_CONFIG['fps'])) / 1000
        self.displays: Dict[Any, Text] = {}

        self._last_render = 0.0
        self._render_handle: Optional[asyncio.TimerHandle] = None
        self._live: Optional[Live] = None

    @property
    def is_enabled(self) -> bool:
        return self.console.is_terminal

    @property
    def window_width(self) -> int:
        return self.console.size.width if self.is_enabled else DEFAULT_WIDTH

    @property
    def window_height(self) -> int:
        return self.console.size.height if self.is_enabled else DEFAULT_HEIGHT

    def display(self, key: Any, text: Renderable) -> None:
        """
        Replace the live region owned by key.

        Args:
            key: Owner of the region (usually the reporter itself)
            text: New content; empty text removes the region
        """
        text = _to_text(text)
        if self.displays.get(key, Text()) == text:
            return

        if text:
            self.displays[key] = text
        else:
            self.displays.pop(key, None)
        self._schedule_render()

    def interrupt(self, text: Renderable) -> None:
        """Print a permanent line above the live region."""
        self.console.print(_to_text(text))
        self._schedule_render()

    def fallback(self, text: Renderable) -> None:
        """Print a line only when there is no live region to show it in."""
        if not self.is_enabled:
            self.console.print(_to_text(text))

    def done(self, clear: bool = False) -> None:
        """
        Stop drawing.

        Args:
            clear: Erase the live region instead of leaving the last frame
        """
        self.displays.clear()
        self._cancel_render()

        if self._live is not None:
            self._live.transient = clear
            self._live.stop()
            self._live = None

    def _schedule_render(self) -> None:
        if not self.is_enabled or self._render_handle is not None:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._redraw()
            return

        delay = max(0.0, self.render_interval - (time.monotonic() - self._last_render))
        self._render_handle = loop.call_later(delay, self._redraw)

    def _redraw(self) -> None:
        self._cancel_render()
        self._last_render = time.monotonic()

        content = Text('\n').join(self.displays.values())
        if self._live is None:
            self._live = Live(
                content,
                console=self.console,
                auto_refresh=False,
                redirect_stdout=False,
                redirect_stderr=False,
            )
            self._live.start(refresh=True)
        else:
            self._live.update(content, refresh=True)

    def _cancel_render(self) -> None:
        if self._render_handle is not None:
            self._render_handle.cancel()
            self._render_handle = None


def _to_text(text: Renderable) -> Text:
    return text if isinstance(text, Text) else Text(text)
