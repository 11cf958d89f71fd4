"""
Asset Reporter

Shows byte-level upload progress for a batch of files.
"""

from typing import Dict, Optional

from rich.filesize import decimal
from rich.text import Text

from ..models import AssetProgress
from .spinner import Spinner
from .status_formatter import INFO_SYMBOL, SUCCESS_SYMBOL
from .tty import Tty


class AssetReporter:
    """Tracks pending uploads and prints a line as each one completes."""

    def __init__(self, tty: Optional[Tty] = None):
        self.own_tty = tty is None
        self.tty = tty or Tty()
        self.spinner = Spinner(self._render, enabled=False)

        # Pending uploads by file name
        self.assets: Dict[str, AssetProgress] = {}

    def close(self) -> None:
        self.spinner.is_enabled = False
        self.assets.clear()

        if self.own_tty:
            self.tty.done(True)
        else:
            self.tty.display(self, '')

    def on_progress(self, event: AssetProgress) -> None:
        """
        Apply one progress event.

        Args:
            event: Progress or completion of a single file
        """
        if event.complete:
            if self.assets.pop(event.file_name, None) is not None and not self.assets:
                self.spinner.is_enabled = False

            total = event.total_bytes if event.total_bytes is not None else event.written_bytes
            line = Text.assemble(SUCCESS_SYMBOL, ' ', event.file_name)
            if total is not None:
                line.append(f" ({decimal(total)})")
            self.tty.interrupt(line)
        else:
            first_seen = event.file_name not in self.assets
            self.assets[event.file_name] = event

            if first_seen:
                if len(self.assets) == 1 and self.tty.is_enabled:
                    self.spinner.is_enabled = True
                # one line per file when there is no live region to update
                self.tty.fallback(Text.assemble(INFO_SYMBOL, ' ', self.get_status_text(event)))

        self._render()

    def get_status_text(self, event: AssetProgress) -> str:
        written = decimal(event.written_bytes or 0)
        total = decimal(event.total_bytes) if event.total_bytes is not None else '?'
        return f"{event.file_name} {written} of {total}"

    def _render(self) -> None:
        frame = self.spinner.frame
        lines = [f"{frame} {self.get_status_text(asset)}" for asset in self.assets.values()]
        self.tty.display(self, '\n'.join(lines))
