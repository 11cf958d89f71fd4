"""
Reporters

Terminal reporters for stack operations and asset uploads.
"""

from .asset_reporter import AssetReporter
from .spinner import Spinner
from .stack_reporter import StackReporter
from .status_formatter import progress_bar
from .tty import Tty

__all__ = [
    'AssetReporter',
    'Spinner',
    'StackReporter',
    'Tty',
    'progress_bar'
]
