"""
Watcher Configuration

Environment-driven settings and logging setup for the deployment watcher.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

# Load environment variables from .env file
load_dotenv()

WATCH_CONFIG = {
    'region': os.getenv('AWS_REGION', 'us-east-1'),
    'fps': int(os.getenv('CFWATCH_FPS', 20)),
    'poll_interval': float(os.getenv('CFWATCH_POLL_INTERVAL', 1.0)),
    'changeset_poll_interval': float(os.getenv('CFWATCH_CHANGESET_POLL_INTERVAL', 2.0)),
    'upload_concurrency': int(os.getenv('CFWATCH_UPLOAD_CONCURRENCY', 4)),
    'log_level': os.getenv('LOG_LEVEL', 'WARNING'),
}


def setup_logging(level: Optional[str] = None) -> None:
    """
    Route watcher diagnostics to stderr.

    stdout belongs to the live region, so log records go through a
    RichHandler bound to a stderr console instead. The package never
    configures logging itself; the application embedding it calls this
    once at startup.

    Args:
        level: Log level name (defaults to LOG_LEVEL from the environment)
    """
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=(level or WATCH_CONFIG['log_level']).upper(),
        format='%(message)s',
        datefmt='[%X]',
        handlers=[handler],
        force=True,
    )
