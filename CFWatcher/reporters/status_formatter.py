"""
Status Formatter

Formats stack events and aggregate progress into rich Text lines for the
terminal.
"""

import json
import math
from typing import Optional

from rich.text import Text

from ..models import StatusEvent

MAX_STATUS_LENGTH = 30
INDENT = '    '

SUCCESS_SYMBOL = Text('✔', style='green')
ERROR_SYMBOL = Text('✖', style='red')
INFO_SYMBOL = Text('ℹ', style='blue')
SKIPPED_SYMBOL = Text('↓', style='magenta')

BAR_FULL = '█'
BAR_EMPTY = '░'


def is_rollback(status: Optional[str]) -> bool:
    """True for rollback statuses, including ROLLBACK_* on a failed create."""
    return bool(status) and 'ROLLBACK_' in status


def is_failed(status: Optional[str]) -> bool:
    return status == 'FAILED' or (status or '').endswith('_FAILED')


def get_status_style(status: Optional[str]) -> str:
    """
    Map a CloudFormation status to a rich style.

    Args:
        status: Status code such as UPDATE_COMPLETE

    Returns:
        Style name ('' when there is no status)
    """
    if not status:
        return ''

    if is_failed(status) or is_rollback(status):
        return 'red'
    elif status.endswith('_COMPLETE'):
        return 'green'
    elif status.endswith('_SKIPPED'):
        return 'magenta'

    return 'yellow'


def progress_bar(value: float, width: int) -> str:
    """
    Render a fraction as a fixed-width block bar.

    Args:
        value: Fraction in [0, 1]; NaN renders as empty
        width: Exact length of the result

    Returns:
        String of exactly width characters
    """
    width = max(0, width)
    filled = 0 if math.isnan(value) else math.floor(value * width)
    filled = min(max(filled, 0), width)
    return BAR_FULL * filled + BAR_EMPTY * (width - filled)


def format_properties(properties: str) -> str:
    """Pretty-print serialized resource properties, indented."""
    try:
        pretty = json.dumps(json.loads(properties), indent=2)
    except ValueError:
        pretty = properties
    return '\n'.join(INDENT + line for line in pretty.splitlines())


def format_status_text(
    event: StatusEvent,
    label_width: int,
    spinner_frame: Optional[str] = None,
) -> Text:
    """
    Format one resource event as a (possibly multi-line) status line.

    Args:
        event: Event to describe
        label_width: Width to pad the logical ID to
        spinner_frame: Prefix the line with this glyph when given

    Returns:
        Styled Text
    """
    status = event.status or ''
    style = get_status_style(status)
    failed = is_failed(status)
    rollback = is_rollback(status)

    parts = [
        Text((event.sub_resource_id or '').ljust(label_width)),
        Text(status.ljust(MAX_STATUS_LENGTH), style=style),
    ]
    if event.resource_kind:
        parts.append(Text(event.resource_kind, style='cyan'))
    if event.reason:
        parts.append(Text(f"\n{INDENT}{event.reason}", style='red' if failed else 'dim'))
    if event.physical_id:
        parts.append(Text(f"\n{INDENT}{event.physical_id}", style='dim'))
    if event.properties and (failed or rollback):
        parts.append(Text('\n' + format_properties(event.properties), style='dim'))

    text = Text(' ').join(parts)

    if spinner_frame is not None:
        return Text.assemble(Text(spinner_frame, style=style), ' ', text)
    return text


def format_aggregate_line(
    label: str,
    status: Optional[str],
    completed: int,
    total: int,
    window_width: int,
) -> Text:
    """
    Format the stack summary line shown under the live resource list.

    Args:
        label: Stack name
        status: Stack status
        completed: Resources completed so far
        total: Resources in the stack
        window_width: Terminal width the line must fit in

    Returns:
        Styled Text ending with a progress bar
    """
    status = status or ''
    rollback = is_rollback(status)

    fields = [
        Text(label, style='bright_white'),
        Text(status, style=get_status_style(status)),
        Text(f"{str(completed).rjust(3)} / {str(total).ljust(3)}"),
    ]
    line = Text(':::: ')
    line.append_text(Text(' ').join(Text.assemble(' ', field, ' ') for field in fields))

    value = completed / total if total else math.nan
    bar = progress_bar(value, window_width - line.cell_len - 6)

    line.append(' ')
    line.append(bar, style='red' if rollback else '')
    line.append(' ::::')
    return line
