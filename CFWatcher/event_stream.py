"""
CloudFormation Event Stream

Turns the newest-first, paginated DescribeStackEvents listing into a
chronological live tail of the events that belong to one operation.
"""

import asyncio
import logging
from typing import AsyncIterator, List, Optional, Protocol, Set, Tuple

from .config import WATCH_CONFIG
from .models import EventPage, StatusEvent

logger = logging.getLogger(__name__)


class EventSource(Protocol):
    """Anything that can list a stack's events newest first."""

    def list_events_descending(
        self, target_id: str, page_token: Optional[str] = None
    ) -> Optional[EventPage]:
        ...


async def stream_change_set_events(
    source: EventSource,
    target_id: str,
    token: str,
    stop_at_id: Optional[str] = None,
    poll_interval: Optional[float] = None,
) -> AsyncIterator[StatusEvent]:
    """
    Stream the events of one operation in the order AWS recorded them.

    The listing has no forward cursor and no filter by client request token,
    so every cycle scans backwards from the newest event until it reaches
    either the last event already yielded or an event from another
    operation, then reverses what it collected.

    The stream never ends on its own; the consumer stops iterating once it
    has seen the status it is waiting for. It ends immediately if the stack
    does not exist.

    Args:
        source: Event source (see EventSource)
        target_id: Stack name or ID to watch
        token: Client request token of the operation
        stop_at_id: Optional event ID that bounds the initial scan
        poll_interval: Seconds between scans (default from WATCH_CONFIG)

    Yields:
        StatusEvent objects, oldest first
    """
    if poll_interval is None:
        poll_interval = WATCH_CONFIG['poll_interval']

    rewind, found = await _scan_reverse(source, target_id, token, stop_at_id)
    if not found:
        logger.debug("No events found for %s, stream ends", target_id)
        return

    # Track which events we've already yielded (by event ID)
    seen: Set[str] = set()
    last_id = stop_at_id

    for event in rewind:
        seen.add(event.event_id)
        last_id = event.event_id
        yield event

    while True:
        await asyncio.sleep(poll_interval)

        events, _ = await _scan_reverse(source, target_id, token, last_id)
        new_events = [event for event in events if event.event_id not in seen]
        if new_events:
            logger.debug("%d new event(s) for %s", len(new_events), target_id)

        for event in new_events:
            seen.add(event.event_id)
            last_id = event.event_id
            yield event


async def _scan_reverse(
    source: EventSource,
    target_id: str,
    token: str,
    stop_at_id: Optional[str],
) -> Tuple[List[StatusEvent], bool]:
    """
    Collect matching events newest first, then return them oldest first.

    Returns:
        Tuple of (events in chronological order, whether any page was returned)
    """
    events: List[StatusEvent] = []
    page_token: Optional[str] = None
    found = False

    while True:
        page = await asyncio.to_thread(source.list_events_descending, target_id, page_token)
        if page is None:
            break
        found = True

        for event in page.events:
            if event.correlation_token != token or event.event_id == stop_at_id:
                events.reverse()
                return events, found
            events.append(event)

        page_token = page.next_token
        if not page_token:
            break

    events.reverse()
    return events, found
