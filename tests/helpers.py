"""Shared builders and fakes for the watcher tests."""

from typing import List, Optional

from rich.console import Console

from CFWatcher.models import EventPage, StatusEvent

STACK_ID = 'arn:aws:cloudformation:us-east-1:123456789012:stack/demo/0f6b2a10'
STACK_NAME = 'demo'


def make_event(
    event_id: str,
    logical_id: Optional[str],
    status: str,
    token: Optional[str] = 'token-1',
    physical_id: Optional[str] = None,
    resource_type: str = 'AWS::S3::Bucket',
    **kwargs,
) -> StatusEvent:
    """Build a stack event; the stack's own events use STACK_NAME as logical ID."""
    if logical_id == STACK_NAME and physical_id is None:
        physical_id = STACK_ID
        resource_type = 'AWS::CloudFormation::Stack'

    return StatusEvent(
        event_id=event_id,
        target_id=STACK_ID,
        target_label=STACK_NAME,
        sub_resource_id=logical_id,
        physical_id=physical_id,
        resource_kind=resource_type,
        status=status,
        correlation_token=token,
        **kwargs,
    )


class FakeEventSource:
    """Serves a growing event log newest first, in fixed-size pages."""

    def __init__(self, events: Optional[List[StatusEvent]] = None, page_size: int = 2, exists: bool = True):
        # oldest first, like the order AWS records them
        self.log: List[StatusEvent] = list(events or [])
        self.page_size = page_size
        self.exists = exists
        self.calls = 0

    def record(self, *events: StatusEvent) -> None:
        self.log.extend(events)

    def list_events_descending(self, target_id: str, page_token: Optional[str] = None) -> Optional[EventPage]:
        self.calls += 1
        if not self.exists:
            return None

        newest_first = list(reversed(self.log))
        start = int(page_token or 0)
        end = start + self.page_size
        return EventPage(
            events=newest_first[start:end],
            next_token=str(end) if end < len(newest_first) else None,
        )


def output_of(console: Console) -> str:
    return console.file.getvalue()


