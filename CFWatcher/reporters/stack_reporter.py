"""
Stack Reporter

Tracks the status of every resource in a stack operation, prints the
transitions worth keeping and keeps a live summary with a progress bar.
"""

import math
from typing import Dict, Iterable, Optional, Set, Union

from rich.text import Text

from ..models import OPERATION_RESOURCE_KIND, OperationSnapshot, StatusEvent, SubResource
from .spinner import Spinner
from .status_formatter import (
    ERROR_SYMBOL,
    INFO_SYMBOL,
    SKIPPED_SYMBOL,
    SUCCESS_SYMBOL,
    format_aggregate_line,
    format_status_text,
    is_failed,
    is_rollback,
)
from .tty import Tty

SKIPPED = 'skipped'
FAILED = 'failed'
ROLLBACK = 'rollback'
COMPLETE = 'complete'
INFO = 'info'

SYMBOLS = {
    SKIPPED: SKIPPED_SYMBOL,
    FAILED: ERROR_SYMBOL,
    ROLLBACK: ERROR_SYMBOL,
    COMPLETE: SUCCESS_SYMBOL,
    INFO: INFO_SYMBOL,
}


def pending_status(action: Optional[str]) -> Optional[str]:
    """
    Map a change set action to the synthetic status shown before it starts.

    Args:
        action: Change set action (Add, Remove, Modify, ...)

    Returns:
        Status code such as CREATE_PENDING, or None without an action
    """
    if action == 'Add':
        return 'CREATE_PENDING'
    elif action == 'Remove':
        return 'DELETE_PENDING'
    elif action:
        return f"{action.upper()}_PENDING"
    return None


def classify_status(status: str, is_operation: bool = False) -> str:
    """Classify a render-worthy status by its suffix."""
    if status.endswith('_SKIPPED'):
        return SKIPPED
    elif is_failed(status):
        return FAILED
    elif is_rollback(status):
        return ROLLBACK
    elif status.endswith('_COMPLETE') and not is_operation:
        return COMPLETE
    return INFO


class StackReporter:
    """
    Consumes stack events for one operation and renders them.

    Every event updates the live view; only status changes that are not
    pending or in progress (except for the stack itself) are printed as
    permanent lines.
    """

    def __init__(self, tty: Optional[Tty] = None):
        """
        Args:
            tty: Shared display surface; a private one is created if omitted
        """
        self.own_tty = tty is None
        self.tty = tty or Tty()
        self.spinner = Spinner(self._render, self.tty.is_enabled)

        # Last event per logical ID
        self.known_status: Dict[str, StatusEvent] = {}

        # Last status of the change set pseudo-resource, which is never
        # itemized in known_status
        self._operation_status: Dict[str, Optional[str]] = {}
        self._counted: Set[str] = set()
        self._target_key: Optional[str] = None

        self.completed_count = 0
        self.max_label_width = 0
        self.target_label = ''
        self.suppress_operation_level_events = False

    @property
    def total_count(self) -> int:
        return sum(1 for key in self.known_status if key != self._target_key)

    @property
    def progress(self) -> float:
        total = self.total_count
        return self.completed_count / total if total else math.nan

    @property
    def target_event(self) -> Optional[StatusEvent]:
        return self.known_status.get(self._target_key or self.target_label)

    @property
    def is_rolling_back(self) -> bool:
        event = self.target_event
        return bool(event) and is_rollback(event.status)

    def close(self) -> None:
        self.spinner.is_enabled = False
        self.known_status.clear()
        self._counted.clear()

        if self.own_tty:
            self.tty.done(True)
        else:
            self.tty.display(self, '')

    def init_from_snapshot(self, snapshot: OperationSnapshot) -> None:
        """
        Seed the reporter from a change set description.

        Args:
            snapshot: Change set with its planned changes
        """
        if snapshot.target_label:
            self.target_label = snapshot.target_label

            self.consume(StatusEvent(
                event_id=snapshot.target_id or snapshot.operation_id,
                target_id=snapshot.target_id,
                target_label=snapshot.target_label,
                sub_resource_id=snapshot.operation_name,
                physical_id=snapshot.operation_id,
                resource_kind=OPERATION_RESOURCE_KIND,
                status=snapshot.status,
                reason=snapshot.reason,
                timestamp=snapshot.created_at,
            ))

        # get the longest id for padding purposes
        self._widen_labels([change.sub_resource_id for change in snapshot.changes])

        for change in snapshot.changes:
            if not change.sub_resource_id:
                continue
            self.consume(StatusEvent(
                event_id=snapshot.target_id or snapshot.operation_id,
                target_id=snapshot.target_id,
                target_label=snapshot.target_label,
                sub_resource_id=change.sub_resource_id,
                physical_id=change.physical_id,
                resource_kind=change.resource_kind,
                status=pending_status(change.planned_action),
                timestamp=snapshot.created_at,
            ))

    def init_from_resource_list(self, resources: Iterable[Union[SubResource, str]]) -> None:
        """
        Seed the reporter for a stack delete; every resource starts DELETE_PENDING.

        Args:
            resources: Stack resources, or bare logical IDs
        """
        resources = [
            SubResource(sub_resource_id=resource) if isinstance(resource, str) else resource
            for resource in resources
        ]

        label = next((r.target_label for r in resources if r.target_label), None)
        if label:
            self.target_label = label

        self._widen_labels([r.sub_resource_id for r in resources])

        for resource in resources:
            self.consume(StatusEvent(
                event_id=resource.target_id or resource.sub_resource_id,
                target_id=resource.target_id,
                target_label=resource.target_label,
                sub_resource_id=resource.sub_resource_id,
                physical_id=resource.physical_id,
                resource_kind=resource.resource_kind,
                status='DELETE_PENDING',
            ))

    def consume(self, event: StatusEvent) -> None:
        """
        Apply one event to the reporter state.

        Args:
            event: Observed (or synthesized) stack event
        """
        if not self.target_label and event.target_label:
            self.target_label = event.target_label
        if not event.sub_resource_id:
            return

        key = event.sub_resource_id
        status = event.status or ''

        if event.is_operation:
            previous = self._operation_status.get(key)
            self._operation_status[key] = event.status
        else:
            previous = self.known_status[key].status if key in self.known_status else None
            self.known_status[key] = event
            if event.is_target:
                self._target_key = key
            self._widen_labels([key])

        in_progress = status.endswith('_IN_PROGRESS')
        pending = status.endswith('_PENDING')

        if (
            (not in_progress or event.is_target)
            and not pending
            and event.status != previous
            and (not event.is_operation or not self.suppress_operation_level_events)
        ):
            classification = classify_status(status, event.is_operation)
            text = format_status_text(event, self.max_label_width)
            self.tty.interrupt(Text.assemble(SYMBOLS[classification], ' ', text))

            self._update_count(key, classification, event)

        self._render()

    def _update_count(self, key: str, classification: str, event: StatusEvent) -> None:
        if event.is_target or event.is_operation:
            return

        reverting = classification == ROLLBACK or (
            classification == COMPLETE and self.is_rolling_back
        )

        if reverting:
            if key in self._counted:
                self._counted.discard(key)
                self.completed_count -= 1
        elif classification == COMPLETE and key not in self._counted:
            self._counted.add(key)
            self.completed_count += 1

    def _widen_labels(self, labels: Iterable[Optional[str]]) -> None:
        widths = [len(label) for label in labels if label]
        widths.append(len(self.target_label or ''))
        self.max_label_width = max(self.max_label_width, *widths)

    def _render(self) -> None:
        if not self.known_status:
            return

        lines = []
        resources = [
            event for key, event in self.known_status.items()
            if key != self._target_key and not event.is_target
        ]

        # pending rows first, then in-progress rows, so the volatile rows
        # stay together at the bottom
        pending = [e for e in resources if (e.status or '').endswith('_PENDING')]
        in_progress = [e for e in resources if (e.status or '').endswith('_IN_PROGRESS')]

        frame = self.spinner.frame
        for event in pending + in_progress:
            lines.append(format_status_text(event, self.max_label_width, frame))

        target = self.target_event
        if target:
            lines.append(Text(''))
            lines.append(format_aggregate_line(
                self.target_label,
                target.status,
                self.completed_count,
                self.total_count,
                self.tty.window_width,
            ))

        self.tty.display(self, Text('\n').join(lines))
