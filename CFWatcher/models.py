"""
Watcher Data Model

Typed records passed between the CloudFormation adapter, the event stream
and the reporters.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

# there is no AWS::CloudFormation::* type for a change set
OPERATION_RESOURCE_KIND = 'ChangeSet'


@dataclass
class StatusEvent:
    """One observation of a stack resource's state."""

    event_id: str
    target_id: Optional[str] = None
    target_label: Optional[str] = None
    sub_resource_id: Optional[str] = None
    physical_id: Optional[str] = None
    resource_kind: Optional[str] = None
    status: Optional[str] = None
    reason: Optional[str] = None
    properties: Optional[str] = None
    timestamp: Optional[datetime] = None
    correlation_token: Optional[str] = None

    @property
    def is_target(self) -> bool:
        """True when the event describes the stack itself."""
        return bool(self.target_id) and self.physical_id == self.target_id

    @property
    def is_operation(self) -> bool:
        """True for the synthetic change set event."""
        return self.resource_kind == OPERATION_RESOURCE_KIND

    @classmethod
    def from_cloudformation(cls, event: Dict) -> 'StatusEvent':
        """
        Build a StatusEvent from a raw DescribeStackEvents entry.

        Args:
            event: Raw CloudFormation event from AWS

        Returns:
            StatusEvent with the fields the reporters use
        """
        return cls(
            event_id=event['EventId'],
            target_id=event.get('StackId'),
            target_label=event.get('StackName'),
            sub_resource_id=event.get('LogicalResourceId'),
            physical_id=event.get('PhysicalResourceId'),
            resource_kind=event.get('ResourceType'),
            status=event.get('ResourceStatus'),
            reason=event.get('ResourceStatusReason'),
            properties=event.get('ResourceProperties'),
            timestamp=event.get('Timestamp'),
            correlation_token=event.get('ClientRequestToken'),
        )


@dataclass
class EventPage:
    """One page of stack events, newest first."""

    events: List[StatusEvent] = field(default_factory=list)
    next_token: Optional[str] = None


@dataclass
class PlannedChange:
    """A resource change listed in a change set."""

    sub_resource_id: str
    planned_action: Optional[str] = None
    physical_id: Optional[str] = None
    resource_kind: Optional[str] = None


@dataclass
class OperationSnapshot:
    """Point-in-time description of a change set and its planned changes."""

    operation_id: str
    operation_name: Optional[str] = None
    target_id: Optional[str] = None
    target_label: Optional[str] = None
    status: Optional[str] = None
    reason: Optional[str] = None
    created_at: Optional[datetime] = None
    changes: List[PlannedChange] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status == 'FAILED' or (self.status or '').endswith('_COMPLETE')

    @property
    def is_failed(self) -> bool:
        return self.status == 'FAILED'


@dataclass
class SubResource:
    """An existing stack resource, used to seed a delete watch."""

    sub_resource_id: str
    physical_id: Optional[str] = None
    resource_kind: Optional[str] = None
    target_id: Optional[str] = None
    target_label: Optional[str] = None


@dataclass
class AssetProgress:
    """Byte-level progress of one uploaded file."""

    file_name: str
    written_bytes: Optional[int] = None
    total_bytes: Optional[int] = None
    complete: bool = False
