"""Tests for the watcher data model and configuration."""

import logging
from datetime import datetime, timezone

from rich.logging import RichHandler

from CFWatcher.config import WATCH_CONFIG, setup_logging
from CFWatcher.models import OperationSnapshot, StatusEvent
from tests.helpers import STACK_ID, STACK_NAME


def test_from_cloudformation():
    timestamp = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    event = StatusEvent.from_cloudformation({
        'EventId': 'Bucket-CREATE_FAILED-2024-05-01',
        'StackId': STACK_ID,
        'StackName': STACK_NAME,
        'LogicalResourceId': 'Bucket',
        'PhysicalResourceId': 'demo-bucket',
        'ResourceType': 'AWS::S3::Bucket',
        'Timestamp': timestamp,
        'ResourceStatus': 'CREATE_FAILED',
        'ResourceStatusReason': 'demo-bucket already exists',
        'ResourceProperties': '{"BucketName":"demo-bucket"}',
        'ClientRequestToken': 'token-1',
    })

    assert event.sub_resource_id == 'Bucket'
    assert event.status == 'CREATE_FAILED'
    assert event.correlation_token == 'token-1'
    assert event.timestamp == timestamp
    assert not event.is_target
    assert not event.is_operation


def test_stack_event_is_target():
    event = StatusEvent.from_cloudformation({
        'EventId': '1',
        'StackId': STACK_ID,
        'StackName': STACK_NAME,
        'LogicalResourceId': STACK_NAME,
        'PhysicalResourceId': STACK_ID,
        'ResourceType': 'AWS::CloudFormation::Stack',
        'Timestamp': datetime.now(timezone.utc),
        'ResourceStatus': 'UPDATE_IN_PROGRESS',
    })

    assert event.is_target
    assert event.correlation_token is None


def test_snapshot_terminal_states():
    assert OperationSnapshot('cs', status='CREATE_COMPLETE').is_terminal
    assert OperationSnapshot('cs', status='FAILED').is_terminal
    assert OperationSnapshot('cs', status='FAILED').is_failed
    assert not OperationSnapshot('cs', status='CREATE_IN_PROGRESS').is_terminal
    assert not OperationSnapshot('cs').is_terminal


def test_config_defaults():
    assert WATCH_CONFIG['fps'] > 0
    assert WATCH_CONFIG['upload_concurrency'] > 0
    assert isinstance(WATCH_CONFIG['poll_interval'], float)


def test_setup_logging_uses_stderr_rich_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging('debug')

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert isinstance(handler, RichHandler)
        assert handler.console.stderr
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
