"""
Watched Stack Operations

Starts change set, execute and delete operations and reports their
progress until the stack reaches a terminal status.
"""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Dict, Iterable, Optional, Tuple, Union

from rich.console import Console
from rich.text import Text

from .aws_deployer import CloudFormationClient
from .config import WATCH_CONFIG
from .event_stream import stream_change_set_events
from .models import OperationSnapshot
from .reporters import AssetReporter, StackReporter, Tty
from .reporters.status_formatter import is_failed, is_rollback
from .upload_s3 import S3AssetUploader

logger = logging.getLogger(__name__)


async def wait_for_change_set(
    client: CloudFormationClient,
    change_set_id: str,
    reporter: StackReporter,
    poll_interval: Optional[float] = None,
) -> OperationSnapshot:
    """
    Poll a change set until it is created or has failed.

    Args:
        client: CloudFormation client
        change_set_id: Change set ARN
        reporter: Reporter seeded with every description
        poll_interval: Seconds between polls (default from WATCH_CONFIG)

    Returns:
        Final OperationSnapshot
    """
    if poll_interval is None:
        poll_interval = WATCH_CONFIG['changeset_poll_interval']

    while True:
        snapshot = await asyncio.to_thread(client.describe_change_set, change_set_id)
        reporter.init_from_snapshot(snapshot)

        if snapshot.is_terminal:
            return snapshot
        await asyncio.sleep(poll_interval)


async def create_change_set(
    client: CloudFormationClient,
    stack_name: str,
    template_url: str,
    parameters: Optional[Dict[str, str]] = None,
    create: Optional[bool] = None,
    change_set_name: Optional[str] = None,
    tty: Optional[Tty] = None,
) -> OperationSnapshot:
    """
    Create a change set and report it until it is ready.

    Args:
        client: CloudFormation client
        stack_name: Name of the stack
        template_url: S3 URL of the template
        parameters: Template parameters
        create: Force create (True) or update (False); by default the
            stack is created if it does not exist yet
        change_set_name: Name for the change set (timestamped by default)
        tty: Shared display surface

    Returns:
        OperationSnapshot of the created (or failed) change set
    """
    if create is None:
        stack = await asyncio.to_thread(client.get_stack, stack_name)
        create = stack is None

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    change_set_name = change_set_name or f"Change-{timestamp}"

    _print(tty, "\nCreating changeset:")

    change_set_id = await asyncio.to_thread(
        client.create_change_set,
        stack_name,
        template_url,
        change_set_name,
        str(uuid.uuid4()),
        parameters,
        create,
    )

    reporter = StackReporter(tty)
    try:
        return await wait_for_change_set(client, change_set_id, reporter)
    finally:
        reporter.close()


async def execute_change_set(
    client: CloudFormationClient,
    change_set_id: str,
    snapshot: Optional[OperationSnapshot] = None,
    tty: Optional[Tty] = None,
) -> bool:
    """
    Execute a change set and report the stack events until it finishes.

    Args:
        client: CloudFormation client
        change_set_id: Change set ARN
        snapshot: Already-fetched change set description
        tty: Shared display surface

    Returns:
        True if the stack reached a *_COMPLETE status, False if it failed
    """
    _print(tty, "\nExecuting changeset:")

    reporter = StackReporter(tty)
    # don't repeat the changeset events
    reporter.suppress_operation_level_events = True

    try:
        if snapshot is None:
            snapshot = await wait_for_change_set(client, change_set_id, reporter)

        reporter.init_from_snapshot(snapshot)
        if snapshot.is_failed:
            return False

        token = str(uuid.uuid4())
        await asyncio.to_thread(
            client.execute_change_set, snapshot.operation_id, snapshot.target_id, token
        )

        return await _watch(client, reporter, snapshot.target_id, token)
    finally:
        reporter.close()


async def delete_stack(
    client: CloudFormationClient,
    stack_name_or_id: str,
    tty: Optional[Tty] = None,
) -> bool:
    """
    Delete a stack and report its resources until it is gone.

    Args:
        client: CloudFormation client
        stack_name_or_id: Stack name or ARN
        tty: Shared display surface

    Returns:
        True if the stack was deleted, False if not found or failed
    """
    stack = await asyncio.to_thread(client.get_stack, stack_name_or_id, False, True)
    if not stack:
        _print(tty, f"Stack {stack_name_or_id} not found")
        return False

    stack_id = stack['StackId']
    line = Text(f"Deleting stack {stack['StackName']} ")
    line.append(f"({stack_id})", style='dim')
    _print(tty, line)

    reporter = StackReporter(tty)
    try:
        resources = await asyncio.to_thread(client.list_stack_resources, stack_name_or_id)
        reporter.init_from_resource_list(resources)

        token = str(uuid.uuid4())
        await asyncio.to_thread(client.delete_stack, stack_name_or_id, token)

        return await _watch(client, reporter, stack_id, token)
    finally:
        reporter.close()


async def upload_assets(
    uploader: S3AssetUploader,
    assets: Iterable[Tuple[str, str]],
    tty: Optional[Tty] = None,
) -> None:
    """
    Upload files and report their progress.

    Args:
        uploader: Configured S3 uploader
        assets: (file_name, path) pairs
        tty: Shared display surface
    """
    _print(tty, "\nUploading assets:")

    reporter = AssetReporter(tty)
    uploader.subscribe(reporter.on_progress)
    try:
        for file_name, path in assets:
            uploader.add_asset(file_name, path)
        await uploader.done()
    finally:
        reporter.close()


async def _watch(client: CloudFormationClient, reporter: StackReporter, stack_id: str, token: str) -> bool:
    events = stream_change_set_events(client, stack_id, token)
    try:
        async for event in events:
            reporter.consume(event)

            if event.physical_id == stack_id:
                status = event.status or ''
                if status.endswith('_COMPLETE'):
                    logger.info("Stack %s finished with %s", stack_id, status)
                    # a completed rollback still means the operation failed
                    return not is_rollback(status)
                if is_failed(status):
                    logger.info("Stack %s failed with %s", stack_id, status)
                    return False
    finally:
        await events.aclose()

    # the stream only ends early when the stack is gone
    return True


def _print(tty: Optional[Tty], text: Union[str, Text]) -> None:
    text = text if isinstance(text, Text) else Text(text)
    if tty is not None:
        tty.interrupt(text)
    else:
        Console(highlight=False).print(text)
