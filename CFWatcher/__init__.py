"""
CFWatcher

Live terminal reporting for CloudFormation stack operations.
"""

from .aws_deployer import AWSDeploymentError, CloudFormationClient
from .config import WATCH_CONFIG, setup_logging
from .commands import create_change_set, delete_stack, execute_change_set, upload_assets
from .event_stream import stream_change_set_events
from .models import AssetProgress, OperationSnapshot, StatusEvent
from .reporters import AssetReporter, StackReporter, Tty

__all__ = [
    'AWSDeploymentError',
    'AssetProgress',
    'AssetReporter',
    'CloudFormationClient',
    'OperationSnapshot',
    'StackReporter',
    'StatusEvent',
    'Tty',
    'WATCH_CONFIG',
    'create_change_set',
    'delete_stack',
    'execute_change_set',
    'setup_logging',
    'stream_change_set_events',
    'upload_assets'
]
