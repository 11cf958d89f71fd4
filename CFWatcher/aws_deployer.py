"""
AWS CloudFormation Client

Thin boto3 wrapper exposing the calls the watcher needs: listing stack
events, describing change sets and stack resources, and starting the
operations that are then watched.
"""

import logging
from typing import Dict, List, Optional

import boto3
from botocore.exceptions import ClientError, NoCredentialsError

from .config import WATCH_CONFIG
from .models import EventPage, OperationSnapshot, PlannedChange, StatusEvent, SubResource

logger = logging.getLogger(__name__)


class AWSDeploymentError(Exception):
    """Custom exception for AWS deployment errors"""
    pass


class CloudFormationClient:
    """
    CloudFormation access for the watcher.

    Read calls let ClientError propagate untouched so the caller decides
    what to do; mutating calls raise AWSDeploymentError.
    """

    def __init__(self, region: Optional[str] = None, cf_client=None):
        """
        Initialize AWS clients.

        Args:
            region: AWS region (default from WATCH_CONFIG)
            cf_client: Pre-built boto3 CloudFormation client
        """
        self.region = region or WATCH_CONFIG['region']
        try:
            self.cf_client = cf_client or boto3.client('cloudformation', region_name=self.region)
        except NoCredentialsError:
            raise AWSDeploymentError(
                "AWS credentials not found. Please configure AWS credentials."
            )

    def list_events_descending(
        self, target_id: str, page_token: Optional[str] = None
    ) -> Optional[EventPage]:
        """
        Fetch one page of stack events (AWS returns newest first).

        Args:
            target_id: Stack name or ID
            page_token: NextToken from the previous page

        Returns:
            EventPage, or None if the stack does not exist
        """
        params = {'StackName': target_id}
        if page_token:
            params['NextToken'] = page_token

        try:
            response = self.cf_client.describe_stack_events(**params)
        except ClientError as e:
            if _is_missing_stack(e):
                return None
            raise

        return EventPage(
            events=[StatusEvent.from_cloudformation(event) for event in response.get('StackEvents', [])],
            next_token=response.get('NextToken'),
        )

    def describe_change_set(self, change_set_id: str, stack_name: Optional[str] = None) -> OperationSnapshot:
        """
        Describe a change set, following pagination of its changes.

        Args:
            change_set_id: Change set ARN (or name, with stack_name)
            stack_name: Stack name when change_set_id is a plain name

        Returns:
            OperationSnapshot with every planned change
        """
        params = {'ChangeSetName': change_set_id}
        if stack_name:
            params['StackName'] = stack_name

        response = self.cf_client.describe_change_set(**params)
        changes = list(response.get('Changes', []))

        while response.get('NextToken'):
            response = self.cf_client.describe_change_set(**params, NextToken=response['NextToken'])
            changes.extend(response.get('Changes', []))

        planned = []
        for change in changes:
            resource_change = change.get('ResourceChange', {})
            if not resource_change.get('LogicalResourceId'):
                continue
            planned.append(PlannedChange(
                sub_resource_id=resource_change['LogicalResourceId'],
                planned_action=resource_change.get('Action'),
                physical_id=resource_change.get('PhysicalResourceId'),
                resource_kind=resource_change.get('ResourceType'),
            ))

        return OperationSnapshot(
            operation_id=response.get('ChangeSetId', change_set_id),
            operation_name=response.get('ChangeSetName'),
            target_id=response.get('StackId'),
            target_label=response.get('StackName'),
            status=response.get('Status'),
            reason=response.get('StatusReason'),
            created_at=response.get('CreationTime'),
            changes=planned,
        )

    def list_stack_resources(self, stack_name_or_id: str) -> List[SubResource]:
        """
        List the resources currently in a stack.

        Args:
            stack_name_or_id: Stack name or ID

        Returns:
            List of SubResource records
        """
        response = self.cf_client.describe_stack_resources(StackName=stack_name_or_id)

        return [
            SubResource(
                sub_resource_id=resource['LogicalResourceId'],
                physical_id=resource.get('PhysicalResourceId'),
                resource_kind=resource.get('ResourceType'),
                target_id=resource.get('StackId'),
                target_label=resource.get('StackName'),
            )
            for resource in response.get('StackResources', [])
        ]

    def get_stack(
        self,
        stack_name_or_id: str,
        include_deleted: bool = False,
        include_in_review: bool = False,
    ) -> Optional[Dict]:
        """
        Find a stack by name or ARN.

        Args:
            stack_name_or_id: Stack name or ARN
            include_deleted: Also match DELETE_COMPLETE stacks
            include_in_review: Also match REVIEW_IN_PROGRESS stacks

        Returns:
            Raw stack description, or None if not found
        """
        by_arn = stack_name_or_id.startswith('arn:')
        paginator = self.cf_client.get_paginator('describe_stacks')

        for page in paginator.paginate():
            for stack in page.get('Stacks', []):
                name_match = (
                    stack.get('StackId') == stack_name_or_id if by_arn
                    else stack.get('StackName') == stack_name_or_id
                )
                status = stack.get('StackStatus')
                status_match = (
                    (include_deleted or status != 'DELETE_COMPLETE')
                    and (include_in_review or status != 'REVIEW_IN_PROGRESS')
                )
                if name_match and status_match:
                    return stack

        return None

    def create_change_set(
        self,
        stack_name: str,
        template_url: str,
        change_set_name: str,
        client_token: str,
        parameters: Optional[Dict[str, str]] = None,
        create: bool = False,
    ) -> str:
        """
        Create a change set for a new or existing stack.

        Args:
            stack_name: Name of the stack
            template_url: S3 URL of the template
            change_set_name: Name for the change set
            client_token: Idempotency token for the request
            parameters: Template parameters
            create: Create a new stack instead of updating one

        Returns:
            Change set ID
        """
        cf_parameters = [
            {'ParameterKey': key, 'ParameterValue': value}
            for key, value in (parameters or {}).items()
        ]

        try:
            response = self.cf_client.create_change_set(
                StackName=stack_name,
                TemplateURL=template_url,
                Parameters=cf_parameters,
                Capabilities=['CAPABILITY_IAM', 'CAPABILITY_NAMED_IAM'],
                ChangeSetName=change_set_name,
                ChangeSetType='CREATE' if create else 'UPDATE',
                ClientToken=client_token,
                OnStackFailure='DELETE' if create else 'ROLLBACK',
            )
        except ClientError as e:
            error_msg = e.response['Error']['Message']
            raise AWSDeploymentError(f"Failed to create change set: {error_msg}")

        logger.info("Change set created: %s", response['Id'])
        return response['Id']

    def execute_change_set(self, change_set_id: str, stack_id: str, client_request_token: str) -> None:
        """
        Execute a change set; its events carry client_request_token.

        Args:
            change_set_id: Change set ARN
            stack_id: Stack ID
            client_request_token: Token used to correlate the stack events
        """
        try:
            self.cf_client.execute_change_set(
                ChangeSetName=change_set_id,
                StackName=stack_id,
                ClientRequestToken=client_request_token,
            )
        except ClientError as e:
            error_msg = e.response['Error']['Message']
            raise AWSDeploymentError(f"Failed to execute change set: {error_msg}")

    def delete_stack(self, stack_name_or_id: str, client_request_token: str) -> None:
        """
        Delete a stack; its events carry client_request_token.

        Args:
            stack_name_or_id: Stack name or ID
            client_request_token: Token used to correlate the stack events
        """
        try:
            self.cf_client.delete_stack(
                StackName=stack_name_or_id,
                ClientRequestToken=client_request_token,
            )
        except ClientError as e:
            error_msg = e.response['Error']['Message']
            raise AWSDeploymentError(f"Failed to delete stack: {error_msg}")


def _is_missing_stack(error: ClientError) -> bool:
    error = error.response.get('Error', {})
    return error.get('Code') == 'ValidationError' and 'does not exist' in error.get('Message', '')
