from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from machine_reconciler.config.schemas import AWSProviderConfig
from machine_reconciler.helpers.logger import get_logger
from machine_reconciler.infrastructure.exceptions import InfrastructureError
from machine_reconciler.providers.aws.exceptions.aws_exceptions import (
    AWSEntityNotFoundError,
    AWSError,
    AWSInfrastructureError,
    AWSPermissionError,
    AWSRateLimitError,
    AWSValidationError,
)

logger = get_logger(__name__)

_VALIDATION_CODES = {
    "InvalidParameterValue",
    "InvalidParameter",
    "InvalidParameterCombination",
    "ValidationError",
    "ValidationException",
    "InvalidConfigurationRequest",
}
_NOT_FOUND_CODES = {
    "ResourceNotFound",
    "InvalidInstanceID.NotFound",
    "InvalidInstanceID.Malformed",
    "LoadBalancerNotFound",
    "TargetGroupNotFound",
    "InvalidTarget",
}
_RATE_LIMIT_CODES = {
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
    "TooManyRequestsException",
}
_PERMISSION_CODES = {
    "UnauthorizedOperation",
    "AccessDenied",
    "AccessDeniedException",
    "Forbidden",
}


class AWSClient:
    """
    Centralized AWS client management.

    Owns the boto3 clients used by the reconciler (EC2, classic ELB and ELBv2)
    and exposes exactly the API operations the reconciler consumes. Every
    operation converts botocore errors into AWSError subclasses while keeping
    the provider error code.
    """

    def __init__(self, config: Optional[AWSProviderConfig] = None, session: Optional[boto3.session.Session] = None):
        """
        Initialize AWS client with configuration.

        Args:
            config: AWS provider configuration
            session: Optional preconfigured boto3 session

        Raises:
            InfrastructureError: If AWS credentials validation fails
        """
        self.provider_config = config or AWSProviderConfig()
        self.region_name = self.provider_config.region
        self.config = Config(
            region_name=self.region_name,
            retries={
                "max_attempts": self.provider_config.request_retry_attempts,
                "mode": self.provider_config.retry_mode,
            },
            connect_timeout=self.provider_config.connect_timeout_ms / 1000,
            read_timeout=self.provider_config.read_timeout_ms / 1000,
        )
        self.session = session or boto3.session.Session(
            profile_name=self.provider_config.profile,
            region_name=self.region_name,
        )

        if self.provider_config.validate_credentials:
            self._validate_credentials()

        self.ec2_client = self._create_client("ec2")
        self.elb_client = self._create_client("elb")
        self.elbv2_client = self._create_client("elbv2")

    def _create_client(self, service_name: str):
        return self.session.client(
            service_name,
            config=self.config,
            endpoint_url=self.provider_config.endpoint_url,
        )

    def _validate_credentials(self) -> None:
        try:
            self._create_client("sts").get_caller_identity()
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to validate AWS credentials", error=str(e))
            raise InfrastructureError(f"Failed to validate AWS credentials: {str(e)}")

    # EC2

    def describe_instances(
        self,
        instance_ids: Optional[List[str]] = None,
        filters: Optional[List[Dict[str, Any]]] = None,
    ) -> List[Dict[str, Any]]:
        """Describe EC2 instances by id or filter and return all reservations."""
        params: Dict[str, Any] = {}
        if instance_ids:
            params["InstanceIds"] = instance_ids
        if filters:
            params["Filters"] = filters
        try:
            paginator = self.ec2_client.get_paginator("describe_instances")
            reservations: List[Dict[str, Any]] = []
            for page in paginator.paginate(**params):
                reservations.extend(page.get("Reservations", []))
            return reservations
        except ClientError as e:
            raise self._convert_client_error(e, "DescribeInstances") from e

    def create_tags(self, resource_ids: List[str], tags: List[Dict[str, str]]) -> None:
        """Add or overwrite tags on EC2 resources."""
        try:
            self.ec2_client.create_tags(Resources=resource_ids, Tags=tags)
        except ClientError as e:
            raise self._convert_client_error(e, "CreateTags") from e

    def delete_tags(self, resource_ids: List[str], tags: List[Dict[str, str]]) -> None:
        """Delete tags from EC2 resources; a tag without Value is deleted whatever its value."""
        try:
            self.ec2_client.delete_tags(Resources=resource_ids, Tags=tags)
        except ClientError as e:
            raise self._convert_client_error(e, "DeleteTags") from e

    def terminate_instances(self, instance_ids: List[str]) -> List[Dict[str, Any]]:
        """Terminate EC2 instances and return the reported state changes."""
        try:
            response = self.ec2_client.terminate_instances(InstanceIds=instance_ids)
        except ClientError as e:
            raise self._convert_client_error(e, "TerminateInstances") from e
        if not response:
            return []
        return response.get("TerminatingInstances", [])

    # Classic ELB

    def register_instances_with_load_balancer(self, load_balancer_name: str, instance_ids: List[str]) -> None:
        try:
            self.elb_client.register_instances_with_load_balancer(
                LoadBalancerName=load_balancer_name,
                Instances=[{"InstanceId": instance_id} for instance_id in instance_ids],
            )
        except ClientError as e:
            raise self._convert_client_error(e, "RegisterInstancesWithLoadBalancer") from e

    # ELBv2

    def describe_load_balancers_v2(self, names: List[str]) -> List[Dict[str, Any]]:
        try:
            response = self.elbv2_client.describe_load_balancers(Names=names)
        except ClientError as e:
            raise self._convert_client_error(e, "DescribeLoadBalancers") from e
        return response.get("LoadBalancers", [])

    def describe_target_groups(self, load_balancer_arn: str) -> List[Dict[str, Any]]:
        try:
            paginator = self.elbv2_client.get_paginator("describe_target_groups")
            target_groups: List[Dict[str, Any]] = []
            for page in paginator.paginate(LoadBalancerArn=load_balancer_arn):
                target_groups.extend(page.get("TargetGroups", []))
            return target_groups
        except ClientError as e:
            raise self._convert_client_error(e, "DescribeTargetGroups") from e

    def register_targets(self, target_group_arn: str, targets: List[Dict[str, Any]]) -> None:
        try:
            self.elbv2_client.register_targets(TargetGroupArn=target_group_arn, Targets=targets)
        except ClientError as e:
            raise self._convert_client_error(e, "RegisterTargets") from e

    def deregister_targets(self, target_group_arn: str, targets: List[Dict[str, Any]]) -> None:
        try:
            self.elbv2_client.deregister_targets(TargetGroupArn=target_group_arn, Targets=targets)
        except ClientError as e:
            raise self._convert_client_error(e, "DeregisterTargets") from e

    @staticmethod
    def _convert_client_error(error: ClientError, operation_name: str = "AWS operation") -> AWSError:
        """
        Convert AWS ClientError to the matching AWSError subclass.

        Args:
            error: The AWS ClientError to convert
            operation_name: Name of the operation for error context

        Returns:
            AWSError carrying the provider error code
        """
        error_code = error.response.get("Error", {}).get("Code", "Unknown")
        error_message = error.response.get("Error", {}).get("Message", str(error))
        message = f"{operation_name} failed: {error_code}: {error_message}"

        if error_code in _VALIDATION_CODES:
            error_class = AWSValidationError
        elif error_code in _NOT_FOUND_CODES or error_code.endswith(".NotFound"):
            error_class = AWSEntityNotFoundError
        elif error_code in _RATE_LIMIT_CODES:
            error_class = AWSRateLimitError
        elif error_code in _PERMISSION_CODES:
            error_class = AWSPermissionError
        else:
            error_class = AWSInfrastructureError
        return error_class(message, error_code=error_code, operation=operation_name)
