"""Instance lookup, lifecycle state filtering and termination."""
from typing import Any, Dict, List, Optional, Sequence

from machine_reconciler.domain.machine.machine_aggregate import Machine
from machine_reconciler.helpers.logger import get_logger
from machine_reconciler.providers.aws.domain.instance import (
    EXISTING_INSTANCE_STATES,
    STOPPED_INSTANCE_STATES,
    Ec2Instance,
)
from machine_reconciler.providers.aws.domain.tags import (
    CLUSTER_OWNED_VALUE,
    NAME_TAG_KEY,
    cluster_tag_key,
)
from machine_reconciler.providers.aws.exceptions.aws_exceptions import (
    AWSError,
    AWSInfrastructureError,
    InstanceNotFoundError,
    InstanceStateError,
    MalformedInstanceError,
)
from machine_reconciler.providers.aws.infrastructure.aws_client import AWSClient

logger = get_logger(__name__)


def aws_tag_filter(key: str, values: Sequence[str]) -> Dict[str, Any]:
    return {"Name": f"tag:{key}", "Values": list(values)}


def cluster_filter(cluster_id: str) -> Dict[str, Any]:
    return aws_tag_filter(cluster_tag_key(cluster_id), [CLUSTER_OWNED_VALUE])


def instance_has_allowed_state(instance: Optional[Ec2Instance], allowed_states: Sequence[str]) -> None:
    """
    Check an instance is in one of the allowed lifecycle states.

    An empty ``allowed_states`` accepts any state.

    Raises:
        MalformedInstanceError: If the instance, its id or its state is unset
        InstanceStateError: If the state is not allowed
    """
    if instance is None or not instance.instance_id:
        raise MalformedInstanceError("instance has nil ID")

    if instance.state is None:
        raise MalformedInstanceError(f"instance {instance.instance_id} has nil state")

    if not allowed_states:
        return

    if instance.state not in allowed_states:
        raise InstanceStateError(instance.instance_id, instance.state, allowed_states)


def get_instances(
    machine: Machine,
    client: AWSClient,
    state_filter: Sequence[str],
) -> List[Ec2Instance]:
    """Return all instances tagged with the machine name and cluster id whose state passes the filter."""
    cluster_id = machine.require_cluster_id()

    filters = [
        aws_tag_filter(NAME_TAG_KEY, [machine.name]),
        cluster_filter(cluster_id),
    ]
    reservations = client.describe_instances(filters=filters)

    instances: List[Ec2Instance] = []
    for reservation in reservations:
        for data in reservation.get("Instances", []):
            instance = Ec2Instance.from_aws_format(data)
            try:
                instance_has_allowed_state(instance, state_filter)
            except (InstanceStateError, MalformedInstanceError) as e:
                logger.error("Excluding instance", machine=machine.name, reason=str(e))
                continue
            instances.append(instance)

    return instances


def get_existing_instances(machine: Machine, client: AWSClient) -> List[Ec2Instance]:
    """Return all instances of the machine that are not terminated."""
    return get_instances(machine, client, EXISTING_INSTANCE_STATES)


def get_stopped_instances(machine: Machine, client: AWSClient) -> List[Ec2Instance]:
    """Return the machine's instances that are stopped or stopping."""
    return get_instances(machine, client, STOPPED_INSTANCE_STATES)


def get_running_from_instances(instances: Sequence[Ec2Instance]) -> List[Ec2Instance]:
    return [instance for instance in instances if instance.is_running]


def get_instance_by_id(
    instance_id: str,
    client: AWSClient,
    state_filter: Sequence[str],
) -> Ec2Instance:
    """
    Return the instance with the given id.

    Raises:
        MalformedInstanceError: If no id is given or the instance lacks id/state
        InstanceNotFoundError: If the provider does not return exactly one
            reservation holding exactly one instance
        InstanceStateError: If the instance state does not pass the filter
    """
    if not instance_id:
        raise MalformedInstanceError("instance-id not specified")

    reservations = client.describe_instances(instance_ids=[instance_id])

    if len(reservations) != 1:
        raise InstanceNotFoundError(
            f"found {len(reservations)} reservations for instance-id {instance_id}", instance_id
        )

    instances = reservations[0].get("Instances", [])
    if len(instances) != 1:
        raise InstanceNotFoundError(
            f"found {len(instances)} instances for instance-id {instance_id}", instance_id
        )

    instance = Ec2Instance.from_aws_format(instances[0])
    instance_has_allowed_state(instance, state_filter)
    return instance


def get_existing_instance_by_id(instance_id: str, client: AWSClient) -> Ec2Instance:
    return get_instance_by_id(instance_id, client, EXISTING_INSTANCE_STATES)


def terminate_instances(client: AWSClient, instances: Sequence[Ec2Instance]) -> List[Dict[str, Any]]:
    """Terminate all provided instances with a single EC2 request."""
    instance_ids = []
    for instance in instances:
        logger.info(
            "Cleaning up extraneous instance for machine",
            instance_id=instance.instance_id,
            state=instance.state,
            launch_time=instance.launch_time,
        )
        instance_ids.append(instance.instance_id)

    if not instance_ids:
        return []

    for instance_id in instance_ids:
        logger.info("Terminating instance", instance_id=instance_id)

    try:
        return client.terminate_instances(instance_ids)
    except AWSError as e:
        logger.error("Error terminating instances", error=str(e))
        raise AWSInfrastructureError(
            f"error terminating instances: {e}", error_code=e.error_code, operation=e.operation
        ) from e
