"""Load balancer membership of machine instances.

Classic load balancers register members by instance id. ELBv2 target groups
register members by instance id or by private IP depending on their target
type. Targets registered by IP are not removed when the instance terminates,
so they have to be deregistered explicitly.
"""
from typing import Dict, List, Optional, Sequence

from machine_reconciler.helpers.logger import get_logger
from machine_reconciler.providers.aws.domain.instance import Ec2Instance
from machine_reconciler.providers.aws.domain.machine.provider_config import (
    LoadBalancerReference,
    LoadBalancerType,
)
from machine_reconciler.providers.aws.domain.target_group import TargetDescriptor, TargetGroup
from machine_reconciler.providers.aws.exceptions.aws_exceptions import (
    AggregateError,
    AWSError,
    ErrorCollector,
    MalformedInstanceError,
)
from machine_reconciler.providers.aws.infrastructure.aws_client import AWSClient

logger = get_logger(__name__)

# Deregistration errors meaning the target is already gone.
TOLERATED_DEREGISTER_ERROR_CODES = frozenset({"InvalidTarget", "TargetGroupNotFound"})


def _require_instance_id(instance: Optional[Ec2Instance]) -> str:
    if instance is None or not instance.instance_id:
        raise MalformedInstanceError(f"unexpected nil found in instance: {instance}")
    return instance.instance_id


def register_with_classic_load_balancers(client: AWSClient, names: Sequence[str], instance: Ec2Instance) -> None:
    """
    Register the instance with every named classic load balancer.

    Raises:
        AggregateError: Listing every load balancer the registration failed for
    """
    instance_id = _require_instance_id(instance)
    logger.debug("Updating classic load balancer registration", instance_id=instance_id)

    errors = ErrorCollector()
    for elb_name in names:
        try:
            client.register_instances_with_load_balancer(elb_name, [instance_id])
        except AWSError as e:
            logger.error(
                "Failed to register instance with classic load balancer",
                instance_id=instance_id,
                load_balancer=elb_name,
                error=str(e),
            )
            errors.add(elb_name, e)
    errors.raise_if_any()


def register_with_network_load_balancers(client: AWSClient, names: Sequence[str], instance: Ec2Instance) -> None:
    """
    Register the instance with every target group of the named load balancers.

    Target group resolution failures abort the whole operation; registration
    failures are collected per target group.

    Raises:
        AWSError: If the target groups cannot be resolved
        AggregateError: Listing every target group the registration failed for
    """
    instance_id = _require_instance_id(instance)
    logger.debug("Updating network load balancer registration", instance_id=instance_id)
    target_groups = gather_load_balancer_target_groups(client, names)

    errors = ErrorCollector()
    for target_group in target_groups:
        logger.debug(
            "Registering instance with target group",
            instance_id=instance_id,
            target_group=target_group.arn,
            target_type=target_group.target_type,
        )
        try:
            target = TargetDescriptor.for_target_group(target_group, instance)
            client.register_targets(target_group.arn, [target.to_aws_format()])
        except (AWSError, MalformedInstanceError, ValueError) as e:
            logger.error(
                "Failed to register instance with target group",
                instance_id=instance_id,
                target_group=target_group.arn,
                error=str(e),
            )
            errors.add(target_group.arn, e)
    errors.raise_if_any()


def deregister_network_load_balancers(client: AWSClient, names: Sequence[str], instance: Ec2Instance) -> None:
    """
    Remove the instance's private IP from the IP-typed target groups of the named load balancers.

    Instance-typed target groups are left alone: the provider drops those
    targets on termination. Targets or target groups that no longer exist
    count as already removed.

    Raises:
        AWSError: If the target groups cannot be resolved
        AggregateError: Listing every target group the deregistration failed for
    """
    instance_id = _require_instance_id(instance)
    if not instance.private_ip_address:
        logger.debug("Instance does not have private ip, skipping", instance_id=instance_id)
        return

    logger.debug("Removing network load balancer registration", instance_id=instance_id)
    target_groups = gather_load_balancer_target_groups(client, names)
    ip_target_groups = [target_group for target_group in target_groups if target_group.is_ip_target]

    target = TargetDescriptor.by_ip(instance)
    errors = ErrorCollector()
    for target_group in ip_target_groups:
        logger.debug(
            "Unregistering instance registered by ip from target group",
            instance_id=instance_id,
            target_group=target_group.arn,
        )
        try:
            client.deregister_targets(target_group.arn, [target.to_aws_format()])
        except AWSError as e:
            if e.error_code in TOLERATED_DEREGISTER_ERROR_CODES:
                logger.debug(
                    "Target already removed from target group",
                    instance_id=instance_id,
                    target_group=target_group.arn,
                    error_code=e.error_code,
                )
                continue
            logger.error(
                "Failed to unregister instance from target group",
                instance_id=instance_id,
                target_group=target_group.arn,
                error=str(e),
            )
            errors.add(target_group.arn, e)
    errors.raise_if_any()


def gather_load_balancer_target_groups(client: AWSClient, names: Sequence[str]) -> List[TargetGroup]:
    """
    Resolve load balancer names to their target groups.

    A target group attached to several of the load balancers is returned once.

    Raises:
        AWSError: If describing the load balancers or any of their target groups fails
    """
    if not names:
        return []

    try:
        load_balancers = client.describe_load_balancers_v2(list(names))
    except AWSError as e:
        logger.error("Failed to describe load balancers", names=list(names), error=str(e))
        raise

    target_groups: Dict[str, TargetGroup] = {}
    for load_balancer in load_balancers:
        lb_name = load_balancer.get("LoadBalancerName")
        logger.debug("Retrieving target groups for load balancer", load_balancer=lb_name)
        try:
            groups = client.describe_target_groups(load_balancer["LoadBalancerArn"])
        except AWSError as e:
            logger.error("Failed to retrieve load balancer target groups", load_balancer=lb_name, error=str(e))
            raise
        for data in groups:
            target_group = TargetGroup.from_aws_format(data)
            target_groups.setdefault(target_group.arn, target_group)

    return list(target_groups.values())


def register_with_load_balancers(
    client: AWSClient,
    load_balancers: Sequence[LoadBalancerReference],
    instance: Ec2Instance,
) -> None:
    """
    Register the instance with the load balancers listed in a provider spec.

    Classic and network registrations both run; their failures are combined.

    Raises:
        AggregateError: If any registration or target group resolution failed
    """
    classic = [lb.name for lb in load_balancers if lb.type == LoadBalancerType.CLASSIC]
    network = [lb.name for lb in load_balancers if lb.type == LoadBalancerType.NETWORK]

    errors = ErrorCollector()
    if classic:
        try:
            register_with_classic_load_balancers(client, classic, instance)
        except AggregateError as e:
            errors.extend(e)
    if network:
        try:
            register_with_network_load_balancers(client, network, instance)
        except AggregateError as e:
            errors.extend(e)
        except AWSError as e:
            errors.add(", ".join(network), e)
    errors.raise_if_any()
