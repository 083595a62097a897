"""Instance tag validation and reconciliation."""
import re
from typing import Dict, List, Optional

from machine_reconciler.domain.cluster.infrastructure import Infrastructure
from machine_reconciler.domain.machine.exceptions import InvalidTagError
from machine_reconciler.domain.machine.machine_aggregate import Machine
from machine_reconciler.helpers.logger import get_logger
from machine_reconciler.providers.aws.domain.instance import Ec2Instance
from machine_reconciler.providers.aws.domain.tags import (
    NAME_TAG_KEY,
    DesiredTags,
    machine_identity_requirements,
    unsatisfied_requirements,
)
from machine_reconciler.providers.aws.exceptions.aws_exceptions import MalformedInstanceError
from machine_reconciler.providers.aws.infrastructure.aws_client import AWSClient

logger = get_logger(__name__)

TAG_KEY_PATTERN = re.compile(r"^[0-9A-Za-z_.:/=+\-@]{1,128}$")
TAG_VALUE_PATTERN = re.compile(r"^[0-9A-Za-z_.:/=+\-@]{0,256}$")
KUBERNETES_NAMESPACE_PATTERN = re.compile(r"^([^/]*\.)?kubernetes\.io/")
OPENSHIFT_NAMESPACE_PATTERN = re.compile(r"^([^/]*\.)?openshift\.io/")


def validate_user_tag(key: str, value: str) -> None:
    """
    Validate a user-supplied tag.

    Raises:
        InvalidTagError: With the first rule the tag violates
    """
    if not TAG_KEY_PATTERN.fullmatch(key):
        raise InvalidTagError(key, value, "key has invalid characters or length")
    if key.lower() == NAME_TAG_KEY.lower():
        raise InvalidTagError(key, value, "key cannot be customized by user")
    if not TAG_VALUE_PATTERN.fullmatch(value):
        raise InvalidTagError(key, value, "value has invalid characters or length")
    if KUBERNETES_NAMESPACE_PATTERN.match(key):
        raise InvalidTagError(key, value, "key is in the kubernetes.io namespace")
    if OPENSHIFT_NAMESPACE_PATTERN.match(key):
        raise InvalidTagError(key, value, "key is in the openshift.io namespace")


def fetch_infra_resource_tags(infra: Optional[Infrastructure]) -> DesiredTags:
    """
    Derive the desired user tags from the cluster infrastructure config.

    Spec tags are authoritative: invalid ones are skipped and an empty value
    asks for deletion. A key listed more than once takes its last entry. Keys only present in the status adopt the status value.
    A status value differing from the spec value is reported and ignored.
    """
    updates: Dict[str, str] = {}
    deletes: Dict[str, str] = {}
    if infra is None:
        return DesiredTags()

    for tag in infra.spec_resource_tags():
        try:
            validate_user_tag(tag.key, tag.value)
        except InvalidTagError as e:
            logger.warning("Skipping invalid resource tag", key=tag.key, value=tag.value, reason=e.reason)
            continue
        # A repeated key keeps its last entry.
        if tag.value == "":
            updates.pop(tag.key, None)
            deletes[tag.key] = ""
            continue
        deletes.pop(tag.key, None)
        updates[tag.key] = tag.value

    for tag in infra.status_resource_tags():
        if tag.key in deletes:
            logger.warning("Tag marked for deletion in infra spec still exists in infra status", key=tag.key)
            continue
        if tag.key not in updates:
            logger.info("Tag exists only in infra status, considering for update", key=tag.key)
            updates[tag.key] = tag.value
        elif updates[tag.key] != tag.value:
            logger.warning(
                "Tag value differs in infra status and infra spec, value in infra spec considered",
                key=tag.key,
                status_value=tag.value,
                spec_value=updates[tag.key],
            )

    return DesiredTags(to_update=updates, to_delete=deletes)


def correct_existing_tags(
    machine: Machine,
    instance: Optional[Ec2Instance],
    client: AWSClient,
    desired: Optional[DesiredTags] = None,
) -> None:
    """
    Bring the instance tags in line with the machine identity and desired tags.

    At most one mutating call is issued: identity tags and pending updates are
    written with a single create-tags call; deletions are only applied on a
    pass that has nothing to create. A converged instance issues no call.

    Raises:
        MalformedInstanceError: If the instance or its id is missing
        MachineValidationError: If the machine has no cluster id
        AWSError: If the tagging call fails
    """
    if instance is None or not instance.instance_id:
        raise MalformedInstanceError(f"unexpected nil found in instance: {instance}")
    cluster_id = machine.require_cluster_id()

    requirements = machine_identity_requirements(machine.name, cluster_id)
    missing_identity = unsatisfied_requirements(requirements, instance.tags)

    pending = desired.copy() if desired is not None else DesiredTags()
    for tag in instance.tags:
        if pending.to_update.get(tag.key) == tag.value:
            del pending.to_update[tag.key]
    for key, value in list(pending.to_delete.items()):
        current = instance.tags.get(key)
        if current is None or (value and current != value):
            del pending.to_delete[key]

    tags_to_add: List[Dict[str, str]] = [
        {"Key": key, "Value": value} for key, value in pending.to_update.items()
    ]
    if missing_identity:
        # Both identity tags are rewritten together when either is wrong.
        tags_to_add.extend(requirement.to_tag().to_dict() for requirement in requirements)

    if tags_to_add:
        logger.info(
            "Updating tags for machine",
            machine=machine.name,
            instance_id=instance.instance_id,
            tags=tags_to_add,
        )
        client.create_tags([instance.instance_id], tags_to_add)
        return

    if pending.to_delete:
        tags_to_delete = [_delete_tag_spec(key, value) for key, value in pending.to_delete.items()]
        logger.info(
            "Deleting tags for machine",
            machine=machine.name,
            instance_id=instance.instance_id,
            tags=tags_to_delete,
        )
        client.delete_tags([instance.instance_id], tags_to_delete)


def _delete_tag_spec(key: str, value: str) -> Dict[str, str]:
    # DeleteTags only removes a tag whose value matches the given one; without
    # a value the tag is removed whatever its value.
    if value == "":
        return {"Key": key}
    return {"Key": key, "Value": value}
