"""ELBv2 target groups and target descriptors."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from machine_reconciler.providers.aws.domain.instance import Ec2Instance
from machine_reconciler.providers.aws.exceptions.aws_exceptions import MalformedInstanceError


class TargetType(str, Enum):
    """How a target group addresses its members."""
    INSTANCE = "instance"
    IP = "ip"
    LAMBDA = "lambda"
    ALB = "alb"


@dataclass(frozen=True)
class TargetGroup:
    arn: str
    target_type: str
    name: Optional[str] = None

    @classmethod
    def from_aws_format(cls, data: Dict[str, Any]) -> TargetGroup:
        return cls(
            arn=data["TargetGroupArn"],
            target_type=data.get("TargetType", TargetType.INSTANCE.value),
            name=data.get("TargetGroupName"),
        )

    @property
    def is_ip_target(self) -> bool:
        return self.target_type == TargetType.IP.value


@dataclass(frozen=True)
class TargetDescriptor:
    """A single target registered in a target group."""
    id: str

    def to_aws_format(self) -> Dict[str, str]:
        return {"Id": self.id}

    @classmethod
    def by_instance(cls, instance: Ec2Instance) -> TargetDescriptor:
        if not instance.instance_id:
            raise MalformedInstanceError("instance has no ID to register by instance")
        return cls(id=instance.instance_id)

    @classmethod
    def by_ip(cls, instance: Ec2Instance) -> TargetDescriptor:
        if not instance.private_ip_address:
            raise MalformedInstanceError(f"instance {instance.instance_id} has no private IP to register by ip")
        return cls(id=instance.private_ip_address)

    @classmethod
    def for_target_group(cls, target_group: TargetGroup, instance: Ec2Instance) -> TargetDescriptor:
        """Build the descriptor matching the target group's target type."""
        builder = _TARGET_BUILDERS.get(target_group.target_type)
        if builder is None:
            raise ValueError(
                f"target group {target_group.arn} has unsupported target type {target_group.target_type!r}"
            )
        return builder(instance)


_TARGET_BUILDERS: Dict[str, Callable[[Ec2Instance], TargetDescriptor]] = {
    TargetType.INSTANCE.value: TargetDescriptor.by_instance,
    TargetType.IP.value: TargetDescriptor.by_ip,
}
