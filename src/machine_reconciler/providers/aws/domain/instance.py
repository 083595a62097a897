"""EC2 instance view used by the reconciler."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from machine_reconciler.domain.core.common_types import Tags


class InstanceState(str, Enum):
    """EC2 instance lifecycle states."""
    PENDING = "pending"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    SHUTTING_DOWN = "shutting-down"
    TERMINATED = "terminated"


# States in which an instance is considered to exist, i.e. anything but terminated.
EXISTING_INSTANCE_STATES: Tuple[str, ...] = (
    InstanceState.RUNNING.value,
    InstanceState.PENDING.value,
    InstanceState.STOPPED.value,
    InstanceState.STOPPING.value,
    InstanceState.SHUTTING_DOWN.value,
)

STOPPED_INSTANCE_STATES: Tuple[str, ...] = (
    InstanceState.STOPPED.value,
    InstanceState.STOPPING.value,
)

NETWORK_INTERFACE_STATUS_IN_USE = "in-use"


@dataclass(frozen=True)
class NetworkInterface:
    status: Optional[str] = None
    ipv6_addresses: List[str] = field(default_factory=list)
    private_ip_addresses: List[str] = field(default_factory=list)

    @property
    def in_use(self) -> bool:
        return self.status == NETWORK_INTERFACE_STATUS_IN_USE

    @classmethod
    def from_aws_format(cls, data: Dict[str, Any]) -> NetworkInterface:
        return cls(
            status=data.get("Status"),
            ipv6_addresses=[
                a["Ipv6Address"] for a in data.get("Ipv6Addresses", []) if a.get("Ipv6Address")
            ],
            private_ip_addresses=[
                a["PrivateIpAddress"] for a in data.get("PrivateIpAddresses", []) if a.get("PrivateIpAddress")
            ],
        )


@dataclass(frozen=True)
class Ec2Instance:
    """
    Read-only view over a describe-instances entry.

    ``state`` keeps the raw state name so that states unknown to
    InstanceState are still reported faithfully. ``instance_id`` and ``state``
    are None when the provider response lacks them.
    """
    instance_id: Optional[str]
    state: Optional[str]
    tags: Tags = field(default_factory=Tags)
    network_interfaces: List[NetworkInterface] = field(default_factory=list)
    private_ip_address: Optional[str] = None
    public_ip_address: Optional[str] = None
    private_dns_name: Optional[str] = None
    public_dns_name: Optional[str] = None
    launch_time: Optional[datetime] = None

    @classmethod
    def from_aws_format(cls, data: Dict[str, Any]) -> Ec2Instance:
        state = data.get("State")
        return cls(
            instance_id=data.get("InstanceId"),
            state=state.get("Name") if state else None,
            tags=Tags.from_aws_format(data.get("Tags")),
            network_interfaces=[
                NetworkInterface.from_aws_format(ni) for ni in data.get("NetworkInterfaces", [])
            ],
            private_ip_address=data.get("PrivateIpAddress") or None,
            public_ip_address=data.get("PublicIpAddress") or None,
            private_dns_name=data.get("PrivateDnsName") or None,
            public_dns_name=data.get("PublicDnsName") or None,
            launch_time=data.get("LaunchTime"),
        )

    @property
    def is_running(self) -> bool:
        return self.state == InstanceState.RUNNING.value
