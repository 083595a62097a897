"""Node address extraction from EC2 instance data."""
import ipaddress
from typing import List, Optional, Sequence

from machine_reconciler.domain.machine.value_objects import NodeAddress, NodeAddressType
from machine_reconciler.providers.aws.domain.instance import Ec2Instance
from machine_reconciler.providers.aws.exceptions.aws_exceptions import (
    InvalidAddressError,
    MalformedInstanceError,
)


def _parse_ip(instance: Ec2Instance, kind: str, address: str) -> str:
    # Scoped IPv6 literals (fe80::1%eth0) are not valid node addresses.
    if "%" in address:
        raise InvalidAddressError(instance.instance_id, kind, address)
    try:
        return str(ipaddress.ip_address(address))
    except ValueError:
        raise InvalidAddressError(instance.instance_id, kind, address) from None


def extract_node_addresses(
    instance: Optional[Ec2Instance],
    domain_names: Sequence[str] = (),
) -> List[NodeAddress]:
    """
    Map the instance network information to an ordered list of node addresses.

    Order: for each in-use network interface its IPv6 then private IPv4
    addresses (all InternalIP), the public IPv4 (ExternalIP), the private DNS
    name (InternalDNS, then Hostname, then one InternalDNS alias per extra
    domain) and finally the public DNS name (ExternalDNS).

    Args:
        instance: EC2 instance
        domain_names: Extra DNS domains for internal DNS aliases built from the
            first label of the private DNS name

    Raises:
        MalformedInstanceError: If no instance is given
        InvalidAddressError: If an IP address cannot be parsed
    """
    if instance is None:
        raise MalformedInstanceError("nil instance passed to extract_node_addresses")

    addresses: List[NodeAddress] = []

    for network_interface in instance.network_interfaces:
        if not network_interface.in_use:
            continue

        # IPv6 addresses are reported as InternalIP, as the cloud provider does.
        for ipv6_address in network_interface.ipv6_addresses:
            addresses.append(NodeAddress(NodeAddressType.INTERNAL_IP, _parse_ip(instance, "IPv6", ipv6_address)))

        for private_address in network_interface.private_ip_addresses:
            addresses.append(
                NodeAddress(NodeAddressType.INTERNAL_IP, _parse_ip(instance, "private", private_address))
            )

    if instance.public_ip_address:
        addresses.append(
            NodeAddress(NodeAddressType.EXTERNAL_IP, _parse_ip(instance, "public", instance.public_ip_address))
        )

    private_dns_name = instance.private_dns_name
    if private_dns_name:
        addresses.append(NodeAddress(NodeAddressType.INTERNAL_DNS, private_dns_name))
        addresses.append(NodeAddress(NodeAddressType.HOSTNAME, private_dns_name))
        host = private_dns_name.split(".")[0]
        for domain_name in domain_names:
            custom_host_name = f"{host}.{domain_name}"
            if custom_host_name != private_dns_name:
                addresses.append(NodeAddress(NodeAddressType.INTERNAL_DNS, custom_host_name))

    if instance.public_dns_name:
        addresses.append(NodeAddress(NodeAddressType.EXTERNAL_DNS, instance.public_dns_name))

    return addresses
