"""AWS machine provider payloads."""

from .provider_config import (
    AWSMachineProviderConfig,
    AWSMachineProviderStatus,
    LoadBalancerReference,
    LoadBalancerType,
    provider_spec_from_raw_extension,
    provider_status_from_raw_extension,
    raw_extension_from_provider_spec,
    raw_extension_from_provider_status,
)

__all__ = [
    "AWSMachineProviderConfig",
    "AWSMachineProviderStatus",
    "LoadBalancerReference",
    "LoadBalancerType",
    "provider_spec_from_raw_extension",
    "provider_status_from_raw_extension",
    "raw_extension_from_provider_spec",
    "raw_extension_from_provider_status",
]
