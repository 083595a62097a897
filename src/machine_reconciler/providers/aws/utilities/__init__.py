"""AWS utilities: instance lookup, tagging, node addresses and load balancers."""

from .addresses import extract_node_addresses
from .instances import (
    get_existing_instance_by_id,
    get_existing_instances,
    get_instance_by_id,
    get_instances,
    get_running_from_instances,
    get_stopped_instances,
    instance_has_allowed_state,
    terminate_instances,
)
from .load_balancers import (
    deregister_network_load_balancers,
    gather_load_balancer_target_groups,
    register_with_classic_load_balancers,
    register_with_load_balancers,
    register_with_network_load_balancers,
)
from .tagging import correct_existing_tags, fetch_infra_resource_tags, validate_user_tag

__all__ = [
    "extract_node_addresses",
    "get_existing_instance_by_id",
    "get_existing_instances",
    "get_instance_by_id",
    "get_instances",
    "get_running_from_instances",
    "get_stopped_instances",
    "instance_has_allowed_state",
    "terminate_instances",
    "deregister_network_load_balancers",
    "gather_load_balancer_target_groups",
    "register_with_classic_load_balancers",
    "register_with_load_balancers",
    "register_with_network_load_balancers",
    "correct_existing_tags",
    "fetch_infra_resource_tags",
    "validate_user_tag",
]
