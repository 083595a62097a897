from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Optional

from machine_reconciler.domain.machine.exceptions import MachineValidationError

# Label carrying the identifier of the cluster a machine belongs to.
MACHINE_CLUSTER_ID_LABEL = "machine.openshift.io/cluster-api-cluster"

# Label name used before the move to the machine.openshift.io group; still
# accepted when resolving the cluster id.
UPSTREAM_MACHINE_CLUSTER_ID_LABEL = "sigs.k8s.io/cluster-api-cluster"


@dataclass
class Machine:
    """Machine resource as seen by the reconciler.

    Only the name and labels are interpreted; the provider spec and status are
    opaque JSON payloads decoded by the provider package.
    """
    name: str
    labels: Dict[str, str] = field(default_factory=dict)
    provider_spec: Optional[bytes] = None
    provider_status: Optional[bytes] = None

    def cluster_id(self) -> Optional[str]:
        """Return the cluster id, falling back to the upstream label name."""
        if MACHINE_CLUSTER_ID_LABEL in self.labels:
            return self.labels[MACHINE_CLUSTER_ID_LABEL]
        return self.labels.get(UPSTREAM_MACHINE_CLUSTER_ID_LABEL)

    def require_cluster_id(self) -> str:
        """Return the cluster id or raise MachineValidationError."""
        cluster_id = self.cluster_id()
        if cluster_id is None:
            raise MachineValidationError(self.name, "unable to get cluster ID")
        return cluster_id

    def validate(self) -> None:
        """Check the machine carries the cluster id label."""
        if not self.labels.get(MACHINE_CLUSTER_ID_LABEL):
            raise MachineValidationError(self.name, f"missing {MACHINE_CLUSTER_ID_LABEL!r} label")


def validate_machine(machine: Machine) -> None:
    machine.validate()
