"""Desired tag sets and identity tag requirements."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from machine_reconciler.domain.core.common_types import Tag, Tags

NAME_TAG_KEY = "Name"
CLUSTER_TAG_PREFIX = "kubernetes.io/cluster/"
CLUSTER_OWNED_VALUE = "owned"


def cluster_tag_key(cluster_id: str) -> str:
    return CLUSTER_TAG_PREFIX + cluster_id


@dataclass
class DesiredTags:
    """Tags to add or update and tags to delete; a key is in at most one map."""
    to_update: Dict[str, str] = field(default_factory=dict)
    to_delete: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        overlap = set(self.to_update) & set(self.to_delete)
        if overlap:
            raise ValueError(f"tag keys both updated and deleted: {', '.join(sorted(overlap))}")

    def copy(self) -> DesiredTags:
        return DesiredTags(to_update=dict(self.to_update), to_delete=dict(self.to_delete))

    def is_empty(self) -> bool:
        return not self.to_update and not self.to_delete


@dataclass(frozen=True)
class IdentityTagRequirement:
    """A tag an instance must carry with an exact value."""
    key: str
    value: str

    def is_satisfied_by(self, tags: Tags) -> bool:
        return tags.get(self.key) == self.value

    def to_tag(self) -> Tag:
        return Tag(self.key, self.value)


def machine_identity_requirements(machine_name: str, cluster_id: str) -> List[IdentityTagRequirement]:
    """Cluster ownership and Name tags every machine instance must carry."""
    return [
        IdentityTagRequirement(cluster_tag_key(cluster_id), CLUSTER_OWNED_VALUE),
        IdentityTagRequirement(NAME_TAG_KEY, machine_name),
    ]


def unsatisfied_requirements(requirements: Iterable[IdentityTagRequirement], tags: Tags) -> List[IdentityTagRequirement]:
    return [r for r in requirements if not r.is_satisfied_by(tags)]
