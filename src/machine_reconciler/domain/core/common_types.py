# src/machine_reconciler/domain/core/common_types.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from machine_reconciler.helpers.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Tag:
    key: str
    value: str

    def __str__(self) -> str:
        return f"{self.key}={self.value}"

    @classmethod
    def from_dict(cls, data: dict) -> Tag:
        return cls(key=data["Key"], value=data["Value"])

    def to_dict(self) -> dict:
        return {"Key": self.key, "Value": self.value}


@dataclass(frozen=True)
class Tags:
    """Collection of tags keyed by tag key; a key appears at most once."""
    items: Dict[str, str] = field(default_factory=dict)

    def add(self, key: str, value: str) -> Tags:
        new_items = self.items.copy()
        new_items[key] = value
        return Tags(new_items)

    def remove(self, key: str) -> Tags:
        new_items = self.items.copy()
        new_items.pop(key, None)
        return Tags(new_items)

    def get(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self.items

    def __iter__(self) -> Iterator[Tag]:
        return (Tag(key, value) for key, value in self.items.items())

    def __len__(self) -> int:
        return len(self.items)

    def to_dict(self) -> Dict[str, str]:
        return self.items.copy()

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> Tags:
        return cls(items=data.copy())

    def to_aws_format(self) -> List[Dict[str, str]]:
        """Convert tags to AWS API format."""
        return [{"Key": k, "Value": v} for k, v in self.items.items()]

    @classmethod
    def from_aws_format(cls, tags: Optional[List[Dict[str, str]]]) -> Tags:
        """
        Create Tags from AWS API format, skipping entries without a key or value.

        A repeated key is reported and keeps its first value.
        """
        items: Dict[str, str] = {}
        for t in tags or []:
            key, value = t.get("Key"), t.get("Value")
            if key is None or value is None:
                continue
            if key in items:
                logger.warning("Ignoring duplicate tag key", key=key, value=value, kept_value=items[key])
                continue
            items[key] = value
        return cls(items=items)

    def __str__(self) -> str:
        return ";".join(f"{k}={v}" for k, v in self.items.items())
