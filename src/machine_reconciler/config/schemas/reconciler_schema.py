"""Reconciler behaviour configuration schema."""
from typing import List

from pydantic import BaseModel, Field, field_validator


class ReconcilerConfig(BaseModel):
    """
    Settings for the per-machine reconciliation helpers.

    The helpers take these values as arguments; the caller reads them from
    here, e.g. ``extract_node_addresses(instance, config.node_dns_domains)``.
    """

    node_dns_domains: List[str] = Field(
        default_factory=list,
        description="Extra DNS domains used to synthesize internal DNS aliases for nodes",
    )

    @field_validator("node_dns_domains", mode="before")
    @classmethod
    def split_domains(cls, v):
        """Accept a comma separated string as well as a list."""
        if isinstance(v, str):
            return [d.strip() for d in v.split(",") if d.strip()]
        return v

    @field_validator("node_dns_domains")
    @classmethod
    def strip_dots(cls, v: List[str]) -> List[str]:
        return [d.strip(".") for d in v]
