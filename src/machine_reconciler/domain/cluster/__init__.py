"""Cluster-wide configuration consumed by the reconciler."""

from .infrastructure import AWSResourceTag, Infrastructure

__all__ = ["AWSResourceTag", "Infrastructure"]
