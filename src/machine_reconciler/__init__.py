"""AWS Machine Reconciler - Root Package.

This package reconciles the desired state of a Machine resource against the
actual state of an EC2 instance and its load-balancer memberships.

Key Components:
    - domain: Machine aggregate, conditions and cluster configuration models
    - providers.aws: instance lookup, tagging, node addresses and load balancers
    - config: configuration schemas, defaults and loading
    - helpers: logging setup

Every operation is synchronous and idempotent; the surrounding controller
decides when to reconcile and how to retry.
"""

from ._version import __version__

__all__ = ["__version__"]
