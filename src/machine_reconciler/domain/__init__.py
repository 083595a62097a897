"""Domain layer - Machine, conditions and cluster configuration models."""
