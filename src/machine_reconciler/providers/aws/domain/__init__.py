"""AWS provider domain objects."""
