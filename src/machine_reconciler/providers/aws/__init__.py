"""AWS provider - EC2 instances, tags and load-balancer memberships."""
