"""HTTP adapter over the relationship and authorization services."""
