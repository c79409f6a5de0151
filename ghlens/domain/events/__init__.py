"""Domain events emitted by the API resilience services."""
