"""API Resilience Implementations.

Contains services for tracking the GitHub rate limit and executing
requests with retries and exponential backoff.
Bounded Context: API Resilience
"""
