"""Caching Service Implementation.

Provides the in-memory TTL cache behind the CacheService interface.
Bounded Context: Cache Management
"""
