"""Domain Events related to API calls and resilience.

Emitted by the fetcher when calls start, succeed, are retried, fail,
or hit an exhausted quota.
"""

from dataclasses import dataclass, field
from datetime import datetime
import time
from typing import Optional

@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass

# --- Specific API Events ---

@dataclass
class ApiCallInitiated(DomainEvent):
    """Event triggered when an API call is about to be made."""
    url: str
    attempt_number: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallSucceeded(DomainEvent):
    """Event triggered when an API call succeeds."""
    url: str
    status_code: int
    latency_ms: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallFailed(DomainEvent):
    """Event triggered when an API call fails definitively."""
    url: str
    error_kind: str
    error_message: str
    attempts: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is scheduled for a failed API call."""
    url: str
    attempt_number: int
    delay_seconds: float
    reason: str
    timestamp: float = field(default_factory=time.time)

@dataclass
class RateLimitExhausted(DomainEvent):
    """Event triggered when GitHub reports zero remaining quota."""
    url: str
    reset_at: Optional[datetime]
    timestamp: float = field(default_factory=time.time)
