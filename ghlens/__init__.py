"""ghlens: cached, rate-limit aware GitHub profile lookups for the dashboard."""

__version__ = "1.0.0"
