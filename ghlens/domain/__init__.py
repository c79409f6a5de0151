"""Domain Layer: value objects, read models, errors, events and ports."""
