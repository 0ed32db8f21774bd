"""Common utilities shared across the identity services."""

__all__ = [
    "logging",
    "schema",
    "time",
]
