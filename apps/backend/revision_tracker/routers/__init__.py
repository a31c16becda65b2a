"""Router package exports."""

from . import health, topics

__all__ = [
    "health",
    "topics",
]
