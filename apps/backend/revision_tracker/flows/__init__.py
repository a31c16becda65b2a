"""Flows combining scheduling rules with storage commands."""

from .topics import TopicFlow, TopicNotFoundError

__all__ = ["TopicFlow", "TopicNotFoundError"]
