"""Event processing infrastructure for the CQRS read side."""

from .processor import EventProcessor

__all__ = [
    "EventProcessor",
]
