"""Exception hierarchy shared by the simulation and the room server."""
from __future__ import annotations


class HearthfrontError(RuntimeError):
    """Base class for every error raised by Hearthfront."""


class UnknownResourceError(HearthfrontError, KeyError):
    """Raised when a ledger is asked about a resource kind it does not track."""

    def __str__(self) -> str:
        return RuntimeError.__str__(self)


class InsufficientResourcesError(HearthfrontError):
    """Raised when a town center cannot pay for a purchase."""


class UnknownEntityError(HearthfrontError):
    """Raised when a command references an entity the world does not know."""


class InvalidCommandError(HearthfrontError):
    """Raised when a player command is malformed or cannot apply."""


__all__ = [
    "HearthfrontError",
    "InsufficientResourcesError",
    "InvalidCommandError",
    "UnknownEntityError",
    "UnknownResourceError",
]
