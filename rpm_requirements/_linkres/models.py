"""Outcome types for symlink resolution."""

from dataclasses import dataclass
from enum import Enum


class ResolutionStatus(str, Enum):
    """Terminal state of a single path resolution."""

    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"
    CIRCULAR = "circular"


@dataclass(frozen=True)
class Resolved:
    """The path reached a location that is not a symlink.

    Attributes:
        path: Canonical absolute path
    """

    path: str

    @property
    def status(self) -> ResolutionStatus:
        return ResolutionStatus.RESOLVED


@dataclass(frozen=True)
class Unresolved:
    """Resolution stopped before reaching a canonical path.

    Attributes:
        last_path: Path reached when resolution stopped
        reason: Human-readable reason (hop budget, traversal above root)
    """

    last_path: str
    reason: str

    @property
    def status(self) -> ResolutionStatus:
        return ResolutionStatus.UNRESOLVED


@dataclass(frozen=True)
class Circular:
    """Resolution revisited a path it had already passed through.

    Attributes:
        visited: Paths in the order they were visited, ending with the repeated one
    """

    visited: tuple[str, ...]

    @property
    def status(self) -> ResolutionStatus:
        return ResolutionStatus.CIRCULAR


ResolutionOutcome = Resolved | Unresolved | Circular
