"""
Menu tree component - Port interfaces.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Protocol

from src.ports.registry import MenuRegistryPort

ResolutionStatus = Literal["resolved", "inaccessible", "not_found"]


@dataclass(frozen=True)
class TargetResolution:
    """Result of resolving an internal path through the router."""

    status: ResolutionStatus
    route_name: str | None = None
    route_parameters: dict[str, str] = field(default_factory=dict)


class TargetResolverPort(Protocol):
    """Interface for resolving internal paths to routes."""

    def resolve(self, path: str) -> TargetResolution:
        """Resolve a path such as /node/5."""
        ...


class RevisionStatePort(Protocol):
    """Interface to content revision storage."""

    def is_pending_revision(self, link_id: str) -> bool:
        """True if the content link's latest revision is not the default one."""
        ...


__all__ = [
    "MenuRegistryPort",
    "ResolutionStatus",
    "RevisionStatePort",
    "TargetResolution",
    "TargetResolverPort",
]
