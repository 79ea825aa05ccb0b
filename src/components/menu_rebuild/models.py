"""
Menu rebuild component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.domain.entities import PluginLinkDefinition


@dataclass(frozen=True)
class RebuildError:
    """Rebuild error. field carries the offending link id where there is one."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class RebuildInput:
    """Declared plugin links, in declaration order."""

    definitions: tuple[PluginLinkDefinition, ...]


@dataclass(frozen=True)
class RebuildSummary:
    """Counts of plugin links by what the rebuild did to them."""

    added: int = 0
    removed: int = 0
    updated: int = 0
    unchanged: int = 0
    relinked: tuple[str, ...] = ()
    promoted: tuple[str, ...] = ()


@dataclass(frozen=True)
class RebuildOutput:
    """Output from a rebuild."""

    summary: RebuildSummary | None
    errors: list[RebuildError] = field(default_factory=list)
    success: bool = True
