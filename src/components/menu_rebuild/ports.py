"""
Menu rebuild component - Port interfaces.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.entities import PluginLinkDefinition
from src.ports.registry import MenuRegistryPort


class DefinitionSourcePort(Protocol):
    """Feed of plugin link declarations registered by modules."""

    def load(self) -> list[PluginLinkDefinition]:
        """Return every declared plugin link."""
        ...


__all__ = [
    "DefinitionSourcePort",
    "MenuRegistryPort",
]
