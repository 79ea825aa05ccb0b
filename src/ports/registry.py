"""
Link Registry port.

Canonical store of menu links, plugin link overrides and menus, keyed by id.
Implementations: SQLite (durable) and in-memory (tests, dev).

Invariants:
- Link ids are unique across the whole registry, regardless of menu
- All reads of one snapshot see the same committed state
- A RegistryChanges batch is committed atomically or not at all
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from src.domain.entities import LinkOverride, Menu, MenuLink


class LinkNotFoundError(KeyError):
    """Raised when deleting a link id that is not in the registry."""

    def __init__(self, link_id: str) -> None:
        self.link_id = link_id
        super().__init__(link_id)


@dataclass(frozen=True)
class RegistrySnapshot:
    """Point-in-time view of the registry."""

    links: dict[str, MenuLink]
    overrides: dict[str, LinkOverride]
    menus: dict[str, Menu]

    def links_in_menu(self, menu_name: str) -> list[MenuLink]:
        return [link for link in self.links.values() if link.menu_name == menu_name]


@dataclass
class RegistryChanges:
    """A unit of writes committed together."""

    save_links: list[MenuLink] = field(default_factory=list)
    delete_links: list[str] = field(default_factory=list)
    save_overrides: list[LinkOverride] = field(default_factory=list)
    delete_overrides: list[str] = field(default_factory=list)
    save_menus: list[Menu] = field(default_factory=list)
    delete_menus: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.save_links
            or self.delete_links
            or self.save_overrides
            or self.delete_overrides
            or self.save_menus
            or self.delete_menus
        )


class MenuRegistryPort(Protocol):
    """Repository interface for menus, links and overrides."""

    def get(self, link_id: str) -> MenuLink | None:
        """Get link by ID."""
        ...

    def list_by_menu(self, menu_name: str) -> list[MenuLink]:
        """List links of one menu."""
        ...

    def list_by_parent(self, link_id: str) -> list[MenuLink]:
        """List direct children of a link."""
        ...

    def list_all(self) -> list[MenuLink]:
        """List every link."""
        ...

    def count(self, menu_name: str | None = None) -> int:
        """Count links, optionally restricted to one menu."""
        ...

    def put(self, link: MenuLink) -> MenuLink:
        """Upsert a link. Does not check tree invariants."""
        ...

    def delete(self, link_id: str) -> None:
        """Delete link. Raises LinkNotFoundError if absent."""
        ...

    def get_override(self, link_id: str) -> LinkOverride | None:
        """Get the override record of a plugin link."""
        ...

    def get_menu(self, menu_id: str) -> Menu | None:
        """Get menu by ID."""
        ...

    def list_menus(self) -> list[Menu]:
        """List all menus."""
        ...

    def snapshot(self) -> RegistrySnapshot:
        """Consistent view of links, overrides and menus."""
        ...

    def commit(self, changes: RegistryChanges) -> None:
        """Apply a batch of writes atomically."""
        ...
