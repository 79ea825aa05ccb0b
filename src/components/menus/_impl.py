"""
MenuService - menu container CRUD.

Key behaviors:
- Menu ids are machine names, unique, length-limited by rules
- System menus come from rules and cannot be deleted
- Deleting a custom menu deletes every content link in it, atomically
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from src.components.menu_tree import MenuLocks, RevisionStatePort
from src.domain.entities import Menu, MenuLink
from src.ports.registry import MenuRegistryPort, RegistryChanges
from src.rules.models import MenuRules

from .models import MenuError

logger = logging.getLogger(__name__)

# --- Configuration ---


@dataclass(frozen=True)
class MenuConfig:
    """Menu configuration from rules."""

    max_id_length: int = 32
    id_pattern: str = r"^[a-z0-9_-]+$"
    page_size: int = 50
    system_menus: tuple[Menu, ...] = field(default_factory=tuple)


DEFAULT_CONFIG = MenuConfig()


def config_from_rules(rules: MenuRules) -> MenuConfig:
    return MenuConfig(
        max_id_length=rules.menus.max_id_length,
        id_pattern=rules.menus.id_pattern,
        page_size=rules.listing.page_size,
        system_menus=tuple(
            Menu(id=m.id, label=m.label, description=m.description, locked=True)
            for m in rules.menus.system_menus
        ),
    )


# --- Validation Functions ---


def validate_menu_id(menu_id: str, config: MenuConfig = DEFAULT_CONFIG) -> list[MenuError]:
    """Validate a menu machine name."""
    if not menu_id:
        return [MenuError(code="menu_id_required", message="Menu name is required", field="id")]

    if len(menu_id) > config.max_id_length:
        return [
            MenuError(
                code="menu_id_too_long",
                message=(
                    f"Menu name cannot be longer than {config.max_id_length} characters "
                    f"but is currently {len(menu_id)} characters long."
                ),
                field="id",
            )
        ]

    if not re.match(config.id_pattern, menu_id):
        return [
            MenuError(
                code="menu_id_invalid",
                message=(
                    "The machine-readable name must contain only lowercase letters, "
                    "numbers, underscores and hyphens."
                ),
                field="id",
            )
        ]

    return []


def validate_label(label: str | None) -> list[MenuError]:
    if label is not None and not label.strip():
        return [MenuError(code="label_required", message="Menu title is required", field="label")]
    return []


# --- Menu Service ---


class MenuService:
    """
    Menu service.

    Handles menu CRUD and the cascade of menu deletion to its links.
    """

    def __init__(
        self,
        registry: MenuRegistryPort,
        locks: MenuLocks | None = None,
        revisions: RevisionStatePort | None = None,
        config: MenuConfig | None = None,
    ) -> None:
        """Initialize service."""
        self._registry = registry
        self._locks = locks or MenuLocks()
        self._revisions = revisions
        self._config = config or DEFAULT_CONFIG

    def _is_pending(self, link: MenuLink) -> bool:
        if link.is_plugin:
            return False
        if self._revisions is not None:
            return self._revisions.is_pending_revision(link.id)
        return link.is_pending

    def get(self, menu_id: str) -> Menu | None:
        """Get menu by ID."""
        return self._registry.get_menu(menu_id)

    def list_menus(self, limit: int | None = None, offset: int = 0) -> tuple[list[Menu], int]:
        """
        List menus alphabetically by label.

        Returns:
            Tuple of (page of menus, total number of menus).
        """
        menus = sorted(self._registry.list_menus(), key=lambda m: (m.label.lower(), m.id))
        limit = self._config.page_size if limit is None else limit
        return menus[offset : offset + limit], len(menus)

    def create(
        self,
        menu_id: str,
        label: str,
        description: str = "",
    ) -> tuple[Menu | None, list[MenuError]]:
        """
        Create a custom menu.

        Returns:
            Tuple of (menu, errors). Menu is None if validation fails.
        """
        errors = validate_menu_id(menu_id, self._config)
        errors.extend(validate_label(label))
        if errors:
            return None, errors

        with self._locks.menus(menu_id):
            if self._registry.get_menu(menu_id) is not None:
                return None, [
                    MenuError(
                        code="menu_exists",
                        message=f"The machine-readable name '{menu_id}' is already in use.",
                        field="id",
                    )
                ]
            menu = Menu(id=menu_id, label=label.strip(), description=description)
            self._registry.commit(RegistryChanges(save_menus=[menu]))

        logger.info("Created menu %s", menu_id)
        return menu, []

    def update(
        self,
        menu_id: str,
        label: str | None = None,
        description: str | None = None,
    ) -> tuple[Menu | None, list[MenuError]]:
        """Rename a menu or change its description."""
        errors = validate_label(label)
        if errors:
            return None, errors

        with self._locks.menus(menu_id):
            menu = self._registry.get_menu(menu_id)
            if menu is None:
                return None, [
                    MenuError(code="menu_not_found", message=f"Menu '{menu_id}' not found")
                ]

            updates: dict[str, str] = {}
            if label is not None:
                updates["label"] = label.strip()
            if description is not None:
                updates["description"] = description
            menu = menu.model_copy(update=updates)
            self._registry.commit(RegistryChanges(save_menus=[menu]))

        return menu, []

    def delete(self, menu_id: str) -> tuple[bool, list[MenuError]]:
        """
        Delete a custom menu and every content link in it.

        Returns:
            Tuple of (success, errors).
        """
        with self._locks.menus(menu_id):
            snapshot = self._registry.snapshot()
            menu = snapshot.menus.get(menu_id)
            if menu is None:
                return False, [
                    MenuError(code="menu_not_found", message=f"Menu '{menu_id}' not found")
                ]
            if menu.locked:
                return False, [
                    MenuError(
                        code="cannot_delete_protected",
                        message=f"System menu '{menu_id}' cannot be deleted",
                    )
                ]

            links = snapshot.links_in_menu(menu_id)
            plugin_links = [link.id for link in links if link.is_plugin]
            if plugin_links:
                return False, [
                    MenuError(
                        code="menu_has_plugin_links",
                        message=(
                            f"Menu '{menu_id}' holds links declared by modules "
                            f"({', '.join(sorted(plugin_links))})"
                        ),
                    )
                ]

            self._registry.commit(
                RegistryChanges(
                    delete_links=[link.id for link in links],
                    delete_menus=[menu_id],
                )
            )

        logger.info("Deleted menu %s with %d link(s)", menu_id, len(links))
        return True, []

    def ensure_system_menus(self) -> list[Menu]:
        """Create any configured system menu that is missing. Returns those created."""
        created: list[Menu] = []
        with self._locks.menus(*(m.id for m in self._config.system_menus)):
            existing = self._registry.snapshot().menus
            for menu in self._config.system_menus:
                current = existing.get(menu.id)
                if current is None:
                    created.append(menu)
                elif not current.locked:
                    created.append(current.model_copy(update={"locked": True}))
            if created:
                self._registry.commit(RegistryChanges(save_menus=created))

        for menu in created:
            logger.info("Installed system menu %s", menu.id)
        return created

    def pending_links(self, menu_id: str) -> tuple[list[MenuLink], list[MenuError]]:
        menu = self._registry.get_menu(menu_id)
        if menu is None:
            return [], [MenuError(code="menu_not_found", message=f"Menu '{menu_id}' not found")]
        links = [link for link in self._registry.list_by_menu(menu_id) if self._is_pending(link)]
        return sorted(links, key=lambda link: link.id), []

    def pending_message(self, menu_id: str, count: int) -> str:
        if not count:
            return ""
        menu = self._registry.get_menu(menu_id)
        label = menu.label if menu else menu_id
        noun = "menu link" if count == 1 else "menu links"
        return (
            f"{label} contains {count} {noun} with pending revisions. "
            "Manipulation of a menu tree having links with pending revisions is not "
            "supported, but you can re-enable manipulation by getting each menu link "
            "to a published state."
        )
