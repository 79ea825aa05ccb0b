"""
In-memory menu registry.

Copy-on-write: every commit builds new dictionaries and swaps them in under a
lock, so readers holding a snapshot never observe a partially applied batch.
"""

from __future__ import annotations

from threading import Lock

from src.domain.entities import LinkOverride, Menu, MenuLink
from src.ports.registry import LinkNotFoundError, RegistryChanges, RegistrySnapshot


class InMemoryMenuRegistry:
    def __init__(self) -> None:
        self._lock = Lock()
        self._state = RegistrySnapshot(links={}, overrides={}, menus={})

    def get(self, link_id: str) -> MenuLink | None:
        link = self._state.links.get(link_id)
        return link.model_copy(deep=True) if link else None

    def list_by_menu(self, menu_name: str) -> list[MenuLink]:
        return [link.model_copy(deep=True) for link in self._state.links_in_menu(menu_name)]

    def list_by_parent(self, link_id: str) -> list[MenuLink]:
        return [
            link.model_copy(deep=True)
            for link in self._state.links.values()
            if link.parent_id == link_id
        ]

    def list_all(self) -> list[MenuLink]:
        return [link.model_copy(deep=True) for link in self._state.links.values()]

    def count(self, menu_name: str | None = None) -> int:
        if menu_name is None:
            return len(self._state.links)
        return len(self._state.links_in_menu(menu_name))

    def put(self, link: MenuLink) -> MenuLink:
        self.commit(RegistryChanges(save_links=[link]))
        return link

    def delete(self, link_id: str) -> None:
        with self._lock:
            if link_id not in self._state.links:
                raise LinkNotFoundError(link_id)
            self._apply(RegistryChanges(delete_links=[link_id]))

    def get_override(self, link_id: str) -> LinkOverride | None:
        override = self._state.overrides.get(link_id)
        return override.model_copy() if override else None

    def get_menu(self, menu_id: str) -> Menu | None:
        menu = self._state.menus.get(menu_id)
        return menu.model_copy() if menu else None

    def list_menus(self) -> list[Menu]:
        return [menu.model_copy() for menu in self._state.menus.values()]

    def snapshot(self) -> RegistrySnapshot:
        state = self._state
        return RegistrySnapshot(
            links={k: v.model_copy(deep=True) for k, v in state.links.items()},
            overrides={k: v.model_copy() for k, v in state.overrides.items()},
            menus={k: v.model_copy() for k, v in state.menus.items()},
        )

    def commit(self, changes: RegistryChanges) -> None:
        if changes.is_empty():
            return
        with self._lock:
            self._apply(changes)

    def _apply(self, changes: RegistryChanges) -> None:
        links = dict(self._state.links)
        overrides = dict(self._state.overrides)
        menus = dict(self._state.menus)

        for link_id in changes.delete_links:
            links.pop(link_id, None)
        for link in changes.save_links:
            links[link.id] = link.model_copy(deep=True)
        for link_id in changes.delete_overrides:
            overrides.pop(link_id, None)
        for override in changes.save_overrides:
            overrides[override.link_id] = override.model_copy()
        for menu_id in changes.delete_menus:
            menus.pop(menu_id, None)
        for menu in changes.save_menus:
            menus[menu.id] = menu.model_copy()

        self._state = RegistrySnapshot(links=links, overrides=overrides, menus=menus)
