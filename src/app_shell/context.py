from __future__ import annotations

from dataclasses import dataclass

from src.adapters.memory_registry import InMemoryMenuRegistry
from src.adapters.sqlite.menu_registry import SQLiteMenuRegistry
from src.components import menu_rebuild, menu_tree, menus
from src.components.menu_rebuild import RebuildService
from src.components.menu_tree import (
    MenuLinkService,
    MenuLocks,
    RevisionStatePort,
    TargetResolverPort,
)
from src.components.menus import MenuService
from src.ports.registry import MenuRegistryPort
from src.rules.models import MenuRules


@dataclass
class MenuServiceContext:
    registry: MenuRegistryPort
    locks: MenuLocks
    links: MenuLinkService
    menus: MenuService
    rebuild: RebuildService
    rules: MenuRules

    @classmethod
    def create(
        cls,
        db_path: str,
        rules: MenuRules,
        resolver: TargetResolverPort | None = None,
        revisions: RevisionStatePort | None = None,
    ) -> MenuServiceContext:
        return cls.from_registry(SQLiteMenuRegistry(db_path), rules, resolver, revisions)

    @classmethod
    def in_memory(
        cls,
        rules: MenuRules,
        resolver: TargetResolverPort | None = None,
        revisions: RevisionStatePort | None = None,
    ) -> MenuServiceContext:
        return cls.from_registry(InMemoryMenuRegistry(), rules, resolver, revisions)

    @classmethod
    def from_registry(
        cls,
        registry: MenuRegistryPort,
        rules: MenuRules,
        resolver: TargetResolverPort | None = None,
        revisions: RevisionStatePort | None = None,
    ) -> MenuServiceContext:
        # One lock set per registry: rebuild must exclude every mutation on it
        locks = MenuLocks()
        return cls(
            registry=registry,
            locks=locks,
            links=MenuLinkService(
                registry,
                resolver=resolver,
                revisions=revisions,
                locks=locks,
                config=menu_tree.config_from_rules(rules),
            ),
            menus=MenuService(
                registry,
                locks=locks,
                revisions=revisions,
                config=menus.config_from_rules(rules),
            ),
            rebuild=RebuildService(
                registry,
                locks=locks,
                config=menu_rebuild.config_from_rules(rules),
                revisions=revisions,
            ),
            rules=rules,
        )
