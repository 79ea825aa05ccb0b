"""
MenuLinkService - structural and attribute mutations of menu links.

Functional core (TreeIndex, parse_target) wrapped with registry I/O.

Key behaviors:
- Every structural write runs validate-then-commit under the menu lock(s)
- All writes of one operation are committed as a single RegistryChanges batch
- Plugin links are never deleted here; their edits land in an override record
- Content links with a pending revision cannot be moved or re-weighted
- Deleting a content link deletes its whole subtree
- Explicit weights are stored as given, never renormalized
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from pydantic import ValidationError

from src.domain.entities import (
    ContentOrigin,
    LinkOverride,
    MenuLink,
    PluginOrigin,
    RevisionState,
)
from src.ports.registry import MenuRegistryPort, RegistryChanges, RegistrySnapshot
from src.rules.models import MenuRules

from ._locks import MenuLocks
from ._target import TargetConfig, parse_target
from ._tree import TreeCycleError, TreeIndex
from .models import MenuLinkError, OverviewEntry, TreeItem
from .ports import RevisionStatePort, TargetResolverPort

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {"title", "description", "target", "weight", "enabled", "expanded", "parent_id", "menu_name"}
)
STRUCTURAL_FIELDS = ("parent_id", "weight", "menu_name")
# Attributes a plugin link override may carry
OVERRIDE_FIELDS = ("parent_id", "weight", "title", "description", "enabled", "expanded")

_LOCK_ATTEMPTS = 3

# --- Configuration ---


@dataclass(frozen=True)
class MenuTreeConfig:
    """Menu tree configuration from rules."""

    max_depth: int = 9
    title_min: int = 1
    title_max: int = 255
    description_max: int = 255
    allow_plugin_title: bool = True
    allow_plugin_description: bool = True
    target: TargetConfig = field(default_factory=TargetConfig)


DEFAULT_CONFIG = MenuTreeConfig()


def config_from_rules(rules: MenuRules) -> MenuTreeConfig:
    """Build tree config from the loaded rules file."""
    return MenuTreeConfig(
        max_depth=rules.menus.max_depth,
        title_min=rules.links.title.min,
        title_max=rules.links.title.max,
        description_max=rules.links.description_max,
        allow_plugin_title=rules.plugin_overrides.allow_title,
        allow_plugin_description=rules.plugin_overrides.allow_description,
        target=TargetConfig(
            allowed_external_schemes=tuple(rules.links.allowed_external_schemes),
            front_sentinels=tuple(rules.links.front_sentinels),
        ),
    )


def new_content_link_id() -> str:
    return f"menu_link_content:{uuid4()}"


# --- Validation Functions ---


def validate_link_data(
    title: str | None = None,
    description: str | None = None,
    config: MenuTreeConfig = DEFAULT_CONFIG,
) -> list[MenuLinkError]:
    """Validate link display data."""
    errors: list[MenuLinkError] = []

    for name, value in (("title", title), ("description", description)):
        if value is not None and not isinstance(value, str):
            errors.append(
                MenuLinkError(code="invalid_value", message=f"{name} must be text", field=name)
            )
    if errors:
        return errors

    if title is not None:
        stripped = title.strip()
        if len(stripped) < max(config.title_min, 1):
            errors.append(
                MenuLinkError(
                    code="title_required",
                    message="Menu link title is required",
                    field="title",
                )
            )
        elif len(stripped) > config.title_max:
            errors.append(
                MenuLinkError(
                    code="title_too_long",
                    message=f"Title must be {config.title_max} characters or less",
                    field="title",
                )
            )

    if description is not None and len(description) > config.description_max:
        errors.append(
            MenuLinkError(
                code="description_too_long",
                message=f"Description must be {config.description_max} characters or less",
                field="description",
            )
        )

    return errors


def _not_found(link_id: str) -> list[MenuLinkError]:
    return [MenuLinkError(code="not_found", message=f"Menu link {link_id} not found")]


def _invalid_values(e: ValidationError) -> list[MenuLinkError]:
    return [
        MenuLinkError(
            code="invalid_value",
            message=err["msg"],
            field=".".join(str(part) for part in err["loc"]),
        )
        for err in e.errors()
    ]


def _revised(
    link: MenuLink, values: dict[str, Any]
) -> tuple[MenuLink | None, list[MenuLinkError]]:
    """Return the link with values applied, validated like a freshly loaded link."""
    try:
        return MenuLink.model_validate({**link.model_dump(), **values}), []
    except ValidationError as e:
        return None, _invalid_values(e)


def override_changes(
    snapshot: RegistrySnapshot, link: MenuLink, changes: RegistryChanges
) -> None:
    """
    Record the override of a plugin link as the difference between its new
    effective attributes and its declared defaults.
    """
    origin = link.origin
    if not isinstance(origin, PluginOrigin):
        return

    defaults = origin.defaults
    override = snapshot.overrides.get(link.id) or LinkOverride(link_id=link.id)
    values: dict[str, Any] = {}
    for name in OVERRIDE_FIELDS:
        current = getattr(link, name)
        values[name] = None if current == getattr(defaults, name) else current
    values["parent_set"] = link.parent_id != defaults.parent_id
    override = override.model_copy(update=values)

    if override.is_empty():
        if link.id in snapshot.overrides:
            changes.delete_overrides.append(link.id)
    else:
        changes.save_overrides.append(override)


# --- Menu Link Service ---


class MenuLinkService:
    """
    Menu link service.

    Mutation operations over the link registry, validated by a TreeIndex.
    """

    def __init__(
        self,
        registry: MenuRegistryPort,
        resolver: TargetResolverPort | None = None,
        revisions: RevisionStatePort | None = None,
        locks: MenuLocks | None = None,
        config: MenuTreeConfig | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize service."""
        self._registry = registry
        self._resolver = resolver
        self._revisions = revisions
        self._locks = locks or MenuLocks()
        self._config = config or DEFAULT_CONFIG
        self._new_id = id_factory or new_content_link_id

    @property
    def locks(self) -> MenuLocks:
        return self._locks

    def max_depth(self) -> int:
        return self._config.max_depth

    # --- Helpers ---

    def is_pending(self, link: MenuLink) -> bool:
        if not isinstance(link.origin, ContentOrigin):
            return False
        if self._revisions is not None:
            return self._revisions.is_pending_revision(link.id)
        return link.origin.revision_state == "pending"

    def index(self, snapshot: RegistrySnapshot | None = None) -> TreeIndex:
        snapshot = snapshot or self._registry.snapshot()
        return TreeIndex(snapshot.links.values(), self._config.max_depth, self.is_pending)

    @contextmanager
    def _locked_snapshot(self, link_id: str, *extra_menus: str | None) -> Iterator[RegistrySnapshot]:
        """Lock the link's menu (plus extra_menus) and yield a fresh snapshot."""
        extras = [m for m in extra_menus if m]
        for _ in range(_LOCK_ATTEMPTS):
            current = self._registry.get(link_id)
            if current is None:
                yield self._registry.snapshot()
                return
            with self._locks.menus(current.menu_name, *extras):
                snapshot = self._registry.snapshot()
                held = snapshot.links.get(link_id)
                # A concurrent move may have taken it to a menu we do not hold
                if held is None or held.menu_name == current.menu_name:
                    yield snapshot
                    return
        raise RuntimeError(f"Link {link_id} kept changing menus while waiting for its lock")

    # --- Reads ---

    def get(self, link_id: str) -> MenuLink | None:
        """Get link by ID."""
        return self._registry.get(link_id)

    def count_links(self, menu_name: str | None = None) -> int:
        """Count links in one menu or the whole registry."""
        return self._registry.count(menu_name)

    def list_tree(
        self,
        menu_name: str,
        max_depth: int | None = None,
        expand_all: bool = False,
        active_trail: tuple[str, ...] = (),
        only_enabled: bool = False,
    ) -> tuple[list[TreeItem], list[MenuLinkError]]:
        """Ordered (link, depth) listing of a menu."""
        snapshot = self._registry.snapshot()
        if menu_name not in snapshot.menus:
            return [], [
                MenuLinkError(code="menu_not_found", message=f"Menu '{menu_name}' not found")
            ]
        items = self.index(snapshot).walk(
            menu_name,
            max_depth=max_depth,
            expand_all=expand_all,
            active_trail=active_trail,
            only_enabled=only_enabled,
        )
        return items, []

    def subtree(self, link_id: str) -> list[str]:
        return self.index().subtree(link_id)

    def depth(self, link_id: str) -> int | None:
        index = self.index()
        return index.depth(link_id) if link_id in index else None

    def parent_options(self, menu_name: str, link_id: str | None = None) -> list[TreeItem]:
        return self.index().parent_options(menu_name, link_id)

    def can_add_child(self, link_id: str) -> bool:
        return self.index().can_add_child(link_id)

    def pending_links(self, menu_name: str) -> list[MenuLink]:
        return self.index().pending_links(menu_name)

    # --- Mutations ---

    def create(
        self,
        menu_name: str,
        title: str,
        target: str,
        parent_id: str | None = None,
        weight: int = 0,
        description: str = "",
        enabled: bool = True,
        expanded: bool = False,
    ) -> tuple[MenuLink | None, list[MenuLinkError]]:
        """
        Create a new content link.

        Returns:
            Tuple of (link, errors). Link is None if validation fails.
        """
        errors = validate_link_data(title=title, description=description, config=self._config)
        parsed_target, target_errors = parse_target(target, self._resolver, self._config.target)
        errors.extend(target_errors)
        if errors:
            return None, errors

        with self._locks.menus(menu_name):
            snapshot = self._registry.snapshot()
            if menu_name not in snapshot.menus:
                return None, [
                    MenuLinkError(
                        code="menu_not_found",
                        message=f"Menu '{menu_name}' not found",
                        field="menu_name",
                    )
                ]

            link_id = self._new_id()
            if link_id in snapshot.links:
                return None, [
                    MenuLinkError(
                        code="id_collision",
                        message=f"Link id {link_id} is already in use",
                    )
                ]

            errors = self.index(snapshot).validate_move(None, parent_id or None, menu_name)
            if errors:
                logger.debug("Rejected new link in %s: %s", menu_name, [e.code for e in errors])
                return None, errors

            assert parsed_target is not None
            try:
                link = MenuLink(
                    id=link_id,
                    menu_name=menu_name,
                    parent_id=parent_id or None,
                    weight=weight,
                    title=title.strip(),
                    description=description,
                    target=parsed_target,
                    enabled=enabled,
                    expanded=expanded,
                    origin=ContentOrigin(),
                )
            except ValidationError as e:
                return None, _invalid_values(e)
            self._registry.commit(RegistryChanges(save_links=[link]))

        logger.info("Created link %s in %s under %s", link.id, menu_name, link.parent_id)
        return link, []

    def update(
        self,
        link_id: str,
        updates: dict[str, Any],
    ) -> tuple[MenuLink | None, list[MenuLinkError]]:
        """
        Update an existing link.

        parent_id=None in updates moves the link to the root of its menu.

        Returns:
            Tuple of (link, errors). Link is None if not found or validation fails.
        """
        unknown = sorted(set(updates) - UPDATABLE_FIELDS)
        if unknown:
            return None, [
                MenuLinkError(
                    code="unknown_field",
                    message=f"Cannot update field(s): {', '.join(unknown)}",
                )
            ]

        errors = validate_link_data(
            title=updates.get("title"),
            description=updates.get("description"),
            config=self._config,
        )
        if errors:
            return None, errors

        requested_menu = updates.get("menu_name")
        extra_menu = requested_menu if isinstance(requested_menu, str) else None
        with self._locked_snapshot(link_id, extra_menu) as snapshot:
            link = snapshot.links.get(link_id)
            if link is None:
                return None, _not_found(link_id)

            errors = self._check_protected(link, updates)
            if errors:
                return None, errors

            values: dict[str, Any] = {
                k: v for k, v in updates.items() if k not in ("target", "title")
            }
            if "title" in updates:
                values["title"] = updates["title"].strip()
            if "target" in updates:
                parsed_target, errors = parse_target(
                    updates["target"], self._resolver, self._config.target
                )
                if errors:
                    return None, errors
                values["target"] = parsed_target
            if "parent_id" in values:
                values["parent_id"] = values["parent_id"] or None

            updated, errors = _revised(link, values)
            if updated is None:
                return None, errors

            new_menu = updated.menu_name
            structural = [
                name for name in STRUCTURAL_FIELDS if getattr(updated, name) != getattr(link, name)
            ]

            if "menu_name" in structural and new_menu not in snapshot.menus:
                return None, [
                    MenuLinkError(
                        code="menu_not_found",
                        message=f"Menu '{new_menu}' not found",
                        field="menu_name",
                    )
                ]

            index = self.index(snapshot)
            if structural and self.is_pending(link):
                return None, [
                    MenuLinkError(
                        code="pending_revision_locked",
                        message=(
                            f"Link {link_id} has a pending revision; its position "
                            "cannot change until that revision is published"
                        ),
                        field=structural[0],
                    )
                ]
            if "parent_id" in structural or "menu_name" in structural:
                errors = index.validate_move(link.id, updated.parent_id, new_menu)
                if errors:
                    logger.debug("Rejected move of %s: %s", link_id, [e.code for e in errors])
                    return None, errors

            changes = RegistryChanges(save_links=[updated])
            if new_menu != link.menu_name:
                descendants = [snapshot.links[i] for i in index.subtree(link.id)]
                # A plugin link's menu is fixed by its declaration
                protected = [d.id for d in descendants if d.is_plugin]
                if protected:
                    return None, [
                        MenuLinkError(
                            code="cannot_modify_protected",
                            message=(
                                f"Link {link_id} has plugin links below it "
                                f"({', '.join(protected)}); move them first"
                            ),
                            field="menu_name",
                        )
                    ]
                # Children always follow the mover into its new menu
                for descendant in descendants:
                    changes.save_links.append(descendant.model_copy(update={"menu_name": new_menu}))
            override_changes(snapshot, updated, changes)
            self._registry.commit(changes)

        if structural:
            logger.info(
                "Moved link %s to %s under %s (weight %s)",
                link_id,
                updated.menu_name,
                updated.parent_id,
                updated.weight,
            )
        return updated, []

    def _check_protected(self, link: MenuLink, updates: dict[str, Any]) -> list[MenuLinkError]:
        if not link.is_plugin:
            return []
        blocked = []
        if "target" in updates:
            blocked.append("target")
        if "menu_name" in updates and updates["menu_name"] != link.menu_name:
            blocked.append("menu_name")
        if "title" in updates and not self._config.allow_plugin_title:
            blocked.append("title")
        if "description" in updates and not self._config.allow_plugin_description:
            blocked.append("description")
        return [
            MenuLinkError(
                code="cannot_modify_protected",
                message=f"The {name} of plugin link {link.id} is fixed by its declaration",
                field=name,
            )
            for name in blocked
        ]

    def move(
        self,
        link_id: str,
        parent_id: str | None,
        menu_name: str | None = None,
        weight: int | None = None,
    ) -> tuple[MenuLink | None, list[MenuLinkError]]:
        """Re-parent a link, optionally into another menu."""
        updates: dict[str, Any] = {"parent_id": parent_id}
        if menu_name is not None:
            updates["menu_name"] = menu_name
        if weight is not None:
            updates["weight"] = weight
        return self.update(link_id, updates)

    def toggle_enabled(
        self, link_id: str, enabled: bool
    ) -> tuple[MenuLink | None, list[MenuLinkError]]:
        """Enable or disable a link."""
        return self.update(link_id, {"enabled": enabled})

    def delete(self, link_id: str) -> tuple[bool, list[MenuLinkError]]:
        """
        Delete a content link and its whole subtree.

        Returns:
            Tuple of (success, errors).
        """
        with self._locked_snapshot(link_id) as snapshot:
            link = snapshot.links.get(link_id)
            if link is None:
                return False, _not_found(link_id)
            if link.is_plugin:
                return False, [
                    MenuLinkError(
                        code="cannot_delete_protected",
                        message=f"Plugin link {link_id} cannot be deleted; reset it instead",
                    )
                ]

            doomed = [link_id, *self.index(snapshot).subtree(link_id)]
            protected = [i for i in doomed if snapshot.links[i].is_plugin]
            if protected:
                return False, [
                    MenuLinkError(
                        code="cannot_delete_protected",
                        message=(
                            f"Link {link_id} has plugin links below it "
                            f"({', '.join(protected)}); move them first"
                        ),
                    )
                ]
            self._registry.commit(RegistryChanges(delete_links=doomed))

        logger.info("Deleted link %s with %d descendant(s)", link_id, len(doomed) - 1)
        return True, []

    def reset(self, link_id: str) -> tuple[MenuLink | None, list[MenuLinkError]]:
        """Drop the override of a plugin link, restoring its declared defaults."""
        with self._locked_snapshot(link_id) as snapshot:
            link = snapshot.links.get(link_id)
            if link is None:
                return None, _not_found(link_id)
            if not isinstance(link.origin, PluginOrigin):
                return None, [
                    MenuLinkError(
                        code="not_resettable",
                        message=f"Link {link_id} is a content link and has no defaults",
                    )
                ]

            defaults = link.origin.defaults
            if defaults.parent_id != link.parent_id:
                errors = self.index(snapshot).validate_move(
                    link.id, defaults.parent_id, link.menu_name
                )
                if errors:
                    return None, errors

            restored = link.model_copy(update=defaults.model_dump())
            changes = RegistryChanges(save_links=[restored])
            if link_id in snapshot.overrides:
                changes.delete_overrides.append(link_id)
            self._registry.commit(changes)

        logger.info("Reset link %s to its defaults", link_id)
        return restored, []

    def set_revision_state(
        self, link_id: str, revision_state: RevisionState
    ) -> tuple[MenuLink | None, list[MenuLinkError]]:
        """Record whether a content link's latest revision is pending."""
        with self._locked_snapshot(link_id) as snapshot:
            link = snapshot.links.get(link_id)
            if link is None:
                return None, _not_found(link_id)
            if not isinstance(link.origin, ContentOrigin):
                return None, [
                    MenuLinkError(
                        code="cannot_modify_protected",
                        message=f"Plugin link {link_id} has no revisions",
                        field="revision_state",
                    )
                ]
            updated, errors = _revised(
                link, {"origin": {"kind": "content", "revision_state": revision_state}}
            )
            if updated is None:
                return None, errors
            self._registry.commit(RegistryChanges(save_links=[updated]))
        return updated, []

    def apply_overview(
        self, menu_name: str, entries: list[OverviewEntry]
    ) -> tuple[list[MenuLink], list[MenuLinkError]]:
        """
        Save weight, parent and enabled for many links of one menu.

        All entries are validated against the resulting tree; nothing is
        written unless every entry is valid.
        """
        with self._locks.menus(menu_name):
            snapshot = self._registry.snapshot()
            errors: list[MenuLinkError] = []
            proposed = dict(snapshot.links)
            touched: list[str] = []
            reparented: set[str] = set()

            for entry in entries:
                link = snapshot.links.get(entry.link_id)
                if link is None or link.menu_name != menu_name:
                    errors.extend(_not_found(entry.link_id))
                    continue
                parent_id = entry.parent_id or None
                changed = (
                    parent_id != link.parent_id
                    or entry.weight != link.weight
                    or entry.enabled != link.enabled
                )
                # Overview rows of pending links are read-only, enabled included
                if changed and self.is_pending(link):
                    errors.append(
                        MenuLinkError(
                            code="pending_revision_locked",
                            message=f"Link {link.id} has a pending revision and cannot be changed here",
                            field="parent_id",
                        )
                    )
                    continue
                if parent_id != link.parent_id:
                    reparented.add(link.id)
                revised, invalid = _revised(
                    link, {"parent_id": parent_id, "weight": entry.weight, "enabled": entry.enabled}
                )
                if revised is None:
                    errors.extend(invalid)
                    continue
                proposed[link.id] = revised
                touched.append(link.id)

            if not errors:
                errors = self._validate_overview(menu_name, proposed, reparented)
            if errors:
                logger.debug("Rejected overview of %s: %s", menu_name, [e.code for e in errors])
                return [], errors

            changes = RegistryChanges()
            saved: list[MenuLink] = []
            for link_id in touched:
                if proposed[link_id] != snapshot.links[link_id]:
                    changes.save_links.append(proposed[link_id])
                    override_changes(snapshot, proposed[link_id], changes)
                saved.append(proposed[link_id])
            self._registry.commit(changes)

        logger.info("Saved overview of %s: %d link(s) changed", menu_name, len(changes.save_links))
        return saved, []

    def _validate_overview(
        self, menu_name: str, proposed: dict[str, MenuLink], reparented: set[str]
    ) -> list[MenuLinkError]:
        index = TreeIndex(proposed.values(), self._config.max_depth, self.is_pending)
        errors: list[MenuLinkError] = []
        for link_id in sorted(reparented):
            link = proposed[link_id]
            parent = proposed.get(link.parent_id) if link.parent_id else None
            if link.parent_id and parent is None:
                errors.append(
                    MenuLinkError(
                        code="parent_not_found",
                        message=f"Parent link {link.parent_id} not found",
                        field="parent_id",
                    )
                )
            elif parent is not None and parent.menu_name != menu_name:
                errors.append(
                    MenuLinkError(
                        code="cross_menu_parent_mismatch",
                        message=f"Parent link {parent.id} belongs to menu '{parent.menu_name}'",
                        field="parent_id",
                    )
                )
            elif parent is not None and self.is_pending(parent):
                errors.append(
                    MenuLinkError(
                        code="pending_revision_parent",
                        message=f"Link {parent.id} has a pending revision and cannot be a parent",
                        field="parent_id",
                    )
                )
        if errors:
            return errors

        for link in proposed.values():
            if link.menu_name != menu_name:
                continue
            try:
                depth = index.depth(link.id)
            except TreeCycleError as e:
                return [MenuLinkError(code="cycle_detected", message=str(e), field="parent_id")]
            if depth >= self._config.max_depth:
                errors.append(
                    MenuLinkError(
                        code="depth_exceeded",
                        message=(
                            f"Link {link.id} would exceed the maximum depth "
                            f"of {self._config.max_depth}"
                        ),
                        field="parent_id",
                    )
                )
        return errors
