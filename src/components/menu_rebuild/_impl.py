"""
RebuildService - reconcile declared plugin links against the registry.

Key behaviors:
- Every declared link exists exactly once; defaults merged with its
  override, override winning where set
- Links whose declaration was withdrawn are deleted with their override
- Content links are never overwritten; a declared id that collides with
  one fails the whole rebuild
- A plugin link whose parent is unusable (absent from its menu, or pending
  a revision) is placed at the root
- Runs with the registry held exclusively; nothing is written unless the
  resulting tree is valid
- A second rebuild with the same declarations changes nothing
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field

from src.components.menu_tree import (
    MenuLocks,
    RevisionStatePort,
    TargetConfig,
    TreeCycleError,
    TreeIndex,
    parse_target,
)
from src.domain.entities import (
    ContentOrigin,
    LinkTarget,
    MenuLink,
    PluginLinkDefinition,
    PluginOrigin,
)
from src.ports.registry import MenuRegistryPort, RegistryChanges, RegistrySnapshot
from src.rules.models import MenuRules

from .models import RebuildError, RebuildSummary

logger = logging.getLogger(__name__)

# --- Configuration ---


@dataclass(frozen=True)
class RebuildConfig:
    """Rebuild configuration from rules."""

    max_depth: int = 9
    target: TargetConfig = field(default_factory=TargetConfig)


DEFAULT_CONFIG = RebuildConfig()


def config_from_rules(rules: MenuRules) -> RebuildConfig:
    return RebuildConfig(
        max_depth=rules.menus.max_depth,
        target=TargetConfig(
            allowed_external_schemes=tuple(rules.links.allowed_external_schemes),
            front_sentinels=tuple(rules.links.front_sentinels),
        ),
    )


# --- Validation Functions ---


def find_duplicates(definitions: list[PluginLinkDefinition]) -> list[RebuildError]:
    """Report every id declared more than once."""
    counts = Counter(d.id for d in definitions)
    return [
        RebuildError(
            code="duplicate_definition",
            message=f"Link {link_id} is declared {count} times",
            field=link_id,
        )
        for link_id, count in counts.items()
        if count > 1
    ]


def parse_definition_targets(
    definitions: list[PluginLinkDefinition],
    config: RebuildConfig = DEFAULT_CONFIG,
) -> tuple[dict[str, LinkTarget], list[RebuildError]]:
    """
    Parse declared targets. Declarations are not access-checked, so no
    resolver is consulted.
    """
    targets: dict[str, LinkTarget] = {}
    errors: list[RebuildError] = []
    for definition in definitions:
        target, target_errors = parse_target(definition.target, None, config.target)
        if target is None:
            errors.extend(
                RebuildError(code=e.code, message=e.message, field=definition.id)
                for e in target_errors
            )
        else:
            targets[definition.id] = target
    return targets, errors


# --- Rebuild Service ---


class RebuildService:
    """
    Rebuild service.

    Materializes declared plugin links into the registry.
    """

    def __init__(
        self,
        registry: MenuRegistryPort,
        locks: MenuLocks | None = None,
        config: RebuildConfig | None = None,
        revisions: RevisionStatePort | None = None,
    ) -> None:
        """Initialize service."""
        self._registry = registry
        self._locks = locks or MenuLocks()
        self._config = config or DEFAULT_CONFIG
        self._revisions = revisions

    def _is_pending(self, link: MenuLink) -> bool:
        if not isinstance(link.origin, ContentOrigin):
            return False
        if self._revisions is not None:
            return self._revisions.is_pending_revision(link.id)
        return link.origin.revision_state == "pending"

    def rebuild(
        self, definitions: list[PluginLinkDefinition]
    ) -> tuple[RebuildSummary | None, list[RebuildError]]:
        """
        Reconcile the registry with definitions.

        Returns:
            Tuple of (summary, errors). Summary is None if the rebuild failed,
            in which case nothing was written.
        """
        errors = find_duplicates(definitions)
        targets, target_errors = parse_definition_targets(definitions, self._config)
        errors.extend(target_errors)
        if errors:
            return None, errors

        with self._locks.exclusive():
            snapshot = self._registry.snapshot()
            errors = self._check_registry(snapshot, definitions)
            if errors:
                for error in errors:
                    logger.error("Rebuild aborted: %s", error.message)
                return None, errors

            declared = self._materialize(snapshot, definitions, targets)
            withdrawn = {
                link.id
                for link in snapshot.links.values()
                if link.is_plugin and link.id not in declared
            }
            proposed = {
                link_id: link
                for link_id, link in snapshot.links.items()
                if not link.is_plugin
            }
            proposed.update(declared)

            promoted = self._promote_orphans(declared, proposed)
            relinked = self._relink_content(snapshot, withdrawn, proposed)

            errors = self._validate_tree(proposed)
            if errors:
                for error in errors:
                    logger.error("Rebuild aborted: %s", error.message)
                return None, errors

            changes = RegistryChanges()
            added = updated = unchanged = 0
            for link_id, link in declared.items():
                existing = snapshot.links.get(link_id)
                if existing is None:
                    added += 1
                elif existing == link:
                    unchanged += 1
                    continue
                else:
                    updated += 1
                changes.save_links.append(link)
            changes.save_links.extend(proposed[link_id] for link_id in relinked)
            changes.delete_links.extend(sorted(withdrawn))
            changes.delete_overrides.extend(
                sorted(link_id for link_id in withdrawn if link_id in snapshot.overrides)
            )
            # Overrides left behind by links removed before they were tracked
            changes.delete_overrides.extend(
                sorted(
                    link_id
                    for link_id in snapshot.overrides
                    if link_id not in declared and link_id not in withdrawn
                )
            )

            if not changes.is_empty():
                self._registry.commit(changes)

        summary = RebuildSummary(
            added=added,
            removed=len(withdrawn),
            updated=updated,
            unchanged=unchanged,
            relinked=tuple(relinked),
            promoted=tuple(promoted),
        )
        logger.info(
            "Rebuilt menu links: %d added, %d removed, %d updated, %d unchanged",
            summary.added,
            summary.removed,
            summary.updated,
            summary.unchanged,
        )
        return summary, []

    def _check_registry(
        self, snapshot: RegistrySnapshot, definitions: list[PluginLinkDefinition]
    ) -> list[RebuildError]:
        errors: list[RebuildError] = []
        for definition in definitions:
            existing = snapshot.links.get(definition.id)
            if existing is not None and not existing.is_plugin:
                errors.append(
                    RebuildError(
                        code="id_collision",
                        message=(
                            f"Declared link {definition.id} collides with an existing "
                            "content link"
                        ),
                        field=definition.id,
                    )
                )
            if definition.menu_name not in snapshot.menus:
                errors.append(
                    RebuildError(
                        code="menu_not_found",
                        message=(
                            f"Declared link {definition.id} belongs to unknown menu "
                            f"'{definition.menu_name}'"
                        ),
                        field=definition.id,
                    )
                )
        return errors

    def _materialize(
        self,
        snapshot: RegistrySnapshot,
        definitions: list[PluginLinkDefinition],
        targets: dict[str, LinkTarget],
    ) -> dict[str, MenuLink]:
        """Effective plugin links: declared defaults with overrides applied."""
        declared: dict[str, MenuLink] = {}
        for definition in definitions:
            defaults = definition.defaults()
            override = snapshot.overrides.get(definition.id)
            attributes = override.apply(defaults) if override else defaults.model_dump()
            declared[definition.id] = MenuLink(
                id=definition.id,
                menu_name=definition.menu_name,
                target=targets[definition.id],
                origin=PluginOrigin(provider=definition.provider, defaults=defaults),
                **attributes,
            )
        return declared

    def _promote_orphans(
        self, declared: dict[str, MenuLink], proposed: dict[str, MenuLink]
    ) -> list[str]:
        """
        Move plugin links to the root when their parent is absent from their
        menu or is a content link pending a revision.
        """
        promoted: list[str] = []
        for link_id, link in declared.items():
            if not link.parent_id:
                continue
            parent = proposed.get(link.parent_id)
            if parent is None or parent.menu_name != link.menu_name:
                logger.warning(
                    "Parent %s of declared link %s is not in menu %s; placing it at the root",
                    link.parent_id,
                    link_id,
                    link.menu_name,
                )
            elif self._is_pending(parent):
                logger.warning(
                    "Parent %s of declared link %s has a pending revision; placing it at the root",
                    link.parent_id,
                    link_id,
                )
            else:
                continue
            proposed[link_id] = declared[link_id] = link.model_copy(update={"parent_id": None})
            promoted.append(link_id)
        return promoted

    def _relink_content(
        self,
        snapshot: RegistrySnapshot,
        withdrawn: set[str],
        proposed: dict[str, MenuLink],
    ) -> list[str]:
        """Re-attach content links whose parent is withdrawn or now declared elsewhere."""
        relinked: list[str] = []
        for link_id, link in sorted(proposed.items()):
            if link.is_plugin or not link.parent_id:
                continue
            current = proposed.get(link.parent_id)
            moved_away = current is not None and current.menu_name != link.menu_name
            if link.parent_id not in withdrawn and not moved_away:
                continue
            # Climb past withdrawn ancestors to the nearest surviving one
            parent_id: str | None = link.parent_id
            seen: set[str] = set()
            while parent_id in withdrawn and parent_id not in seen:
                seen.add(parent_id)
                parent_id = snapshot.links[parent_id].parent_id
            parent = proposed.get(parent_id) if parent_id else None
            if parent is None or parent.menu_name != link.menu_name:
                parent_id = None
            proposed[link_id] = link.model_copy(update={"parent_id": parent_id})
            relinked.append(link_id)
            logger.info("Re-attached content link %s under %s", link_id, parent_id)
        return relinked

    def _validate_tree(self, proposed: dict[str, MenuLink]) -> list[RebuildError]:
        index = TreeIndex(proposed.values(), self._config.max_depth, self._is_pending)
        errors: list[RebuildError] = []
        for link_id in sorted(proposed):
            try:
                depth = index.depth(link_id)
            except TreeCycleError as e:
                return [RebuildError(code="cycle_detected", message=str(e), field=link_id)]
            if depth >= self._config.max_depth:
                errors.append(
                    RebuildError(
                        code="depth_exceeded",
                        message=(
                            f"Link {link_id} would sit at depth {depth}, beyond the "
                            f"maximum of {self._config.max_depth} levels"
                        ),
                        field=link_id,
                    )
                )
        return errors
