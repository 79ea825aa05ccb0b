"""
Menu tree component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from src.domain.entities import MenuLink, RevisionState

# --- Validation Errors ---


@dataclass(frozen=True)
class MenuLinkError:
    """Menu link validation error."""

    code: str
    message: str
    field: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class CreateLinkInput:
    """Input for creating a content link."""

    menu_name: str
    title: str
    target: str
    parent_id: str | None = None
    weight: int = 0
    description: str = ""
    enabled: bool = True
    expanded: bool = False


@dataclass(frozen=True)
class UpdateLinkInput:
    """Input for updating a link. Keys absent from updates are left alone."""

    link_id: str
    updates: dict[str, Any]


@dataclass(frozen=True)
class MoveLinkInput:
    """Input for re-parenting a link (optionally into another menu)."""

    link_id: str
    parent_id: str | None
    menu_name: str | None = None
    weight: int | None = None


@dataclass(frozen=True)
class DeleteLinkInput:
    """Input for deleting a link."""

    link_id: str


@dataclass(frozen=True)
class ToggleLinkInput:
    """Input for enabling or disabling a link."""

    link_id: str
    enabled: bool


@dataclass(frozen=True)
class ResetLinkInput:
    """Input for resetting a plugin link to its declared defaults."""

    link_id: str


@dataclass(frozen=True)
class SetRevisionStateInput:
    """Input recording the revision state of a content link."""

    link_id: str
    revision_state: RevisionState


@dataclass(frozen=True)
class GetLinkInput:
    """Input for getting a link."""

    link_id: str


@dataclass(frozen=True)
class ListTreeInput:
    """Input for materializing a menu tree."""

    menu_name: str
    max_depth: int | None = None
    expand_all: bool = False
    active_trail: tuple[str, ...] = ()
    only_enabled: bool = False


@dataclass(frozen=True)
class CountLinksInput:
    """Input for counting links; menu_name None counts the whole registry."""

    menu_name: str | None = None


@dataclass(frozen=True)
class ParentOptionsInput:
    """Input for listing legal parents in a menu."""

    menu_name: str
    link_id: str | None = None


@dataclass(frozen=True)
class OverviewEntry:
    """One row of a menu overview save."""

    link_id: str
    weight: int
    parent_id: str | None
    enabled: bool


@dataclass(frozen=True)
class ApplyOverviewInput:
    """Input for saving many rows of one menu at once."""

    menu_name: str
    entries: tuple[OverviewEntry, ...]


# --- Output Models ---


@dataclass(frozen=True)
class TreeItem:
    """A link and its depth (number of ancestors; roots are 0)."""

    link: MenuLink
    depth: int


@dataclass(frozen=True)
class LinkOperationOutput:
    """Output from link operation."""

    link: MenuLink | None
    errors: list[MenuLinkError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class TreeOutput:
    """Output from tree listing."""

    items: tuple[TreeItem, ...]
    total: int
    errors: list[MenuLinkError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class CountOutput:
    """Output from count operation."""

    count: int


@dataclass(frozen=True)
class OverviewOutput:
    """Output from overview save."""

    links: tuple[MenuLink, ...]
    errors: list[MenuLinkError] = field(default_factory=list)
    success: bool = True
