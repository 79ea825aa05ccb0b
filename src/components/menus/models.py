"""
Menus component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.domain.entities import Menu

# --- Validation Errors ---


@dataclass(frozen=True)
class MenuError:
    """Menu validation error."""

    code: str
    message: str
    field: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class CreateMenuInput:
    """Input for creating a menu."""

    id: str
    label: str
    description: str = ""


@dataclass(frozen=True)
class UpdateMenuInput:
    """Input for renaming a menu. None leaves a field alone."""

    menu_id: str
    label: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class DeleteMenuInput:
    """Input for deleting a menu."""

    menu_id: str


@dataclass(frozen=True)
class GetMenuInput:
    """Input for getting a menu."""

    menu_id: str


@dataclass(frozen=True)
class ListMenusInput:
    """Input for listing menus. limit None uses the configured page size."""

    limit: int | None = None
    offset: int = 0


@dataclass(frozen=True)
class PendingSummaryInput:
    """Input for summarizing pending links of a menu."""

    menu_id: str


# --- Output Models ---


@dataclass(frozen=True)
class MenuOperationOutput:
    """Output from menu operation."""

    menu: Menu | None
    errors: list[MenuError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class MenuListOutput:
    """Output from list operation."""

    menus: list[Menu]
    total: int


@dataclass(frozen=True)
class PendingSummaryOutput:
    """Links of a menu that have pending revisions."""

    menu_id: str
    count: int
    link_ids: tuple[str, ...] = ()
    message: str = ""
    errors: list[MenuError] = field(default_factory=list)
    success: bool = True
