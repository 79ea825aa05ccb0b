"""
Menus component - Menu container management.

Shell Layer - handles I/O and error conversion.
"""

from __future__ import annotations

from ._impl import MenuService
from .models import (
    CreateMenuInput,
    DeleteMenuInput,
    GetMenuInput,
    ListMenusInput,
    MenuError,
    MenuListOutput,
    MenuOperationOutput,
    PendingSummaryInput,
    PendingSummaryOutput,
    UpdateMenuInput,
)


def run_create(input_data: CreateMenuInput, service: MenuService) -> MenuOperationOutput:
    """Create a custom menu."""
    menu, errors = service.create(
        input_data.id,
        input_data.label,
        description=input_data.description,
    )
    return MenuOperationOutput(menu=menu, errors=errors, success=menu is not None)


def run_update(input_data: UpdateMenuInput, service: MenuService) -> MenuOperationOutput:
    """Rename a menu."""
    menu, errors = service.update(
        input_data.menu_id,
        label=input_data.label,
        description=input_data.description,
    )
    return MenuOperationOutput(menu=menu, errors=errors, success=menu is not None)


def run_delete(input_data: DeleteMenuInput, service: MenuService) -> MenuOperationOutput:
    """Delete a custom menu and its content links."""
    success, errors = service.delete(input_data.menu_id)
    return MenuOperationOutput(menu=None, errors=errors, success=success)


def run_get(input_data: GetMenuInput, service: MenuService) -> MenuOperationOutput:
    """Get a menu by ID."""
    menu = service.get(input_data.menu_id)

    if menu is None:
        return MenuOperationOutput(
            menu=None,
            errors=[
                MenuError(
                    code="menu_not_found",
                    message=f"Menu '{input_data.menu_id}' not found",
                )
            ],
            success=False,
        )

    return MenuOperationOutput(menu=menu, errors=[], success=True)


def run_list(input_data: ListMenusInput, service: MenuService) -> MenuListOutput:
    """List menus alphabetically by label."""
    menus, total = service.list_menus(limit=input_data.limit, offset=input_data.offset)
    return MenuListOutput(menus=menus, total=total)


def run_pending_summary(
    input_data: PendingSummaryInput, service: MenuService
) -> PendingSummaryOutput:
    """Report links of a menu that have pending revisions."""
    links, errors = service.pending_links(input_data.menu_id)
    if errors:
        return PendingSummaryOutput(
            menu_id=input_data.menu_id, count=0, errors=errors, success=False
        )

    return PendingSummaryOutput(
        menu_id=input_data.menu_id,
        count=len(links),
        link_ids=tuple(link.id for link in links),
        message=service.pending_message(input_data.menu_id, len(links)),
    )


def run(
    inp: (
        CreateMenuInput
        | UpdateMenuInput
        | DeleteMenuInput
        | GetMenuInput
        | ListMenusInput
        | PendingSummaryInput
    ),
    *,
    service: MenuService,
) -> MenuOperationOutput | MenuListOutput | PendingSummaryOutput:
    """
    Main entry point for the menus component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, CreateMenuInput):
        return run_create(inp, service)
    elif isinstance(inp, UpdateMenuInput):
        return run_update(inp, service)
    elif isinstance(inp, DeleteMenuInput):
        return run_delete(inp, service)
    elif isinstance(inp, GetMenuInput):
        return run_get(inp, service)
    elif isinstance(inp, ListMenusInput):
        return run_list(inp, service)
    elif isinstance(inp, PendingSummaryInput):
        return run_pending_summary(inp, service)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
