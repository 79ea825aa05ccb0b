"""
Menu tree component - Link placement and structural mutations.

Shell Layer - handles I/O and error conversion.
"""

from __future__ import annotations

from ._impl import MenuLinkService
from .models import (
    ApplyOverviewInput,
    CountLinksInput,
    CountOutput,
    CreateLinkInput,
    DeleteLinkInput,
    GetLinkInput,
    LinkOperationOutput,
    ListTreeInput,
    MenuLinkError,
    MoveLinkInput,
    OverviewOutput,
    ParentOptionsInput,
    ResetLinkInput,
    SetRevisionStateInput,
    ToggleLinkInput,
    TreeOutput,
    UpdateLinkInput,
)


def _link_output(link, errors: list[MenuLinkError]) -> LinkOperationOutput:
    return LinkOperationOutput(link=link, errors=errors, success=link is not None)


def run_create(input_data: CreateLinkInput, service: MenuLinkService) -> LinkOperationOutput:
    """Create a new content link."""
    link, errors = service.create(
        menu_name=input_data.menu_name,
        title=input_data.title,
        target=input_data.target,
        parent_id=input_data.parent_id,
        weight=input_data.weight,
        description=input_data.description,
        enabled=input_data.enabled,
        expanded=input_data.expanded,
    )
    return _link_output(link, errors)


def run_update(input_data: UpdateLinkInput, service: MenuLinkService) -> LinkOperationOutput:
    """Update an existing link."""
    link, errors = service.update(input_data.link_id, dict(input_data.updates))
    return _link_output(link, errors)


def run_move(input_data: MoveLinkInput, service: MenuLinkService) -> LinkOperationOutput:
    """Re-parent a link."""
    link, errors = service.move(
        input_data.link_id,
        input_data.parent_id,
        menu_name=input_data.menu_name,
        weight=input_data.weight,
    )
    return _link_output(link, errors)


def run_delete(input_data: DeleteLinkInput, service: MenuLinkService) -> LinkOperationOutput:
    """Delete a content link and its subtree."""
    success, errors = service.delete(input_data.link_id)
    return LinkOperationOutput(link=None, errors=errors, success=success)


def run_toggle(input_data: ToggleLinkInput, service: MenuLinkService) -> LinkOperationOutput:
    """Enable or disable a link."""
    link, errors = service.toggle_enabled(input_data.link_id, input_data.enabled)
    return _link_output(link, errors)


def run_reset(input_data: ResetLinkInput, service: MenuLinkService) -> LinkOperationOutput:
    """Reset a plugin link to its declared defaults."""
    link, errors = service.reset(input_data.link_id)
    return _link_output(link, errors)


def run_set_revision_state(
    input_data: SetRevisionStateInput, service: MenuLinkService
) -> LinkOperationOutput:
    link, errors = service.set_revision_state(input_data.link_id, input_data.revision_state)
    return _link_output(link, errors)


def run_get(input_data: GetLinkInput, service: MenuLinkService) -> LinkOperationOutput:
    """Get a link by ID."""
    link = service.get(input_data.link_id)

    if link is None:
        return LinkOperationOutput(
            link=None,
            errors=[
                MenuLinkError(
                    code="not_found",
                    message=f"Menu link {input_data.link_id} not found",
                )
            ],
            success=False,
        )

    return LinkOperationOutput(link=link, errors=[], success=True)


def run_list_tree(input_data: ListTreeInput, service: MenuLinkService) -> TreeOutput:
    """Materialize a menu as an ordered (link, depth) listing."""
    items, errors = service.list_tree(
        input_data.menu_name,
        max_depth=input_data.max_depth,
        expand_all=input_data.expand_all,
        active_trail=input_data.active_trail,
        only_enabled=input_data.only_enabled,
    )
    return TreeOutput(items=tuple(items), total=len(items), errors=errors, success=not errors)


def run_count(input_data: CountLinksInput, service: MenuLinkService) -> CountOutput:
    """Count links in a menu, or in the whole registry."""
    return CountOutput(count=service.count_links(input_data.menu_name))


def run_parent_options(input_data: ParentOptionsInput, service: MenuLinkService) -> TreeOutput:
    """List the links that may parent a new or existing link."""
    items = service.parent_options(input_data.menu_name, input_data.link_id)
    return TreeOutput(items=tuple(items), total=len(items))


def run_apply_overview(input_data: ApplyOverviewInput, service: MenuLinkService) -> OverviewOutput:
    """Save weight, parent and enabled for many links of one menu."""
    links, errors = service.apply_overview(input_data.menu_name, list(input_data.entries))
    return OverviewOutput(links=tuple(links), errors=errors, success=not errors)


def run(
    inp: (
        CreateLinkInput
        | UpdateLinkInput
        | MoveLinkInput
        | DeleteLinkInput
        | ToggleLinkInput
        | ResetLinkInput
        | SetRevisionStateInput
        | GetLinkInput
        | ListTreeInput
        | CountLinksInput
        | ParentOptionsInput
        | ApplyOverviewInput
    ),
    *,
    service: MenuLinkService,
) -> LinkOperationOutput | TreeOutput | CountOutput | OverviewOutput:
    """
    Main entry point for the menu tree component.

    Dispatches to appropriate handler based on input type.

    Args:
        inp: Input object determining the operation.
        service: Configured menu link service.

    Returns:
        Appropriate output object based on input type.
    """
    if isinstance(inp, CreateLinkInput):
        return run_create(inp, service)
    elif isinstance(inp, UpdateLinkInput):
        return run_update(inp, service)
    elif isinstance(inp, MoveLinkInput):
        return run_move(inp, service)
    elif isinstance(inp, DeleteLinkInput):
        return run_delete(inp, service)
    elif isinstance(inp, ToggleLinkInput):
        return run_toggle(inp, service)
    elif isinstance(inp, ResetLinkInput):
        return run_reset(inp, service)
    elif isinstance(inp, SetRevisionStateInput):
        return run_set_revision_state(inp, service)
    elif isinstance(inp, GetLinkInput):
        return run_get(inp, service)
    elif isinstance(inp, ListTreeInput):
        return run_list_tree(inp, service)
    elif isinstance(inp, CountLinksInput):
        return run_count(inp, service)
    elif isinstance(inp, ParentOptionsInput):
        return run_parent_options(inp, service)
    elif isinstance(inp, ApplyOverviewInput):
        return run_apply_overview(inp, service)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
