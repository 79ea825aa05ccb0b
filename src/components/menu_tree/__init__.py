"""
Menu tree component - Link placement, tree index and structural mutations.
"""

from ._impl import (
    DEFAULT_CONFIG,
    MenuLinkService,
    MenuTreeConfig,
    config_from_rules,
    new_content_link_id,
    validate_link_data,
)
from ._locks import MenuLocks
from ._target import TargetConfig, parse_target
from ._tree import TreeCycleError, TreeIndex
from .component import (
    run,
    run_apply_overview,
    run_count,
    run_create,
    run_delete,
    run_get,
    run_list_tree,
    run_move,
    run_parent_options,
    run_reset,
    run_set_revision_state,
    run_toggle,
    run_update,
)
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
    OverviewEntry,
    OverviewOutput,
    ParentOptionsInput,
    ResetLinkInput,
    SetRevisionStateInput,
    ToggleLinkInput,
    TreeItem,
    TreeOutput,
    UpdateLinkInput,
)
from .ports import (
    MenuRegistryPort,
    RevisionStatePort,
    TargetResolution,
    TargetResolverPort,
)

__all__ = [
    # Entry points
    "run",
    "run_create",
    "run_update",
    "run_move",
    "run_delete",
    "run_toggle",
    "run_reset",
    "run_set_revision_state",
    "run_get",
    "run_list_tree",
    "run_count",
    "run_parent_options",
    "run_apply_overview",
    # Input models
    "CreateLinkInput",
    "UpdateLinkInput",
    "MoveLinkInput",
    "DeleteLinkInput",
    "ToggleLinkInput",
    "ResetLinkInput",
    "SetRevisionStateInput",
    "GetLinkInput",
    "ListTreeInput",
    "CountLinksInput",
    "ParentOptionsInput",
    "OverviewEntry",
    "ApplyOverviewInput",
    # Output models
    "LinkOperationOutput",
    "TreeOutput",
    "TreeItem",
    "CountOutput",
    "OverviewOutput",
    "MenuLinkError",
    # Ports
    "MenuRegistryPort",
    "RevisionStatePort",
    "TargetResolution",
    "TargetResolverPort",
    # Service and core
    "MenuLinkService",
    "MenuTreeConfig",
    "DEFAULT_CONFIG",
    "config_from_rules",
    "new_content_link_id",
    "validate_link_data",
    "MenuLocks",
    "TargetConfig",
    "parse_target",
    "TreeIndex",
    "TreeCycleError",
]
