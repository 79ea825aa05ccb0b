"""
Menus component - Menu container management.
"""

from ._impl import (
    DEFAULT_CONFIG,
    MenuConfig,
    MenuService,
    config_from_rules,
    validate_label,
    validate_menu_id,
)
from .component import (
    run,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_pending_summary,
    run_update,
)
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

__all__ = [
    # Entry points
    "run",
    "run_create",
    "run_update",
    "run_delete",
    "run_get",
    "run_list",
    "run_pending_summary",
    # Input models
    "CreateMenuInput",
    "UpdateMenuInput",
    "DeleteMenuInput",
    "GetMenuInput",
    "ListMenusInput",
    "PendingSummaryInput",
    # Output models
    "MenuOperationOutput",
    "MenuListOutput",
    "PendingSummaryOutput",
    "MenuError",
    # Service
    "MenuService",
    "MenuConfig",
    "DEFAULT_CONFIG",
    "config_from_rules",
    "validate_menu_id",
    "validate_label",
]
