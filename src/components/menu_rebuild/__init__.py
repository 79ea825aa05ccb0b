"""
Menu rebuild component - Reconciliation of declared plugin links.
"""

from ._definitions import (
    DefinitionError,
    YamlDefinitionSource,
    load_definition_file,
    load_definitions,
)
from ._impl import (
    DEFAULT_CONFIG,
    RebuildConfig,
    RebuildService,
    config_from_rules,
    find_duplicates,
)
from .component import run, run_rebuild, run_rebuild_from
from .models import RebuildError, RebuildInput, RebuildOutput, RebuildSummary
from .ports import DefinitionSourcePort

__all__ = [
    # Entry points
    "run",
    "run_rebuild",
    "run_rebuild_from",
    # Models
    "RebuildInput",
    "RebuildOutput",
    "RebuildSummary",
    "RebuildError",
    # Ports
    "DefinitionSourcePort",
    # Service
    "RebuildService",
    "RebuildConfig",
    "DEFAULT_CONFIG",
    "config_from_rules",
    "find_duplicates",
    # Declaration files
    "DefinitionError",
    "YamlDefinitionSource",
    "load_definition_file",
    "load_definitions",
]
