"""
Menu rebuild component - Reconciliation of declared plugin links.

Shell Layer - handles I/O and error conversion.
"""

from __future__ import annotations

from ._impl import RebuildService
from .models import RebuildInput, RebuildOutput
from .ports import DefinitionSourcePort


def run_rebuild(input_data: RebuildInput, service: RebuildService) -> RebuildOutput:
    """Reconcile the registry with the given declarations."""
    summary, errors = service.rebuild(list(input_data.definitions))
    return RebuildOutput(summary=summary, errors=errors, success=summary is not None)


def run_rebuild_from(source: DefinitionSourcePort, service: RebuildService) -> RebuildOutput:
    """Load declarations from a feed, then rebuild."""
    return run_rebuild(RebuildInput(definitions=tuple(source.load())), service)


def run(inp: RebuildInput, *, service: RebuildService) -> RebuildOutput:
    """
    Main entry point for the menu rebuild component.
    """
    if isinstance(inp, RebuildInput):
        return run_rebuild(inp, service)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
