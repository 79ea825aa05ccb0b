"""
Static route table for resolving internal link targets.

Routes are declared as path patterns with {placeholders}, e.g.
("entity.node.canonical", "/node/{node}"). Aliases map a friendly path to
its system path before matching.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from src.components.menu_tree import TargetResolution
from src.domain.entities import FRONT_ROUTE

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def _compile(pattern: str) -> re.Pattern[str]:
    parts = _PLACEHOLDER.split(pattern)
    # split() alternates literal text and placeholder names
    regex = "".join(
        f"(?P<{part}>[^/]+)" if i % 2 else re.escape(part) for i, part in enumerate(parts)
    )
    return re.compile(f"^{regex}$")


class StaticRouteResolver:
    def __init__(
        self,
        routes: list[tuple[str, str]] | None = None,
        aliases: dict[str, str] | None = None,
        can_access: Callable[[str, dict[str, str]], bool] | None = None,
    ) -> None:
        self._routes: list[tuple[str, re.Pattern[str]]] = []
        self._aliases = dict(aliases or {})
        self._can_access = can_access
        for name, pattern in routes or []:
            self.add_route(name, pattern)

    def add_route(self, name: str, pattern: str) -> None:
        self._routes.append((name, _compile(pattern)))

    def add_alias(self, alias: str, system_path: str) -> None:
        self._aliases[alias] = system_path

    def resolve(self, path: str) -> TargetResolution:
        path = self._aliases.get(path, path)
        if path == "/":
            return TargetResolution(status="resolved", route_name=FRONT_ROUTE)

        for name, regex in self._routes:
            match = regex.match(path)
            if match is None:
                continue
            params = match.groupdict()
            if self._can_access is not None and not self._can_access(name, params):
                return TargetResolution(status="inaccessible", route_name=name)
            return TargetResolution(status="resolved", route_name=name, route_parameters=params)

        return TargetResolution(status="not_found")
