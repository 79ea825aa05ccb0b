"""
Link target parsing and validation.

Accepted forms:
- front page sentinels: <front>, /, internal:/ (query/fragment allowed)
- internal paths: /node/5, internal:/node/5, entity:node/5
- named routes: route:entity.node.canonical;node=5
- external URLs whose scheme is allowed by rules
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from src.domain.entities import FRONT_ROUTE, LinkTarget

from .models import MenuLinkError
from .ports import TargetResolverPort

# Schemes that must never become a link, whatever the rules say
BLOCKED_SCHEMES = ("javascript", "data", "vbscript", "file")


@dataclass(frozen=True)
class TargetConfig:
    """Target rules."""

    allowed_external_schemes: tuple[str, ...] = ("http", "https")
    front_sentinels: tuple[str, ...] = ("<front>", "/", "internal:/")


@dataclass(frozen=True)
class _Split:
    base: str
    query: str = ""
    fragment: str = ""


def _split_query_fragment(uri: str) -> _Split:
    base, _, fragment = uri.partition("#")
    base, _, query = base.partition("?")
    return _Split(base=base, query=query, fragment=fragment)


def _invalid(uri: str, message: str | None = None) -> list[MenuLinkError]:
    return [
        MenuLinkError(
            code="invalid_target",
            message=message or f"The path '{uri}' is either invalid or you do not have access to it.",
            field="target",
        )
    ]


def _parse_route(uri: str, parts: _Split) -> tuple[LinkTarget | None, list[MenuLinkError]]:
    body = parts.base[len("route:"):]
    name, *raw_params = body.split(";")
    if not name:
        return None, _invalid(uri, "Route name is required")
    params: dict[str, str] = {}
    for raw in raw_params:
        key, sep, value = raw.partition("=")
        if not sep or not key:
            return None, _invalid(uri, f"Malformed route parameter '{raw}'")
        params[key] = value
    kind = "front" if name == FRONT_ROUTE else "route"
    return (
        LinkTarget(
            kind=kind,
            uri=uri,
            route_name=name,
            route_parameters=params,
            query=parts.query,
            fragment=parts.fragment,
        ),
        [],
    )


def parse_target(
    uri: str,
    resolver: TargetResolverPort | None = None,
    config: TargetConfig | None = None,
) -> tuple[LinkTarget | None, list[MenuLinkError]]:
    """
    Parse and validate a link target URI.

    Returns:
        Tuple of (target, errors). Target is None if validation fails.
    """
    config = config or TargetConfig()
    uri = uri.strip() if isinstance(uri, str) else ""
    if not uri:
        return None, [
            MenuLinkError(code="invalid_target", message="Link target is required", field="target")
        ]

    parts = _split_query_fragment(uri)

    if parts.base in config.front_sentinels:
        return (
            LinkTarget(
                kind="front",
                uri=uri,
                path="/",
                route_name=FRONT_ROUTE,
                query=parts.query,
                fragment=parts.fragment,
            ),
            [],
        )

    if parts.base.startswith("route:"):
        return _parse_route(uri, parts)

    split = urlsplit(uri)
    scheme = split.scheme.lower()

    if scheme in config.allowed_external_schemes and scheme not in BLOCKED_SCHEMES:
        if not split.netloc:
            return None, _invalid(uri, f"External URL '{uri}' must include a host")
        return (
            LinkTarget(
                kind="external",
                uri=uri,
                url=uri,
                query=split.query,
                fragment=split.fragment,
            ),
            [],
        )

    if scheme == "internal":
        path = parts.base[len("internal:"):]
    elif scheme == "entity":
        path = "/" + parts.base[len("entity:"):].lstrip("/")
    elif parts.base.startswith("/") and not parts.base.startswith("//"):
        path = parts.base
    elif scheme or split.netloc:
        return None, _invalid(uri)
    else:
        return None, _invalid(
            uri,
            f"Manually entered paths should start with a slash ('{uri}')",
        )

    if not path.startswith("/"):
        return None, _invalid(uri)

    if path in config.front_sentinels:
        return (
            LinkTarget(
                kind="front",
                uri=uri,
                path="/",
                route_name=FRONT_ROUTE,
                query=parts.query,
                fragment=parts.fragment,
            ),
            [],
        )

    if resolver is None:
        # No routing collaborator: keep the path unresolved
        return (
            LinkTarget(kind="route", uri=uri, path=path, query=parts.query, fragment=parts.fragment),
            [],
        )

    resolution = resolver.resolve(path)
    if resolution.status == "inaccessible":
        return None, [
            MenuLinkError(
                code="inaccessible",
                message=f"The path '{uri}' is inaccessible.",
                field="target",
            )
        ]
    if resolution.status != "resolved":
        return None, _invalid(uri)

    kind = "front" if resolution.route_name == FRONT_ROUTE else "route"
    return (
        LinkTarget(
            kind=kind,
            uri=uri,
            path=path,
            route_name=resolution.route_name,
            route_parameters=dict(resolution.route_parameters),
            query=parts.query,
            fragment=parts.fragment,
        ),
        [],
    )
