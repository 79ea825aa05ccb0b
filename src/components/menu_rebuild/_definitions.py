"""
Plugin link declaration files.

A module declares its links in a <module>.links.menu.yml file keyed by link id:

    system.admin_content:
      title: Content
      menu_name: admin
      parent: system.admin
      route_name: system.admin_content
      weight: -10

The target is one of route_name (+ route_parameters), url, or target.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from src.domain.entities import PluginLinkDefinition

DEFINITION_SUFFIX = ".links.menu.yml"


class DefinitionError(ValueError):
    """Raised when a declaration file cannot be read."""


class _DeclaredLink(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str
    menu_name: str
    description: str = ""
    parent: str | None = None
    weight: int = 0
    route_name: str | None = None
    route_parameters: dict[str, str | int] = {}
    url: str | None = None
    target: str | None = None
    enabled: bool = True
    expanded: bool = False

    @model_validator(mode="after")
    def _one_target(self) -> _DeclaredLink:
        given = [v for v in (self.route_name, self.url, self.target) if v]
        if len(given) != 1:
            raise ValueError("exactly one of route_name, url or target is required")
        return self

    def target_uri(self) -> str:
        if self.route_name:
            params = "".join(f";{k}={v}" for k, v in self.route_parameters.items())
            return f"route:{self.route_name}{params}"
        return self.url or self.target or ""


def provider_for(path: Path) -> str:
    name = path.name
    if name.endswith(DEFINITION_SUFFIX):
        return name[: -len(DEFINITION_SUFFIX)]
    return path.stem


def load_definition_file(path: Path) -> list[PluginLinkDefinition]:
    """
    Load one declaration file.

    Raises:
        FileNotFoundError: if the file is missing.
        DefinitionError: if the YAML or a declaration is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Link declarations not found at: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise DefinitionError(f"Invalid YAML syntax in {path}: {e}") from e

    if data is None:
        return []
    if not isinstance(data, dict):
        raise DefinitionError(f"{path} must map link ids to declarations")

    provider = provider_for(path)
    definitions: list[PluginLinkDefinition] = []
    for link_id, raw in data.items():
        try:
            declared = _DeclaredLink.model_validate(raw)
        except ValidationError as e:
            raise DefinitionError(f"Invalid declaration '{link_id}' in {path}:\n{e}") from e
        definitions.append(
            PluginLinkDefinition(
                id=str(link_id),
                menu_name=declared.menu_name,
                provider=provider,
                title=declared.title,
                description=declared.description,
                parent_id=declared.parent,
                weight=declared.weight,
                target=declared.target_uri(),
                enabled=declared.enabled,
                expanded=declared.expanded,
            )
        )
    return definitions


def load_definitions(paths: list[Path]) -> list[PluginLinkDefinition]:
    """Load declaration files in order. Directories are searched for *.links.menu.yml."""
    definitions: list[PluginLinkDefinition] = []
    for path in paths:
        if path.is_dir():
            for found in sorted(path.glob(f"*{DEFINITION_SUFFIX}")):
                definitions.extend(load_definition_file(found))
        else:
            definitions.extend(load_definition_file(path))
    return definitions


class YamlDefinitionSource:
    """Declaration feed backed by declaration files."""

    def __init__(self, paths: list[Path]) -> None:
        self._paths = paths

    def load(self) -> list[PluginLinkDefinition]:
        return load_definitions(self._paths)
