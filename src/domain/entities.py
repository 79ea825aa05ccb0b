from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

# --- Enums / Literals ---
OriginKind = Literal["plugin", "content"]
RevisionState = Literal["default", "pending"]
TargetKind = Literal["route", "external", "front"]

# --- Targets ---

class LinkTarget(BaseModel):
    kind: TargetKind
    # Original URI as entered, e.g. "internal:/node/5?x=1#top"
    uri: str
    path: str | None = None
    route_name: str | None = None
    route_parameters: dict[str, str] = Field(default_factory=dict)
    url: str | None = None
    query: str = ""
    fragment: str = ""

FRONT_ROUTE = "<front>"

# --- Origins (tagged variant) ---

class LinkDefaults(BaseModel):
    """Declaration-time attributes of a plugin link, restored on reset."""

    parent_id: str | None = None
    weight: int = 0
    title: str
    description: str = ""
    enabled: bool = True
    expanded: bool = False

class PluginOrigin(BaseModel):
    kind: Literal["plugin"] = "plugin"
    provider: str
    defaults: LinkDefaults

class ContentOrigin(BaseModel):
    kind: Literal["content"] = "content"
    revision_state: RevisionState = "default"

LinkOrigin = Annotated[PluginOrigin | ContentOrigin, Field(discriminator="kind")]

# --- Links ---

class MenuLink(BaseModel):
    id: str
    menu_name: str
    parent_id: str | None = None
    weight: int = 0
    title: str
    description: str = ""
    target: LinkTarget
    enabled: bool = True
    expanded: bool = False
    origin: LinkOrigin

    @property
    def is_plugin(self) -> bool:
        return self.origin.kind == "plugin"

    @property
    def is_pending(self) -> bool:
        return self.origin.kind == "content" and self.origin.revision_state == "pending"

    def sort_key(self) -> tuple[int, str]:
        return (self.weight, self.title)

class LinkOverride(BaseModel):
    """Persisted user customisation of a plugin link."""

    link_id: str
    weight: int | None = None
    parent_id: str | None = None
    # parent_id=None is a legal override (moved to root), so track presence
    parent_set: bool = False
    enabled: bool | None = None
    expanded: bool | None = None
    title: str | None = None
    description: str | None = None

    def is_empty(self) -> bool:
        return (
            self.weight is None
            and not self.parent_set
            and self.enabled is None
            and self.expanded is None
            and self.title is None
            and self.description is None
        )

    def apply(self, defaults: LinkDefaults) -> dict[str, Any]:
        """Return the effective attribute values, override winning where set."""
        return {
            "parent_id": self.parent_id if self.parent_set else defaults.parent_id,
            "weight": self.weight if self.weight is not None else defaults.weight,
            "title": self.title if self.title is not None else defaults.title,
            "description": (
                self.description if self.description is not None else defaults.description
            ),
            "enabled": self.enabled if self.enabled is not None else defaults.enabled,
            "expanded": self.expanded if self.expanded is not None else defaults.expanded,
        }

# --- Menus ---

class Menu(BaseModel):
    id: str
    label: str
    description: str = ""
    # System menus are declared in rules and cannot be deleted
    locked: bool = False

# --- Declarations ---

class PluginLinkDefinition(BaseModel):
    id: str
    menu_name: str
    provider: str
    title: str
    description: str = ""
    parent_id: str | None = None
    weight: int = 0
    target: str
    enabled: bool = True
    expanded: bool = False

    def defaults(self) -> LinkDefaults:
        return LinkDefaults(
            parent_id=self.parent_id,
            weight=self.weight,
            title=self.title,
            description=self.description,
            enabled=self.enabled,
            expanded=self.expanded,
        )
