from pydantic import BaseModel, Field, field_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str

class SystemMenuRule(BaseModel):
    id: str
    label: str
    description: str = ""

class MenusRules(BaseModel):
    max_depth: int = Field(default=9, ge=1)
    max_id_length: int = Field(default=32, ge=1)
    id_pattern: str = r"^[a-z0-9_-]+$"
    system_menus: list[SystemMenuRule] = Field(default_factory=list)

class RangeRule(BaseModel):
    min: int
    max: int

class LinksRules(BaseModel):
    title: RangeRule = RangeRule(min=1, max=255)
    description_max: int = 255
    allowed_external_schemes: list[str] = Field(default_factory=lambda: ["http", "https"])
    front_sentinels: list[str] = Field(default_factory=lambda: ["<front>", "/", "internal:/"])

    @field_validator("allowed_external_schemes")
    @classmethod
    def _lowercase_schemes(cls, v: list[str]) -> list[str]:
        return [s.lower() for s in v]

class PluginOverrideRules(BaseModel):
    allow_title: bool = True
    allow_description: bool = True

class ListingRules(BaseModel):
    page_size: int = Field(default=50, ge=1)

class MenuRules(BaseModel):
    project: ProjectRules
    menus: MenusRules = MenusRules()
    links: LinksRules = LinksRules()
    plugin_overrides: PluginOverrideRules = PluginOverrideRules()
    listing: ListingRules = ListingRules()
