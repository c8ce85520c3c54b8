from pydantic import BaseModel, ConfigDict, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class PasteRuleConfig(BaseModel):
    match: str
    match_link: bool = Field(default=False, alias="matchLink")
    component: str
    field: str
    group: str | None = None
    sanitize: bool = False

    model_config = ConfigDict(populate_by_name=True)


class WysiwygFieldRules(BaseModel):
    enable_keyboard_extras: bool = Field(default=False, alias="enableKeyboardExtras")
    buttons: list[str] = Field(default_factory=list)
    styled: bool = False
    paste: list[PasteRuleConfig] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class Rules(BaseModel):
    project: ProjectRules
    same_as: dict[str, str] = Field(default_factory=dict)
    # Keyed by "<component>.<field>"
    fields: dict[str, WysiwygFieldRules] = Field(default_factory=dict)

    def field_rules(self, component: str, field: str) -> WysiwygFieldRules:
        """Rules for one wysiwyg field, or the defaults if none are configured."""
        return self.fields.get(f"{component}.{field}", WysiwygFieldRules())
