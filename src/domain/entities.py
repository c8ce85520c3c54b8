from typing import Any

from pydantic import BaseModel, Field

from src.domain.references import REFERENCE_PROPERTY, get_component_name

# --- Content Tree ---


class ContentEntry(BaseModel):
    """
    A node of the persisted document tree.

    Child entries live in list fields of their parent as ``{"_ref": ...}``
    items; list order is document order.
    """

    ref: str
    parent_ref: str | None = None
    parent_field: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def name(self) -> str:
        return get_component_name(self.ref) or ""

    @property
    def is_root(self) -> bool:
        return self.parent_ref is None

    def child_refs(self, field: str) -> list[str]:
        items = self.data.get(field)
        if not isinstance(items, list):
            return []
        return [
            item[REFERENCE_PROPERTY]
            for item in items
            if isinstance(item, dict) and REFERENCE_PROPERTY in item
        ]


class FieldSchema(BaseModel):
    """Schema of one component field."""

    name: str
    type: str = "text"  # "text" or "list"
    behaviors: list[str] = Field(default_factory=list)


class ComponentSchema(BaseModel):
    """Schema of a component: its fields and groups."""

    fields: dict[str, FieldSchema] = Field(default_factory=dict)
    groups: dict[str, list[str]] = Field(default_factory=dict)
    description: str = ""
