"""
In-memory document store.

Implements EditServicePort over a dict of content entries. Used by the HTTP
adapter for a single editing session and by tests as the persistence double.

Caching:
- Component schemas are cached per component name for the whole process;
  schemas only change on restart, so there is no invalidation apart from
  clear_schema_cache().
- get_entry_data_only is memoized per store and the memo is dropped after
  every successful write.
"""

from __future__ import annotations

import copy
import html
import logging
from collections.abc import Mapping
from typing import Any

from src.domain.entities import ComponentSchema, ContentEntry, FieldSchema
from src.domain.references import (
    REFERENCE_PROPERTY,
    create_instance_ref,
    get_component_name,
)

logger = logging.getLogger(__name__)

SCHEMA_PROPERTY = "_schema"
GROUPS_PROPERTY = "_groups"
DESCRIPTION_PROPERTY = "_description"

DEFAULT_PREFIX = "localhost/site"

# Process-wide, keyed by component name
_schema_cache: dict[str, ComponentSchema] = {}


def clear_schema_cache() -> None:
    """Forget every cached schema (e.g. between tests)."""
    _schema_cache.clear()


class EntryNotFoundError(KeyError):
    """Raised when a reference does not name a stored entry."""

    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(ref)

    def __str__(self) -> str:
        return f"Entry not found: {self.ref}"


class EntryCreateError(RuntimeError):
    """Raised when a created entry cannot be given a reference."""


def remove_extras(data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Convert augmented data to plain data.

    Unwraps {"value", "_schema"} fields and drops the reference, groups and
    description. Works on a copy.
    """
    plain: dict[str, Any] = {}
    for key, value in copy.deepcopy(dict(data)).items():
        if key in (REFERENCE_PROPERTY, GROUPS_PROPERTY, DESCRIPTION_PROPERTY):
            continue
        if isinstance(value, dict) and SCHEMA_PROPERTY in value:
            value = value.get("value")
        plain[key] = value
    return plain


def _infer_schema(data: Mapping[str, Any]) -> ComponentSchema:
    fields = {
        name: FieldSchema(name=name, type="list" if isinstance(value, list) else "text")
        for name, value in data.items()
        if not name.startswith("_")
    }
    return ComponentSchema(fields=fields)


class InMemoryDocumentStore:
    """
    Document tree held in memory.

    Child entries are listed in their parent's list fields as
    ``{"_ref": ref}`` items. Every write is recorded in ``writes`` as
    (operation, ref) so callers can tell whether anything changed.
    """

    def __init__(
        self,
        prefix: str = DEFAULT_PREFIX,
        schemas: Mapping[str, ComponentSchema] | None = None,
    ) -> None:
        self.prefix = prefix
        self.schemas: dict[str, ComponentSchema] = dict(schemas or {})
        self.writes: list[tuple[str, str]] = []
        self._entries: dict[str, ContentEntry] = {}
        self._data_cache: dict[str, dict[str, Any]] = {}

    # --- Seeding ---

    def add_root(
        self,
        component: str,
        data: Mapping[str, Any] | None = None,
        instance_id: str | None = None,
    ) -> str:
        """Store a top-level entry without recording a write."""
        ref = create_instance_ref(self.prefix, component, instance_id)
        self._entries[ref] = ContentEntry(ref=ref, data=dict(data or {}))
        return ref

    def add_child(
        self,
        parent_ref: str,
        field: str,
        component: str,
        data: Mapping[str, Any] | None = None,
        instance_id: str | None = None,
    ) -> str:
        """Store an entry at the end of a parent's list without recording a write."""
        parent = self.get(parent_ref)
        ref = create_instance_ref(self.prefix, component, instance_id)
        self._entries[ref] = ContentEntry(
            ref=ref,
            parent_ref=parent_ref,
            parent_field=field,
            data=dict(data or {}),
        )
        parent.data.setdefault(field, []).append({REFERENCE_PROPERTY: ref})
        return ref

    # --- Lookups ---

    def __contains__(self, ref: object) -> bool:
        return ref in self._entries

    def get(self, ref: str) -> ContentEntry:
        try:
            return self._entries[ref]
        except KeyError:
            raise EntryNotFoundError(ref) from None

    def roots(self) -> list[ContentEntry]:
        return [entry for entry in self._entries.values() if entry.is_root]

    def all_data(self) -> dict[str, dict[str, Any]]:
        """Plain data of every entry, keyed by reference."""
        return {ref: copy.deepcopy(entry.data) for ref, entry in self._entries.items()}

    def get_schema(self, ref: str) -> ComponentSchema:
        name = get_component_name(ref) or ""
        cached = _schema_cache.get(name)
        if cached is not None:
            return cached

        schema = self.schemas.get(name) or _infer_schema(self.get(ref).data)
        _schema_cache[name] = schema
        logger.debug("Cached schema for %s", name)
        return schema

    def list_fields(self, ref: str) -> list[str]:
        """Names of the entry's fields that hold child entries."""
        entry = self.get(ref)
        schema = self.get_schema(ref)
        names = [name for name, field in schema.fields.items() if field.type == "list"]
        names.extend(
            name
            for name, value in entry.data.items()
            if isinstance(value, list) and name not in names
        )
        return names

    def resolve_field(self, ref: str, path: str) -> str:
        """Field a focus path points to: the field itself or a group's first field."""
        groups = self.get_schema(ref).groups
        if path in groups and groups[path]:
            return groups[path][0]
        return path

    # --- Reads ---

    async def get_entry_data_only(self, ref: str) -> dict[str, Any]:
        cached = self._data_cache.get(ref)
        if cached is None:
            cached = copy.deepcopy(self.get(ref).data)
            cached[REFERENCE_PROPERTY] = ref
            self._data_cache[ref] = cached
        else:
            logger.debug("Data cache hit for %s", ref)
        return copy.deepcopy(cached)

    async def get_entry_data(self, ref: str) -> dict[str, Any]:
        schema = self.get_schema(ref)
        data = await self.get_entry_data_only(ref)

        for name, field in schema.fields.items():
            data[name] = {
                "value": data.get(name),
                SCHEMA_PROPERTY: field.model_dump(),
            }
        if schema.groups:
            data[GROUPS_PROPERTY] = copy.deepcopy(schema.groups)
        return data

    # --- Writes ---

    def _written(self, operation: str, ref: str) -> None:
        self.writes.append((operation, ref))
        self._data_cache.clear()
        logger.debug("%s %s; data cache cleared", operation, ref)

    async def create_entry(self, component: str, data: dict[str, Any]) -> str:
        ref = create_instance_ref(self.prefix, component)
        if get_component_name(ref) != component:
            raise EntryCreateError("Created, but we do not know where.")

        self._entries[ref] = ContentEntry(ref=ref, data=remove_extras(data))
        self._written("create", ref)
        return ref

    async def save_field(self, ref: str, data: dict[str, Any]) -> dict[str, Any]:
        entry = self.get(ref)
        entry.data.update(remove_extras(data))
        self._written("save", ref)
        return await self.get_entry_data(ref)

    def _list(self, parent_ref: str, parent_field: str) -> list[dict[str, Any]]:
        items = self.get(parent_ref).data.setdefault(parent_field, [])
        if not isinstance(items, list):
            raise ValueError(f"{parent_ref}.{parent_field} is not a list field")
        return items

    def _index_of(self, items: list[dict[str, Any]], ref: str) -> int | None:
        for index, item in enumerate(items):
            if item.get(REFERENCE_PROPERTY) == ref:
                return index
        return None

    async def remove_from_parent_list(self, ref: str, parent_field: str, parent_ref: str) -> str:
        items = self._list(parent_ref, parent_field)
        index = self._index_of(items, ref)
        if index is None:
            raise EntryNotFoundError(ref)

        del items[index]
        entry = self.get(ref)
        entry.parent_ref = None
        entry.parent_field = None
        self._written("remove", ref)
        return self.render_markup(parent_ref)

    async def add_to_parent_list(
        self,
        ref: str,
        parent_field: str,
        parent_ref: str,
        prev_ref: str | None = None,
    ) -> str:
        await self.add_multiple_to_parent_list([ref], parent_field, parent_ref, prev_ref=prev_ref)
        return self.render_markup(ref)

    async def add_multiple_to_parent_list(
        self,
        refs: list[str],
        parent_field: str,
        parent_ref: str,
        prev_ref: str | None = None,
        insert_index: int | None = None,
    ) -> str:
        items = self._list(parent_ref, parent_field)

        if insert_index is not None:
            position = max(0, min(insert_index, len(items)))
        elif prev_ref is not None:
            prev_index = self._index_of(items, prev_ref)
            position = len(items) if prev_index is None else prev_index + 1
        else:
            position = len(items)

        items[position:position] = [{REFERENCE_PROPERTY: ref} for ref in refs]
        for ref in refs:
            entry = self.get(ref)
            entry.parent_ref = parent_ref
            entry.parent_field = parent_field

        self._written("insert", parent_ref)
        logger.info(
            "Inserted %d entries into %s.%s at %d", len(refs), parent_ref, parent_field, position
        )
        return self.render_markup(parent_ref)

    # --- Markup ---

    def render_markup(self, ref: str) -> str:
        """Markup of an entry and its descendants."""
        entry = self.get(ref)
        parts = [f'<div data-uri="{html.escape(ref)}">']
        for name, value in entry.data.items():
            if isinstance(value, list):
                parts.append(f'<div data-editable="{html.escape(name)}">')
                parts.extend(
                    self.render_markup(item[REFERENCE_PROPERTY])
                    for item in value
                    if isinstance(item, dict) and item.get(REFERENCE_PROPERTY) in self._entries
                )
                parts.append("</div>")
            elif isinstance(value, str):
                parts.append(f'<div data-editable="{html.escape(name)}">{value}</div>')
        parts.append("</div>")
        return "".join(parts)
