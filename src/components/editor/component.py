"""
Editor component - Structural edits driven by wysiwyg field input.

Transitions:
- delete-at-start: merge the field into the previous entry of the same
  component, remove the current entry, caret lands before the appended text
- split: enter mid-text cuts the field at the caret and moves the rest into
  a new entry after the current one
- create: enter at the end of the text adds an empty entry after the current one
- paste: classify the pasted content; either replace the field in place and
  insert the remaining components after it, or replace the current entry
  with all of them at its position

Guards:
- G1: delete-at-start only fires on a collapsed caret at offset 0
- G2: a classification failure clears the field and issues no tree writes
- G3: entry creation for a multi-insert completes before the single list insert

Port failures propagate unchanged; nothing here retries or rolls back.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from src.components.navigation import NavTarget, get_current, get_parent, get_previous
from src.components.paste import (
    ComponentDescriptor,
    NoMatchingRuleError,
    PasteRule,
    compile_rules,
    match_components,
    pre_clean,
    split_paragraphs,
)
from src.components.textmodel import (
    RunSequence,
    TextRun,
    concat,
    normalize_markup,
    parse,
    serialize,
    split,
)
from src.domain.references import REFERENCE_PROPERTY
from src.rules.models import WysiwygFieldRules

from .models import (
    Caret,
    DeleteKeyInput,
    EditorConfigError,
    EditorError,
    EnterKeyInput,
    FieldHandle,
    PasteInput,
    TabKeyInput,
    TransitionOutput,
)
from .ports import EditServicePort, FocusPort, ProgressPort, RenderPort

logger = logging.getLogger(__name__)

LINE_BREAK = "\n\n"
BULLET = "\u2022\xa0"


def _field_value(data: dict[str, Any], field: str) -> str:
    """Read a text field from plain or schema-augmented entry data."""
    value = data.get(field)
    if isinstance(value, dict):
        value = value.get("value")
    return value if isinstance(value, str) else ""


def _set_field_value(data: dict[str, Any], field: str, value: str) -> None:
    current = data.get(field)
    if isinstance(current, dict):
        current["value"] = value
    else:
        data[field] = value


def _descriptor_markup(descriptor: ComponentDescriptor) -> str:
    if isinstance(descriptor.value, RunSequence):
        return serialize(descriptor.value)
    return descriptor.value or ""


class FieldEditor:
    """
    Edits the document tree in response to input in one wysiwyg field.

    Each transition runs to completion, including focus transfer, or raises.
    Callers must not start a second transition on the same field while one
    is in flight.
    """

    def __init__(
        self,
        *,
        edit: EditServicePort | None,
        render: RenderPort | None,
        focus: FocusPort | None,
        progress: ProgressPort | None = None,
        paste_rules: tuple[PasteRule, ...] = (),
        enable_keyboard_extras: bool = False,
    ) -> None:
        missing = [
            name
            for name, port in (("edit", edit), ("render", render), ("focus", focus))
            if port is None
        ]
        if missing:
            raise EditorConfigError(f"Field editor is missing required ports: {missing}")

        assert edit is not None and render is not None and focus is not None
        self.edit = edit
        self.render = render
        self.focus = focus
        self.progress = progress
        self.paste_rules = paste_rules
        self.enable_keyboard_extras = enable_keyboard_extras

    @classmethod
    def from_rules(
        cls,
        rules: WysiwygFieldRules,
        *,
        edit: EditServicePort | None,
        render: RenderPort | None,
        focus: FocusPort | None,
        progress: ProgressPort | None = None,
    ) -> FieldEditor:
        """
        Build an editor from a field's configuration.

        Raises:
            PasteRuleConfigError: If a paste rule pattern is missing or invalid.
            EditorConfigError: If a required port is missing.
        """
        return cls(
            edit=edit,
            render=render,
            focus=focus,
            progress=progress,
            paste_rules=compile_rules(rules.paste),
            enable_keyboard_extras=rules.enable_keyboard_extras,
        )

    # --- Navigation ---

    def _locate(self, handle: FieldHandle) -> tuple[NavTarget, NavTarget | None]:
        current = get_current(handle.ref, handle.field, self.render)
        return current, get_parent(current, self.render)

    # --- Delete at start ---

    async def handle_delete_at_start(self, handle: FieldHandle) -> str | None:
        """
        Merge the field into the previous same-component entry.

        Returns:
            Reference of the entry merged into, or None when nothing happened
            (caret not at the start, or no previous entry of the same component).
        """
        caret = self.focus.get_caret(handle)
        if caret.start != 0 or caret.end != 0:
            return None
        return await self.remove_component(handle)

    async def remove_component(self, handle: FieldHandle) -> str | None:
        current, parent = self._locate(handle)
        if parent is None:
            return None

        prev = await get_previous(current, parent, self.edit)
        if prev is None:
            logger.debug("No previous %s before %s", current.name, current.ref)
            return None

        prev_length = await self._append_to_previous(handle.value, prev)
        await self.edit.remove_from_parent_list(current.ref, parent.field, parent.ref)
        await self.render.reload_entry(prev.ref)

        focused = await self.focus.focus(prev.ref, prev.field)
        # Caret goes right before the appended text
        self.focus.set_caret(focused, Caret.at(prev_length))

        logger.info("Merged %s into %s", current.ref, prev.ref)
        return prev.ref

    async def _append_to_previous(self, markup: str, prev: NavTarget) -> int:
        """Append markup to the previous entry's field. Returns its old text length."""
        prev_data = await self.edit.get_entry_data(prev.ref)
        prev_markup = _field_value(prev_data, prev.field)
        prev_length = len(parse(prev_markup).text)

        # Re-parse the joined markup so runs that now touch are merged
        _set_field_value(prev_data, prev.field, normalize_markup(prev_markup + markup))
        await self.edit.save_field(prev.ref, prev_data)
        return prev_length

    # --- Enter ---

    def has_trailing_text(self, handle: FieldHandle) -> bool:
        return self.focus.get_caret(handle).start < len(handle.text)

    async def handle_create_or_split(self, handle: FieldHandle) -> str | None:
        """
        Split at the caret if text follows it, otherwise add an empty entry.

        Returns:
            Reference of the new entry, or None if the field's entry has no parent list.
        """
        caret = self.focus.get_caret(handle)
        if caret.start < len(handle.text):
            return await self.split_component(handle, caret)
        return await self.add_component(handle)

    async def split_component(self, handle: FieldHandle, caret: Caret) -> str | None:
        sequence = parse(handle.value.replace("&nbsp;", " ").replace("\xa0", " "))
        before, after = split(sequence, caret.start)

        # Persisted by the focus service when focus moves to the new entry
        handle.value = serialize(before)
        return await self.add_component(handle, serialize(after))

    async def add_component(self, handle: FieldHandle, markup: str | None = None) -> str | None:
        """Create an entry of the same component right after the current one."""
        current, parent = self._locate(handle)
        if parent is None:
            return None

        data = {current.field: markup} if markup else {}
        new_ref = await self.edit.create_entry(current.name, data)
        inserted = await self.edit.add_to_parent_list(
            new_ref, parent.field, parent.ref, prev_ref=current.ref
        )
        await self.render.attach_handlers(inserted)
        await self.focus.focus(new_ref, current.field)

        logger.info("Added %s after %s", new_ref, current.ref)
        return new_ref

    async def add_components(
        self,
        parent: NavTarget,
        components: list[ComponentDescriptor],
        *,
        current: NavTarget | None = None,
        insert_index: int | None = None,
    ) -> list[str]:
        """
        Create entries for components and insert them into the parent's list.

        insert_index wins over current; with neither the entries are appended.
        Does nothing for an empty list.
        """
        if not components:
            return []

        created = await asyncio.gather(
            *(
                self.edit.create_entry(component.component, self._entry_data(component))
                for component in components
            )
        )
        refs = list(created)

        prev_ref = current.ref if current is not None and insert_index is None else None
        markup = await self.edit.add_multiple_to_parent_list(
            refs,
            parent.field,
            parent.ref,
            prev_ref=prev_ref,
            insert_index=insert_index,
        )

        # Save the field being edited before its parent is re-rendered
        await self.focus.unfocus()
        await self.render.reload_entry(parent.ref, markup)

        last = components[-1]
        if last.field:
            focused = await self.focus.focus(refs[-1], last.path)
            self.focus.set_caret(focused, Caret.at(len(focused.text)))

        logger.info("Inserted %d components into %s.%s", len(refs), parent.ref, parent.field)
        return refs

    @staticmethod
    def _entry_data(component: ComponentDescriptor) -> dict[str, Any]:
        if component.value is None:
            return {}
        return {component.field: _descriptor_markup(component)}

    # --- Paste ---

    def classify(self, handle: FieldHandle, markup: str) -> list[ComponentDescriptor]:
        """
        Turn pasted field content into component descriptors.

        Raises:
            NoMatchingRuleError: If a paragraph matches no rule. The field is
                cleared and an error message is shown first.
        """
        if not self.paste_rules:
            current = get_current(handle.ref, handle.field)
            return [
                ComponentDescriptor(
                    component=current.name,
                    field=current.field,
                    value=parse(markup),
                    sanitize=True,
                )
            ]

        try:
            return match_components(split_paragraphs(markup), self.paste_rules)
        except NoMatchingRuleError as e:
            handle.value = ""
            if self.progress is not None:
                self.progress.open("error", f"Error pasting text: {e}")
            raise

    async def handle_paste(self, handle: FieldHandle, markup: str) -> list[str]:
        """
        Apply pasted content to the document.

        Args:
            handle: Field that received the paste.
            markup: The field's content once the pasted fragment is in place.

        Returns:
            References of the entries created for the paste.
        """
        components = self.classify(handle, pre_clean(markup))
        if not components:
            return []

        current, parent = self._locate(handle)
        first = components[0]

        if first.component == current.name:
            caret = self.focus.get_caret(handle)
            handle.value = _descriptor_markup(first)
            self.focus.set_caret(handle, caret)

            if parent is None:
                return []
            return await self.add_components(parent, components[1:], current=current)

        if parent is None:
            logger.warning("Cannot replace %s: it has no parent list", current.ref)
            if self.progress is not None:
                self.progress.open(
                    "error", f"Error pasting text: cannot add {first.component} here"
                )
            return []

        parent_data = await self.edit.get_entry_data_only(parent.ref)
        refs = [item.get(REFERENCE_PROPERTY) for item in parent_data.get(parent.field) or []]
        insert_index = refs.index(current.ref) if current.ref in refs else None

        await self.edit.remove_from_parent_list(current.ref, parent.field, parent.ref)
        return await self.add_components(parent, components, insert_index=insert_index)

    # --- Keyboard extras ---

    def insert_text(self, handle: FieldHandle, text: str) -> None:
        """Replace the selection with plain text and put the caret after it."""
        caret = self.focus.get_caret(handle)
        sequence = parse(handle.value)
        before, _ = split(sequence, caret.start)
        _, after = split(sequence, caret.end)

        handle.value = serialize(concat(before, RunSequence.from_runs([TextRun(text)]), after))
        self.focus.set_caret(handle, Caret.at(caret.start + len(text)))


# --- Component Entry Points ---


async def run(
    inp: DeleteKeyInput | EnterKeyInput | TabKeyInput | PasteInput,
    *,
    editor: FieldEditor,
) -> TransitionOutput:
    """
    Main entry point for the editor component.

    Translates one input event into a transition. Classification failures are
    reported in the output; port failures propagate.
    """
    handle = inp.handle

    if isinstance(inp, DeleteKeyInput):
        if not editor.enable_keyboard_extras:
            return TransitionOutput(transition="noop")
        merged = await editor.handle_delete_at_start(handle)
        if merged is None:
            return TransitionOutput(transition="noop")
        return TransitionOutput(transition="merge", refs=[merged])

    elif isinstance(inp, EnterKeyInput):
        if not editor.enable_keyboard_extras:
            await editor.focus.unfocus()
            return TransitionOutput(transition="unfocus")
        if inp.shift:
            editor.insert_text(handle, LINE_BREAK)
            return TransitionOutput(transition="line_break")

        transition = "split" if editor.has_trailing_text(handle) else "create"
        new_ref = await editor.handle_create_or_split(handle)
        if new_ref is None:
            return TransitionOutput(transition="noop")
        return TransitionOutput(transition=transition, refs=[new_ref])

    elif isinstance(inp, TabKeyInput):
        if not editor.enable_keyboard_extras:
            return TransitionOutput(transition="noop")
        editor.insert_text(handle, BULLET)
        return TransitionOutput(transition="bullet")

    elif isinstance(inp, PasteInput):
        try:
            refs = await editor.handle_paste(handle, inp.markup)
        except NoMatchingRuleError as e:
            return TransitionOutput(
                transition="paste",
                errors=[EditorError(code="no_matching_rule", message=f"Error pasting text: {e}")],
                success=False,
            )
        return TransitionOutput(transition="paste", refs=refs)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
