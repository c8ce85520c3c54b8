"""
Editor routes - translate host input events into editor transitions.

Each request carries the live state of the field being edited (reference,
field name, markup and caret). The transition runs against the session's
document store and the response describes where focus ended up.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.deps import EditorSession, build_editor, get_rules, get_session
from src.api.schemas import (
    CaretModel,
    DocumentCreateRequest,
    DocumentCreateResponse,
    EntryResponse,
    FieldInputBase,
    FocusState,
    KeyDownRequest,
    PasteRequest,
    TkCheckResponse,
    TkIssueResponse,
    TransitionResponse,
)
from src.components.editor import (
    Caret,
    DeleteKeyInput,
    EnterKeyInput,
    FieldHandle,
    PasteInput,
    TabKeyInput,
    TransitionOutput,
    run,
)
from src.components.paste import PasteRuleConfigError
from src.components.validators import TkCheckInput, run_tk_check
from src.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_entry(session: EditorSession, ref: str) -> None:
    if ref not in session.store:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Entry not found: {ref}")


def _open_field(session: EditorSession, body: FieldInputBase) -> FieldHandle:
    handle = FieldHandle(ref=body.ref, field=body.field, value=body.value)
    caret = Caret(start=body.caret.start, end=body.caret.end) if body.caret else None
    session.renderer.rebuild()
    return session.focus.track(handle, caret)


async def _finish(session: EditorSession, output: TransitionOutput) -> TransitionResponse:
    if not output.success:
        message = output.errors[0].message if output.errors else "Transition failed"
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=message)

    focused = session.focus.current
    state = None
    if focused is not None:
        caret = session.focus.get_caret(focused)
        state = FocusState(
            ref=focused.ref,
            field=focused.field,
            value=focused.value,
            caret=CaretModel(start=caret.start, end=caret.end),
        )

    # Requests are stateless, so whatever is still focused is saved now
    await session.focus.unfocus()
    return TransitionResponse(transition=output.transition, refs=output.refs, focus=state)


@router.post("/documents", response_model=DocumentCreateResponse, status_code=201)
async def create_document(
    body: DocumentCreateRequest,
    session: EditorSession = Depends(get_session),
) -> DocumentCreateResponse:
    """Create a root entry holding one text entry."""
    ref = session.store.add_root(body.component, {body.list_field: []})
    child_data = {body.child_field: body.text}
    child_ref = session.store.add_child(ref, body.list_field, body.child_component, child_data)
    session.renderer.rebuild()
    return DocumentCreateResponse(ref=ref, child_ref=child_ref)


@router.get("/entries", response_model=EntryResponse)
async def get_entry(
    ref: str = Query(...),
    session: EditorSession = Depends(get_session),
) -> EntryResponse:
    """Get the stored data of an entry."""
    _require_entry(session, ref)
    entry = session.store.get(ref)
    return EntryResponse(
        ref=entry.ref,
        parent_ref=entry.parent_ref,
        parent_field=entry.parent_field,
        data=entry.data,
    )


@router.post("/keydown", response_model=TransitionResponse)
async def key_down(
    body: KeyDownRequest,
    session: EditorSession = Depends(get_session),
    rules: Rules = Depends(get_rules),
) -> TransitionResponse:
    """Handle delete, enter or tab in a wysiwyg field."""
    _require_entry(session, body.ref)

    async with session.lock:
        try:
            editor = build_editor(session, rules, body.ref, body.field)
        except PasteRuleConfigError as e:
            raise HTTPException(status_code=500, detail=str(e)) from e

        handle = _open_field(session, body)
        inp: DeleteKeyInput | EnterKeyInput | TabKeyInput
        if body.key == "delete":
            inp = DeleteKeyInput(handle=handle)
        elif body.key == "enter":
            inp = EnterKeyInput(handle=handle, shift=body.shift)
        else:
            inp = TabKeyInput(handle=handle)

        output = await run(inp, editor=editor)
        return await _finish(session, output)


@router.post("/paste", response_model=TransitionResponse)
async def paste(
    body: PasteRequest,
    session: EditorSession = Depends(get_session),
    rules: Rules = Depends(get_rules),
) -> TransitionResponse:
    """Handle content pasted into a wysiwyg field."""
    _require_entry(session, body.ref)

    async with session.lock:
        try:
            editor = build_editor(session, rules, body.ref, body.field)
        except PasteRuleConfigError as e:
            raise HTTPException(status_code=500, detail=str(e)) from e

        handle = _open_field(session, body)
        output = await run(PasteInput(handle=handle, markup=body.markup), editor=editor)
        if not output.success:
            # The field was cleared; nothing is left to save
            session.focus.current = None
        return await _finish(session, output)


@router.get("/checks/tk", response_model=TkCheckResponse)
async def check_tks(session: EditorSession = Depends(get_session)) -> TkCheckResponse:
    """Report TK placeholders left in the document."""
    output = run_tk_check(TkCheckInput(entries=session.store.all_data()))
    return TkCheckResponse(
        label=output.info.label,
        description=output.info.description,
        type=output.info.type,
        issues=[
            TkIssueResponse(ref=i.ref, field=i.field, location=i.location, preview=i.preview)
            for i in output.issues
        ],
    )
