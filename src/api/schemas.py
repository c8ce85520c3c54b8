from typing import Any, Literal

from pydantic import BaseModel, Field

# --- Shared Types ---
Key = Literal["delete", "enter", "tab"]


class CaretModel(BaseModel):
    start: int = Field(ge=0)
    end: int = Field(ge=0)


# --- Documents ---
class DocumentCreateRequest(BaseModel):
    component: str = "article"
    list_field: str = "content"
    child_component: str = "paragraph"
    child_field: str = "text"
    text: str = ""


class DocumentCreateResponse(BaseModel):
    ref: str
    child_ref: str


class EntryResponse(BaseModel):
    ref: str
    parent_ref: str | None = None
    parent_field: str | None = None
    data: dict[str, Any]


# --- Field Input ---
class FieldInputBase(BaseModel):
    ref: str
    field: str
    value: str = ""
    caret: CaretModel | None = None


class KeyDownRequest(FieldInputBase):
    key: Key
    shift: bool = False


class PasteRequest(FieldInputBase):
    # Field content once the pasted fragment is in place
    markup: str


class FocusState(BaseModel):
    ref: str
    field: str
    value: str
    caret: CaretModel


class TransitionResponse(BaseModel):
    transition: str
    refs: list[str] = []
    focus: FocusState | None = None


# --- Checks ---
class TkIssueResponse(BaseModel):
    ref: str
    field: str
    location: str
    preview: str


class TkCheckResponse(BaseModel):
    label: str
    description: str
    type: str
    issues: list[TkIssueResponse] = []
