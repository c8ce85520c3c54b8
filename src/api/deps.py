import asyncio
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from src.adapters.memory_document import DEFAULT_PREFIX, InMemoryDocumentStore
from src.adapters.memory_view import InMemoryFocus, InMemoryRenderer, LoggingProgress
from src.components.editor import FieldEditor
from src.domain.references import get_component_name
from src.rules.loader import get_rules_path, load_rules
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.rules_path = get_rules_path()
        self.site_prefix = os.environ.get("EDITOR_SITE_PREFIX", DEFAULT_PREFIX)


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Editing Session ---
@dataclass
class EditorSession:
    """Document and view state shared by all editor requests."""

    store: InMemoryDocumentStore
    renderer: InMemoryRenderer
    focus: InMemoryFocus
    progress: LoggingProgress
    # One transition at a time
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


def create_session(prefix: str = DEFAULT_PREFIX) -> EditorSession:
    store = InMemoryDocumentStore(prefix=prefix)
    return EditorSession(
        store=store,
        renderer=InMemoryRenderer(store),
        focus=InMemoryFocus(store),
        progress=LoggingProgress(),
    )


@lru_cache
def get_session(settings: Settings = Depends(get_settings)) -> EditorSession:
    return create_session(settings.site_prefix)


# --- Component Services ---
def build_editor(session: EditorSession, rules: Rules, ref: str, field_name: str) -> FieldEditor:
    """Field editor for one wysiwyg field, configured from the rules file."""
    component = get_component_name(ref) or ""
    return FieldEditor.from_rules(
        rules.field_rules(component, field_name),
        edit=session.store,
        render=session.renderer,
        focus=session.focus,
        progress=session.progress,
    )
