from collections.abc import Iterator
from pathlib import Path

import pytest

from src.adapters.memory_document import InMemoryDocumentStore, clear_schema_cache
from src.adapters.memory_view import InMemoryFocus, InMemoryRenderer, LoggingProgress
from src.components.editor import FieldEditor
from src.components.textmodel import reset_same_as
from src.rules.loader import load_rules
from src.rules.models import Rules

PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def reset_process_state() -> Iterator[None]:
    """Process-wide tables must not leak between tests."""
    clear_schema_cache()
    reset_same_as()
    yield
    clear_schema_cache()
    reset_same_as()


@pytest.fixture
def rules() -> Rules:
    """Load REAL rules from project root."""
    rules_path = (PROJECT_ROOT / "rules.yaml").resolve()
    if not rules_path.exists():
        raise FileNotFoundError(f"Rules not found at {rules_path}")
    return load_rules(rules_path)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore(prefix="test.local/site")


@pytest.fixture
def renderer(store: InMemoryDocumentStore) -> InMemoryRenderer:
    return InMemoryRenderer(store)


@pytest.fixture
def focus(store: InMemoryDocumentStore) -> InMemoryFocus:
    return InMemoryFocus(store)


@pytest.fixture
def progress() -> LoggingProgress:
    return LoggingProgress()


@pytest.fixture
def article(store: InMemoryDocumentStore) -> str:
    """Root entry with an empty content list."""
    return store.add_root("article", {"content": []}, instance_id="a1")


@pytest.fixture
def make_editor(
    store: InMemoryDocumentStore,
    renderer: InMemoryRenderer,
    focus: InMemoryFocus,
    progress: LoggingProgress,
):
    """Build a field editor over the in-memory services."""

    def _make(paste_rules=(), enable_keyboard_extras: bool = True) -> FieldEditor:
        renderer.rebuild()
        return FieldEditor(
            edit=store,
            render=renderer,
            focus=focus,
            progress=progress,
            paste_rules=paste_rules,
            enable_keyboard_extras=enable_keyboard_extras,
        )

    return _make
