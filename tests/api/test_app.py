"""
Tests for application start-up.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.api.deps import get_rules, get_session, get_settings
from src.api.main import app, validate_paste_rules
from src.components.paste import PasteRuleConfigError
from src.components.textmodel import DEFAULT_SAME_AS, get_same_as, parse
from src.rules.loader import RULES_PATH_ENV, parse_rules

PROJECT_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture(autouse=True)
def fresh_dependencies(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv(RULES_PATH_ENV, str(PROJECT_ROOT / "rules.yaml"))
    for provider in (get_settings, get_rules, get_session):
        provider.cache_clear()
    yield
    for provider in (get_settings, get_rules, get_session):
        provider.cache_clear()


def test_health() -> None:
    with TestClient(app) as client:
        response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "api"}


def test_startup_applies_style_table() -> None:
    with TestClient(app):
        assert get_same_as() is not DEFAULT_SAME_AS
        assert get_same_as()["H2"] == "STRONG"
        assert parse("<h2>x</h2>").runs[0].marks == frozenset(["strong"])


def test_editor_routes_mounted() -> None:
    with TestClient(app) as client:
        document = client.post("/api/editor/documents", json={"text": "x"}).json()
        response = client.get("/api/editor/entries", params={"ref": document["child_ref"]})
    assert response.status_code == 200


def test_invalid_paste_rule_fails_validation() -> None:
    rules = parse_rules(
        {
            "project": {"slug": "x", "rules_version": "1"},
            "fields": {
                "paragraph.text": {
                    "paste": [{"match": "(unclosed", "component": "paragraph", "field": "text"}]
                }
            },
        }
    )
    with pytest.raises(PasteRuleConfigError):
        validate_paste_rules(rules)
