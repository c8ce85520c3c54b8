"""
Rules file loading and validation tests.

Verifies that the loader accepts plain YAML and markdown-wrapped YAML, and
fails fast on missing, malformed or invalid rules.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from src.rules.loader import (
    DEFAULT_RULES_FILE,
    RULES_PATH_ENV,
    get_rules_path,
    load_rules,
    parse_rules,
)
from src.rules.models import Rules, WysiwygFieldRules

MINIMAL: dict[str, Any] = {
    "project": {"slug": "test", "rules_version": "1"},
    "fields": {
        "paragraph.text": {
            "enableKeyboardExtras": True,
            "paste": [
                {"match": "(.+)", "component": "paragraph", "field": "text", "sanitize": True},
            ],
        }
    },
}


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent


def write_rules(tmp_path: Path, content: str, name: str = "rules.yaml") -> Path:
    path = tmp_path / name
    path.write_text(content)
    return path


class TestRulesLoading:
    """Rules file loading."""

    def test_load_project_rules(self, project_root: Path) -> None:
        """Project rules file loads successfully."""
        rules = load_rules(project_root / "rules.yaml")
        assert isinstance(rules, Rules)
        assert rules.project.slug == "wysiwyg-paste-engine"
        assert rules.same_as["H1"] == "STRONG"

    def test_load_plain_yaml(self, tmp_path: Path) -> None:
        rules = load_rules(write_rules(tmp_path, yaml.dump(MINIMAL)))
        field_rules = rules.field_rules("paragraph", "text")
        assert field_rules.enable_keyboard_extras is True
        assert field_rules.paste[0].component == "paragraph"

    def test_load_markdown_wrapped_yaml(self, tmp_path: Path) -> None:
        content = f"# Rules\n\nSome prose.\n\n```yaml\n{yaml.dump(MINIMAL)}```\n\nMore prose.\n"
        rules = load_rules(write_rules(tmp_path, content, "rules.md"))
        assert rules.project.slug == "test"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_rules(write_rules(tmp_path, "invalid: yaml: content: ["))

    def test_empty_file(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="empty"):
            load_rules(write_rules(tmp_path, ""))

    def test_schema_violation(self, tmp_path: Path) -> None:
        bad = {"project": {"slug": "x"}}
        with pytest.raises(ValueError, match="validation failed"):
            load_rules(write_rules(tmp_path, yaml.dump(bad)))


class TestRulesModel:
    """Rules schema behavior."""

    def test_unconfigured_field_gets_defaults(self) -> None:
        rules = parse_rules(MINIMAL)
        assert rules.field_rules("image", "caption") == WysiwygFieldRules()

    def test_match_link_alias_and_name(self) -> None:
        rules = parse_rules(
            {
                "project": {"slug": "x", "rules_version": "1"},
                "fields": {
                    "a.b": {
                        "paste": [
                            {"match": "x", "matchLink": True, "component": "c", "field": "f"},
                            {"match": "y", "match_link": True, "component": "c", "field": "f"},
                        ]
                    }
                },
            }
        )
        assert [rule.match_link for rule in rules.field_rules("a", "b").paste] == [True, True]


class TestRulesPath:
    """Rules path resolution."""

    def test_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(RULES_PATH_ENV, raising=False)
        assert get_rules_path() == Path(DEFAULT_RULES_FILE)

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv(RULES_PATH_ENV, str(tmp_path / "custom.yaml"))
        assert get_rules_path() == tmp_path / "custom.yaml"
