"""
Editor rules loader.

Reads the editor rules file (plain YAML, or a markdown document wrapping a
```yaml fenced block) and validates it against the rules schema. Invalid
rules must halt editor start-up.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from src.rules.models import Rules

DEFAULT_RULES_FILE = "rules.yaml"
RULES_PATH_ENV = "EDITOR_RULES_PATH"


def _strip_markdown_fences(content: str) -> str:
    """Return the first ```yaml block of a markdown document, or the content as-is."""
    yaml_lines: list[str] = []
    in_block = False
    found_block = False

    for line in content.splitlines():
        stripped = line.strip()
        if stripped.startswith("```yaml"):
            in_block = True
            found_block = True
            continue
        if in_block and stripped.startswith("```"):
            break
        if in_block:
            yaml_lines.append(line)

    return "\n".join(yaml_lines) if found_block else content


def parse_rules(data: dict[str, Any]) -> Rules:
    """
    Validate already-parsed rules data.

    Raises:
        ValueError: If the data does not match the rules schema.
    """
    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e


def load_rules(path: Path) -> Rules:
    """
    Load and validate the rules file.

    Raises:
        FileNotFoundError: If the file is missing.
        ValueError: If the YAML is invalid, empty, or fails validation.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    content = _strip_markdown_fences(path.read_text())

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    if data is None:
        raise ValueError(f"Rules file is empty: {path}")

    return parse_rules(data)


def get_rules_path() -> Path:
    """Rules path from the environment, defaulting to rules.yaml in the working directory."""
    return Path(os.environ.get(RULES_PATH_ENV, DEFAULT_RULES_FILE))
