"""
Content entry references.

A reference is an opaque, tree-unique id of the form
``<site prefix>/components/<component name>/instances/<instance id>``.
Only the component name is ever read back out of it.
"""

from __future__ import annotations

import re
from uuid import uuid4

REFERENCE_PROPERTY = "_ref"
COMPONENTS_ROUTE = "/components/"
INSTANCES_ROUTE = "/instances/"

_COMPONENT_NAME = re.compile(r"/components/([^/@.]+)")


def get_component_name(ref: str) -> str | None:
    """Component name from a reference, or None if it is not a component reference."""
    match = _COMPONENT_NAME.search(ref)
    return match.group(1) if match else None


def create_instance_ref(prefix: str, component: str, instance_id: str | None = None) -> str:
    return f"{prefix}{COMPONENTS_ROUTE}{component}{INSTANCES_ROUTE}{instance_id or uuid4().hex}"


def get_site_prefix(ref: str) -> str:
    index = ref.find(COMPONENTS_ROUTE)
    return ref[:index] if index >= 0 else ""


def label(component: str) -> str:
    """Human label for a component name, e.g. 'page-title' -> 'Page Title'."""
    return " ".join(word.capitalize() for word in re.split(r"[-_]", component) if word)
