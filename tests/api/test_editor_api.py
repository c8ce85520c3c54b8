"""
Tests for the editor HTTP routes.
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.deps import EditorSession, create_session, get_rules, get_session
from src.api.routes import editor
from src.rules.models import Rules

# --- Test Setup ---


@pytest.fixture
def session() -> EditorSession:
    return create_session("test.local/site")


@pytest.fixture
def app(session: EditorSession, rules: Rules) -> FastAPI:
    """Test FastAPI app with editor routes."""
    app = FastAPI()
    app.include_router(editor.router, prefix="/api/editor")
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_rules] = lambda: rules
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def document(client: TestClient) -> dict[str, str]:
    response = client.post("/api/editor/documents", json={"text": "ABCD"})
    assert response.status_code == 201
    return response.json()


def _children(client: TestClient, ref: str) -> list[str]:
    response = client.get("/api/editor/entries", params={"ref": ref})
    assert response.status_code == 200
    return [item["_ref"] for item in response.json()["data"]["content"]]


# --- Documents ---


class TestDocuments:
    """Document creation and reads."""

    def test_create_document(self, client: TestClient, document) -> None:
        assert _children(client, document["ref"]) == [document["child_ref"]]

        response = client.get("/api/editor/entries", params={"ref": document["child_ref"]})
        body = response.json()
        assert body["data"] == {"text": "ABCD"}
        assert body["parent_ref"] == document["ref"]
        assert body["parent_field"] == "content"

    def test_unknown_entry(self, client: TestClient) -> None:
        response = client.get("/api/editor/entries", params={"ref": "nope/components/x/instances/1"})
        assert response.status_code == 404


# --- Key Events ---


class TestKeyDown:
    """Keyboard transitions over HTTP."""

    def test_enter_splits(self, client: TestClient, document) -> None:
        response = client.post(
            "/api/editor/keydown",
            json={
                "ref": document["child_ref"],
                "field": "text",
                "value": "ABCD",
                "caret": {"start": 2, "end": 2},
                "key": "enter",
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["transition"] == "split"
        new_ref = body["refs"][0]
        assert body["focus"]["ref"] == new_ref
        assert body["focus"]["value"] == "CD"
        assert _children(client, document["ref"]) == [document["child_ref"], new_ref]

        first = client.get("/api/editor/entries", params={"ref": document["child_ref"]}).json()
        assert first["data"]["text"] == "AB"

    def test_delete_at_start_merges(self, client: TestClient, document) -> None:
        split = client.post(
            "/api/editor/keydown",
            json={
                "ref": document["child_ref"],
                "field": "text",
                "value": "ABCD",
                "caret": {"start": 2, "end": 2},
                "key": "enter",
            },
        ).json()

        response = client.post(
            "/api/editor/keydown",
            json={
                "ref": split["refs"][0],
                "field": "text",
                "value": "CD",
                "caret": {"start": 0, "end": 0},
                "key": "delete",
            },
        )

        body = response.json()
        assert body["transition"] == "merge"
        assert body["focus"]["ref"] == document["child_ref"]
        assert body["focus"]["value"] == "ABCD"
        assert body["focus"]["caret"] == {"start": 2, "end": 2}
        assert _children(client, document["ref"]) == [document["child_ref"]]

    def test_tab_inserts_bullet(self, client: TestClient, document) -> None:
        response = client.post(
            "/api/editor/keydown",
            json={
                "ref": document["child_ref"],
                "field": "text",
                "value": "ABCD",
                "caret": {"start": 0, "end": 0},
                "key": "tab",
            },
        )

        body = response.json()
        assert body["transition"] == "bullet"
        assert body["focus"]["value"] == "•\xa0ABCD"

    def test_unknown_entry(self, client: TestClient) -> None:
        response = client.post(
            "/api/editor/keydown",
            json={"ref": "nope/components/paragraph/instances/1", "field": "text", "key": "enter"},
        )
        assert response.status_code == 404

    def test_invalid_key(self, client: TestClient, document) -> None:
        response = client.post(
            "/api/editor/keydown",
            json={"ref": document["child_ref"], "field": "text", "key": "escape"},
        )
        assert response.status_code == 422


# --- Paste ---


class TestPaste:
    """Paste transitions over HTTP."""

    def test_paste_inserts_components(self, client: TestClient, session, document) -> None:
        markup = "<p>One</p><blockquote>Two</blockquote>"
        response = client.post(
            "/api/editor/paste",
            json={
                "ref": document["child_ref"],
                "field": "text",
                "value": markup,
                "markup": markup,
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["transition"] == "paste"
        assert len(body["refs"]) == 1
        assert _children(client, document["ref"]) == [document["child_ref"], *body["refs"]]
        assert session.store.get(body["refs"][0]).data == {"text": "Two"}
        assert session.store.get(document["child_ref"]).data == {"text": "One"}

    def test_unmatched_paste(self, client: TestClient, session, rules: Rules) -> None:
        # Fields without a catch-all rule can reject a paste
        document = client.post(
            "/api/editor/documents",
            json={"child_component": "blockquote", "text": "kept"},
        ).json()
        rules.fields["blockquote.text"].paste = [
            rules.fields["paragraph.text"].paste[2],
        ]
        writes_before = list(session.store.writes)

        response = client.post(
            "/api/editor/paste",
            json={
                "ref": document["child_ref"],
                "field": "text",
                "value": "random unparseable $$$",
                "markup": "random unparseable $$$",
            },
        )

        assert response.status_code == 422
        assert response.json()["detail"] == (
            'Error pasting text: No rule found for "random unparseable $$$"'
        )
        assert session.store.writes == writes_before
        assert session.store.get(document["child_ref"]).data == {"text": "kept"}
        assert session.progress.messages[-1][0] == "error"


# --- Checks ---


class TestChecks:
    """Content checks over HTTP."""

    def test_tk_check(self, client: TestClient) -> None:
        client.post("/api/editor/documents", json={"text": "Needs a TK here"})

        response = client.get("/api/editor/checks/tk")

        assert response.status_code == 200
        body = response.json()
        assert body["label"] == "TKs"
        assert body["type"] == "warning"
        assert [issue["preview"] for issue in body["issues"]] == ["Needs a TK here"]
        assert body["issues"][0]["location"] == "Paragraph"
