"""
Checkstate: States API Tests
==============================

What:  End-to-end tests for /api/states and /api/state through the ASGI app.
How:   HTTPX AsyncClient over ASGITransport against a fresh app whose storage
       root is a temporary directory (see conftest.py).

What we test:
    ✅ The documented request/response scenarios, bodies compared exactly
    ✅ Every 400 message of the update endpoint
    ✅ Storage failures surface as 500 with the step's message
    ✅ Any HTTP method reaches both handlers
"""

from pathlib import Path

import pytest

from checkstate.main import create_app


class TestGetStates:
    """GET /api/states."""

    @pytest.mark.asyncio
    async def test_fresh_document_is_empty(self, test_client):
        response = await test_client.get("/api/states", params={"md_id": "doc1"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert response.json() == {"checked": []}

    @pytest.mark.asyncio
    async def test_missing_md_id(self, test_client):
        response = await test_client.get("/api/states")

        assert response.status_code == 400
        assert response.text == "md_id query parameter is required"
        assert response.headers["content-type"].startswith("text/plain")

    @pytest.mark.asyncio
    async def test_empty_md_id(self, test_client):
        response = await test_client.get("/api/states?md_id=")

        assert response.status_code == 400
        assert response.text == "md_id query parameter is required"

    @pytest.mark.asyncio
    async def test_first_md_id_wins(self, test_client):
        await test_client.post("/api/state", json={"md_id": "doc1", "check_id": "a", "state": True})

        response = await test_client.get("/api/states?md_id=doc1&md_id=doc2")

        assert response.json() == {"checked": ["a"]}

    @pytest.mark.asyncio
    async def test_read_failure(self, test_client, data_dir):
        Path(data_dir).mkdir()
        (Path(data_dir) / "doc1").write_text("not a directory")

        response = await test_client.get("/api/states", params={"md_id": "doc1"})

        assert response.status_code == 500
        assert response.text == "Failed to read directory"


class TestUpdateState:
    """POST/PUT /api/state."""

    @pytest.mark.asyncio
    async def test_check_then_list(self, test_client):
        response = await test_client.post(
            "/api/state", json={"md_id": "doc1", "check_id": "a", "state": True}
        )

        assert response.status_code == 200
        assert response.text == "State updated successfully"

        response = await test_client.get("/api/states", params={"md_id": "doc1"})
        assert response.json() == {"checked": ["a"]}

    @pytest.mark.asyncio
    async def test_uncheck_then_list(self, test_client):
        await test_client.post("/api/state", json={"md_id": "doc1", "check_id": "a", "state": True})

        response = await test_client.post(
            "/api/state", json={"md_id": "doc1", "check_id": "a", "state": False}
        )
        assert response.status_code == 200
        assert response.text == "State updated successfully"

        response = await test_client.get("/api/states", params={"md_id": "doc1"})
        assert response.json() == {"checked": []}

    @pytest.mark.asyncio
    async def test_put_is_an_update(self, test_client):
        response = await test_client.put(
            "/api/state", json={"md_id": "doc1", "check_id": "b", "state": True}
        )

        assert response.status_code == 200
        response = await test_client.get("/api/states", params={"md_id": "doc1"})
        assert response.json() == {"checked": ["b"]}

    @pytest.mark.asyncio
    async def test_missing_state_means_unchecked(self, test_client):
        await test_client.post("/api/state", json={"md_id": "doc1", "check_id": "a", "state": True})

        response = await test_client.post("/api/state", json={"md_id": "doc1", "check_id": "a"})

        assert response.status_code == 200
        response = await test_client.get("/api/states", params={"md_id": "doc1"})
        assert response.json() == {"checked": []}

    @pytest.mark.asyncio
    async def test_unknown_fields_are_ignored(self, test_client):
        response = await test_client.post(
            "/api/state",
            json={"md_id": "doc1", "check_id": "a", "state": True, "label": "Write tests"},
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_invalid_json(self, test_client):
        response = await test_client.post("/api/state", content=b"not json")

        assert response.status_code == 400
        assert response.text == "Invalid JSON"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            b"",
            b"[]",
            b'{"md_id": 1, "check_id": "a", "state": true}',
            b'{"md_id": "doc1", "check_id": "a", "state": "true"}',
        ],
    )
    async def test_undecodable_bodies(self, test_client, body):
        response = await test_client.post("/api/state", content=body)

        assert response.status_code == 400
        assert response.text == "Invalid JSON"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            b"null",
            b'{"md_id": null, "check_id": "a", "state": true}',
            b'{"md_id": "doc1", "check_id": null}',
        ],
    )
    async def test_null_values_decode_as_empty(self, test_client, body):
        """null is valid JSON: it leaves fields empty rather than failing to decode."""
        response = await test_client.post("/api/state", content=body)

        assert response.status_code == 400
        assert response.text == "md_id and check_id are required"

    @pytest.mark.asyncio
    async def test_null_state_means_unchecked(self, test_client):
        await test_client.post("/api/state", json={"md_id": "doc1", "check_id": "a", "state": True})

        response = await test_client.post(
            "/api/state", content=b'{"md_id": "doc1", "check_id": "a", "state": null}'
        )

        assert response.status_code == 200
        response = await test_client.get("/api/states", params={"md_id": "doc1"})
        assert response.json() == {"checked": []}

    @pytest.mark.asyncio
    async def test_keys_match_case_insensitively(self, test_client):
        response = await test_client.post(
            "/api/state", json={"MD_ID": "doc1", "Check_ID": "a", "State": True}
        )

        assert response.status_code == 200
        assert response.text == "State updated successfully"
        response = await test_client.get("/api/states", params={"md_id": "doc1"})
        assert response.json() == {"checked": ["a"]}

    @pytest.mark.asyncio
    async def test_wrong_type_still_rejected_with_folded_key(self, test_client):
        response = await test_client.post(
            "/api/state", json={"MD_ID": "doc1", "check_id": "a", "STATE": "yes"}
        )

        assert response.status_code == 400
        assert response.text == "Invalid JSON"

    @pytest.mark.asyncio
    async def test_body_read_failure(self, settings):
        """A client that disconnects before sending its body gets a 400."""
        app = create_app(settings)
        scope = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": "POST",
            "scheme": "http",
            "path": "/api/state",
            "raw_path": b"/api/state",
            "root_path": "",
            "query_string": b"",
            "headers": [(b"content-type", b"application/json")],
            "client": ("127.0.0.1", 50000),
            "server": ("test", 80),
        }
        sent = []

        async def receive():
            return {"type": "http.disconnect"}

        async def send(message):
            sent.append(message)

        await app(scope, receive, send)

        start = next(m for m in sent if m["type"] == "http.response.start")
        body = b"".join(m.get("body", b"") for m in sent if m["type"] == "http.response.body")
        assert start["status"] == 400
        assert body == b"Failed to read request body"

    @pytest.mark.asyncio
    async def test_empty_md_id(self, test_client):
        response = await test_client.post(
            "/api/state", json={"md_id": "", "check_id": "a", "state": True}
        )

        assert response.status_code == 400
        assert response.text == "md_id and check_id are required"

    @pytest.mark.asyncio
    async def test_missing_check_id(self, test_client):
        response = await test_client.post("/api/state", json={"md_id": "doc1", "state": True})

        assert response.status_code == 400
        assert response.text == "md_id and check_id are required"

    @pytest.mark.asyncio
    async def test_rejected_update_writes_nothing(self, test_client, data_dir):
        await test_client.post("/api/state", json={"md_id": "doc1", "check_id": "", "state": True})

        assert not Path(data_dir, "doc1").exists()

    @pytest.mark.asyncio
    async def test_directory_creation_failure(self, test_client, data_dir):
        Path(data_dir).mkdir()
        (Path(data_dir) / "doc1").write_text("blocks the directory")

        response = await test_client.post(
            "/api/state", json={"md_id": "doc1", "check_id": "a", "state": True}
        )

        assert response.status_code == 500
        assert response.text == "Failed to create directory"

    @pytest.mark.asyncio
    async def test_file_creation_failure(self, test_client, data_dir):
        (Path(data_dir) / "doc1" / "a").mkdir(parents=True)

        response = await test_client.post(
            "/api/state", json={"md_id": "doc1", "check_id": "a", "state": True}
        )

        assert response.status_code == 500
        assert response.text == "Failed to create file"

    @pytest.mark.asyncio
    async def test_file_removal_failure(self, test_client, data_dir):
        (Path(data_dir) / "doc1" / "a").mkdir(parents=True)

        response = await test_client.post(
            "/api/state", json={"md_id": "doc1", "check_id": "a", "state": False}
        )

        assert response.status_code == 500
        assert response.text == "Failed to remove file"


class TestMethodAgnosticRouting:
    """Neither path restricts the HTTP method."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "PATCH", "TRACE", "PROPFIND"])
    async def test_states_accepts_any_method(self, test_client, method):
        response = await test_client.request(method, "/api/states", params={"md_id": "doc1"})

        assert response.status_code == 200
        assert response.json() == {"checked": []}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["TRACE", "PROPFIND", "MKCOL"])
    async def test_state_accepts_nonstandard_methods(self, test_client, method):
        response = await test_client.request(
            method,
            "/api/state",
            json={"md_id": "doc1", "check_id": "a", "state": True},
        )

        assert response.status_code == 200
        assert response.text == "State updated successfully"

    @pytest.mark.asyncio
    async def test_unknown_path_is_still_404(self, test_client):
        response = await test_client.request("PROPFIND", "/api/other")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_get_on_state_runs_the_update_handler(self, test_client):
        """A GET carries no body, so it fails JSON decoding rather than routing."""
        response = await test_client.get("/api/state")

        assert response.status_code == 400
        assert response.text == "Invalid JSON"

    @pytest.mark.asyncio
    async def test_delete_with_body_updates(self, test_client):
        response = await test_client.request(
            "DELETE",
            "/api/state",
            json={"md_id": "doc1", "check_id": "a", "state": True},
        )

        assert response.status_code == 200
        assert response.text == "State updated successfully"
