"""Integration tests for the example application.

Drives the minimal example app through a complete search with Litestar's
test client.
"""

from __future__ import annotations

from typing import Any

import pytest
from litestar.testing import AsyncTestClient


def field_value(data: dict[str, Any], name: str) -> Any:
    """Return the value of a rendered field by name."""
    for section in data["sections"]:
        for field in section["fields"]:
            if field["name"] == name:
                return field.get("value")
    raise AssertionError(f"field {name} not rendered")


@pytest.mark.e2e
@pytest.mark.asyncio
class TestMinimalApp:
    """Integration tests for the minimal example app."""

    @pytest.fixture
    def app(self) -> Any:
        """Get the minimal example app."""
        from examples.minimal.app import app

        return app

    async def test_root_lists_entry_points(self, app: Any) -> None:
        """Test the root route points to the form endpoints."""
        async with AsyncTestClient(app=app) as client:
            response = await client.get("/")

            assert response.status_code == 200
            assert response.json()["search"] == "/workflow/index?wf_type=search_scep"

    async def test_search_flow(self, app: Any) -> None:
        """Test searching the seeded enrollment ends on its choice form."""
        async with AsyncTestClient(app=app) as client:
            response = await client.get("/workflow/index", params={"wf_type": "search_scep"})
            assert response.status_code == 200
            assert field_value(response.json(), "wf_type") == "search_scep"

            response = await client.post("/workflow/action", data={"wf_type": "search_scep"})
            assert response.status_code == 200
            token = field_value(response.json(), "wf_token")
            assert token

            response = await client.post("/workflow/action", data={"wf_token": token, "transaction_id": "ABC123"})
            data = response.json()
            assert data["redirect"] == "workflow!load!wf_id!1"

            response = await client.get("/workflow/load", params={"wf_id": "1"})
            data = response.json()
            assert [s["target"] for s in data["sections"]] == ["select", "select"]

    async def test_search_without_match(self, app: Any) -> None:
        """Test an unknown transaction id renders the no result page."""
        async with AsyncTestClient(app=app) as client:
            response = await client.post("/workflow/action", data={"wf_type": "search_scep"})
            token = field_value(response.json(), "wf_token")

            response = await client.post("/workflow/action", data={"wf_token": token, "transaction_id": "NOPE"})
            data = response.json()

            assert "redirect" not in data
            assert field_value(data, "error_code") == "I18N_OPENXPKI_UI_SEARCH_HAS_NO_MATCHES"
            assert field_value(data, "transaction_id") == "NOPE"
