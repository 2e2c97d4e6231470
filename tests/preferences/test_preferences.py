"""
Tests for preference endpoints:
- GET /api/v1/preferences
- PUT /api/v1/preferences
"""

import pytest
from httpx import AsyncClient

PREFERENCES_URL = "/api/v1/preferences"

DEFAULTS = {
    "theme": "system",
    "language": "en",
    "cardsPerPage": 6,
    "notificationsEnabled": True,
    "compactView": False,
    "accentColor": "#0284c7",
}


class TestGetPreferences:
    """GET /api/v1/preferences tests."""

    async def test_defaults_when_nothing_saved(self, async_client: AsyncClient):
        response = await async_client.get(PREFERENCES_URL)
        assert response.status_code == 200
        assert response.json() == DEFAULTS


class TestSavePreferences:
    """PUT /api/v1/preferences tests."""

    async def test_save_merges_with_existing(self, async_client: AsyncClient, viewer_headers):
        """Saving one key leaves previously saved keys in place."""
        await async_client.put(PREFERENCES_URL, json={"theme": "dark"}, headers=viewer_headers)
        response = await async_client.put(PREFERENCES_URL, json={"cardsPerPage": 9}, headers=viewer_headers)

        assert response.status_code == 200
        assert response.json() == {**DEFAULTS, "theme": "dark", "cardsPerPage": 9}
        assert (await async_client.get(PREFERENCES_URL)).json() == response.json()

    async def test_save_requires_auth(self, async_client: AsyncClient):
        response = await async_client.put(PREFERENCES_URL, json={"theme": "dark"})
        assert response.status_code == 401

    @pytest.mark.parametrize(
        "body",
        [
            {"theme": "neon"},
            {"language": "it"},
            {"cardsPerPage": 2},
            {"cardsPerPage": 13},
            {"unknownKey": True},
        ],
    )
    async def test_invalid_values_return_400(self, async_client: AsyncClient, viewer_headers, body: dict):
        response = await async_client.put(PREFERENCES_URL, json=body, headers=viewer_headers)
        assert response.status_code == 400
        assert (await async_client.get(PREFERENCES_URL)).json() == DEFAULTS
