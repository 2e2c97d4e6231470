"""
Tests for profile endpoints:
- GET /api/v1/profiles
- GET /api/v1/profiles/{id}
- POST /api/v1/profiles
- PUT /api/v1/profiles/{id}
- DELETE /api/v1/profiles/{id}
"""

from httpx import AsyncClient

PROFILES_URL = "/api/v1/profiles"


class TestProfileLifecycle:
    """Create, read, delete round trip."""

    async def test_create_get_delete_scenario(self, async_client: AsyncClient, admin_headers):
        """A created profile is readable until it is deleted."""
        body = {"profileId": "p1", "name": "A", "description": "0123456789"}

        response = await async_client.post(PROFILES_URL, json=body, headers=admin_headers)
        assert response.status_code == 201
        created = response.json()
        assert created["id"] == 1

        response = await async_client.get(f"{PROFILES_URL}/1")
        assert response.status_code == 200
        fetched = response.json()
        assert fetched["profileId"] == "p1"
        assert fetched["name"] == "A"
        assert fetched["description"] == "0123456789"
        assert fetched == created

        response = await async_client.delete(f"{PROFILES_URL}/1", headers=admin_headers)
        assert response.status_code == 204
        assert response.content == b""

        response = await async_client.get(f"{PROFILES_URL}/1")
        assert response.status_code == 404

    async def test_create_normalizes_optional_fields(
        self, async_client: AsyncClient, admin_headers, profile_payload
    ):
        """Missing searchId/photoUrl come back as null and documents as []."""
        response = await async_client.post(PROFILES_URL, json=profile_payload(), headers=admin_headers)
        data = response.json()
        assert data["searchId"] is None
        assert data["photoUrl"] is None
        assert data["documents"] == []

    async def test_create_generates_profile_id(
        self, async_client: AsyncClient, admin_headers, profile_payload
    ):
        """profileId is generated when the body leaves it out."""
        body = profile_payload()
        del body["profileId"]
        response = await async_client.post(PROFILES_URL, json=body, headers=admin_headers)
        assert response.status_code == 201
        assert response.json()["profileId"]

    async def test_create_keeps_documents_in_order(
        self, async_client: AsyncClient, admin_headers, profile_payload, document_payload
    ):
        """Documents are stored in the order they were sent."""
        docs = [document_payload("b"), document_payload("a"), document_payload("c")]
        response = await async_client.post(
            PROFILES_URL, json=profile_payload(documents=docs), headers=admin_headers
        )
        assert response.status_code == 201

        fetched = await async_client.get(f"{PROFILES_URL}/{response.json()['id']}")
        assert [d["id"] for d in fetched.json()["documents"]] == ["b", "a", "c"]
        assert fetched.json()["documents"][0]["dateAdded"] == "2026-10-19T12:00:00Z"


class TestCreateProfileErrors:
    """POST /api/v1/profiles failure modes."""

    async def test_duplicate_profile_id_returns_409(
        self, async_client: AsyncClient, admin_headers, profile_payload
    ):
        """A second profile with the same profileId is rejected."""
        first = await async_client.post(PROFILES_URL, json=profile_payload(), headers=admin_headers)
        assert first.status_code == 201

        second = await async_client.post(
            PROFILES_URL, json=profile_payload(name="Someone Else"), headers=admin_headers
        )
        assert second.status_code == 409
        assert second.json()["error"]["code"] == "CONFLICT"

    async def test_missing_fields_returns_400_listing_each_field(
        self, async_client: AsyncClient, admin_headers
    ):
        """Every failing field is named in the error."""
        response = await async_client.post(PROFILES_URL, json={"profileId": "p1"}, headers=admin_headers)
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert "name" in error["message"]
        assert "description" in error["message"]
        assert len(error["details"]) == 2

    async def test_empty_name_returns_400(
        self, async_client: AsyncClient, admin_headers, profile_payload
    ):
        response = await async_client.post(
            PROFILES_URL, json=profile_payload(name=""), headers=admin_headers
        )
        assert response.status_code == 400

    async def test_wrong_type_returns_400(
        self, async_client: AsyncClient, admin_headers, profile_payload
    ):
        response = await async_client.post(
            PROFILES_URL, json=profile_payload(documents="not-a-list"), headers=admin_headers
        )
        assert response.status_code == 400

    async def test_error_includes_request_id(
        self, async_client: AsyncClient, admin_headers
    ):
        response = await async_client.post(PROFILES_URL, json={}, headers=admin_headers)
        error = response.json()["error"]
        assert error["request_id"] == response.headers["X-Request-ID"]


class TestProfileAuthorization:
    """Mutations require an admin bearer header."""

    async def test_create_without_auth_returns_401(
        self, async_client: AsyncClient, profile_payload
    ):
        response = await async_client.post(PROFILES_URL, json=profile_payload())
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    async def test_create_with_unknown_user_returns_401(
        self, async_client: AsyncClient, auth_headers, profile_payload
    ):
        response = await async_client.post(
            PROFILES_URL, json=profile_payload(), headers=auth_headers("nobody")
        )
        assert response.status_code == 401

    async def test_malformed_header_returns_401(
        self, async_client: AsyncClient, profile_payload
    ):
        response = await async_client.post(
            PROFILES_URL, json=profile_payload(), headers={"Authorization": "Basic admin"}
        )
        assert response.status_code == 401

    async def test_viewer_cannot_create(
        self, async_client: AsyncClient, viewer_headers, profile_payload
    ):
        response = await async_client.post(PROFILES_URL, json=profile_payload(), headers=viewer_headers)
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    async def test_viewer_cannot_update_or_delete(
        self, async_client: AsyncClient, admin_headers, viewer_headers, profile_payload
    ):
        created = await async_client.post(PROFILES_URL, json=profile_payload(), headers=admin_headers)
        profile_id = created.json()["id"]

        update = await async_client.put(
            f"{PROFILES_URL}/{profile_id}", json=profile_payload(), headers=viewer_headers
        )
        delete = await async_client.delete(f"{PROFILES_URL}/{profile_id}", headers=viewer_headers)
        assert update.status_code == 403
        assert delete.status_code == 403

    async def test_reads_do_not_require_auth(self, async_client: AsyncClient):
        response = await async_client.get(PROFILES_URL)
        assert response.status_code == 200


class TestGetProfile:
    """GET /api/v1/profiles/{id} tests."""

    async def test_non_integer_id_returns_400(self, async_client: AsyncClient):
        response = await async_client.get(f"{PROFILES_URL}/abc")
        assert response.status_code == 400

    async def test_missing_profile_returns_404(self, async_client: AsyncClient):
        response = await async_client.get(f"{PROFILES_URL}/999")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


class TestUpdateProfile:
    """PUT /api/v1/profiles/{id} tests."""

    async def test_update_replaces_all_fields(
        self, async_client: AsyncClient, admin_headers, profile_payload, document_payload
    ):
        """Fields left out of the update are reset, not kept."""
        created = await async_client.post(
            PROFILES_URL,
            json=profile_payload(searchId="S-1", photoUrl="https://example.com/a.png", documents=[document_payload()]),
            headers=admin_headers,
        )
        profile_id = created.json()["id"]

        response = await async_client.put(
            f"{PROFILES_URL}/{profile_id}",
            json=profile_payload(name="Alice Jones", description="Updated description"),
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == profile_id
        assert data["name"] == "Alice Jones"
        assert data["searchId"] is None
        assert data["photoUrl"] is None
        assert data["documents"] == []

    async def test_update_then_get_round_trips(
        self, async_client: AsyncClient, admin_headers, profile_payload, document_payload
    ):
        created = await async_client.post(PROFILES_URL, json=profile_payload(), headers=admin_headers)
        profile_id = created.json()["id"]
        replacement = profile_payload(
            profileId="p1-renamed",
            name="Bob",
            description="Another description",
            searchId="B-7",
            photoUrl="https://example.com/b.png",
            documents=[document_payload("x")],
        )

        await async_client.put(f"{PROFILES_URL}/{profile_id}", json=replacement, headers=admin_headers)
        fetched = (await async_client.get(f"{PROFILES_URL}/{profile_id}")).json()

        assert fetched == {"id": profile_id, **replacement}

    async def test_update_missing_profile_returns_404(
        self, async_client: AsyncClient, admin_headers, profile_payload
    ):
        response = await async_client.put(
            f"{PROFILES_URL}/999", json=profile_payload(), headers=admin_headers
        )
        assert response.status_code == 404

    async def test_update_invalid_body_returns_400(
        self, async_client: AsyncClient, admin_headers, profile_payload
    ):
        created = await async_client.post(PROFILES_URL, json=profile_payload(), headers=admin_headers)
        response = await async_client.put(
            f"{PROFILES_URL}/{created.json()['id']}",
            json={"name": "No description"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    async def test_update_to_taken_profile_id_returns_409(
        self, async_client: AsyncClient, admin_headers, profile_payload
    ):
        await async_client.post(PROFILES_URL, json=profile_payload(profileId="first"), headers=admin_headers)
        second = await async_client.post(
            PROFILES_URL, json=profile_payload(profileId="second"), headers=admin_headers
        )

        response = await async_client.put(
            f"{PROFILES_URL}/{second.json()['id']}",
            json=profile_payload(profileId="first"),
            headers=admin_headers,
        )
        assert response.status_code == 409


class TestDeleteProfile:
    """DELETE /api/v1/profiles/{id} tests."""

    async def test_delete_twice_returns_404_second_time(
        self, async_client: AsyncClient, admin_headers, profile_payload
    ):
        created = await async_client.post(PROFILES_URL, json=profile_payload(), headers=admin_headers)
        url = f"{PROFILES_URL}/{created.json()['id']}"

        assert (await async_client.delete(url, headers=admin_headers)).status_code == 204
        assert (await async_client.delete(url, headers=admin_headers)).status_code == 404

    async def test_ids_are_not_reused_after_delete(
        self, async_client: AsyncClient, admin_headers, profile_payload
    ):
        first = await async_client.post(PROFILES_URL, json=profile_payload(profileId="a"), headers=admin_headers)
        await async_client.delete(f"{PROFILES_URL}/{first.json()['id']}", headers=admin_headers)

        second = await async_client.post(PROFILES_URL, json=profile_payload(profileId="b"), headers=admin_headers)
        assert second.json()["id"] > first.json()["id"]
