"""MQTT credential management and the broker auth hooks."""

import pytest
from httpx import AsyncClient
from sqlmodel import select

from src.iotauth.core.db import get_session
from src.iotauth.core.security import verify_password
from src.iotauth.models import MqttCredential
from tests.factories import DEFAULT_MQTT_PASSWORD, MqttCredentialFactory
from tests.helpers import api_key_headers, api_path, fetch, seed

pytestmark = pytest.mark.integration


async def post(client: AsyncClient, path: str, payload: dict[str, object]):
    return await client.post(api_path(f"/mqtt{path}"), json=payload, headers=api_key_headers())


class TestCreate:
    async def test_create_stores_a_hash(self, client: AsyncClient, engine: object) -> None:
        response = await post(
            client, "/create", {"username": "sensor-01", "password": DEFAULT_MQTT_PASSWORD}
        )

        assert response.status_code == 201
        assert response.json()["message"] == "MQTT User created successfully"
        assert response.json()["data"] == {"username": "sensor-01", "is_superuser": False}

        listing = await client.get(api_path("/mqtt"), headers=api_key_headers())
        assert listing.json()["data"]["mqtt"][0]["username"] == "sensor-01"

    async def test_password_is_not_stored_in_clear(
        self, client: AsyncClient, engine: object
    ) -> None:
        await post(
            client, "/create", {"username": "sensor-05", "password": DEFAULT_MQTT_PASSWORD}
        )

        async with get_session() as session:
            result = await session.execute(
                select(MqttCredential).where(MqttCredential.username == "sensor-05")
            )
            stored = result.scalar_one()

        assert stored.hashed_password != DEFAULT_MQTT_PASSWORD
        assert verify_password(DEFAULT_MQTT_PASSWORD, stored.hashed_password)

    async def test_duplicate_username_is_409(self, client: AsyncClient, engine: object) -> None:
        existing = MqttCredentialFactory.build()
        await seed(existing)

        response = await post(
            client, "/create", {"username": existing.username, "password": DEFAULT_MQTT_PASSWORD}
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Username already exists"

    async def test_deleted_username_stays_reserved(
        self, client: AsyncClient, engine: object
    ) -> None:
        gone = MqttCredentialFactory.deleted()
        await seed(gone)

        response = await post(
            client, "/create", {"username": gone.username, "password": DEFAULT_MQTT_PASSWORD}
        )

        assert response.status_code == 409

    @pytest.mark.parametrize(
        "payload",
        [
            {"password": DEFAULT_MQTT_PASSWORD},
            {"username": "sensor-02"},
            {"username": "sensor-02", "password": DEFAULT_MQTT_PASSWORD, "is_superuser": "yes"},
        ],
    )
    async def test_structural_errors_are_400(
        self, client: AsyncClient, engine: object, payload: dict[str, object]
    ) -> None:
        response = await post(client, "/create", payload)

        assert response.status_code == 400
        assert "result" not in response.json()

    @pytest.mark.parametrize(
        ("username", "password"),
        [
            ("bad name!", DEFAULT_MQTT_PASSWORD),
            ("ab", DEFAULT_MQTT_PASSWORD),
            ("sensor-03", "password"),
        ],
    )
    async def test_rule_violations_are_422(
        self, client: AsyncClient, engine: object, username: str, password: str
    ) -> None:
        response = await post(client, "/create", {"username": username, "password": password})

        assert response.status_code == 422

    async def test_requires_api_key(self, client: AsyncClient, engine: object) -> None:
        response = await client.post(
            api_path("/mqtt/create"),
            json={"username": "sensor-04", "password": DEFAULT_MQTT_PASSWORD},
        )

        assert response.status_code == 401


class TestCheckHook:
    async def test_allow(self, client: AsyncClient, engine: object) -> None:
        credential = MqttCredentialFactory.superuser()
        await seed(credential)

        response = await post(
            client, "/check", {"username": credential.username, "password": DEFAULT_MQTT_PASSWORD}
        )

        assert response.status_code == 200
        assert response.json() == {
            "status": True,
            "message": "Authentication successful",
            "data": {"is_superuser": True},
            "result": "allow",
        }

    async def test_wrong_password_is_deny(self, client: AsyncClient, engine: object) -> None:
        credential = MqttCredentialFactory.build()
        await seed(credential)

        response = await post(
            client, "/check", {"username": credential.username, "password": "Wrong#Pass123"}
        )

        assert response.status_code == 200
        assert response.json()["result"] == "deny"
        assert response.json()["message"] == "Invalid information"
        assert "data" not in response.json()

    async def test_unknown_user_is_ignore(self, client: AsyncClient, engine: object) -> None:
        response = await post(
            client, "/check", {"username": "nobody", "password": DEFAULT_MQTT_PASSWORD}
        )

        assert response.status_code == 200
        assert response.json()["result"] == "ignore"
        assert response.json()["message"] == "User not found"

    async def test_deleted_user_is_ignore(self, client: AsyncClient, engine: object) -> None:
        gone = MqttCredentialFactory.deleted()
        await seed(gone)

        response = await post(
            client, "/check", {"username": gone.username, "password": DEFAULT_MQTT_PASSWORD}
        )

        assert response.json()["result"] == "ignore"

    async def test_malformed_request_is_ignore(
        self, client: AsyncClient, engine: object
    ) -> None:
        response = await post(client, "/check", {"username": "sensor-01"})

        assert response.status_code == 422
        body = response.json()
        assert body["status"] is False
        assert body["result"] == "ignore"
        assert body["details"][0]["field"] == "password"


class TestAclHook:
    async def test_superuser_may_use_any_topic(
        self, client: AsyncClient, engine: object
    ) -> None:
        credential = MqttCredentialFactory.superuser()
        await seed(credential)

        response = await post(
            client,
            "/acl",
            {"username": credential.username, "topic": "users/someone/x", "access": "publish"},
        )

        assert response.json()["result"] == "allow"
        assert response.json()["message"] == "Superuser authorized"

    @pytest.mark.parametrize("access", ["publish", "subscribe"])
    async def test_own_topic_tree_is_allowed(
        self, client: AsyncClient, engine: object, access: str
    ) -> None:
        credential = MqttCredentialFactory.build()
        await seed(credential)

        response = await post(
            client,
            "/acl",
            {
                "username": credential.username,
                "topic": f"users/{credential.username}/telemetry",
                "access": access,
            },
        )

        assert response.json()["result"] == "allow"
        assert response.json()["message"] == "Authorization successful"

    @pytest.mark.parametrize(
        "topic_template",
        ["users/other/telemetry", "users/{username}", "users/{username}x/data", "public/feed"],
    )
    async def test_other_topics_are_denied(
        self, client: AsyncClient, engine: object, topic_template: str
    ) -> None:
        credential = MqttCredentialFactory.build()
        await seed(credential)
        topic = topic_template.format(username=credential.username)

        response = await post(
            client, "/acl", {"username": credential.username, "topic": topic, "access": "publish"}
        )

        assert response.status_code == 200
        assert response.json()["result"] == "deny"
        assert response.json()["message"] == "Permission denied"

    async def test_unknown_user_is_denied(self, client: AsyncClient, engine: object) -> None:
        response = await post(
            client, "/acl", {"username": "ghost", "topic": "users/ghost/a", "access": "publish"}
        )

        assert response.json()["result"] == "deny"

    async def test_unknown_access_is_ignore(self, client: AsyncClient, engine: object) -> None:
        response = await post(
            client, "/acl", {"username": "ghost", "topic": "users/ghost/a", "access": "delete"}
        )

        assert response.status_code == 422
        assert response.json()["result"] == "ignore"


class TestListAndDelete:
    async def test_list_excludes_deleted(self, client: AsyncClient, engine: object) -> None:
        live = MqttCredentialFactory.build()
        gone = MqttCredentialFactory.deleted()
        await seed(live, gone)

        response = await client.get(api_path("/mqtt"), headers=api_key_headers())

        assert response.status_code == 200
        assert response.json()["data"]["mqtt"] == [
            {"username": live.username, "is_superuser": False, "is_deleted": False}
        ]

    async def test_delete_then_404(self, client: AsyncClient, engine: object) -> None:
        credential = MqttCredentialFactory.build()
        await seed(credential)
        path = api_path(f"/mqtt/{credential.username}")

        first = await client.delete(path, headers=api_key_headers())
        second = await client.delete(path, headers=api_key_headers())

        assert first.status_code == 200
        assert first.json() == {"status": True, "message": "MQTT User deleted successfully"}
        assert second.status_code == 404
        assert second.json()["message"] == "MQTT User not found"
        assert (await fetch(MqttCredential, credential.id)).deleted_at is not None

    async def test_deleted_credential_can_no_longer_connect(
        self, client: AsyncClient, engine: object
    ) -> None:
        credential = MqttCredentialFactory.build()
        await seed(credential)
        await client.delete(api_path(f"/mqtt/{credential.username}"), headers=api_key_headers())

        response = await post(
            client, "/check", {"username": credential.username, "password": DEFAULT_MQTT_PASSWORD}
        )

        assert response.json()["result"] == "ignore"
