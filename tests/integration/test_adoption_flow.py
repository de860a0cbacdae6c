"""
Integration tests for the complete adoption flow.

Drives the HTTP API end to end against the in-memory database:
register -> login -> profile -> pet CRUD -> user management.
"""

from datetime import datetime
from urllib.parse import urlencode

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.repository.mongo import USERS_COLLECTION

pytestmark = pytest.mark.integration

PETS = "/api/mascotas"
USERS = "/api/usuarios"


def login(client: TestClient, email: str, password: str) -> dict[str, str]:
    response = client.post(f"{USERS}/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def registered(client: TestClient, user_data: dict) -> dict:
    response = client.post(f"{USERS}/register", json=user_data)
    assert response.status_code == 201, response.text
    return response.json()["user"]


@pytest.fixture
def auth(client: TestClient, registered: dict, user_data: dict) -> dict[str, str]:
    return login(client, user_data["email"], user_data["password"])


class TestRegistration:
    def test_register_returns_sanitized_user(self, client: TestClient, user_data: dict) -> None:
        response = client.post(f"{USERS}/register", json=user_data)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "user registered"
        user = body["user"]
        assert user["email"] == "ana@example.com"
        assert user["fullName"] == "Ana García"
        assert user["role"] == "user"
        assert user["isAdmin"] is False
        assert "password" not in user
        assert "passwordHash" not in user

    async def test_stored_hash_is_not_plaintext(
        self, app: FastAPI, client: TestClient, registered: dict, user_data: dict
    ) -> None:
        document = await app.state.connection.database[USERS_COLLECTION].find_one(
            {"email": "ana@example.com"}
        )

        assert document is not None
        assert document["password_hash"] != user_data["password"]
        assert document["password_hash"].startswith("$2b$")
        assert "password" not in document

    def test_duplicate_email(self, client: TestClient, registered: dict, user_data: dict) -> None:
        response = client.post(f"{USERS}/register", json={**user_data, "email": "ANA@example.com"})

        assert response.status_code == 400
        assert response.json() == {"error": "user already exists"}

    def test_invalid_field(self, client: TestClient, user_data: dict) -> None:
        response = client.post(f"{USERS}/register", json={**user_data, "password": "test1234!"})

        assert response.status_code == 400
        assert "uppercase" in response.json()["error"]

    def test_form_with_blank_surname(self, client: TestClient, user_data: dict) -> None:
        response = client.post(
            f"{USERS}/register",
            content=urlencode({**user_data, "surname": ""}),
            headers={"Content-Type": "Application/X-WWW-Form-Urlencoded"},
        )

        assert response.status_code == 201, response.text
        user = response.json()["user"]
        assert user["surname"] is None
        assert user["fullName"] == "Ana"


class TestLogin:
    def test_login_issues_token(self, client: TestClient, registered: dict, user_data: dict) -> None:
        response = client.post(
            f"{USERS}/login", json={"email": user_data["email"], "password": user_data["password"]}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "authenticated"
        assert body["token"].count(".") == 2
        assert body["user"]["id"] == registered["id"]
        assert "passwordHash" not in body["user"]

    def test_login_reports_refreshed_last_access(
        self, client: TestClient, registered: dict, user_data: dict
    ) -> None:
        response = client.post(
            f"{USERS}/login", json={"email": user_data["email"], "password": user_data["password"]}
        )

        logged_in_at = datetime.fromisoformat(response.json()["user"]["lastAccess"])
        registered_at = datetime.fromisoformat(registered["lastAccess"])
        assert logged_in_at > registered_at

    def test_wrong_password(self, client: TestClient, registered: dict) -> None:
        response = client.post(
            f"{USERS}/login", json={"email": "ana@example.com", "password": "Wrong1234!"}
        )

        assert response.status_code == 401
        assert response.json() == {"error": "invalid credentials"}

    def test_unknown_email_looks_the_same(self, client: TestClient) -> None:
        response = client.post(
            f"{USERS}/login", json={"email": "nobody@example.com", "password": "Test1234!"}
        )

        assert response.status_code == 401
        assert response.json() == {"error": "invalid credentials"}

    def test_profile_with_token(self, client: TestClient, auth: dict, registered: dict) -> None:
        response = client.get(f"{USERS}/profile", headers=auth)

        assert response.status_code == 200
        profile = response.json()
        assert profile["id"] == registered["id"]
        assert profile["email"] == "ana@example.com"
        assert "passwordHash" not in profile
        assert profile["lastAccess"] is not None


class TestPetLifecycle:
    def test_create_read_update_delete(self, client: TestClient, auth: dict, pet_data: dict) -> None:
        created = client.post(PETS, json=pet_data, headers=auth)
        assert created.status_code == 201
        pet = created.json()
        assert pet["humanAge"] == 35
        assert pet["adopted"] is False

        listed = client.get(PETS)
        assert [p["id"] for p in listed.json()] == [pet["id"]]

        updated = client.put(f"{PETS}/{pet['id']}", json={"adopted": True}, headers=auth)
        assert updated.status_code == 200
        assert updated.json()["adopted"] is True
        assert updated.json()["name"] == "Firulais"
        assert updated.json()["breed"] == "Mestizo"

        fetched = client.get(f"{PETS}/{pet['id']}")
        assert fetched.json()["adopted"] is True

        removed = client.delete(f"{PETS}/{pet['id']}", headers=auth)
        assert removed.status_code == 200
        assert removed.json()["id"] == pet["id"]

        assert client.get(f"{PETS}/{pet['id']}").status_code == 404
        assert client.delete(f"{PETS}/{pet['id']}", headers=auth).status_code == 404

    def test_invalid_update_leaves_pet_unchanged(
        self, client: TestClient, auth: dict, pet_data: dict
    ) -> None:
        pet = client.post(PETS, json=pet_data, headers=auth).json()

        response = client.put(f"{PETS}/{pet['id']}", json={"age": 31}, headers=auth)

        assert response.status_code == 400
        assert response.json() == {"error": "age cannot exceed 30"}
        assert client.get(f"{PETS}/{pet['id']}").json()["age"] == 5

    def test_update_missing_pet(self, client: TestClient, auth: dict) -> None:
        response = client.put(f"{PETS}/65f0c0ffee0000000000abcd", json={"adopted": True}, headers=auth)

        assert response.status_code == 404
        assert response.json() == {"error": "pet not found"}

    def test_cat_human_age(self, client: TestClient, auth: dict, pet_data: dict) -> None:
        pet = client.post(PETS, json={**pet_data, "kind": "Cat"}, headers=auth).json()

        assert pet["humanAge"] == 30


class TestUserManagement:
    def test_list_and_get(self, client: TestClient, auth: dict, registered: dict) -> None:
        listed = client.get(USERS, headers=auth)
        assert listed.status_code == 200
        assert [u["email"] for u in listed.json()] == ["ana@example.com"]

        fetched = client.get(f"{USERS}/{registered['id']}", headers=auth)
        assert fetched.status_code == 200
        assert fetched.json()["fullName"] == "Ana García"

    def test_update_password(self, client: TestClient, auth: dict, registered: dict) -> None:
        response = client.put(f"{USERS}/{registered['id']}", json={"password": "Newpass1!"}, headers=auth)
        assert response.status_code == 200

        login(client, "ana@example.com", "Newpass1!")
        old = client.post(f"{USERS}/login", json={"email": "ana@example.com", "password": "Test1234!"})
        assert old.status_code == 401

    @pytest.mark.parametrize("key", ["passwordHash", "password_hash"])
    async def test_update_cannot_set_raw_hash(
        self, app: FastAPI, client: TestClient, auth: dict, registered: dict, key: str
    ) -> None:
        users = app.state.connection.database[USERS_COLLECTION]
        before = (await users.find_one({"email": "ana@example.com"}))["password_hash"]

        response = client.put(
            f"{USERS}/{registered['id']}", json={key: "plaintext-secret"}, headers=auth
        )

        assert response.status_code == 200
        after = (await users.find_one({"email": "ana@example.com"}))["password_hash"]
        assert after == before
        login(client, "ana@example.com", "Test1234!")

    def test_update_to_taken_email(
        self, client: TestClient, auth: dict, registered: dict, user_data: dict
    ) -> None:
        other = client.post(
            f"{USERS}/register", json={**user_data, "email": "otra@example.com"}
        ).json()["user"]

        response = client.put(f"{USERS}/{other['id']}", json={"email": "ana@example.com"}, headers=auth)

        assert response.status_code == 409
        assert response.json() == {"error": "duplicate value for email"}

    def test_delete_user(self, client: TestClient, auth: dict, registered: dict) -> None:
        removed = client.delete(f"{USERS}/{registered['id']}", headers=auth)
        assert removed.status_code == 200
        assert removed.json()["id"] == registered["id"]

        assert client.get(f"{USERS}/{registered['id']}", headers=auth).status_code == 404
        assert client.get(f"{USERS}/profile", headers=auth).status_code == 404

    def test_malformed_user_id(self, client: TestClient, auth: dict) -> None:
        response = client.get(f"{USERS}/xyz", headers=auth)

        assert response.status_code == 400
        assert response.json() == {"error": "invalid id"}
