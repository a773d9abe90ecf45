"""End-to-end tests for the user directory HTTP API."""

from __future__ import annotations

import sqlite3
import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from userhub import create_api_app, create_app
from userhub.application import create_application
from userhub.config import Settings
from userhub.database import Database


class UserDirectoryAPITests(unittest.TestCase):
    def setUp(self) -> None:
        self._tempdir = tempfile.TemporaryDirectory()
        db_path = Path(self._tempdir.name) / "userhub.sqlite3"
        self.settings = Settings(database_path=db_path)
        self.database = Database(db_path)
        self.database.initialize()

    def tearDown(self) -> None:
        self._tempdir.cleanup()

    def _client(self) -> TestClient:
        app = create_application(settings=self.settings, database=self.database)
        return TestClient(app)

    def test_user_lifecycle(self) -> None:
        with self._client() as client:
            created = client.post("/api/users", json={"id": None, "name": "A"})
            self.assertEqual(created.status_code, 200, created.text)
            self.assertEqual(created.json(), {"id": 1, "name": "A"})

            fetched = client.get("/api/users/1")
            self.assertEqual(fetched.status_code, 200, fetched.text)
            self.assertEqual(fetched.json(), {"id": 1, "name": "A"})

            deleted = client.delete("/api/users/1")
            self.assertEqual(deleted.status_code, 204, deleted.text)
            self.assertEqual(deleted.content, b"")

            missing = client.get("/api/users/1")
            self.assertEqual(missing.status_code, 404)
            self.assertEqual(missing.content, b"")

    def test_save_with_existing_id_updates_record(self) -> None:
        with self._client() as client:
            created = client.post(
                "/api/users",
                json={"name": "Alice", "email": "alice@example.com", "phone": "555-0100"},
            )
            user_id = created.json()["id"]

            updated = client.post(
                "/api/users",
                json={"id": user_id, "name": "Alice Smith", "department": "Finance"},
            )
            self.assertEqual(updated.status_code, 200, updated.text)
            self.assertEqual(
                updated.json(),
                {"id": user_id, "name": "Alice Smith", "department": "Finance"},
            )

            listing = client.get("/api/users")
            self.assertEqual(listing.status_code, 200, listing.text)
            self.assertEqual(listing.json(), [updated.json()])

    def test_list_reflects_saved_and_deleted_users(self) -> None:
        with self._client() as client:
            ids = [client.post("/api/users", json={"name": name}).json()["id"] for name in ("A", "B", "C")]
            client.delete(f"/api/users/{ids[1]}")

            listing = client.get("/api/users")
            self.assertEqual([item["id"] for item in listing.json()], [ids[0], ids[2]])

    def test_delete_unknown_user_returns_no_content(self) -> None:
        with self._client() as client:
            response = client.delete("/api/users/77")
            self.assertEqual(response.status_code, 204)

    def test_identifiers_outside_integer_range_are_rejected(self) -> None:
        too_large = 2**63
        with self._client() as client:
            self.assertEqual(client.get(f"/api/users/{too_large}").status_code, 422)
            self.assertEqual(client.get(f"/api/users/{-too_large - 1}").status_code, 422)
            self.assertEqual(client.delete(f"/api/users/{too_large}").status_code, 422)
            self.assertEqual(
                client.post("/api/users", json={"id": too_large, "name": "Big"}).status_code,
                422,
            )

            largest = 2**63 - 1
            self.assertEqual(client.get(f"/api/users/{largest}").status_code, 404)
            saved = client.post("/api/users", json={"id": largest, "name": "Edge"})
            self.assertEqual(saved.status_code, 200, saved.text)
            self.assertEqual(saved.json(), {"id": largest, "name": "Edge"})

    def test_cross_origin_requests_are_allowed(self) -> None:
        with self._client() as client:
            response = client.get("/api/users", headers={"Origin": "http://frontend.example"})
            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.headers.get("access-control-allow-origin"), "*")

            preflight = client.options(
                "/api/users",
                headers={
                    "Origin": "http://frontend.example",
                    "Access-Control-Request-Method": "DELETE",
                },
            )
            self.assertEqual(preflight.status_code, 200)

    def test_database_errors_become_server_errors(self) -> None:
        def broken() -> None:
            raise sqlite3.OperationalError("database is locked")

        self.database.list_users = broken  # type: ignore[method-assign]

        with self._client() as client:
            response = client.get("/api/users")
            self.assertEqual(response.status_code, 500)
            self.assertEqual(response.json(), {"detail": "Database error"})

    def test_healthcheck(self) -> None:
        with self._client() as client:
            response = client.get("/api/health")
            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.json(), {"status": "ok"})

    def test_api_app_serves_routes_without_prefix(self) -> None:
        app = create_api_app(database=self.database)

        with TestClient(app) as client:
            created = client.post("/users", json={"name": "Unmounted", "email": "u@example.com"})
            self.assertEqual(created.status_code, 200, created.text)
            user_id = created.json()["id"]
            self.assertEqual(
                client.get(f"/users/{user_id}").json(),
                {"id": user_id, "name": "Unmounted", "email": "u@example.com"},
            )

    def test_package_factory_builds_combined_app(self) -> None:
        with TestClient(create_app(settings=self.settings, database=self.database)) as client:
            self.assertEqual(client.get("/api/users").json(), [])

    def test_prompt_route_absent_without_gateway(self) -> None:
        with self._client() as client:
            response = client.post("/api/prompt", json={"prompt": "hello"})
            self.assertEqual(response.status_code, 404)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
