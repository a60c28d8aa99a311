"""
Route authorization end to end: get_current_user / require_role on a small guarded app
backed by SQLite, plus the real API for the protected-account scenario.
"""

import unittest
from datetime import timedelta
from typing import Annotated
from unittest.mock import MagicMock

from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from cashbook.api.v1.auth import get_current_user, get_session_store, require_admin
from cashbook.core.errors import register_exception_handlers
from cashbook.core.security import token_sources
from cashbook.main import app as api_app
from cashbook.models import User
from cashbook.schemas.auth import CurrentUser
from cashbook.services.session_store import AuthInfraError
from db_support import add_session, add_user, bind_app, make_session_factory

PROVIDER_COOKIE = token_sources()[1].name


def _guarded_app() -> FastAPI:
    """Minimal app whose handlers echo what the authorization layer attached."""
    guarded = FastAPI()
    register_exception_handlers(guarded)
    calls: list[str] = []
    guarded.state.calls = calls

    @guarded.get("/any")
    def any_user(
        request: Request,
        user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> dict:
        calls.append("any")
        return {"role": user.role, "id": user.id, "state_role": request.state.user.role}

    @guarded.get("/admin")
    def admin_only(user: Annotated[CurrentUser, Depends(require_admin)]) -> dict:
        calls.append("admin")
        return {"role": user.role}

    return guarded


class TestRouteAuthorizationScenarios(unittest.TestCase):
    def setUp(self) -> None:
        self.factory = make_session_factory()
        db = self.factory()
        add_user(db, "u-admin", "admin@example.com", role="ADMIN")
        add_user(db, "u-user", "user1@example.com", role="USER")
        add_session(db, "u-admin", "abc123")
        add_session(db, "u-user", "user-token")
        add_session(db, "u-admin", "expired1", expires_in=timedelta(hours=-1))
        db.close()
        self.app = _guarded_app()
        self.client = bind_app(self.app, self.factory)

    def test_scenario_a_valid_admin_session_allowed(self) -> None:
        response = self.client.get("/any", headers={"Cookie": "custom-auth-token=abc123"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"role": "ADMIN", "id": "u-admin", "state_role": "ADMIN"},
        )

    def test_scenario_b_expired_session_rejected(self) -> None:
        response = self.client.get("/any", headers={"Cookie": "session-token=expired1"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "No autenticado"})
        self.assertEqual(self.app.state.calls, [])

    def test_scenario_c_user_on_admin_route(self) -> None:
        response = self.client.get("/admin", headers={"Cookie": "custom-auth-token=user-token"})
        self.assertEqual(response.status_code, 403)
        body = response.json()
        self.assertIn("error", body)
        self.assertEqual(body["userRole"], "USER")
        self.assertEqual(body["requiredRole"], "ADMIN")
        self.assertEqual(self.app.state.calls, [])

    def test_admin_on_admin_route(self) -> None:
        response = self.client.get("/admin", headers={"Cookie": "custom-auth-token=abc123"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.app.state.calls, ["admin"])

    def test_provider_cookie_accepted(self) -> None:
        response = self.client.get("/any", headers={"Cookie": f"{PROVIDER_COOKIE}=user-token"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["role"], "USER")

    def test_no_cookie_header(self) -> None:
        response = self.client.get("/any")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "No autenticado"})

    def test_unknown_token(self) -> None:
        response = self.client.get("/admin", headers={"Cookie": "custom-auth-token=forged"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "No autenticado"})

    def test_unauthenticated_beats_role_check(self) -> None:
        response = self.client.get("/admin", headers={"Cookie": "session-token=expired1"})
        self.assertEqual(response.status_code, 401)


class TestRouteAuthorizationFailsClosed(unittest.TestCase):
    """Store faults and the cookie pre-check, with a mock store in place of the database."""

    def setUp(self) -> None:
        self.store = MagicMock()
        self.app = _guarded_app()
        self.app.dependency_overrides[get_session_store] = lambda: self.store
        self.client = TestClient(self.app)

    def test_precheck_skips_store(self) -> None:
        response = self.client.get("/any", headers={"Cookie": "theme=dark"})
        self.assertEqual(response.status_code, 401)
        self.store.find_active_session.assert_not_called()

    def test_infra_error_is_401(self) -> None:
        self.store.find_active_session.side_effect = AuthInfraError("database unreachable")
        with self.assertLogs("cashbook.api.v1.auth", level="ERROR"):
            response = self.client.get("/any", headers={"Cookie": "custom-auth-token=abc123"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Error de autenticación"})
        self.assertEqual(self.app.state.calls, [])

    def test_unexpected_error_is_401(self) -> None:
        self.store.find_active_session.side_effect = RuntimeError("boom")
        with self.assertLogs("cashbook.api.v1.auth", level="ERROR"):
            response = self.client.get("/admin", headers={"Cookie": "custom-auth-token=abc123"})
        self.assertEqual(response.status_code, 401)
        self.assertNotIn("boom", response.text)
        self.assertEqual(self.app.state.calls, [])


class TestProtectedTestAccount(unittest.TestCase):
    """Scenario D: the seeded test account cannot be deleted, whoever asks."""

    def setUp(self) -> None:
        self.factory = make_session_factory()
        db = self.factory()
        add_user(db, "u-admin", "admin@example.com", role="ADMIN")
        add_user(db, "u-user", "user1@example.com", role="USER")
        add_user(db, "test-user-id", "test-user@example.com", role="USER")
        add_session(db, "u-admin", "admin-token")
        add_session(db, "u-user", "user-token")
        db.close()
        self.client = bind_app(api_app, self.factory)

    def tearDown(self) -> None:
        api_app.dependency_overrides.clear()

    def _delete_test_user(self, token: str):
        return self.client.request(
            "DELETE",
            "/api/v1/users",
            json={"userId": "test-user-id"},
            headers={"Cookie": f"custom-auth-token={token}"},
        )

    def test_admin_cannot_delete_test_account(self) -> None:
        response = self._delete_test_user("admin-token")
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error"], "No se puede eliminar el usuario de pruebas")

    def test_user_cannot_delete_test_account(self) -> None:
        response = self._delete_test_user("user-token")
        self.assertEqual(response.status_code, 403)

    def test_test_account_still_exists(self) -> None:
        self._delete_test_user("admin-token")
        self._delete_test_user("user-token")

        db = self.factory()
        try:
            self.assertIsNotNone(db.query(User).filter(User.id == "test-user-id").first())
        finally:
            db.close()


if __name__ == "__main__":
    unittest.main()
