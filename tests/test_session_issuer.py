"""Tests for the session issuers: OAuth sign-in callback and the seeded test account."""

import unittest
from datetime import timedelta

from cashbook.core.security import hash_password
from cashbook.models import AuthSession, User
from cashbook.services.session_issuer import OAuthSessionIssuer, TestSessionIssuer
from cashbook.services.session_resolver import SessionResolver
from cashbook.services.session_store import SessionStore
from db_support import add_user, make_session_factory

EXPIRES_IN = timedelta(days=7)


class IssuerTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.store = SessionStore(self.db)
        self.resolver = SessionResolver(self.store)

    def tearDown(self) -> None:
        self.db.close()

    def _resolve(self, token: str):
        return self.resolver.resolve(f"custom-auth-token={token}")


class TestOAuthSessionIssuer(IssuerTestCase):
    def test_new_user_gets_default_role(self) -> None:
        issuer = OAuthSessionIssuer(self.store, EXPIRES_IN, default_role="ADMIN")
        issued = issuer.sign_in("Nueva@Example.com", name="Nueva")
        self.assertEqual(issued.identity.role, "ADMIN")
        self.assertEqual(issued.identity.email, "nueva@example.com")
        self.assertEqual(self._resolve(issued.token).id, issued.identity.id)

    def test_configurable_default_role(self) -> None:
        issuer = OAuthSessionIssuer(self.store, EXPIRES_IN, default_role="USER")
        self.assertEqual(issuer.sign_in("otra@example.com").identity.role, "USER")

    def test_existing_user_keeps_role(self) -> None:
        add_user(self.db, "u1", "user1@example.com", role="USER")
        issuer = OAuthSessionIssuer(self.store, EXPIRES_IN, default_role="ADMIN")
        issued = issuer.sign_in("user1@example.com")
        self.assertEqual(issued.identity.id, "u1")
        self.assertEqual(issued.identity.role, "USER")

    def test_test_account_forced_to_user(self) -> None:
        issuer = OAuthSessionIssuer(self.store, EXPIRES_IN, default_role="ADMIN")
        issued = issuer.sign_in("test-user@example.com")
        self.assertEqual(issued.identity.role, "USER")
        stored = self.db.query(User).filter(User.email == "test-user@example.com").one()
        self.assertEqual(stored.role, "USER")

    def test_email_without_at_rejected(self) -> None:
        issuer = OAuthSessionIssuer(self.store, EXPIRES_IN, default_role="ADMIN")
        with self.assertRaises(ValueError):
            issuer.sign_in("not-an-email")
        self.assertEqual(self.db.query(AuthSession).count(), 0)

    def test_each_sign_in_creates_a_new_session(self) -> None:
        issuer = OAuthSessionIssuer(self.store, EXPIRES_IN, default_role="ADMIN")
        first = issuer.sign_in("ana@example.com")
        second = issuer.sign_in("ana@example.com")
        self.assertNotEqual(first.token, second.token)
        self.assertEqual(self.db.query(AuthSession).count(), 2)


class TestTestSessionIssuer(IssuerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.issuer = TestSessionIssuer(self.store, EXPIRES_IN, password="test-password")

    def test_ensure_creates_account(self) -> None:
        user = self.issuer.ensure_test_user()
        self.assertEqual(user.id, "test-user-id")
        self.assertEqual(user.role, "USER")
        self.assertTrue(user.email_verified)
        self.assertTrue(user.password_hash)

    def test_ensure_resets_role(self) -> None:
        add_user(self.db, "test-user-id", "test-user@example.com", role="ADMIN")
        self.assertEqual(self.issuer.ensure_test_user().role, "USER")

    def test_ensure_keeps_matching_hash(self) -> None:
        first_hash = self.issuer.ensure_test_user().password_hash
        self.assertEqual(self.issuer.ensure_test_user().password_hash, first_hash)

    def test_ensure_replaces_stale_hash(self) -> None:
        user = self.issuer.ensure_test_user()
        user.password_hash = hash_password("old-password")
        self.db.commit()
        self.issuer.ensure_test_user()
        self.assertIsNotNone(self.issuer.authenticate("test-user@example.com", "test-password"))

    def test_issue_resolves_to_user(self) -> None:
        issued = self.issuer.issue()
        identity = self._resolve(issued.token)
        self.assertEqual(identity.email, "test-user@example.com")
        self.assertEqual(identity.role, "USER")

    def test_authenticate(self) -> None:
        self.issuer.ensure_test_user()
        self.assertIsNotNone(self.issuer.authenticate("TEST-USER@example.com", "test-password"))
        self.assertIsNone(self.issuer.authenticate("test-user@example.com", "wrong-password"))
        self.assertIsNone(self.issuer.authenticate("admin@example.com", "test-password"))

    def test_authenticate_before_account_exists(self) -> None:
        self.assertIsNone(self.issuer.authenticate("test-user@example.com", "test-password"))


if __name__ == "__main__":
    unittest.main()
