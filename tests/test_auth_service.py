"""Tests for app.services.auth.SessionManager against an in-memory credential store."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from app.core.rbac import UserRole
from app.core.tokens import ACCESS_TOKEN, TokenIssuer
from app.schemas.auth import RegisterRequest
from app.services.auth import SessionManager
from app.services.errors import (
    AccessDenied,
    DuplicateEmail,
    InvalidCredentials,
    InvalidRefreshToken,
)
from app.services.user_store import UserStore
from tests.support import make_hasher, make_session_factory, make_settings


def _draft(email: str = "ann@x.com", password: str = "secret1", name: str = "Ann") -> RegisterRequest:
    return RegisterRequest(name=name, email=email, password=password)


class SessionManagerTestCase(unittest.TestCase):
    """Fresh database and session manager per test."""

    def setUp(self) -> None:
        self.session_factory = make_session_factory()
        self.db = self.session_factory()
        self.store = UserStore(self.db)
        self.hasher = make_hasher()
        self.issuer = TokenIssuer(make_settings())
        self.sessions = SessionManager(self.store, self.hasher, self.issuer)

    def tearDown(self) -> None:
        self.db.close()


class TestRegister(SessionManagerTestCase):
    def test_register_returns_tokens_and_viewer_profile(self) -> None:
        result = self.sessions.register(_draft())
        self.assertTrue(result.access_token)
        self.assertTrue(result.refresh_token)
        self.assertEqual(result.user.email, "ann@x.com")
        self.assertEqual(result.user.name, "Ann")
        self.assertEqual(result.user.role, UserRole.VIEWER)
        self.assertEqual(result.user.permissions, [])

    def test_profile_excludes_hashes(self) -> None:
        dumped = self.sessions.register(_draft()).user.model_dump()
        self.assertNotIn("password_hash", dumped)
        self.assertNotIn("refresh_token_hash", dumped)

    def test_register_stores_hashed_password_and_session(self) -> None:
        result = self.sessions.register(_draft())
        user = self.store.get_by_id(result.user.id)
        self.assertNotEqual(user.password_hash, "secret1")
        self.assertTrue(self.hasher.verify("secret1", user.password_hash))
        self.assertTrue(self.hasher.verify_token(result.refresh_token, user.refresh_token_hash))

    def test_duplicate_email_is_rejected(self) -> None:
        self.sessions.register(_draft())
        with self.assertRaises(DuplicateEmail):
            self.sessions.register(_draft(name="Other Ann", password="another1"))
        self.assertEqual(len(self.store.list_users()), 1)

    def test_duplicate_email_differs_only_in_case(self) -> None:
        self.sessions.register(_draft())
        with self.assertRaises(DuplicateEmail):
            self.sessions.register(_draft(email="ANN@X.COM"))

    def test_register_then_login_succeeds(self) -> None:
        self.sessions.register(_draft())
        result = self.sessions.login("ann@x.com", "secret1")
        self.assertTrue(result.access_token)
        self.assertTrue(result.refresh_token)

    def test_create_user_with_role_does_not_start_session(self) -> None:
        user = self.sessions.create_user(
            _draft(email="boss@x.com"), role=UserRole.ADMIN, permissions=["material.create"]
        )
        self.assertEqual(user.role, "ADMIN")
        self.assertEqual(user.permissions, ["material.create"])
        self.assertIsNone(user.refresh_token_hash)


class TestLogin(SessionManagerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.sessions.register(_draft())

    def test_wrong_password_and_unknown_email_fail_identically(self) -> None:
        with self.assertRaises(InvalidCredentials) as wrong_pw:
            self.sessions.login("ann@x.com", "wrong")
        with self.assertRaises(InvalidCredentials) as unknown:
            self.sessions.login("nobody@x.com", "secret1")
        self.assertEqual(type(wrong_pw.exception), type(unknown.exception))
        self.assertEqual(wrong_pw.exception.message, unknown.exception.message)

    def test_unknown_email_still_runs_bcrypt(self) -> None:
        hasher = MagicMock(wraps=self.hasher)
        sessions = SessionManager(self.store, hasher, self.issuer)
        with self.assertRaises(InvalidCredentials):
            sessions.login("nobody@x.com", "secret1")
        hasher.verify_dummy.assert_called_once_with("secret1")

    def test_failed_login_keeps_existing_session(self) -> None:
        first = self.sessions.login("ann@x.com", "secret1")
        with self.assertRaises(InvalidCredentials):
            self.sessions.login("ann@x.com", "wrong")
        self.sessions.refresh(first.refresh_token)

    def test_access_token_carries_identity(self) -> None:
        result = self.sessions.login("ann@x.com", "secret1")
        claims = self.issuer.verify(result.access_token, ACCESS_TOKEN)
        self.assertEqual(claims.sub, result.user.id)
        self.assertEqual(claims.email, "ann@x.com")
        self.assertEqual(claims.role, "VIEWER")

    def test_login_rotates_out_previous_refresh_token(self) -> None:
        first = self.sessions.login("ann@x.com", "secret1")
        self.sessions.login("ann@x.com", "secret1")
        with self.assertRaises(AccessDenied):
            self.sessions.refresh(first.refresh_token)


class TestRefresh(SessionManagerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.registered = self.sessions.register(_draft())
        self.login = self.sessions.login("ann@x.com", "secret1")

    def test_refresh_returns_new_pair(self) -> None:
        refreshed = self.sessions.refresh(self.login.refresh_token)
        self.assertNotEqual(refreshed.refresh_token, self.login.refresh_token)
        self.assertNotEqual(refreshed.access_token, self.login.access_token)
        self.assertEqual(refreshed.user.id, self.login.user.id)

    def test_original_token_is_stale_after_refresh(self) -> None:
        self.sessions.refresh(self.login.refresh_token)
        with self.assertRaises(AccessDenied):
            self.sessions.refresh(self.login.refresh_token)

    def test_token_is_stale_after_second_refresh(self) -> None:
        second = self.sessions.refresh(self.login.refresh_token)
        third = self.sessions.refresh(second.refresh_token)
        with self.assertRaises(AccessDenied):
            self.sessions.refresh(second.refresh_token)
        self.sessions.refresh(third.refresh_token)

    def test_token_issued_before_login_is_stale(self) -> None:
        with self.assertRaises(AccessDenied):
            self.sessions.refresh(self.registered.refresh_token)

    def test_refresh_after_logout_is_denied(self) -> None:
        self.sessions.logout(self.login.user.id)
        with self.assertRaises(AccessDenied):
            self.sessions.refresh(self.login.refresh_token)

    def test_malformed_token_is_invalid(self) -> None:
        with self.assertRaises(InvalidRefreshToken):
            self.sessions.refresh("not-a-jwt")

    def test_access_token_is_not_a_refresh_token(self) -> None:
        with self.assertRaises(InvalidRefreshToken):
            self.sessions.refresh(self.login.access_token)

    def test_expired_refresh_token_is_invalid(self) -> None:
        old_issuer = TokenIssuer(
            make_settings(), clock=lambda: datetime.now(UTC) - timedelta(days=8)
        )
        old = SessionManager(self.store, self.hasher, old_issuer).login("ann@x.com", "secret1")
        with self.assertRaises(InvalidRefreshToken):
            self.sessions.refresh(old.refresh_token)

    def test_deleted_user_is_denied(self) -> None:
        self.store.delete_user(self.login.user.id)
        with self.assertRaises(AccessDenied):
            self.sessions.refresh(self.login.refresh_token)

    def test_store_failure_is_normalized(self) -> None:
        store = MagicMock(spec=UserStore)
        store.get_by_id.side_effect = OperationalError("SELECT", {}, Exception("db down"))
        sessions = SessionManager(store, self.hasher, self.issuer)
        with self.assertRaises(InvalidRefreshToken):
            sessions.refresh(self.login.refresh_token)

    def test_unexpected_lookup_error_is_normalized(self) -> None:
        store = MagicMock(spec=UserStore)
        store.get_by_id.side_effect = RuntimeError("driver crashed")
        sessions = SessionManager(store, self.hasher, self.issuer)
        with self.assertRaises(InvalidRefreshToken):
            sessions.refresh(self.login.refresh_token)

    def test_failed_refresh_does_not_change_session(self) -> None:
        stored_before = self.store.get_by_id(self.login.user.id).refresh_token_hash
        with self.assertRaises(InvalidRefreshToken):
            self.sessions.refresh("garbage")
        self.db.expire_all()
        self.assertEqual(self.store.get_by_id(self.login.user.id).refresh_token_hash, stored_before)


class TestLogout(SessionManagerTestCase):
    def test_logout_clears_hash_and_is_idempotent(self) -> None:
        result = self.sessions.register(_draft())
        self.sessions.logout(result.user.id)
        self.sessions.logout(result.user.id)
        self.db.expire_all()
        self.assertIsNone(self.store.get_by_id(result.user.id).refresh_token_hash)

    def test_logout_of_unknown_user_is_not_an_error(self) -> None:
        self.sessions.logout("missing-id")

    def test_login_after_logout_starts_new_session(self) -> None:
        result = self.sessions.register(_draft())
        self.sessions.logout(result.user.id)
        again = self.sessions.login("ann@x.com", "secret1")
        self.sessions.refresh(again.refresh_token)


if __name__ == "__main__":
    unittest.main()
