"""
Session manager: register, login, refresh and logout.

Session state lives entirely in User.refresh_token_hash. Login, register and
refresh overwrite it (rotation); logout clears it. A refresh token is accepted
only while its hash matches the stored one, so each successful refresh
consumes the presented token.
"""

import logging
from dataclasses import dataclass

from app.core.rbac import UserRole
from app.core.security import PasswordHasher
from app.core.tokens import REFRESH_TOKEN, InvalidToken, TokenClaims, TokenIssuer
from app.models.user import User
from app.schemas.auth import RegisterRequest, UserProfile
from app.services.errors import AccessDenied, InvalidCredentials, InvalidRefreshToken
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionTokens:
    """Result of a successful login, register or refresh."""

    access_token: str
    refresh_token: str
    user: UserProfile


class SessionManager:
    """Orchestrates the credential store, password hasher and token issuer."""

    def __init__(self, store: UserStore, hasher: PasswordHasher, issuer: TokenIssuer) -> None:
        self.store = store
        self.hasher = hasher
        self.issuer = issuer

    def register(self, draft: RegisterRequest) -> SessionTokens:
        """Create a VIEWER account and log it in. Raises DuplicateEmail."""
        user = self.create_user(draft)
        logger.info("Registered user id=%s", user.id)
        return self._start_session(user)

    def create_user(
        self,
        draft: RegisterRequest,
        role: UserRole = UserRole.VIEWER,
        permissions: list[str] | None = None,
    ) -> User:
        """Hash the password and persist the account without logging it in."""
        return self.store.create(
            email=draft.email,
            name=draft.name,
            password_hash=self.hasher.hash(draft.password),
            role=role,
            permissions=permissions,
        )

    def login(self, email: str, password: str) -> SessionTokens:
        """Verify credentials and rotate the session. Raises InvalidCredentials."""
        user = self.store.get_by_email(email)
        if user is None:
            # Same bcrypt cost as a real check so timing does not reveal the account.
            self.hasher.verify_dummy(password)
            logger.warning("Login rejected")
            raise InvalidCredentials()
        if not self.hasher.verify(password, user.password_hash):
            logger.warning("Login rejected for user id=%s", user.id)
            raise InvalidCredentials()
        logger.info("Login succeeded for user id=%s", user.id)
        return self._start_session(user)

    def refresh(self, refresh_token: str) -> SessionTokens:
        """
        Exchange a refresh token for a new pair, invalidating the presented one.

        Raises InvalidRefreshToken when the token cannot be verified or the
        lookup fails, and AccessDenied when it is not the current token for
        its subject (stale, rotated out, or logged out).
        """
        try:
            claims = self.issuer.verify(refresh_token, REFRESH_TOKEN)
            user = self.store.get_by_id(claims.sub)
            if user is None or not user.refresh_token_hash:
                logger.warning("Refresh rejected: no active session for sub=%s", claims.sub)
                raise AccessDenied()
            if not self.hasher.verify_token(refresh_token, user.refresh_token_hash):
                logger.warning("Refresh rejected: stale token for user id=%s", user.id)
                raise AccessDenied()
        except AccessDenied:
            raise
        except InvalidToken as e:
            raise InvalidRefreshToken() from e
        except Exception as e:
            logger.warning("Refresh failed during lookup: %s", type(e).__name__)
            raise InvalidRefreshToken() from e
        logger.info("Refreshed session for user id=%s", user.id)
        return self._start_session(user)

    def logout(self, user_id: str) -> None:
        """Clear the stored refresh-token hash. Idempotent."""
        self.store.set_refresh_token_hash(user_id, None)
        logger.info("Logged out user id=%s", user_id)

    def _start_session(self, user: User) -> SessionTokens:
        """Mint a fresh pair and overwrite the stored hash (the rotation point)."""
        claims = TokenClaims(sub=user.id, email=user.email, role=user.role)
        access_token = self.issuer.issue_access(claims)
        refresh_token = self.issuer.issue_refresh(claims)
        self.store.set_refresh_token_hash(user.id, self.hasher.hash_token(refresh_token))
        return SessionTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            user=UserProfile.model_validate(user),
        )
