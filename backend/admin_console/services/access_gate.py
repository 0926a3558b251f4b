"""Admin sign-in and session lifecycle."""

import logging
from typing import Any, Callable

from admin_console.exceptions import UnauthorizedError
from admin_console.schemas.auth import LoginResponse
from admin_console.services.gateway import PersistenceGateway
from admin_console.services.session_store import SessionStore

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
ACTIVE_STATUS = "active"


class AccessGate:
    """Admits only active admin accounts and owns the stored session.

    Components holding per-session state register a reset hook; every hook
    runs on logout, whether the operator asked for it or the upstream
    rejected the token, and again before a new sign-in is stored.
    """

    def __init__(self, gateway: PersistenceGateway, store: SessionStore):
        self.gateway = gateway
        self.store = store
        self._reset_hooks: list[Callable[[], Any]] = []

    def add_reset_hook(self, hook: Callable[[], Any]) -> None:
        self._reset_hooks.append(hook)

    async def login(self, email: str, password: str) -> LoginResponse:
        """Authenticate against the marketplace API.

        Raises UnauthorizedError when the upstream refuses the credentials,
        when the account is not an admin, or when it is not active. Nothing
        is stored unless every check passes.
        """
        response = await self.gateway.login(email.strip(), password)

        if (response.role or "").lower() != ADMIN_ROLE:
            logger.warning(f"Refused console login for non-admin account (role={response.role})")
            raise UnauthorizedError(
                "Access denied. Admin credentials required.",
                reason=UnauthorizedError.ROLE_MISMATCH,
            )
        if (response.status or "").lower() != ACTIVE_STATUS:
            logger.warning(f"Refused console login for inactive admin (status={response.status})")
            raise UnauthorizedError(
                "Your account is not active. Please contact support.",
                reason=UnauthorizedError.ACCOUNT_INACTIVE,
            )

        # A new session never sees state derived from the previous one
        self._run_reset_hooks()
        self.store.set_token(response.token)
        self.store.set_profile(response.profile)
        logger.info("Admin signed in")
        return response

    def token(self) -> str | None:
        return self.store.get_token()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.store.get_token())

    def current_session(self) -> dict[str, Any] | None:
        """Cached profile of the signed-in admin, or None."""
        if not self.is_authenticated:
            return None
        return self.store.get_profile() or {}

    def _run_reset_hooks(self) -> None:
        for hook in self._reset_hooks:
            hook()

    def logout(self) -> None:
        self.store.clear()
        self._run_reset_hooks()
        logger.info("Admin session cleared")
