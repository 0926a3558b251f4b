"""Wires the console's components together for one admin session."""

import logging
from dataclasses import dataclass

from admin_console.config import Settings, get_settings
from admin_console.services.access_gate import AccessGate
from admin_console.services.dashboard import DashboardState
from admin_console.services.gateway import MarketplaceGateway, PersistenceGateway
from admin_console.services.moderation import ModerationController
from admin_console.services.notifications import NotificationService
from admin_console.services.session_store import SessionStore, build_session_store

logger = logging.getLogger(__name__)


@dataclass
class Console:
    settings: Settings
    store: SessionStore
    gateway: PersistenceGateway
    state: DashboardState
    moderation: ModerationController
    gate: AccessGate
    notifications: NotificationService

    async def aclose(self) -> None:
        close = getattr(self.gateway, "aclose", None)
        if close is not None:
            await close()


def build_console(
    settings: Settings | None = None,
    store: SessionStore | None = None,
    gateway: PersistenceGateway | None = None,
) -> Console:
    settings = settings or get_settings()
    store = store or build_session_store(settings)
    gateway = gateway or MarketplaceGateway(settings, token_provider=store.get_token)

    state = DashboardState(gateway)
    moderation = ModerationController(gateway, state, settings)
    gate = AccessGate(gateway, store)
    notifications = NotificationService(store, settings)

    # Logout drops everything derived from the old session
    gate.add_reset_hook(state.reset)
    gate.add_reset_hook(moderation.reset)
    moderation.add_unauthorized_hook(gate.logout)

    logger.info(f"Console ready (upstream {settings.api_base_url}, session backend {settings.session_backend})")
    return Console(
        settings=settings,
        store=store,
        gateway=gateway,
        state=state,
        moderation=moderation,
        gate=gate,
        notifications=notifications,
    )
