"""
Pytest fixtures for the admin console tests.
"""

import pytest

from admin_console.config import Settings
from admin_console.services.console import build_console
from admin_console.services.session_store import FileSessionStore

from fakes import FakeGateway


@pytest.fixture
def settings(tmp_path):
    return Settings(_env_file=None, session_dir=str(tmp_path / "session"))


@pytest.fixture
def session_store(tmp_path):
    return FileSessionStore(tmp_path / "session")


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def console(settings, session_store, gateway):
    """Console wired to the fake gateway, with an admin already signed in."""
    session_store.set_token("tok-admin")
    session_store.set_profile({"name": "Admin", "type": "admin"})
    return build_console(settings, store=session_store, gateway=gateway)
