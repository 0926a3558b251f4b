"""Tests for admin sign-in and session lifecycle."""

import asyncio

import pytest

from admin_console.exceptions import UnauthorizedError
from admin_console.services.access_gate import AccessGate
from admin_console.services.transitions import EntityType

from factories import make_user
from fakes import FakeGateway


@pytest.fixture
def gate(session_store):
    return AccessGate(FakeGateway(), session_store)


@pytest.mark.asyncio
async def test_active_admin_is_admitted(gate, session_store):
    response = await gate.login(" admin@example.com ", "secret")

    assert response.token == "tok-admin"
    assert session_store.get_token() == "tok-admin"
    assert session_store.get_profile()["email"] == "admin@example.com"
    assert gate.is_authenticated
    assert gate.current_session()["name"] == "Admin"
    assert gate.gateway.calls_to("login") == [("login", "admin@example.com")]


@pytest.mark.asyncio
async def test_wrong_password(gate, session_store):
    with pytest.raises(UnauthorizedError) as excinfo:
        await gate.login("admin@example.com", "wrong")
    assert excinfo.value.reason == UnauthorizedError.INVALID_CREDENTIALS
    assert session_store.get_token() is None


@pytest.mark.asyncio
async def test_non_admin_refused(gate, session_store):
    gate.gateway.login_payload["type"] = "employer"
    with pytest.raises(UnauthorizedError) as excinfo:
        await gate.login("boss@example.com", "secret")
    assert excinfo.value.reason == UnauthorizedError.ROLE_MISMATCH
    assert excinfo.value.message == "Access denied. Admin credentials required."
    assert not gate.is_authenticated


@pytest.mark.asyncio
async def test_inactive_admin_refused(gate, session_store):
    gate.gateway.login_payload["status"] = "suspended"
    with pytest.raises(UnauthorizedError) as excinfo:
        await gate.login("admin@example.com", "secret")
    assert excinfo.value.reason == UnauthorizedError.ACCOUNT_INACTIVE
    assert "not active" in excinfo.value.message
    assert session_store.get_profile() is None


@pytest.mark.asyncio
async def test_logout_clears_session_and_runs_hooks(gate, session_store):
    await gate.login("admin@example.com", "secret")
    session_store.set_read_ids({"user-u1"})
    calls = []
    gate.add_reset_hook(lambda: calls.append("reset"))

    gate.logout()

    assert calls == ["reset"]
    assert not gate.is_authenticated
    assert gate.current_session() is None
    # Read notifications outlive the session
    assert session_store.get_read_ids() == {"user-u1"}


def test_session_restored_from_store(session_store):
    session_store.set_token("tok-old")
    session_store.set_profile({"name": "Admin"})
    gate = AccessGate(FakeGateway(), session_store)
    assert gate.is_authenticated
    assert gate.current_session() == {"name": "Admin"}
    assert gate.token() == "tok-old"


@pytest.mark.asyncio
async def test_hooks_run_only_for_an_admitted_login(gate):
    calls = []
    gate.add_reset_hook(lambda: calls.append("reset"))

    with pytest.raises(UnauthorizedError):
        await gate.login("admin@example.com", "wrong")
    assert calls == []

    await gate.login("admin@example.com", "secret")
    assert calls == ["reset"]


@pytest.mark.asyncio
async def test_second_login_drops_previous_session_state(console, gateway):
    gateway.users = [make_user("u1", status="pending")]
    await console.state.refresh()
    hold = asyncio.Event()
    gateway.gates["approve_user"] = hold
    pending = asyncio.create_task(console.moderation.approve_user("u1"))
    await asyncio.sleep(0)
    assert console.moderation.is_in_flight(EntityType.USER, "u1")

    await console.gate.login("other-admin@example.com", "secret")

    assert console.state.snapshot is None
    assert not console.moderation.is_in_flight(EntityType.USER, "u1")
    hold.set()
    await pending
