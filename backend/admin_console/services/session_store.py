"""Durable client-side session state.

Holds the admin's bearer token, the cached profile returned at login, and the
set of notification ids the admin has marked read. All three survive process
restarts. ``clear()`` removes the session (token and profile) only; read
notification ids are kept.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

import redis

from admin_console.config import Settings, get_settings

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    def get_token(self) -> str | None: ...
    def set_token(self, token: str) -> None: ...
    def get_profile(self) -> dict[str, Any] | None: ...
    def set_profile(self, profile: dict[str, Any]) -> None: ...
    def clear(self) -> None: ...
    def get_read_ids(self) -> set[str]: ...
    def set_read_ids(self, read_ids: set[str]) -> None: ...


class FileSessionStore:
    """JSON files under a directory: ``session.json`` and ``read_notifications.json``."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self.session_path = self.directory / "session.json"
        self.read_ids_path = self.directory / "read_notifications.json"

    def _load(self, path: Path, default: Any) -> Any:
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {path}: {e}")
            return default

    def _write(self, path: Path, data: Any) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        # Atomic replace: readers see the old file or the new one
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def _session(self) -> dict:
        data = self._load(self.session_path, {})
        return data if isinstance(data, dict) else {}

    def get_token(self) -> str | None:
        return self._session().get("token")

    def set_token(self, token: str) -> None:
        self._write(self.session_path, {**self._session(), "token": token})

    def get_profile(self) -> dict[str, Any] | None:
        return self._session().get("profile")

    def set_profile(self, profile: dict[str, Any]) -> None:
        self._write(self.session_path, {**self._session(), "profile": profile})

    def clear(self) -> None:
        self.session_path.unlink(missing_ok=True)

    def get_read_ids(self) -> set[str]:
        data = self._load(self.read_ids_path, [])
        return {str(i) for i in data} if isinstance(data, list) else set()

    def set_read_ids(self, read_ids: set[str]) -> None:
        self._write(self.read_ids_path, sorted(read_ids))


class RedisSessionStore:
    """Session state kept in Redis under a key prefix."""

    def __init__(self, client: redis.Redis, prefix: str = "admin_console:"):
        self.client = client
        self.token_key = f"{prefix}token"
        self.profile_key = f"{prefix}profile"
        self.read_ids_key = f"{prefix}read_notifications"

    @classmethod
    def from_url(cls, url: str, prefix: str = "admin_console:") -> "RedisSessionStore":
        return cls(redis.from_url(url, decode_responses=True, socket_timeout=5), prefix=prefix)

    def get_token(self) -> str | None:
        return self.client.get(self.token_key)

    def set_token(self, token: str) -> None:
        self.client.set(self.token_key, token)

    def get_profile(self) -> dict[str, Any] | None:
        raw = self.client.get(self.profile_key)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Ignoring unreadable cached profile")
            return None

    def set_profile(self, profile: dict[str, Any]) -> None:
        self.client.set(self.profile_key, json.dumps(profile))

    def clear(self) -> None:
        self.client.delete(self.token_key, self.profile_key)

    def get_read_ids(self) -> set[str]:
        return set(self.client.smembers(self.read_ids_key))

    def set_read_ids(self, read_ids: set[str]) -> None:
        pipe = self.client.pipeline()
        pipe.delete(self.read_ids_key)
        if read_ids:
            pipe.sadd(self.read_ids_key, *sorted(read_ids))
        pipe.execute()


def build_session_store(settings: Settings | None = None) -> SessionStore:
    settings = settings or get_settings()
    if settings.session_backend == "redis":
        logger.info("Using Redis session store")
        return RedisSessionStore.from_url(settings.redis_url, prefix=settings.redis_key_prefix)
    return FileSessionStore(settings.session_dir)
