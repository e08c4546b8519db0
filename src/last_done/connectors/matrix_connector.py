# src/last_done/connectors/matrix_connector.py

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from nio import AsyncClient, AsyncClientConfig, LoginResponse, exceptions

logger = logging.getLogger(__name__)

try:
    import olm  # type: ignore  # noqa: F401

    OLM_AVAILABLE = True
except Exception:
    OLM_AVAILABLE = False


def _session_path(store_dir: Path) -> Path:
    return store_dir / "session.json"


def _load_json(path: Path) -> dict[str, Any]:
    val = json.loads(path.read_text("utf-8"))
    if isinstance(val, dict):
        return val
    raise ValueError("Expected JSON object")


def _atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False), "utf-8")
    os.replace(tmp, path)
    try:
        os.chmod(path, 0o600)
    except Exception:
        # Best-effort: not critical on Windows or restricted FS.
        pass


async def create_matrix_client(settings) -> AsyncClient | None:
    """
    Create a logged-in Matrix AsyncClient, reusing <store>/session.json when present.

    The session file holds an access token; it lives under the gitignored data dir.
    """
    homeserver = (getattr(settings, "matrix_homeserver", "") or "").strip()
    user_id = (getattr(settings, "matrix_user_id", "") or "").strip()
    password = (getattr(settings, "matrix_password", "") or "").strip()
    store_dir = Path(getattr(settings, "matrix_store_path", Path(".local/last_done/matrix_store")))

    if not homeserver or not user_id:
        logger.error("Matrix is not configured: set LASTDONE_MATRIX_HOMESERVER and LASTDONE_MATRIX_USER_ID")
        return None

    store_dir.mkdir(parents=True, exist_ok=True)
    session_file = _session_path(store_dir)

    encryption_enabled = bool(OLM_AVAILABLE)
    if not encryption_enabled:
        logger.warning("python-olm not installed: E2EE disabled")

    client = AsyncClient(
        homeserver,
        user_id,
        store_path=str(store_dir) if encryption_enabled else None,
        config=AsyncClientConfig(encryption_enabled=encryption_enabled, store_sync_tokens=True),
    )

    if session_file.exists():
        try:
            data = _load_json(session_file)
            access_token = data.get("access_token")
            sess_user_id = data.get("user_id")
            device_id = data.get("device_id")
            if not access_token or not sess_user_id or not device_id:
                raise ValueError("session.json is missing required fields")

            client.access_token = str(access_token)
            client.user_id = str(sess_user_id)
            client.device_id = str(device_id)
            if encryption_enabled:
                try:
                    client.load_store()
                except Exception as e:
                    logger.warning("Failed to load E2EE store: %r", e)
            logger.info("Matrix session restored for %s", client.user_id)
            return client
        except Exception as e:
            logger.warning("Failed to restore Matrix session.json, will try password login: %r", e)

    if not password:
        logger.error(
            "Matrix session.json not found and password is not set. "
            "Set LASTDONE_MATRIX_PASSWORD once to bootstrap a session."
        )
        await client.close()
        return None

    device_name = f"{getattr(settings, 'app_name', 'last-done')} (Python)"
    resp = await client.login(password=password, device_name=device_name)
    if not isinstance(resp, LoginResponse):
        logger.error("Matrix login failed: %r", resp)
        await client.close()
        return None

    try:
        _atomic_write_json(
            session_file,
            {"access_token": resp.access_token, "user_id": resp.user_id, "device_id": resp.device_id},
        )
        logger.info("Matrix session saved to %s (user=%s)", session_file, resp.user_id)
    except Exception:
        logger.exception("Failed to write Matrix session.json (%s)", session_file)

    return client


class MatrixMessenger:
    """OutboundMessenger posting fired reminders into a single Matrix room."""

    def __init__(self, client: Any, room_id: str) -> None:
        self._client = client
        self._room_id = room_id

    async def send_text(self, *, text: str) -> None:
        try:
            await self._client.room_send(
                room_id=self._room_id,
                message_type="m.room.message",
                content={"msgtype": "m.text", "body": text},
                ignore_unverified_devices=True,
            )
        except exceptions.OlmUnverifiedDeviceError:
            logger.warning("Cannot send reminder to %s: unverified device.", self._room_id)
            raise

    async def close(self) -> None:
        await self._client.close()


async def create_matrix_messenger(settings) -> MatrixMessenger | None:
    room_id = (getattr(settings, "matrix_room_id", "") or "").strip()
    if not room_id:
        logger.error("Matrix is enabled but LASTDONE_MATRIX_ROOM_ID is not set.")
        return None

    client = await create_matrix_client(settings)
    if client is None:
        return None

    # Encrypted rooms need room state before room_send; one sync is enough to send.
    try:
        await client.sync(timeout=30000, full_state=True)
        logger.info("Matrix initial sync done. Joined rooms: %d", len(client.rooms))
    except Exception:
        logger.exception("Matrix initial sync failed.")

    return MatrixMessenger(client, room_id)
