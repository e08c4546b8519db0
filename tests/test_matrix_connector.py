# tests/test_matrix_connector.py

from __future__ import annotations

from types import SimpleNamespace

import pytest

from last_done.connectors.matrix_connector import MatrixMessenger, create_matrix_messenger


class FakeMatrixClient:
    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.closed = False

    async def room_send(self, **kwargs) -> None:
        self.sent.append(kwargs)

    async def close(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_matrix_messenger_posts_text_to_room() -> None:
    client = FakeMatrixClient()
    messenger = MatrixMessenger(client, "!room:example.org")

    await messenger.send_text(text="Reminder: Clean filter\nTime to do Clean filter again!")
    await messenger.close()

    assert client.sent == [
        {
            "room_id": "!room:example.org",
            "message_type": "m.room.message",
            "content": {"msgtype": "m.text", "body": "Reminder: Clean filter\nTime to do Clean filter again!"},
            "ignore_unverified_devices": True,
        }
    ]
    assert client.closed is True


@pytest.mark.asyncio
async def test_matrix_messenger_needs_a_room(tmp_path) -> None:
    settings = SimpleNamespace(
        matrix_room_id="",
        matrix_homeserver="https://matrix.example.org",
        matrix_user_id="@bot:example.org",
        matrix_password="",
        matrix_store_path=tmp_path,
    )
    assert await create_matrix_messenger(settings) is None
