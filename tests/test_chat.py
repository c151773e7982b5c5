"""Tests for conversations and messages."""

from unittest.mock import patch

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.chat import Conversation
from tests.conftest import create_job, open_conversation


async def send(client: AsyncClient, conversation_id: int, text: str, uid: str = "bidder-1", name: str = "Bidder One"):  # type: ignore[no-untyped-def]
    return await client.post(
        "/api/chat/messages",
        json={"conversationId": conversation_id, "senderUid": uid, "senderName": name, "message": text},
    )


@pytest.mark.asyncio
async def test_create_or_get_is_idempotent(client: AsyncClient, db_session: AsyncSession) -> None:
    job_id = await create_job(client)
    first = await open_conversation(client, job_id)
    second = await open_conversation(client, job_id)
    assert first == second

    count = (await db_session.execute(select(func.count(Conversation.id)))).scalar_one()
    assert count == 1


@pytest.mark.asyncio
async def test_distinct_participants_get_distinct_threads(client: AsyncClient) -> None:
    job_id = await create_job(client)
    a = await open_conversation(client, job_id, participant_uid="bidder-1")
    b = await open_conversation(client, job_id, participant_uid="bidder-2")
    assert a != b


@pytest.mark.asyncio
async def test_create_or_get_does_not_touch_existing(client: AsyncClient) -> None:
    job_id = await create_job(client)
    conversation_id = await open_conversation(client, job_id)
    await send(client, conversation_id, "hello")
    await open_conversation(client, job_id)

    threads = (await client.get("/api/chat/conversations/bidder-1")).json()["conversations"]
    assert threads[0]["last_message"] == "hello"


@pytest.mark.asyncio
async def test_messages_in_send_order(client: AsyncClient) -> None:
    job_id = await create_job(client)
    conversation_id = await open_conversation(client, job_id)
    for text in ("one", "two", "three"):
        resp = await send(client, conversation_id, text)
        assert resp.status_code == 200
        assert resp.json() == {"success": True}

    body = (await client.get(f"/api/chat/messages/{conversation_id}")).json()
    assert body["success"] is True
    assert [m["message"] for m in body["messages"]] == ["one", "two", "three"]
    assert body["messages"][0]["sender_name"] == "Bidder One"


@pytest.mark.asyncio
async def test_unknown_conversation_has_no_messages(client: AsyncClient) -> None:
    body = (await client.get("/api/chat/messages/999")).json()
    assert body == {"success": True, "messages": []}


@pytest.mark.asyncio
async def test_send_to_unknown_conversation_fails(client: AsyncClient) -> None:
    resp = await send(client, 999, "anyone there?")
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Failed to send message"}


@pytest.mark.asyncio
async def test_conversation_for_missing_job_fails(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/chat/conversations",
        json={"jobId": 999, "jobOwnerUid": "o", "participantUid": "p", "jobTitle": "t"},
    )
    assert resp.status_code == 500
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_conversations_list_for_both_parties(client: AsyncClient) -> None:
    job_id = await create_job(client)
    await client.post(
        "/api/jobs",
        json={
            "jobData": {"title": "x", "category": "c", "material": "m", "quantity": 1, "budget": 1, "location": "l"},
            "user": {"uid": "bidder-1", "email": "bidder@example.com", "displayName": "Bidder One"},
        },
    )
    conversation_id = await open_conversation(client, job_id)
    await send(client, conversation_id, "quote attached")

    for uid in ("owner-1", "bidder-1"):
        body = (await client.get(f"/api/chat/conversations/{uid}")).json()
        assert body["success"] is True
        [thread] = body["conversations"]
        assert thread["id"] == conversation_id
        assert thread["job_owner_name"] == "Owner One"
        assert thread["participant_name"] == "Bidder One"
        assert thread["last_message"] == "quote attached"

    body = (await client.get("/api/chat/conversations/stranger")).json()
    assert body["conversations"] == []


@pytest.mark.asyncio
async def test_conversations_newest_activity_first(client: AsyncClient) -> None:
    job_id = await create_job(client)
    quiet = await open_conversation(client, job_id, participant_uid="bidder-1")
    busy = await open_conversation(client, job_id, participant_uid="bidder-2")
    await send(client, busy, "latest")

    threads = (await client.get("/api/chat/conversations/owner-1")).json()["conversations"]
    assert [t["id"] for t in threads] == [busy, quiet]


@pytest.mark.asyncio
async def test_sender_name_is_a_snapshot(client: AsyncClient) -> None:
    job_id = await create_job(client)
    conversation_id = await open_conversation(client, job_id)
    await send(client, conversation_id, "first", name="Old Name")
    await send(client, conversation_id, "second", name="New Name")

    messages = (await client.get(f"/api/chat/messages/{conversation_id}")).json()["messages"]
    assert [m["sender_name"] for m in messages] == ["Old Name", "New Name"]


@pytest.mark.asyncio
async def test_preview_failure_does_not_fail_send(client: AsyncClient) -> None:
    job_id = await create_job(client)
    conversation_id = await open_conversation(client, job_id)

    from app.services import chat as chat_service

    real_update = chat_service.update

    def failing_update(*args, **kwargs):  # type: ignore[no-untyped-def]
        raise OperationalError("UPDATE conversations", {}, Exception("disk I/O error"))

    with patch.object(chat_service, "update", side_effect=failing_update):
        resp = await send(client, conversation_id, "still delivered")
    assert resp.status_code == 200
    assert chat_service.update is real_update

    messages = (await client.get(f"/api/chat/messages/{conversation_id}")).json()["messages"]
    assert [m["message"] for m in messages] == ["still delivered"]

    thread = (await client.get("/api/chat/conversations/bidder-1")).json()["conversations"][0]
    assert thread["last_message"] is None
