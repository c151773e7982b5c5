"""Tests for client-side synchronisation: chat window, content sync, comment polling."""

import asyncio
from typing import Any

import pytest
from fastapi import FastAPI

from app.client.services import (
    ApiClient,
    ApiError,
    BidService,
    ChatService,
    ContentService,
    ForumService,
    JobService,
)
from app.client.sync import ChatWindow, CommentPoller, ContentSync, format_inr
from tests.conftest import RecordingSocket, make_job_payload


async def post_job(api: ApiClient, uid: str = "owner-1") -> int:
    payload = make_job_payload(uid=uid)
    return await JobService(api).create_job(payload["jobData"], payload["user"])


def make_window(api: ApiClient, job_id: int, user_uid: str = "bidder-1", user_name: str = "Bidder One") -> ChatWindow:
    return ChatWindow(
        ChatService(api),
        BidService(api),
        job_id=job_id,
        job_title="Injection mould for bottle caps",
        job_owner_uid="owner-1",
        user_uid=user_uid,
        user_name=user_name,
        reconcile_delay=0,
    )


class FlakyChatService(ChatService):
    """Rejects the sends whose 1-based call numbers are in ``fail_calls``."""

    def __init__(self, api: ApiClient, fail_calls: set[int]) -> None:
        super().__init__(api)
        self.fail_calls = fail_calls
        self.calls = 0

    async def send_message(self, *args: Any) -> None:
        self.calls += 1
        if self.calls in self.fail_calls:
            raise ApiError(500, "Failed to send message")
        await super().send_message(*args)


@pytest.mark.parametrize(
    "amount, expected",
    [(0, "₹0"), (999, "₹999"), (1000, "₹1,000"), (150000, "₹1,50,000"), (12345678.4, "₹1,23,45,678")],
)
def test_format_inr(amount: float, expected: str) -> None:
    assert format_inr(amount) == expected


@pytest.mark.asyncio
async def test_send_confirms_optimistic_entry(api_client: ApiClient) -> None:
    window = make_window(api_client, await post_job(api_client))
    await window.open()
    assert window.entries == []

    entry = await window.send("  Can you share the drawing?  ")
    assert entry is not None
    assert entry.id < 0
    assert not entry.failed

    [confirmed] = window.entries
    assert confirmed.confirmed
    assert confirmed.message == "Can you share the drawing?"


@pytest.mark.asyncio
async def test_blank_send_is_ignored(api_client: ApiClient) -> None:
    window = make_window(api_client, await post_job(api_client))
    await window.open()
    assert await window.send("   ") is None
    assert window.entries == []


@pytest.mark.asyncio
async def test_send_before_open_raises(api_client: ApiClient) -> None:
    window = make_window(api_client, 1)
    with pytest.raises(RuntimeError):
        await window.send("hello")


@pytest.mark.asyncio
async def test_failed_send_stays_distinguishable(api_client: ApiClient) -> None:
    job_id = await post_job(api_client)
    window = make_window(api_client, job_id)
    window.chat = FlakyChatService(api_client, fail_calls={2})
    await window.open()

    await window.send("first")
    failed = await window.send("second")
    await window.send("third")

    assert failed is not None and failed.failed
    assert [e.message for e in window.entries] == ["first", "third", "second"]
    confirmed = [e for e in window.entries if e.confirmed]
    assert [e.message for e in confirmed] == ["first", "third"]
    assert window.entries[-1] is failed
    assert failed.error == "Failed to send message"
    assert not failed.pending

    server = await ChatService(api_client).get_messages(window.conversation_id)  # type: ignore[arg-type]
    assert [m["message"] for m in server] == ["first", "third"]


@pytest.mark.asyncio
async def test_reconcile_failure_keeps_local_entries(api_client: ApiClient) -> None:
    window = make_window(api_client, await post_job(api_client))
    await window.open()

    class BrokenReads(ChatService):
        async def get_messages(self, conversation_id: int) -> list[dict[str, Any]]:
            raise ApiError(None, "Request timed out")

    window.chat = BrokenReads(api_client)
    entry = await window.send("offline?")
    assert window.entries == [entry]


@pytest.mark.asyncio
async def test_open_is_idempotent_and_loads_history(api_client: ApiClient) -> None:
    job_id = await post_job(api_client)
    first = make_window(api_client, job_id)
    await first.open()
    await first.send("hello")

    second = make_window(api_client, job_id)
    await second.open()
    assert second.conversation_id == first.conversation_id
    assert [e.message for e in second.entries] == ["hello"]


@pytest.mark.asyncio
async def test_place_bid_announces_in_thread(api_client: ApiClient) -> None:
    window = make_window(api_client, await post_job(api_client))
    await window.open()
    assert window.my_bid is None

    result = await window.place_bid(150000, "Includes tooling")
    assert result["updated"] is False
    assert window.my_bid is not None and window.my_bid["bid_amount"] == 150000

    result = await window.place_bid(140000)
    assert result["updated"] is True

    assert [e.message for e in window.entries] == [
        "I've placed a bid of ₹1,50,000 for this job. Includes tooling",
        "I've updated my bid to ₹1,40,000.",
    ]

    with pytest.raises(ValueError):
        await window.place_bid(0)


@pytest.mark.asyncio
async def test_end_to_end_chat_and_bid(api_client: ApiClient) -> None:
    """Owner posts, bidder chats and bids twice, owner sees one thread and one bid."""
    job_id = await post_job(api_client)

    bidder = make_window(api_client, job_id)
    await bidder.open()
    await bidder.send("Interested. What is the cavity count?")
    await bidder.place_bid(120000)
    await bidder.place_bid(110000, "Final offer")

    chat = ChatService(api_client)
    [thread] = await chat.get_conversations("owner-1")
    assert thread["id"] == bidder.conversation_id
    assert thread["participant_uid"] == "bidder-1"
    assert thread["last_message"].startswith("I've updated my bid")

    messages = await chat.get_messages(thread["id"])
    assert len(messages) == 3

    bids = await BidService(api_client).get_bids(job_id)
    assert len(bids) == 1
    assert bids[0]["bid_amount"] == 110000

    job = await JobService(api_client).get_job(job_id)
    assert job is not None and job["bids_received"] == 1


@pytest.mark.asyncio
async def test_content_sync_refetches_on_banner_event(api_client: ApiClient, test_app: FastAPI) -> None:
    socket = RecordingSocket()
    await test_app.state.ctx.broadcaster.connect(socket)

    content = ContentService(api_client)
    sync = ContentSync(content)
    await sync.refresh_all()
    assert sync.banners == []

    await content.create("banners", {"title": "Diwali offers", "image": "/diwali.png"})
    await test_app.state.ctx.broadcaster.flush()
    [event] = socket.sent
    assert await sync.handle_event(event)

    assert [b["title"] for b in sync.banners] == ["Diwali offers"]
    assert sync.sponsors == []


@pytest.mark.asyncio
async def test_content_sync_listen_and_unknown_events(api_client: ApiClient) -> None:
    content = ContentService(api_client)
    await content.create("sponsors", {"name": "Acme Polymers"})
    sync = ContentSync(content)

    async def events():  # type: ignore[no-untyped-def]
        yield "jobs_updated"
        yield {"event": "testimonials_updated"}

    assert not await sync.handle_event("jobs_updated")
    await sync.listen(events())
    assert [s["name"] for s in sync.sponsors] == ["Acme Polymers"]


@pytest.mark.asyncio
async def test_content_sync_keeps_cache_on_failure(api_client: ApiClient) -> None:
    content = ContentService(api_client)
    await content.create("banners", {"title": "Cached", "image": "/c.png"})
    sync = ContentSync(content)
    await sync.refresh("banners")

    class Down(ContentService):
        async def get_items(self, collection: str) -> list[dict[str, Any]]:
            raise ApiError(None, "Request failed")

    sync.content = Down(api_client)
    await sync.handle_event("banners_updated")
    assert [b["title"] for b in sync.banners] == ["Cached"]


@pytest.mark.asyncio
async def test_comment_poller(api_client: ApiClient) -> None:
    forum = ForumService(api_client)
    post_id = await forum.create_post("member-1", "Regrind ratios", "How much regrind is safe?")

    updates: list[int] = []
    poller = CommentPoller(forum, post_id, interval=0.01, on_update=lambda c: updates.append(len(c)))
    poller.start()
    assert poller.running

    await forum.add_comment(post_id, "member-2", "Up to 20% for most grades")
    for _ in range(100):
        if poller.comments:
            break
        await asyncio.sleep(0.01)
    await poller.stop()

    assert not poller.running
    assert [c["content"] for c in poller.comments] == ["Up to 20% for most grades"]
    assert updates and updates[-1] == 1
