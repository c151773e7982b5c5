"""Client-side state kept in step with the server.

``ChatWindow`` shows one job thread with optimistic sends, ``ContentSync``
re-fetches homepage content lists when an ``*_updated`` event arrives, and
``CommentPoller`` refreshes a forum post's comments on a fixed interval.
"""

import asyncio
import logging
from collections.abc import AsyncIterable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from app.client.services import ApiError, BidService, ChatService, ContentService, ForumService

logger = logging.getLogger(__name__)


def format_inr(amount: float) -> str:
    """Whole rupees with Indian digit grouping, e.g. 150000 -> '₹1,50,000'."""
    sign = "-" if amount < 0 else ""
    digits = str(int(round(abs(amount))))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        groups.insert(0, head)
        digits = ",".join(groups) + "," + tail
    return f"{sign}₹{digits}"


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass
class ChatEntry:
    """One line in the chat window.

    Server-confirmed entries have positive ids. Optimistic entries use
    negative ids and carry ``pending`` while the send is in flight and
    ``failed`` if it was rejected.
    """

    id: int
    sender_uid: str
    sender_name: str
    message: str
    timestamp: datetime
    pending: bool = False
    failed: bool = False
    error: str | None = None

    @property
    def confirmed(self) -> bool:
        return self.id > 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ChatEntry":
        return cls(
            id=data["id"],
            sender_uid=data["sender_uid"],
            sender_name=data["sender_name"],
            message=data["message"],
            timestamp=_parse_timestamp(data["timestamp"]),
        )


class ChatWindow:
    """Chat between the current user and a job's owner.

    Messages are fetched once on open and after each send or bid. There is
    no background polling, so the other party's messages appear on the next
    re-fetch.
    """

    def __init__(
        self,
        chat: ChatService,
        bids: BidService,
        *,
        job_id: int,
        job_title: str,
        job_owner_uid: str,
        user_uid: str,
        user_name: str,
        reconcile_delay: float | None = None,
    ) -> None:
        self.chat = chat
        self.bids = bids
        self.job_id = job_id
        self.job_title = job_title
        self.job_owner_uid = job_owner_uid
        self.user_uid = user_uid
        self.user_name = user_name
        self.reconcile_delay = (
            chat.api.settings.chat_reconcile_delay if reconcile_delay is None else reconcile_delay
        )
        self.conversation_id: int | None = None
        self.entries: list[ChatEntry] = []
        self.my_bid: dict[str, Any] | None = None
        self._next_temp_id = -1

    async def open(self) -> None:
        self.conversation_id = await self.chat.create_or_get_conversation(
            self.job_id, self.job_owner_uid, self.user_uid, self.job_title
        )
        await self.refresh()
        self.my_bid = await self.bids.get_my_bid(self.job_id, self.user_uid)

    async def refresh(self) -> None:
        """Replace confirmed entries with the server's list.

        Local entries that are still in flight or whose send failed stay
        after the server list, in their original order.
        """
        if self.conversation_id is None:
            raise RuntimeError("Chat window is not open")
        server = await self.chat.get_messages(self.conversation_id)
        local = [e for e in self.entries if not e.confirmed and (e.pending or e.failed)]
        self.entries = [ChatEntry.from_api(m) for m in server] + local

    async def send(self, text: str) -> ChatEntry | None:
        """Show the message at once, send it, then reconcile with the server.

        Returns the optimistic entry, or None for blank input.
        """
        text = text.strip()
        if not text:
            return None
        if self.conversation_id is None:
            raise RuntimeError("Chat window is not open")

        entry = ChatEntry(
            id=self._next_temp_id,
            sender_uid=self.user_uid,
            sender_name=self.user_name,
            message=text,
            timestamp=datetime.now(UTC),
            pending=True,
        )
        self._next_temp_id -= 1
        self.entries.append(entry)

        try:
            await self.chat.send_message(self.conversation_id, self.user_uid, self.user_name, text)
        except ApiError as e:
            entry.failed = True
            entry.error = e.message
            logger.warning("Message to conversation %s failed: %s", self.conversation_id, e.message)
        finally:
            entry.pending = False

        await self._reconcile()
        return entry

    async def place_bid(self, amount: float, note: str | None = None) -> dict[str, Any]:
        """Place or update the user's bid and announce it in the thread."""
        if amount <= 0:
            raise ValueError("Bid amount must be positive")
        result = await self.bids.place_bid(self.job_id, self.user_uid, self.user_name, amount, note)
        self.my_bid = await self.bids.get_my_bid(self.job_id, self.user_uid)

        if self.conversation_id is not None:
            if result.get("updated"):
                text = f"I've updated my bid to {format_inr(amount)}. {note or ''}"
            else:
                text = f"I've placed a bid of {format_inr(amount)} for this job. {note or ''}"
            await self.chat.send_message(
                self.conversation_id, self.user_uid, self.user_name, text.strip()
            )
            await self.refresh()
        return result

    async def _reconcile(self) -> None:
        await asyncio.sleep(self.reconcile_delay)
        try:
            await self.refresh()
        except ApiError as e:
            logger.warning("Could not refresh conversation %s: %s", self.conversation_id, e.message)


# Event name -> content collection it invalidates
EVENT_COLLECTIONS = {
    "testimonials_updated": "testimonials",
    "banners_updated": "banners",
    "sponsors_updated": "sponsors",
}


class ContentSync:
    """Cached homepage content, re-fetched whenever the server says it changed."""

    def __init__(self, content: ContentService) -> None:
        self.content = content
        self.lists: dict[str, list[dict[str, Any]]] = {name: [] for name in EVENT_COLLECTIONS.values()}

    @property
    def testimonials(self) -> list[dict[str, Any]]:
        return self.lists["testimonials"]

    @property
    def banners(self) -> list[dict[str, Any]]:
        return self.lists["banners"]

    @property
    def sponsors(self) -> list[dict[str, Any]]:
        return self.lists["sponsors"]

    async def refresh(self, collection: str) -> None:
        """Re-fetch one list. On failure the cached list is kept."""
        try:
            self.lists[collection] = await self.content.get_items(collection)
        except ApiError as e:
            logger.warning("Could not refresh %s: %s", collection, e.message)

    async def refresh_all(self) -> None:
        """Revalidate everything, e.g. after a reconnect."""
        for collection in self.lists:
            await self.refresh(collection)

    async def handle_event(self, event: str | dict[str, Any]) -> bool:
        """Re-fetch the list named by an event. Returns False for unknown events."""
        name = event.get("event") if isinstance(event, dict) else event
        collection = EVENT_COLLECTIONS.get(name or "")
        if collection is None:
            logger.debug("Ignoring event %r", name)
            return False
        await self.refresh(collection)
        return True

    async def listen(self, events: AsyncIterable[str | dict[str, Any]]) -> None:
        """Consume events until the stream ends, starting with a full refresh."""
        await self.refresh_all()
        async for event in events:
            await self.handle_event(event)


class CommentPoller:
    """Re-fetches a post's comments every ``interval`` seconds until stopped."""

    def __init__(
        self,
        forum: ForumService,
        post_id: int,
        interval: float | None = None,
        on_update: Callable[[list[dict[str, Any]]], None] | None = None,
    ) -> None:
        self.forum = forum
        self.post_id = post_id
        self.interval = forum.api.settings.comment_poll_interval if interval is None else interval
        self.on_update = on_update
        self.comments: list[dict[str, Any]] = []
        self._task: asyncio.Task[None] | None = None

    async def poll_once(self) -> None:
        try:
            self.comments = await self.forum.get_comments(self.post_id)
        except ApiError as e:
            logger.warning("Could not load comments for post %s: %s", self.post_id, e.message)
            return
        if self.on_update is not None:
            self.on_update(self.comments)

    async def _run(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()
