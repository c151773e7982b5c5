"""Async HTTP wrappers around the marketplace API.

Each service takes an ``ApiClient``; the client owns the base URL and the
``httpx.AsyncClient``. Failures raise ``ApiError``, except for the read
helpers documented as degrading to an empty value.
"""

import logging
from typing import Any

import httpx

from app.client.config import ClientSettings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response, timeout or transport failure.

    ``status`` is None when no response was received.
    """

    def __init__(self, status: int | None, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


class ApiClient:
    def __init__(
        self,
        settings: ClientSettings | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or ClientSettings()
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(base_url=self.settings.api_base_url)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        timeout: float,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        try:
            resp = await self._http.request(method, path, json=json, params=params, timeout=timeout)
        except httpx.TimeoutException:
            logger.error("%s %s timed out after %.1fs", method, path, timeout)
            raise ApiError(None, f"Request timed out: {method} {path}")
        except httpx.RequestError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise ApiError(None, f"Request failed: {method} {path}")

        if resp.status_code >= 400:
            raise ApiError(resp.status_code, _error_message(resp))
        return resp.json()


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return f"HTTP error {resp.status_code}"
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"HTTP error {resp.status_code}"


class ChatService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api
        self._timeouts = api.settings

    async def create_or_get_conversation(
        self, job_id: int, job_owner_uid: str, participant_uid: str, job_title: str
    ) -> int:
        body = await self.api.request(
            "POST",
            "/chat/conversations",
            timeout=self._timeouts.write_timeout,
            json={
                "jobId": job_id,
                "jobOwnerUid": job_owner_uid,
                "participantUid": participant_uid,
                "jobTitle": job_title,
            },
        )
        return body["conversationId"]

    async def send_message(
        self, conversation_id: int, sender_uid: str, sender_name: str, message: str
    ) -> None:
        await self.api.request(
            "POST",
            "/chat/messages",
            timeout=self._timeouts.write_timeout,
            json={
                "conversationId": conversation_id,
                "senderUid": sender_uid,
                "senderName": sender_name,
                "message": message,
            },
        )

    async def get_conversations(self, user_uid: str) -> list[dict[str, Any]]:
        body = await self.api.request(
            "GET", f"/chat/conversations/{user_uid}", timeout=self._timeouts.read_timeout
        )
        return body["conversations"]

    async def get_messages(self, conversation_id: int) -> list[dict[str, Any]]:
        body = await self.api.request(
            "GET", f"/chat/messages/{conversation_id}", timeout=self._timeouts.read_timeout
        )
        return body["messages"]


class BidService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api
        self._timeouts = api.settings

    async def place_bid(
        self,
        job_id: int,
        bidder_uid: str,
        bidder_name: str,
        bid_amount: float,
        message: str | None = None,
    ) -> dict[str, Any]:
        """Returns ``{"success", "bidId", "updated"}``."""
        return await self.api.request(
            "POST",
            f"/jobs/{job_id}/bids",
            timeout=self._timeouts.write_timeout,
            json={
                "bidder_uid": bidder_uid,
                "bidder_name": bidder_name,
                "bid_amount": bid_amount,
                "message": message,
            },
        )

    async def get_bids(self, job_id: int) -> list[dict[str, Any]]:
        return await self.api.request(
            "GET", f"/jobs/{job_id}/bids", timeout=self._timeouts.read_timeout
        )

    async def get_my_bid(self, job_id: int, bidder_uid: str) -> dict[str, Any] | None:
        """The caller's bid, or None when there is none or it cannot be loaded."""
        try:
            return await self.api.request(
                "GET", f"/jobs/{job_id}/bids/{bidder_uid}", timeout=self._timeouts.lookup_timeout
            )
        except ApiError as e:
            if e.status != 404:
                logger.warning("Could not load bid on job %s: %s", job_id, e.message)
            return None


class JobService:
    """Job endpoints. List loads fall back to the last list that loaded."""

    def __init__(self, api: ApiClient) -> None:
        self.api = api
        self._timeouts = api.settings
        self._jobs_cache: list[dict[str, Any]] | None = None
        self._user_jobs_cache: dict[str, list[dict[str, Any]]] = {}

    async def create_job(self, job_data: dict[str, Any], user: dict[str, Any]) -> int:
        body = await self.api.request(
            "POST",
            "/jobs",
            timeout=self._timeouts.write_timeout,
            json={"jobData": job_data, "user": user},
        )
        return body["jobId"]

    async def get_jobs(self) -> list[dict[str, Any]]:
        """All jobs. On failure, the previously loaded list, or [] if there is none."""
        try:
            jobs = await self.api.request("GET", "/jobs", timeout=self._timeouts.read_timeout)
        except ApiError as e:
            logger.warning("Could not load jobs, serving cached list: %s", e.message)
            return list(self._jobs_cache or [])
        self._jobs_cache = jobs
        return jobs

    async def get_job(self, job_id: int) -> dict[str, Any] | None:
        try:
            return await self.api.request("GET", f"/jobs/{job_id}", timeout=self._timeouts.read_timeout)
        except ApiError as e:
            if e.status != 404:
                logger.warning("Could not load job %s: %s", job_id, e.message)
            return None

    async def get_user_jobs(self, firebase_uid: str) -> list[dict[str, Any]]:
        try:
            jobs = await self.api.request(
                "GET", f"/users/{firebase_uid}/jobs", timeout=self._timeouts.read_timeout
            )
        except ApiError as e:
            logger.warning("Could not load jobs for %s: %s", firebase_uid, e.message)
            return list(self._user_jobs_cache.get(firebase_uid, []))
        self._user_jobs_cache[firebase_uid] = jobs
        return jobs

    async def update_job(self, job_id: int, changes: dict[str, Any]) -> None:
        await self.api.request(
            "PUT", f"/jobs/{job_id}", timeout=self._timeouts.write_timeout, json=changes
        )

    async def delete_job(self, job_id: int) -> None:
        await self.api.request("DELETE", f"/jobs/{job_id}", timeout=self._timeouts.write_timeout)

    async def request_boost(self, job_id: int, user_uid: str) -> str:
        body = await self.api.request(
            "POST",
            f"/jobs/{job_id}/boost",
            timeout=self._timeouts.write_timeout,
            json={"user_uid": user_uid},
        )
        return body["message"]


# Collection name -> API path
CONTENT_PATHS = {
    "testimonials": "/testimonials",
    "banners": "/banners",
    "sponsors": "/sponsors",
}


class ContentService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api
        self._timeouts = api.settings

    async def get_items(self, collection: str) -> list[dict[str, Any]]:
        return await self.api.request(
            "GET", CONTENT_PATHS[collection], timeout=self._timeouts.read_timeout
        )

    async def create(self, collection: str, data: dict[str, Any]) -> int:
        body = await self.api.request(
            "POST", CONTENT_PATHS[collection], timeout=self._timeouts.write_timeout, json=data
        )
        return body["id"]

    async def update(self, collection: str, item_id: int, data: dict[str, Any]) -> None:
        await self.api.request(
            "PUT",
            f"{CONTENT_PATHS[collection]}/{item_id}",
            timeout=self._timeouts.write_timeout,
            json=data,
        )

    async def delete(self, collection: str, item_id: int) -> None:
        await self.api.request(
            "DELETE", f"{CONTENT_PATHS[collection]}/{item_id}", timeout=self._timeouts.write_timeout
        )


class ForumService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api
        self._timeouts = api.settings

    async def get_posts(
        self, page: int = 1, page_size: int = 20, search: str | None = None
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"page": page, "pageSize": page_size}
        if search:
            params["search"] = search
        return await self.api.request(
            "GET", "/forum/posts", timeout=self._timeouts.read_timeout, params=params
        )

    async def create_post(self, user_uid: str, title: str, content: str) -> int:
        body = await self.api.request(
            "POST",
            "/forum/posts",
            timeout=self._timeouts.write_timeout,
            json={"user_uid": user_uid, "title": title, "content": content},
        )
        return body["id"]

    async def get_comments(self, post_id: int) -> list[dict[str, Any]]:
        return await self.api.request(
            "GET", f"/forum/posts/{post_id}/comments", timeout=self._timeouts.read_timeout
        )

    async def add_comment(self, post_id: int, user_uid: str, content: str) -> int:
        body = await self.api.request(
            "POST",
            f"/forum/posts/{post_id}/comments",
            timeout=self._timeouts.write_timeout,
            json={"user_uid": user_uid, "content": content},
        )
        return body["id"]
