"""Tests for the httpx-based client wrappers against the in-process app."""

import httpx
import pytest

from app.client.config import ClientSettings
from app.client.services import (
    ApiClient,
    ApiError,
    BidService,
    ChatService,
    ContentService,
    ForumService,
    JobService,
)
from tests.conftest import make_job_payload


@pytest.mark.asyncio
async def test_job_service_round_trip(api_client: ApiClient) -> None:
    jobs = JobService(api_client)
    payload = make_job_payload()
    job_id = await jobs.create_job(payload["jobData"], payload["user"])

    job = await jobs.get_job(job_id)
    assert job is not None and job["title"] == payload["jobData"]["title"]
    assert [j["id"] for j in await jobs.get_jobs()] == [job_id]
    assert [j["id"] for j in await jobs.get_user_jobs("owner-1")] == [job_id]

    await jobs.update_job(job_id, {"title": "Renamed"})
    assert (await jobs.get_job(job_id))["title"] == "Renamed"  # type: ignore[index]

    message = await jobs.request_boost(job_id, "owner-1")
    assert "admin approval" in message

    await jobs.delete_job(job_id)
    assert await jobs.get_job(job_id) is None


@pytest.mark.asyncio
async def test_errors_surface_as_api_error(api_client: ApiClient) -> None:
    jobs = JobService(api_client)
    with pytest.raises(ApiError) as exc_info:
        await jobs.delete_job(999)
    assert exc_info.value.status == 404
    assert exc_info.value.message == "Job not found"


@pytest.mark.asyncio
async def test_bid_service(api_client: ApiClient) -> None:
    payload = make_job_payload()
    job_id = await JobService(api_client).create_job(payload["jobData"], payload["user"])
    bids = BidService(api_client)

    assert await bids.get_my_bid(job_id, "bidder-1") is None
    first = await bids.place_bid(job_id, "bidder-1", "Bidder One", 5000, "ready")
    second = await bids.place_bid(job_id, "bidder-1", "Bidder One", 4500)
    assert first["updated"] is False
    assert second["updated"] is True

    mine = await bids.get_my_bid(job_id, "bidder-1")
    assert mine is not None and mine["bid_amount"] == 4500
    assert len(await bids.get_bids(job_id)) == 1

    with pytest.raises(ApiError) as exc_info:
        await bids.place_bid(job_id, "bidder-1", "Bidder One", 0)
    assert exc_info.value.status == 422


@pytest.mark.asyncio
async def test_chat_service(api_client: ApiClient) -> None:
    payload = make_job_payload()
    job_id = await JobService(api_client).create_job(payload["jobData"], payload["user"])
    chat = ChatService(api_client)

    conversation_id = await chat.create_or_get_conversation(job_id, "owner-1", "bidder-1", "Moulds")
    assert await chat.create_or_get_conversation(job_id, "owner-1", "bidder-1", "Moulds") == conversation_id

    await chat.send_message(conversation_id, "bidder-1", "Bidder One", "hello")
    [message] = await chat.get_messages(conversation_id)
    assert message["message"] == "hello"
    [thread] = await chat.get_conversations("owner-1")
    assert thread["last_message"] == "hello"

    with pytest.raises(ApiError) as exc_info:
        await chat.send_message(999, "bidder-1", "Bidder One", "lost")
    assert exc_info.value.status == 500
    assert exc_info.value.message == "Failed to send message"


@pytest.mark.asyncio
async def test_content_and_forum_services(api_client: ApiClient) -> None:
    content = ContentService(api_client)
    banner_id = await content.create("banners", {"title": "Expo", "image": "/expo.png"})
    await content.update("banners", banner_id, {"title": "Plastics Expo"})
    assert [b["title"] for b in await content.get_items("banners")] == ["Plastics Expo"]
    await content.delete("banners", banner_id)
    assert await content.get_items("banners") == []

    forum = ForumService(api_client)
    post_id = await forum.create_post("member-1", "Dryers", "Which desiccant dryer?")
    await forum.add_comment(post_id, "member-2", "Go with a dew point of -40C")
    assert [p["id"] for p in await forum.get_posts(search="dryer")] == [post_id]
    assert len(await forum.get_comments(post_id)) == 1


@pytest.mark.asyncio
async def test_timeout_raises_api_error_and_list_degrades() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    settings = ClientSettings(api_base_url="http://test/api")
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=settings.api_base_url) as http:
        api = ApiClient(settings=settings, http=http)
        with pytest.raises(ApiError) as exc_info:
            await ChatService(api).get_messages(1)
        assert exc_info.value.status is None

        assert await JobService(api).get_jobs() == []
        assert await BidService(api).get_my_bid(1, "x") is None


@pytest.mark.asyncio
async def test_non_json_error_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad Gateway")

    settings = ClientSettings(api_base_url="http://test/api")
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=settings.api_base_url) as http:
        api = ApiClient(settings=settings, http=http)
        with pytest.raises(ApiError) as exc_info:
            await ContentService(api).get_items("sponsors")
    assert exc_info.value.status == 502
    assert exc_info.value.message == "HTTP error 502"


@pytest.mark.asyncio
async def test_job_lists_fall_back_to_last_loaded_copy() -> None:
    backend_up = True
    listing = [{"id": 7, "title": "Preform mould"}]

    def handler(request: httpx.Request) -> httpx.Response:
        if not backend_up:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json=listing)

    settings = ClientSettings(api_base_url="http://test/api")
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=settings.api_base_url) as http:
        jobs = JobService(ApiClient(settings=settings, http=http))
        assert await jobs.get_jobs() == listing
        assert await jobs.get_user_jobs("owner-1") == listing

        backend_up = False
        assert await jobs.get_jobs() == listing
        assert await jobs.get_user_jobs("owner-1") == listing
        assert await jobs.get_user_jobs("someone-else") == []
