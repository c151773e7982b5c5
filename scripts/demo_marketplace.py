#!/usr/bin/env python3
"""
Live demo: a job owner and a bidder meet through the marketplace API.

Showcases:
  1. Job posting
  2. Opening the per-job chat thread
  3. Optimistic chat sends with reconciliation
  4. Placing and then revising a bid
  5. The owner's view of threads and bids
  6. Homepage content refresh after a banner change

Run:
  1. Start the API:  uvicorn app.main:app --port 3002
  2. Run this demo:  python scripts/demo_marketplace.py [api_base_url]
"""

import asyncio
import json
import sys

import httpx

from app.client.config import ClientSettings
from app.client.services import ApiClient, ApiError, BidService, ChatService, ContentService, JobService
from app.client.sync import ChatWindow, ContentSync, format_inr

BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:3002/api"

# ─── Colors ───

BOLD = "\033[1m"
DIM = "\033[2m"
GREEN = "\033[92m"
BLUE = "\033[94m"
YELLOW = "\033[93m"
RED = "\033[91m"
CYAN = "\033[96m"
MAGENTA = "\033[95m"
RESET = "\033[0m"


def banner(text: str) -> None:
    print(f"\n{'═' * 64}")
    print(f"  {BOLD}{text}{RESET}")
    print(f"{'═' * 64}")


def step(num: int, text: str) -> None:
    print(f"\n{BOLD}{CYAN}Step {num:2d}{RESET} │ {text}")


def user_says(name: str, color: str, msg: str) -> None:
    print(f"         {color}{BOLD}{name}{RESET}: {msg}")


def platform_says(msg: str) -> None:
    print(f"         {MAGENTA}⚙ Platform{RESET}: {msg}")


def show_json(data: dict, keys: list[str] | None = None, indent: int = 9) -> None:
    filtered = {k: data[k] for k in keys if k in data} if keys else data
    prefix = " " * indent
    for line in json.dumps(filtered, indent=2, default=str).split("\n"):
        print(f"{prefix}{DIM}{line}{RESET}")


def fail(msg: str) -> None:
    print(f"\n{RED}{BOLD}✖ FAILED: {msg}{RESET}")
    sys.exit(1)


async def run() -> None:
    banner("B2B Plastics Marketplace: Live Demo")
    print(f"\n{DIM}Checking API at {BASE_URL}...{RESET}")

    health_url = BASE_URL.rsplit("/api", 1)[0] + "/health"
    try:
        r = httpx.get(health_url, timeout=3)
        if r.status_code != 200:
            fail(f"API returned {r.status_code}")
    except httpx.ConnectError:
        fail(f"Cannot connect to {BASE_URL}. Start the API first:\n  uvicorn app.main:app --port 3002")
    print(f"{GREEN}✓ API is running{RESET}")

    settings = ClientSettings(api_base_url=BASE_URL)
    async with ApiClient(settings=settings) as api:
        jobs = JobService(api)

        step(1, "Meera posts a job")
        job_id = await jobs.create_job(
            {
                "title": "Two-cavity cap mould",
                "category": "Moulds",
                "material": "HDPE",
                "quantity": 2,
                "budget": 180000,
                "location": "Coimbatore",
                "requirements": {"runner": "hot"},
                "specifications": ["28mm neck", "tolerance 0.05mm"],
                "estimatedDuration": "5 weeks",
            },
            {"uid": "demo-meera", "email": "meera@example.com", "displayName": "Meera"},
        )
        job = await jobs.get_job(job_id)
        if job is None:
            fail("Job was not readable after posting")
        show_json(job, ["id", "title", "status", "priority", "bids_received"])  # type: ignore[arg-type]

        step(2, "Arjun opens the job's chat")
        window = ChatWindow(
            ChatService(api),
            BidService(api),
            job_id=job_id,
            job_title=job["title"],  # type: ignore[index]
            job_owner_uid="demo-meera",
            user_uid="demo-arjun",
            user_name="Arjun",
        )
        await window.open()
        platform_says(f"Conversation #{window.conversation_id}, {len(window.entries)} earlier messages")

        step(3, "Arjun asks a question")
        entry = await window.send("Is a hot runner mandatory, or can we quote cold runner too?")
        user_says("Arjun", YELLOW, entry.message if entry else "")
        platform_says(f"Thread now shows {len(window.entries)} confirmed message(s)")

        step(4, "Arjun bids, then revises")
        first = await window.place_bid(175000, "Includes trial samples")
        platform_says(f"Bid #{first['bidId']} placed ({format_inr(175000)})")
        second = await window.place_bid(168000)
        platform_says(f"Bid #{second['bidId']} updated={second['updated']} ({format_inr(168000)})")

        step(5, "Meera reviews her inbox")
        [thread] = await ChatService(api).get_conversations("demo-meera")
        show_json(thread, ["id", "participant_name", "last_message"])
        for bid in await BidService(api).get_bids(job_id):
            user_says(bid["bidder_name"], BLUE, f"{format_inr(bid['bid_amount'])} ({bid['status']})")

        step(6, "An admin adds a banner; the homepage re-fetches")
        content = ContentService(api)
        sync = ContentSync(content)
        await sync.refresh_all()
        before = len(sync.banners)
        banner_id = await content.create("banners", {"title": "Demo banner", "image": "/placeholder-banner.svg"})
        await sync.handle_event("banners_updated")
        platform_says(f"Banners: {before} -> {len(sync.banners)}")
        await content.delete("banners", banner_id)

        try:
            await jobs.delete_job(job_id)
        except ApiError as e:
            fail(f"Cleanup failed: {e.message}")

    banner(f"{GREEN}✓ Demo complete{RESET}")


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
