"""Tests for testimonials, banners and sponsors, including change broadcasts."""

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.services.broadcast import Broadcaster
from app.services.content import seed_defaults
from tests.conftest import RecordingSocket


@pytest.fixture
def broadcaster(test_app: FastAPI) -> Broadcaster:
    return test_app.state.ctx.broadcaster


@pytest_asyncio.fixture
async def socket(broadcaster: Broadcaster) -> RecordingSocket:
    sock = RecordingSocket()
    await broadcaster.connect(sock)
    return sock


@pytest.mark.asyncio
async def test_banner_crud_broadcasts_each_write(
    client: AsyncClient, socket: RecordingSocket, broadcaster: Broadcaster
) -> None:
    resp = await client.post("/api/banners", json={"title": "Monsoon sale", "image": "/sale.png"})
    assert resp.status_code == 200
    banner_id = resp.json()["id"]

    resp = await client.put(f"/api/banners/{banner_id}", json={"title": "Monsoon mega sale"})
    assert resp.status_code == 200

    resp = await client.delete(f"/api/banners/{banner_id}")
    assert resp.status_code == 200

    await broadcaster.flush()
    assert socket.sent == [{"event": "banners_updated"}] * 3


@pytest.mark.asyncio
async def test_each_kind_emits_its_own_event(
    client: AsyncClient, socket: RecordingSocket, broadcaster: Broadcaster
) -> None:
    await client.post(
        "/api/testimonials",
        json={"name": "A", "company": "B", "image": "/a.png", "testimonial": "Great", "rating": 4},
    )
    await client.post("/api/sponsors", json={"name": "Acme", "website": "https://acme.example"})
    await broadcaster.flush()
    assert socket.sent == [{"event": "testimonials_updated"}, {"event": "sponsors_updated"}]


@pytest.mark.asyncio
async def test_failed_write_does_not_broadcast(
    client: AsyncClient, socket: RecordingSocket, broadcaster: Broadcaster
) -> None:
    resp = await client.put("/api/banners/999", json={"title": "Ghost"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Banner not found"}
    resp = await client.delete("/api/sponsors/999")
    assert resp.status_code == 404
    assert broadcaster.pending_sends == 0
    assert socket.sent == []


@pytest.mark.asyncio
async def test_public_list_shows_active_only(client: AsyncClient) -> None:
    await client.post("/api/sponsors", json={"name": "Visible"})
    hidden = (await client.post("/api/sponsors", json={"name": "Hidden", "active": False})).json()["id"]

    public = (await client.get("/api/sponsors")).json()
    assert [s["name"] for s in public] == ["Visible"]

    everyone = (await client.get("/api/admin/sponsors")).json()
    assert {s["id"] for s in everyone} >= {hidden}
    assert len(everyone) == 2


@pytest.mark.asyncio
async def test_deactivating_hides_item(client: AsyncClient) -> None:
    banner_id = (await client.post("/api/banners", json={"title": "T", "image": "/t.png"})).json()["id"]
    await client.put(f"/api/banners/{banner_id}", json={"active": False})
    assert (await client.get("/api/banners")).json() == []


@pytest.mark.asyncio
async def test_sponsor_defaults(client: AsyncClient) -> None:
    await client.post("/api/sponsors", json={"name": "  ", "logo": ""})
    [sponsor] = (await client.get("/api/sponsors")).json()
    assert sponsor["name"] == "New Sponsor"
    assert sponsor["logo"] == "/placeholder-banner.svg"


@pytest.mark.asyncio
async def test_testimonial_rating_bounds(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/testimonials",
        json={"name": "A", "company": "B", "image": "/a.png", "testimonial": "ok", "rating": 6},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_newest_first(client: AsyncClient) -> None:
    await client.post("/api/banners", json={"title": "Older", "image": "/1.png"})
    await client.post("/api/banners", json={"title": "Newer", "image": "/2.png"})
    titles = [b["title"] for b in (await client.get("/api/banners")).json()]
    assert titles == ["Newer", "Older"]


@pytest.mark.asyncio
async def test_seed_defaults_only_fills_empty_tables(client: AsyncClient, db_session: AsyncSession) -> None:
    await client.post("/api/banners", json={"title": "Custom", "image": "/c.png"})
    await seed_defaults(db_session)

    testimonials = (await client.get("/api/testimonials")).json()
    banners = (await client.get("/api/banners")).json()
    sponsors = (await client.get("/api/sponsors")).json()
    assert len(testimonials) == 4
    assert {t["company"] for t in testimonials} >= {"Kumar Plastics Ltd.", "Reddy Polymers"}
    assert [b["title"] for b in banners] == ["Custom"]
    assert {s["name"] for s in sponsors} == {"PlasticTech Solutions", "Industrial Partners"}

    await seed_defaults(db_session)
    assert len((await client.get("/api/testimonials")).json()) == 4


@pytest.mark.asyncio
async def test_sponsor_defaults_when_fields_omitted(client: AsyncClient) -> None:
    resp = await client.post("/api/sponsors", json={"website": "https://acme.example"})
    assert resp.status_code == 200
    [sponsor] = (await client.get("/api/sponsors")).json()
    assert sponsor["name"] == "New Sponsor"
    assert sponsor["logo"] == "/placeholder-banner.svg"


@pytest.mark.asyncio
async def test_all_null_update_is_rejected_without_broadcast(
    client: AsyncClient, socket: RecordingSocket, broadcaster: Broadcaster
) -> None:
    banner = (await client.post("/api/banners", json={"title": "T", "image": "/t.png"})).json()["id"]
    await broadcaster.flush()
    before = (await client.get("/api/banners")).json()[0]

    resp = await client.put(f"/api/banners/{banner}", json={"active": None, "title": None})
    assert resp.status_code == 400
    assert resp.json() == {"error": "No fields to update"}

    await broadcaster.flush()
    assert socket.sent == [{"event": "banners_updated"}]
    assert (await client.get("/api/banners")).json()[0]["updated_at"] == before["updated_at"]
