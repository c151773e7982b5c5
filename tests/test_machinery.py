"""Tests for machinery listings and admin moderation."""

from typing import Any

import pytest
from httpx import AsyncClient

from tests.conftest import create_job


async def register_seller(client: AsyncClient, uid: str = "seller-1", approved: bool = True) -> int:
    """Create the user (via a job post) and grant selling rights. Returns users.id."""
    await create_job(client, uid=uid)
    [user] = (await client.get("/api/admin/users", params={"search": uid})).json()
    if approved:
        resp = await client.put(
            f"/api/admin/users/{user['id']}",
            json={"can_sell": True, "is_seller_approved": True},
        )
        assert resp.status_code == 200, resp.text
    return user["id"]


def make_listing(uid: str = "seller-1", **fields: Any) -> dict:
    listing = {
        "firebase_uid": uid,
        "name": "250T injection moulding machine",
        "category": "Injection Moulding",
        "price": 2500000,
        "capacity": "250 tons",
        "location": "Pune",
        "specifications": {"screw_diameter": "50mm"},
        "features": ["servo pump"],
    }
    listing.update(fields)
    return listing


async def create_listing(client: AsyncClient, uid: str = "seller-1", **fields: Any) -> int:
    resp = await client.post("/api/machinery", json=make_listing(uid, **fields))
    assert resp.status_code == 200, resp.text
    return resp.json()["id"]


@pytest.mark.asyncio
async def test_listing_waits_for_approval(client: AsyncClient) -> None:
    await register_seller(client)

    resp = await client.post("/api/machinery", json=make_listing())
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Machinery listing created. Pending admin approval."
    machinery_id = body["id"]

    assert (await client.get("/api/machinery")).json() == []
    [own] = (await client.get("/api/users/seller-1/machinery")).json()
    assert own["id"] == machinery_id
    assert own["is_approved"] is False
    assert own["user_name"] == "Owner One"
    assert own["unit"] == "piece"
    assert own["features"] == ["servo pump"]

    resp = await client.put(f"/api/admin/machinery/{machinery_id}", json={"is_approved": True})
    assert resp.json() == {"success": True}
    [public] = (await client.get("/api/machinery")).json()
    assert public["id"] == machinery_id


@pytest.mark.asyncio
async def test_listing_requires_seller_approval(client: AsyncClient) -> None:
    await register_seller(client, approved=False)

    resp = await client.post("/api/machinery", json=make_listing())
    assert resp.status_code == 403
    assert resp.json()["error"].startswith("Selling permission not approved")


@pytest.mark.asyncio
async def test_listing_by_unknown_user_returns_404(client: AsyncClient) -> None:
    resp = await client.post("/api/machinery", json=make_listing(uid="nobody"))
    assert resp.status_code == 404
    assert resp.json() == {"error": "User not found"}


@pytest.mark.asyncio
async def test_admin_role_may_list_without_seller_flags(client: AsyncClient) -> None:
    user_id = await register_seller(client, approved=False)
    await client.put(f"/api/admin/users/{user_id}", json={"role": "ADMIN"})

    resp = await client.post("/api/machinery", json=make_listing())
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_listing_validation(client: AsyncClient) -> None:
    await register_seller(client)

    resp = await client.post("/api/machinery", json=make_listing(price=0))
    assert resp.status_code == 422
    payload = make_listing()
    del payload["name"]
    resp = await client.post("/api/machinery", json=payload)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_owner_can_edit_and_delete(client: AsyncClient) -> None:
    await register_seller(client)
    machinery_id = await create_listing(client)

    resp = await client.put(
        f"/api/machinery/{machinery_id}",
        json={"firebase_uid": "seller-1", "price": 2400000, "in_stock": False},
    )
    assert resp.json() == {"success": True}
    [listing] = (await client.get("/api/users/seller-1/machinery")).json()
    assert listing["price"] == 2400000
    assert listing["in_stock"] is False
    assert listing["name"] == "250T injection moulding machine"

    resp = await client.delete(f"/api/machinery/{machinery_id}", params={"firebase_uid": "seller-1"})
    assert resp.json() == {"success": True}
    assert (await client.get("/api/users/seller-1/machinery")).json() == []


@pytest.mark.asyncio
async def test_other_users_cannot_edit_or_delete(client: AsyncClient) -> None:
    await register_seller(client)
    machinery_id = await create_listing(client)

    resp = await client.put(
        f"/api/machinery/{machinery_id}", json={"firebase_uid": "intruder", "price": 1}
    )
    assert resp.status_code == 403
    assert resp.json() == {"error": "You can only edit your own machinery"}

    resp = await client.delete(f"/api/machinery/{machinery_id}", params={"firebase_uid": "intruder"})
    assert resp.status_code == 403
    assert resp.json() == {"error": "You can only delete your own machinery"}


@pytest.mark.asyncio
async def test_update_edge_cases(client: AsyncClient) -> None:
    await register_seller(client)
    machinery_id = await create_listing(client)

    resp = await client.put(f"/api/machinery/{machinery_id}", json={"firebase_uid": "seller-1"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "No fields to update"}

    resp = await client.put(
        f"/api/machinery/{machinery_id}", json={"firebase_uid": "seller-1", "name": None}
    )
    assert resp.status_code == 422

    resp = await client.put("/api/machinery/9999", json={"firebase_uid": "seller-1", "price": 5})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Machinery not found"}


@pytest.mark.asyncio
async def test_admin_listing_crud_and_search(client: AsyncClient) -> None:
    await register_seller(client)
    await create_listing(client)

    resp = await client.post(
        "/api/admin/machinery",
        json={"name": "Blow moulder", "category": "Blow Moulding", "price": 900000, "supplier": "Acme"},
    )
    admin_id = resp.json()["id"]

    listings = (await client.get("/api/admin/machinery")).json()
    assert [m["category"] for m in listings] == ["Blow Moulding", "Injection Moulding"]
    admin_listing = listings[0]
    assert admin_listing["is_approved"] is True
    assert admin_listing["user_id"] is None
    assert admin_listing["user_name"] is None

    found = (await client.get("/api/admin/machinery", params={"search": "acme"})).json()
    assert [m["id"] for m in found] == [admin_id]
    found = (await client.get("/api/admin/machinery", params={"search": "owner one"})).json()
    assert [m["category"] for m in found] == ["Injection Moulding"]

    resp = await client.delete(f"/api/admin/machinery/{admin_id}")
    assert resp.json() == {"success": True, "message": "Machinery deleted successfully"}
    resp = await client.delete(f"/api/admin/machinery/{admin_id}")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_listing_survives_seller_deletion(client: AsyncClient) -> None:
    user_id = await register_seller(client)
    machinery_id = await create_listing(client)

    await client.delete(f"/api/admin/users/{user_id}")

    [listing] = (await client.get("/api/admin/machinery")).json()
    assert listing["id"] == machinery_id
    assert listing["user_id"] is None
    assert listing["firebase_uid"] == "seller-1"


@pytest.mark.asyncio
async def test_admin_user_update(client: AsyncClient) -> None:
    user_id = await register_seller(client, approved=False)

    resp = await client.put(f"/api/admin/users/{user_id}", json={"can_buy": True})
    user = resp.json()
    assert user["can_buy"] is True
    assert user["can_sell"] is False
    assert user["role"] == "USER"

    resp = await client.put(f"/api/admin/users/{user_id}", json={})
    assert resp.status_code == 400
    resp = await client.put(f"/api/admin/users/{user_id}", json={"role": "ROOT"})
    assert resp.status_code == 422
    resp = await client.put(f"/api/admin/users/{user_id}", json={"can_chat": None})
    assert resp.status_code == 422
    resp = await client.put("/api/admin/users/9999", json={"can_buy": True})
    assert resp.status_code == 404
