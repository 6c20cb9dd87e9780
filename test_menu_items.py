# test_menu_items.py
import uuid

import pytest

from zocpos.models.core import SUGGESTED_CATEGORIES


def jprint(step, r):
    assert 200 <= r.status_code < 300, f"{step} -> {r.status_code}: {r.text}"
    return r.json()


def add_item(client, name, category="Main Course", price=9.5, **extra):
    body = {"name": name, "category": category, "price": price, **extra}
    return jprint(f"POST {name}", client.post("/api/menu-items", json=body))


def test_create_and_fetch(client):
    it = add_item(client, "  Butter Chicken ", price=12.499, description="Creamy tomato gravy")
    assert it["name"] == "Butter Chicken"
    assert it["price"] == 12.50
    assert it["available"] is True
    assert it["createdAt"] and it["updatedAt"]

    got = jprint("GET", client.get(f"/api/menu-items/{it['id']}"))
    assert got["description"] == "Creamy tomato gravy"
    assert got["category"] == "Main Course"


@pytest.mark.parametrize("body", [
    {"name": "Free Water", "category": "Beverages", "price": 0},
    {"name": "Mystery", "category": "Beverages", "price": "abc"},
    {"name": "No Category", "price": 4},
    {"name": "   ", "category": "Beverages", "price": 4},
])
def test_create_rejects_invalid(client, body):
    r = client.post("/api/menu-items", json=body)
    assert r.status_code == 400
    assert r.json()["error_code"] == "VALIDATION_ERROR"


def test_partial_update(client):
    it = add_item(client, "Lassi", category="Beverages", price=3, description="Sweet")
    upd = jprint("PATCH", client.patch(f"/api/menu-items/{it['id']}", json={"available": False}))
    assert upd["available"] is False
    assert upd["name"] == "Lassi"
    assert upd["price"] == 3.0

    upd = jprint("PATCH price", client.patch(f"/api/menu-items/{it['id']}", json={"price": 3.75, "description": None}))
    assert upd["price"] == 3.75
    assert upd["description"] is None
    assert upd["available"] is False

    r = client.patch(f"/api/menu-items/{it['id']}", json={"price": -1})
    assert r.status_code == 400


def test_delete_then_not_found(client):
    it = add_item(client, "Samosa", category="Appetizers", price=2)
    assert jprint("DELETE", client.delete(f"/api/menu-items/{it['id']}")) == {
        "message": "Menu item deleted successfully"
    }
    assert client.get(f"/api/menu-items/{it['id']}").status_code == 404
    assert client.delete(f"/api/menu-items/{it['id']}").status_code == 404


def test_bad_and_unknown_ids(client):
    assert client.get("/api/menu-items/xyz").status_code == 400
    assert client.patch(f"/api/menu-items/{uuid.uuid4()}", json={"price": 2}).status_code == 404


def test_list_filters(client):
    add_item(client, "Gulab Jamun", category="Desserts", price=4)
    add_item(client, "Kulfi", category="Desserts", price=3.5, available=False)
    add_item(client, "Tomato Soup", category="Soups", price=5, description="with basil")

    desserts = jprint("category", client.get("/api/menu-items", params={"category": "Desserts"}))
    assert {m["name"] for m in desserts["items"]} == {"Gulab Jamun", "Kulfi"}

    everything = jprint("all", client.get("/api/menu-items", params={"category": "all"}))
    assert everything["total"] == 3

    available = jprint("available", client.get("/api/menu-items", params={"available": "true"}))
    assert "Kulfi" not in {m["name"] for m in available["items"]}

    by_desc = jprint("search", client.get("/api/menu-items", params={"search": "BASIL"}))
    assert [m["name"] for m in by_desc["items"]] == ["Tomato Soup"]


def test_list_pagination(client):
    for i in range(7):
        add_item(client, f"Dish {i}")
    page = jprint("page 2", client.get("/api/menu-items", params={"page": 2, "pageSize": 3}))
    assert page["total"] == 7
    assert page["pageCount"] == 3
    assert page["page"] == 2
    assert len(page["items"]) == 3

    capped = jprint("huge", client.get("/api/menu-items", params={"pageSize": 5000}))
    assert capped["pageSize"] == 100


def test_categories_lists_suggestions_then_custom(client):
    add_item(client, "Chaat", category="Street Food")
    add_item(client, "Naan", category="Breads")
    add_item(client, "Paneer Tikka", category="Appetizers")

    cats = jprint("categories", client.get("/api/menu-items/categories"))
    assert cats[:len(SUGGESTED_CATEGORIES)] == SUGGESTED_CATEGORIES
    assert cats[len(SUGGESTED_CATEGORIES):] == ["Breads", "Street Food"]


def test_non_finite_price_rejected(client):
    r = client.post("/api/menu-items", content='{"name": "X", "category": "Soups", "price": Infinity}',
                    headers={"content-type": "application/json"})
    assert r.status_code == 400

    it = add_item(client, "Rasam", category="Soups", price=4)
    r = client.patch(f"/api/menu-items/{it['id']}", content='{"price": NaN}',
                     headers={"content-type": "application/json"})
    assert r.status_code == 400
    assert jprint("GET", client.get(f"/api/menu-items/{it['id']}"))["price"] == 4.0
