#!/usr/bin/env python3
"""
Remote E2E smoke runner for the ZOC POS API.

Walks a deployed server through the menu -> order -> billing -> reporting
flow. Every record it creates carries a run tag and is deleted at the end.

Run:
    BASE_URL=http://localhost:8000 python remote_e2e.py
"""

import os
import sys
import time
import uuid
import json
from datetime import date
import requests

BASE_URL = os.getenv("BASE_URL", "http://localhost:8000").rstrip("/")
TIMEOUT = 25
RNG = str(int(time.time()))[-6:] + "-" + uuid.uuid4().hex[:6]


def _url(path: str) -> str:
    path = path if path.startswith("/") else f"/{path}"
    return f"{BASE_URL}{path}"


def jprint(step: str, r: requests.Response):
    if not (200 <= r.status_code < 300):
        ct = r.headers.get("content-type", "")
        body = r.text if "application/json" not in ct else json.dumps(r.json(), indent=2)
        print(f"\n❌ {step} -> {r.status_code}\n{body}\n", file=sys.stderr)
        sys.exit(1)
    print(f"✅ {step} [{r.status_code}]")
    return r.json() if r.headers.get("content-type", "").startswith("application/json") and r.text else {}


def expect(step: str, r: requests.Response, status: int):
    if r.status_code != status:
        print(f"\n❌ {step} -> expected {status}, got {r.status_code}\n{r.text}\n", file=sys.stderr)
        sys.exit(1)
    print(f"✅ {step} [{r.status_code}]")


def req(method: str, path: str, **kwargs) -> requests.Response:
    headers = kwargs.pop("headers", {}) or {}
    if "json" in kwargs:
        headers.setdefault("content-type", "application/json")
    return requests.request(method, _url(path), headers=headers, timeout=TIMEOUT, **kwargs)


def setup_menu() -> list[dict]:
    items = []
    for name, category, price in (("Paneer Wrap", "Main Course", 5.0), ("Masala Chai", "Beverages", 3.5)):
        body = {"name": f"{name} {RNG}", "category": category, "price": price}
        items.append(jprint(f"POST /api/menu-items ({name})", req("POST", "/api/menu-items", json=body)))
    return items


def place_order(menu: list[dict]) -> dict:
    body = {
        "customerName": f"E2E Guest {RNG}",
        "paymentMethod": "Card",
        "items": [
            {"menuItemId": menu[0]["id"], "name": menu[0]["name"], "quantity": 2, "price": menu[0]["price"]},
            {"menuItemId": menu[1]["id"], "name": menu[1]["name"], "quantity": 1, "price": menu[1]["price"]},
        ],
    }
    order = jprint("POST /api/orders", req("POST", "/api/orders", json=body))
    if order["total"] != 13.5:
        print(f"❌ unexpected order total {order['total']}", file=sys.stderr)
        sys.exit(1)
    return order


def run_kitchen_flow(order: dict) -> None:
    oid = order["id"]
    for status in ("preparing", "ready", "completed"):
        jprint(f"PATCH /api/orders/{{id}} status={status}", req("PATCH", f"/api/orders/{oid}", json={"status": status}))
    expect("PATCH back to pending is rejected",
           req("PATCH", f"/api/orders/{oid}", json={"status": "pending"}), 400)


def check_billing(order: dict) -> None:
    oid = order["id"]
    bill = jprint("GET /api/billing/{id}", req("GET", f"/api/billing/{oid}"))
    print(f"   subtotal={bill['subtotal']} tax={bill['tax']} total={bill['total']} status={bill['status']}")
    r = req("GET", f"/api/billing/{oid}/receipt")
    if r.status_code != 200 or order["orderNumber"] not in r.text:
        print(f"❌ receipt missing order number\n{r.text}", file=sys.stderr)
        sys.exit(1)
    print("✅ GET /api/billing/{id}/receipt")

    jprint("PATCH status=paid", req("PATCH", f"/api/orders/{oid}", json={"status": "paid"}))
    page = jprint("GET /api/billing?status=paid", req("GET", "/api/billing", params={"status": "paid", "search": RNG}))
    if not any(b["id"] == oid for b in page["items"]):
        print("❌ paid bill not listed", file=sys.stderr)
        sys.exit(1)


def check_reports() -> None:
    today = date.today().isoformat()
    data = jprint("GET /api/analytics", req("GET", "/api/analytics", params={"dateFrom": today, "dateTo": today}))
    print(f"   today: {data['summary']['totalOrders']} orders, revenue {data['summary']['totalRevenue']}")
    if len(data["hourlyOrders"]) != 24:
        print("❌ hourly histogram should have 24 buckets", file=sys.stderr)
        sys.exit(1)
    expect("GET /api/analytics bad status", req("GET", "/api/analytics", params={"orderStatus": "nope"}), 400)
    jprint("GET /api/dashboard/metrics", req("GET", "/api/dashboard/metrics"))
    jprint("GET /api/dashboard/charts?range=30d", req("GET", "/api/dashboard/charts", params={"range": "30d"}))
    jprint("GET /api/orders/status", req("GET", "/api/orders/status"))
    r = req("GET", "/api/orders/export", params={"search": RNG})
    expect("GET /api/orders/export", r, 200)


def cleanup(order: dict, menu: list[dict]) -> None:
    jprint("DELETE /api/orders/{id}", req("DELETE", f"/api/orders/{order['id']}"))
    expect("DELETE again", req("DELETE", f"/api/orders/{order['id']}"), 404)
    for it in menu:
        jprint("DELETE /api/menu-items/{id}", req("DELETE", f"/api/menu-items/{it['id']}"))


def main():
    print(f"Target: {BASE_URL}  run={RNG}")
    jprint("GET /healthz", req("GET", "/healthz"))
    jprint("GET /api/test-db", req("GET", "/api/test-db"))

    menu = setup_menu()
    order = place_order(menu)
    run_kitchen_flow(order)
    check_billing(order)
    check_reports()
    cleanup(order, menu)
    print("\n🎉 remote E2E finished")


if __name__ == "__main__":
    main()
