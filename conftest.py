# conftest.py
import os

os.environ.setdefault("DB_URL", "sqlite://")

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from zocpos.config import Settings
from zocpos.main import create_app
from zocpos.models.core import MenuItem, Order, OrderLine, OrderStatus
from zocpos.services.ordering import next_order_number


@pytest.fixture
def settings():
    return Settings(DB_URL="sqlite://", TZ="UTC", LOG_LEVEL="WARNING", TAX_RATE=Decimal("0.08"))


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # entering the client runs startup, which creates the tables
    with TestClient(app) as c:
        yield c


@pytest.fixture
def database(app, client):
    return app.state.db


@pytest.fixture
def seed_order(database, settings):
    """Insert an order directly, with a chosen timestamp and status."""
    def _seed(created_at: datetime, lines=(("Burger", 1, "10.00"),), status=OrderStatus.COMPLETED,
              payment_method="Cash", customer="Walk-in"):
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        items = [
            OrderLine(position=i, name=name, quantity=qty, price=Decimal(price))
            for i, (name, qty, price) in enumerate(lines)
        ]
        total = sum((l.price * l.quantity for l in items), Decimal("0"))
        with database.session() as db:
            o = Order(
                order_number=next_order_number(db, settings),
                customer_name=customer,
                total=total,
                status=status,
                payment_method=payment_method,
                tax_rate=settings.TAX_RATE,
                items=items,
                created_at=created_at,
                updated_at=created_at,
            )
            db.add(o)
            db.commit()
            return o.id
    return _seed


@pytest.fixture
def seed_menu_item(database):
    def _seed(name: str, category: str, price: str = "9.50", available: bool = True):
        with database.session() as db:
            it = MenuItem(name=name, category=category, price=Decimal(price), available=available)
            db.add(it)
            db.commit()
            return it.id
    return _seed
