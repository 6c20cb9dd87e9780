# test_order_numbers.py
from concurrent.futures import ThreadPoolExecutor

import pytest

from zocpos.config import Settings
from zocpos.db import Database
from zocpos.models.core import Counter
from zocpos.schemas.orders import OrderIn
from zocpos.services.ordering import create_order, next_order_number


@pytest.fixture
def file_db(tmp_path):
    settings = Settings(DB_URL=f"sqlite:///{tmp_path}/pos.db", LOG_LEVEL="WARNING")
    db = Database(settings)
    db.open()
    yield db, settings
    db.close()


def _place(db, settings, i):
    body = OrderIn(customer_name=f"Guest {i}", items=[{"name": "Idli", "quantity": 1, "price": 2.5}])
    with db.session() as s:
        return create_order(s, body, settings).order_number


def test_concurrent_orders_get_distinct_sequential_numbers(file_db):
    db, settings = file_db
    with ThreadPoolExecutor(max_workers=8) as pool:
        numbers = list(pool.map(lambda i: _place(db, settings, i), range(24)))

    assert len(set(numbers)) == 24
    assert sorted(numbers) == [f"ORD-{n:04d}" for n in range(1, 25)]


def test_counter_resumes_after_restart(file_db):
    db, settings = file_db
    _place(db, settings, 1)
    _place(db, settings, 2)
    db.close()

    reopened = Database(settings)
    reopened.open()
    try:
        assert _place(reopened, settings, 3) == "ORD-0003"
    finally:
        reopened.close()


def test_counter_seeds_from_existing_orders(file_db):
    db, settings = file_db
    _place(db, settings, 1)
    _place(db, settings, 2)
    with db.session() as s:
        s.delete(s.get(Counter, Counter.ORDERS))
        s.commit()

    db.open()
    assert _place(db, settings, 3) == "ORD-0003"


def test_prefix_is_configurable(file_db):
    db, settings = file_db
    custom = settings.model_copy(update={"ORDER_NUMBER_PREFIX": "TBL"})
    with db.session() as s:
        assert next_order_number(s, custom) == "TBL-0001"
        s.rollback()
