from datetime import datetime, time

import pytest
from pydantic import ValidationError

from supermarket_chain.domain.errors import (
    DuplicateProductError,
    InsufficientStockError,
    InvalidQuantityError,
    UnknownProductError,
)
from supermarket_chain.domain.models import Product, Weekday
from supermarket_chain.domain.supermarket import Supermarket


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


def test_register_product_starts_with_zeroed_entry(super_a, meat):
    assert super_a.has_product(meat.id)
    assert super_a.get_current_stock(meat.id) == 0
    assert super_a.get_quantity_sold(meat.id) == 0
    assert super_a.get_product_revenue(meat.id) == 0.0


def test_register_product_twice_is_rejected(super_a, meat):
    with pytest.raises(DuplicateProductError, match="Meat"):
        super_a.register_product(meat)
    assert len(super_a) == 2


def test_unregister_product_discards_history(super_a, meat):
    super_a.add_stock(meat.id, 10)
    super_a.register_sale(meat.id, 4)

    super_a.unregister_product(meat)

    assert not super_a.has_product(meat.id)
    assert super_a.get_quantity_sold(meat.id) == 0
    assert super_a.get_total_revenue() == 0.0


def test_unregister_unknown_product_is_rejected(super_a, chicken):
    with pytest.raises(UnknownProductError):
        super_a.unregister_product(chicken)
    assert len(super_a) == 2


def test_product_identity_is_frozen_but_price_is_not(meat):
    meat.price = 12.5
    assert meat.price == 12.5

    with pytest.raises(ValidationError):
        meat.name = "Beef"
    with pytest.raises(ValidationError):
        meat.price = -1


# ---------------------------------------------------------------------------
# Stock and sales
# ---------------------------------------------------------------------------


def test_add_stock_updates_quantity(super_a, meat):
    super_a.add_stock(meat.id, 50)

    assert super_a.get_current_stock(meat.id) == 50
    assert super_a.get_quantity_sold(meat.id) == 0
    super_a.register_sale(meat.id, 50)
    assert super_a.get_current_stock(meat.id) == 0


@pytest.mark.parametrize("quantity", [-10, 0])
def test_add_stock_rejects_non_positive_quantity(super_a, meat, quantity):
    with pytest.raises(InvalidQuantityError, match="must be bigger than 0"):
        super_a.add_stock(meat.id, quantity)
    assert super_a.get_current_stock(meat.id) == 0


def test_add_stock_to_unregistered_product(super_a):
    with pytest.raises(UnknownProductError, match=r"register_product\(\) first"):
        super_a.add_stock(999, 10)


def test_register_sale_updates_stock_sales_and_revenue(super_a, fish):
    super_a.add_stock(fish.id, 10)

    total = super_a.register_sale(fish.id, 5)

    assert total == 100.0
    assert super_a.get_current_stock(fish.id) == 5
    assert super_a.get_quantity_sold(fish.id) == 5
    assert super_a.get_product_revenue(fish.id) == 100.0
    assert super_a.get_total_revenue() == 100.0


@pytest.mark.parametrize("quantity", [-1, 0])
def test_register_sale_rejects_non_positive_quantity(super_a, meat, quantity):
    super_a.add_stock(meat.id, 10)

    with pytest.raises(InvalidQuantityError):
        super_a.register_sale(meat.id, quantity)

    assert super_a.get_current_stock(meat.id) == 10
    assert super_a.get_quantity_sold(meat.id) == 0


@pytest.mark.parametrize("quantity", [2.5, 1.0, "3", True])
def test_fractional_or_non_int_quantity_is_rejected(super_a, meat, quantity):
    super_a.add_stock(meat.id, 10)

    with pytest.raises(InvalidQuantityError):
        super_a.add_stock(meat.id, quantity)
    with pytest.raises(InvalidQuantityError):
        super_a.register_sale(meat.id, quantity)

    assert super_a.get_current_stock(meat.id) == 10
    assert isinstance(super_a.get_current_stock(meat.id), int)
    assert super_a.get_quantity_sold(meat.id) == 0


def test_register_sale_of_unregistered_product(super_a, chicken):
    with pytest.raises(UnknownProductError):
        super_a.register_sale(chicken.id, 1)


def test_insufficient_stock_leaves_entry_untouched(super_a, meat):
    super_a.add_stock(meat.id, 10)
    super_a.register_sale(meat.id, 3)

    with pytest.raises(InsufficientStockError) as excinfo:
        super_a.register_sale(meat.id, 11)

    assert excinfo.value.available == 7
    assert excinfo.value.requested == 11
    assert "available 7, requested 11" in str(excinfo.value)
    assert super_a.get_current_stock(meat.id) == 7
    assert super_a.get_quantity_sold(meat.id) == 3
    assert super_a.get_product_revenue(meat.id) == 30.0


def test_revenue_survives_price_changes(super_a):
    gold = Product(id=999, name="Gold", price=10.0)
    super_a.register_product(gold)
    super_a.add_stock(gold.id, 20)

    super_a.register_sale(gold.id, 1)
    gold.price = 50.0
    super_a.register_sale(gold.id, 1)

    assert super_a.get_product_revenue(gold.id) == 60.0
    assert super_a.get_total_revenue() == 60.0


def test_price_change_is_seen_by_every_store(super_a, super_b, meat):
    super_a.add_stock(meat.id, 5)
    super_b.add_stock(meat.id, 5)

    meat.price = 3.0

    assert super_a.register_sale(meat.id, 1) == 3.0
    assert super_b.register_sale(meat.id, 2) == 6.0


def test_queries_on_unknown_product_return_zero(super_a):
    assert super_a.get_quantity_sold(42) == 0
    assert super_a.get_product_revenue(42) == 0.0
    assert super_a.get_current_stock(42) == 0


def test_sold_entries_exclude_unsold_and_are_snapshots(super_a, meat, fish):
    super_a.add_stock(meat.id, 10)
    super_a.add_stock(fish.id, 10)
    super_a.register_sale(meat.id, 2)

    entries = super_a.get_sold_entries()

    assert [e.product.id for e in entries] == [meat.id]
    entries[0].sold_quantity = 1000
    assert super_a.get_quantity_sold(meat.id) == 2


# ---------------------------------------------------------------------------
# Schedule
# ---------------------------------------------------------------------------


def test_default_schedule_is_every_day_eight_to_ten():
    store = Supermarket(7, "Default")

    assert store.opening_time == time(8, 0)
    assert store.closing_time == time(22, 0)
    assert store.open_days == frozenset(Weekday)


def test_is_open_boundaries():
    store = Supermarket(5, "Nine to Six", time(9, 0), time(18, 0))

    assert store.is_open(Weekday.MONDAY, time(9, 0))
    assert store.is_open(Weekday.MONDAY, time(17, 59))
    assert not store.is_open(Weekday.MONDAY, time(18, 0))
    assert not store.is_open(Weekday.MONDAY, time(8, 59))


def test_is_open_respects_open_days():
    store = Supermarket(6, "Weekdays", open_days=[Weekday.MONDAY, Weekday.FRIDAY])

    assert store.is_open(Weekday.FRIDAY, time(12, 0))
    assert not store.is_open(Weekday.SUNDAY, time(12, 0))
    # 2024-06-02 is a Sunday, 2024-06-03 a Monday
    assert not store.is_open_at(datetime(2024, 6, 2, 12, 0))
    assert store.is_open_at(datetime(2024, 6, 3, 12, 0))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"opening_time": time(18, 0), "closing_time": time(9, 0)},
        {"opening_time": time(9, 0), "closing_time": time(9, 0)},
        {"open_days": []},
    ],
)
def test_invalid_schedule_is_rejected(kwargs):
    with pytest.raises(ValueError):
        Supermarket(8, "Broken", **kwargs)


def test_weekday_from_name():
    assert Weekday.from_name("monday") is Weekday.MONDAY
    assert Weekday.from_name(" Sat ") is Weekday.SATURDAY
    with pytest.raises(ValueError):
        Weekday.from_name("Funday")
