import logging
import threading
from dataclasses import replace
from datetime import datetime, time
from typing import Iterable

from supermarket_chain.domain.errors import (
    DuplicateProductError,
    InsufficientStockError,
    InvalidQuantityError,
    UnknownProductError,
)
from supermarket_chain.domain.models import Product, StockEntry, Weekday

logger = logging.getLogger(__name__)

DEFAULT_OPENING_TIME = time(8, 0)
DEFAULT_CLOSING_TIME = time(22, 0)


class Supermarket:
    """
    A single retail location and its inventory.

    The store owns one StockEntry per registered product id. Revenue is
    accumulated at sale time from the product's price at that moment, so later
    price changes never rewrite history.

    Mutations and reads go through one re-entrant lock, which keeps each
    operation all-or-nothing when handlers run on worker threads.
    """

    def __init__(
        self,
        id: int,
        name: str,
        opening_time: time = DEFAULT_OPENING_TIME,
        closing_time: time = DEFAULT_CLOSING_TIME,
        open_days: Iterable[Weekday] | None = None,
    ):
        if opening_time >= closing_time:
            raise ValueError(
                f"Opening time {opening_time:%H:%M} must be before closing time "
                f"{closing_time:%H:%M} for supermarket {name}."
            )
        days = frozenset(Weekday) if open_days is None else frozenset(Weekday(d) for d in open_days)
        if not days:
            raise ValueError(f"Supermarket {name} must be open at least one day a week.")

        self.id = id
        self.name = name
        self.opening_time = opening_time
        self.closing_time = closing_time
        self.open_days = days

        # Key: product id
        self._inventory: dict[int, StockEntry] = {}
        self._lock = threading.RLock()

    def __repr__(self):
        return f"Supermarket({self.id}, {self.name!r}, products={len(self)})"

    def __len__(self):
        return len(self._inventory)

    # ---- catalog ----

    def register_product(self, product: Product) -> None:
        with self._lock:
            if product.id in self._inventory:
                raise DuplicateProductError(product.id, product.name, self.name)
            self._inventory[product.id] = StockEntry(product=product)
        logger.debug("Registered product %s (%s) in %s", product.id, product.name, self.name)

    def unregister_product(self, product: Product) -> None:
        """Drop the product and all of its stock and sales history from this store."""
        with self._lock:
            if product.id not in self._inventory:
                raise UnknownProductError(product.id, self.name)
            del self._inventory[product.id]
        logger.debug("Unregistered product %s from %s", product.id, self.name)

    def has_product(self, product_id: int) -> bool:
        with self._lock:
            return product_id in self._inventory

    # ---- stock & sales ----

    def add_stock(self, product_id: int, quantity: int) -> None:
        _check_quantity(product_id, quantity)
        with self._lock:
            entry = self._entry(product_id)
            entry.current_quantity += quantity
        logger.debug("Added %d units of product %s to %s", quantity, product_id, self.name)

    def register_sale(self, product_id: int, quantity: int) -> float:
        """
        Sell ``quantity`` units and return the total charged.

        The total uses the product's current price and is added to the
        entry's revenue right away.

        Raises:
            InvalidQuantityError: quantity is not a positive whole number.
            UnknownProductError: the product is not registered here.
            InsufficientStockError: fewer than ``quantity`` units on hand.
        """
        _check_quantity(product_id, quantity)
        with self._lock:
            entry = self._entry(product_id)
            if entry.current_quantity < quantity:
                raise InsufficientStockError(
                    product_id, entry.product.name, entry.current_quantity, quantity
                )
            total = entry.product.price * quantity
            entry.current_quantity -= quantity
            entry.sold_quantity += quantity
            entry.revenue_generated += total
        logger.debug(
            "Sale at %s: product %s x%d = %s", self.name, product_id, quantity, total
        )
        return total

    # ---- queries ----

    def get_quantity_sold(self, product_id: int) -> int:
        with self._lock:
            entry = self._inventory.get(product_id)
            return entry.sold_quantity if entry else 0

    def get_current_stock(self, product_id: int) -> int:
        with self._lock:
            entry = self._inventory.get(product_id)
            return entry.current_quantity if entry else 0

    def get_product_revenue(self, product_id: int) -> float:
        with self._lock:
            entry = self._inventory.get(product_id)
            return entry.revenue_generated if entry else 0.0

    def get_total_revenue(self) -> float:
        with self._lock:
            return sum((e.revenue_generated for e in self._inventory.values()), 0.0)

    def get_entries(self) -> list[StockEntry]:
        """Snapshot of every entry, in registration order."""
        with self._lock:
            return [replace(e) for e in self._inventory.values()]

    def get_sold_entries(self) -> list[StockEntry]:
        """Snapshots of the entries that have sold at least one unit."""
        with self._lock:
            return [replace(e) for e in self._inventory.values() if e.sold_quantity > 0]

    # ---- schedule ----

    def is_open(self, day: Weekday, at: time) -> bool:
        # opening inclusive, closing exclusive
        return day in self.open_days and self.opening_time <= at < self.closing_time

    def is_open_at(self, moment: datetime) -> bool:
        return self.is_open(Weekday(moment.weekday()), moment.time())

    def _entry(self, product_id: int) -> StockEntry:
        entry = self._inventory.get(product_id)
        if entry is None:
            raise UnknownProductError(product_id, self.name)
        return entry


def _check_quantity(product_id: int, quantity: int) -> None:
    # whole units only; bool is an int subclass but not a quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantityError(product_id, quantity)
