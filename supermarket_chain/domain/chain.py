import logging
import threading
from datetime import time
from typing import Iterable, Iterator

from supermarket_chain.domain.errors import DuplicateStoreError, UnknownStoreError
from supermarket_chain.domain.models import ProductSales, Weekday
from supermarket_chain.domain.supermarket import Supermarket

logger = logging.getLogger(__name__)

TOP_PRODUCTS_LIMIT = 5
NO_REVENUE_DATA = "No supermarkets or sales data available."
NO_STORES_OPEN = "No supermarkets open at this time."


class SupermarketChain:
    """
    Ordered collection of supermarkets with chain-wide reports.

    Nothing is cached: every report is recomputed from the member stores at
    call time.
    """

    def __init__(self, supermarkets: Iterable[Supermarket] | None = None):
        self._supermarkets: list[Supermarket] = []
        self._lock = threading.Lock()
        for supermarket in supermarkets or ():
            self.add_supermarket(supermarket)

    def __len__(self):
        return len(self._supermarkets)

    def __iter__(self) -> Iterator[Supermarket]:
        return iter(self.supermarkets)

    @property
    def supermarkets(self) -> tuple[Supermarket, ...]:
        with self._lock:
            return tuple(self._supermarkets)

    # ---- membership ----

    def add_supermarket(self, supermarket: Supermarket) -> None:
        """Append ``supermarket``; its id must not already be in the chain."""
        with self._lock:
            if any(s.id == supermarket.id for s in self._supermarkets):
                raise DuplicateStoreError(supermarket.id)
            self._supermarkets.append(supermarket)
        logger.info("Supermarket %s (ID: %s) joined the chain", supermarket.name, supermarket.id)

    def remove_supermarket(self, supermarket: Supermarket) -> None:
        with self._lock:
            for index, member in enumerate(self._supermarkets):
                if member.id == supermarket.id:
                    del self._supermarkets[index]
                    break
            else:
                raise UnknownStoreError(supermarket.id)
        logger.info("Supermarket %s (ID: %s) left the chain", supermarket.name, supermarket.id)

    def get_supermarket(self, store_id: int) -> Supermarket:
        for supermarket in self.supermarkets:
            if supermarket.id == store_id:
                return supermarket
        raise UnknownStoreError(store_id)

    # ---- reports ----

    def get_available_supermarkets(self) -> str:
        return ", ".join(f"{s.name} (ID: {s.id})" for s in self.supermarkets)

    def get_total_revenue(self) -> float:
        return sum((s.get_total_revenue() for s in self.supermarkets), 0.0)

    def get_supermarket_with_highest_revenue(self) -> str:
        revenues = [(s, s.get_total_revenue()) for s in self.supermarkets]
        if not revenues:
            return NO_REVENUE_DATA
        # max() keeps the first of equal maxima, so ties go to chain order
        winner, revenue = max(revenues, key=lambda pair: pair[1])
        return f"{winner.name} (ID: {winner.id}). Total Revenue: {revenue}"

    def get_top_selling_products(self, limit: int = TOP_PRODUCTS_LIMIT) -> list[ProductSales]:
        """
        Rank products by units sold across every store.

        Sales of the same product id in different stores are summed. Equal
        totals keep the order in which the products were first met: chain
        order, then each store's registration order.
        """
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")

        names: dict[int, str] = {}
        totals: dict[int, int] = {}
        for supermarket in self.supermarkets:
            for entry in supermarket.get_sold_entries():
                product_id = entry.product.id
                if product_id not in totals:
                    names[product_id] = entry.product.name
                    totals[product_id] = 0
                totals[product_id] += entry.sold_quantity

        # sorted() is stable with reverse=True as well
        ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
        return [ProductSales(pid, names[pid], qty) for pid, qty in ranked[:limit]]

    def get_top5_selling_products(self) -> str:
        return " - ".join(
            f"{p.name}: {p.quantity}" for p in self.get_top_selling_products(TOP_PRODUCTS_LIMIT)
        )

    def get_open_supermarkets(self, day: Weekday, at: time) -> str:
        open_list = [s for s in self.supermarkets if s.is_open(day, at)]
        if not open_list:
            return NO_STORES_OPEN
        return ", ".join(f"{s.name} ({s.id})" for s in open_list)
