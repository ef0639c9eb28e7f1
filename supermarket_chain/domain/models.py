from dataclasses import dataclass
from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field


class Weekday(IntEnum):
    # values line up with date.weekday()
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def from_name(cls, token: str) -> "Weekday":
        """Parse ``MONDAY``, ``monday`` or the three-letter form ``Mon``."""
        key = token.strip().upper()
        for day in cls:
            if key == day.name or (len(key) == 3 and day.name.startswith(key)):
                return day
        raise ValueError(f"Unknown weekday: {token!r}")


class Product(BaseModel):
    """A catalog product, shared by reference between every store selling it.

    ``id`` and ``name`` are fixed at creation; ``price`` may change at any time
    and the change is seen by every store holding this instance.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: int = Field(frozen=True)
    name: str = Field(frozen=True, min_length=1)
    price: float = Field(ge=0)


@dataclass
class StockEntry:
    """One store's stock and cumulative sales for a single product."""

    product: Product
    current_quantity: int = 0
    sold_quantity: int = 0
    revenue_generated: float = 0.0


@dataclass(frozen=True)
class ProductSales:
    product_id: int
    name: str
    quantity: int
