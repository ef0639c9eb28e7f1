"""Validate CSV frames and build a chain from them.

Four frames feed a chain:

    stores     id, name[, opening_time, closing_time, open_days]
    products   id, name, price
    inventory  store_id, product_id, quantity
    sales      store_id, product_id, units

``open_days`` holds weekday tokens (``MON``, ``Tuesday``...) separated by
``|``, ``,`` or spaces; blank means every day. Sales are replayed in file
order, each at the product's price when it is applied.
"""
import logging
import re
from datetime import datetime, time

import pandas as pd

from supermarket_chain.domain.chain import SupermarketChain
from supermarket_chain.domain.errors import UnknownProductError
from supermarket_chain.domain.models import Product, Weekday
from supermarket_chain.domain.supermarket import (
    DEFAULT_CLOSING_TIME,
    DEFAULT_OPENING_TIME,
    Supermarket,
)

logger = logging.getLogger(__name__)

REQUIRED_STORES = {"id", "name"}
REQUIRED_PRODUCTS = {"id", "name", "price"}
REQUIRED_INVENTORY = {"store_id", "product_id", "quantity"}
REQUIRED_SALES = {"store_id", "product_id", "units"}

DEFAULT_FILENAMES = {
    "stores": "stores.csv",
    "products": "products.csv",
    "inventory": "inventory.csv",
    "sales": "sales.csv",
}

_DAY_SEPARATORS = re.compile(r"[|,\s]+")


def missing_cols(df: pd.DataFrame, required: set[str]) -> list[str]:
    return sorted(list(required - set(df.columns)))


def add_error(
    errors: list,
    *,
    file: str,
    row: int | None,
    field: str,
    code: str,
    message: str,
    value: str = "",
    suggestion: str = "",
):
    errors.append({
        "file": file,
        "row": row,
        "field": field,
        "code": code,
        "message": message,
        "value": value,
        "suggestion": suggestion,
    })


def is_blank(value) -> bool:
    return value is None or (not isinstance(value, str) and pd.isna(value)) or str(value).strip() == ""


def as_int(value) -> int:
    """int() that refuses blanks and fractional numbers."""
    number = float(value)
    if pd.isna(number) or not number.is_integer():
        raise ValueError(f"not an integer: {value!r}")
    return int(number)


def parse_time(value) -> time | None:
    if is_blank(value):
        return None
    return datetime.strptime(str(value).strip(), "%H:%M").time()


def parse_days(value) -> frozenset[Weekday] | None:
    if is_blank(value):
        return None
    tokens = [t for t in _DAY_SEPARATORS.split(str(value)) if t]
    return frozenset(Weekday.from_name(t) for t in tokens)


def validate_frames(
    stores: pd.DataFrame,
    products: pd.DataFrame,
    inventory: pd.DataFrame,
    sales: pd.DataFrame,
    filenames: dict[str, str] | None = None,
) -> list[dict]:
    """Return every problem found in the four frames; an empty list means loadable.

    Stock sufficiency is not checked here, it only shows up when sales are
    replayed by :func:`build_chain`.
    """
    names = {**DEFAULT_FILENAMES, **(filenames or {})}
    errors: list[dict] = []

    # 1) Required columns
    for key, df, required in (
        ("stores", stores, REQUIRED_STORES),
        ("products", products, REQUIRED_PRODUCTS),
        ("inventory", inventory, REQUIRED_INVENTORY),
        ("sales", sales, REQUIRED_SALES),
    ):
        missing = missing_cols(df, required)
        if missing:
            add_error(errors, file=names[key], row=None, field="*", code="MISSING_COLUMNS",
                      message="Missing required columns", value=",".join(missing),
                      suggestion="Add these columns to header.")

    # Stop early if missing columns
    if errors:
        return errors

    # 2) Row-level checks
    store_ids: set[int] = set()
    for idx, row in stores.iterrows():
        csv_row = int(idx) + 2
        try:
            store_id = as_int(row["id"])
            if store_id in store_ids:
                add_error(errors, file=names["stores"], row=csv_row, field="id", code="DUPLICATE_ID",
                          message="store id appears more than once", value=str(store_id))
            store_ids.add(store_id)
        except (TypeError, ValueError):
            add_error(errors, file=names["stores"], row=csv_row, field="id", code="BAD_INT",
                      message="id must be an integer", value=str(row.get("id", "")))

        if is_blank(row["name"]):
            add_error(errors, file=names["stores"], row=csv_row, field="name", code="REQUIRED",
                      message="name is required", suggestion="Provide a non-empty name.")

        hours = {}
        for field in ("opening_time", "closing_time"):
            try:
                hours[field] = parse_time(row.get(field))
            except ValueError:
                add_error(errors, file=names["stores"], row=csv_row, field=field, code="BAD_TIME",
                          message=f"{field} must be HH:MM", value=str(row.get(field, "")),
                          suggestion="Use 24h time like 08:00.")
        if len(hours) == 2:
            # a blank side falls back to the store default
            hours = {
                "opening_time": hours["opening_time"] or DEFAULT_OPENING_TIME,
                "closing_time": hours["closing_time"] or DEFAULT_CLOSING_TIME,
            }
        if len(hours) == 2 and hours["opening_time"] >= hours["closing_time"]:
            add_error(errors, file=names["stores"], row=csv_row, field="closing_time",
                      code="BAD_SCHEDULE", message="closing_time must be after opening_time",
                      value=f"{hours['opening_time']:%H:%M}-{hours['closing_time']:%H:%M}")

        try:
            days = parse_days(row.get("open_days"))
            if days is not None and not days:
                raise ValueError("no days")
        except ValueError:
            add_error(errors, file=names["stores"], row=csv_row, field="open_days", code="BAD_DAY",
                      message="open_days must list weekdays", value=str(row.get("open_days", "")),
                      suggestion="Use tokens like MON|TUE|WED.")

    product_ids: set[int] = set()
    for idx, row in products.iterrows():
        csv_row = int(idx) + 2
        try:
            product_id = as_int(row["id"])
            if product_id in product_ids:
                add_error(errors, file=names["products"], row=csv_row, field="id", code="DUPLICATE_ID",
                          message="product id appears more than once", value=str(product_id))
            product_ids.add(product_id)
        except (TypeError, ValueError):
            add_error(errors, file=names["products"], row=csv_row, field="id", code="BAD_INT",
                      message="id must be an integer", value=str(row.get("id", "")))

        if is_blank(row["name"]):
            add_error(errors, file=names["products"], row=csv_row, field="name", code="REQUIRED",
                      message="name is required", suggestion="Provide a non-empty name.")

        try:
            price = float(row["price"])
            if pd.isna(price) or price < 0:
                raise ValueError()
        except (TypeError, ValueError):
            add_error(errors, file=names["products"], row=csv_row, field="price", code="BAD_NUMBER",
                      message="price must be a number >= 0", value=str(row.get("price", "")))

    # 3) Cross-file id checks
    for key, qty_field in (("inventory", "quantity"), ("sales", "units")):
        df = inventory if key == "inventory" else sales
        for idx, row in df.iterrows():
            csv_row = int(idx) + 2
            for field, known, code in (
                ("store_id", store_ids, "UNKNOWN_STORE"),
                ("product_id", product_ids, "UNKNOWN_PRODUCT"),
            ):
                try:
                    ref = as_int(row[field])
                except (TypeError, ValueError):
                    add_error(errors, file=names[key], row=csv_row, field=field, code="BAD_INT",
                              message=f"{field} must be an integer", value=str(row.get(field, "")))
                    continue
                if ref not in known:
                    add_error(errors, file=names[key], row=csv_row, field=field, code=code,
                              message=f"{field} not found in {names[field.replace('_id', 's')]}",
                              value=str(ref), suggestion="Fix the id to match the referenced file.")

            try:
                if as_int(row[qty_field]) <= 0:
                    raise ValueError()
            except (TypeError, ValueError):
                add_error(errors, file=names[key], row=csv_row, field=qty_field, code="BAD_INT",
                          message=f"{qty_field} must be an integer > 0",
                          value=str(row.get(qty_field, "")))

    return errors


def build_chain(
    stores: pd.DataFrame,
    products: pd.DataFrame,
    inventory: pd.DataFrame,
    sales: pd.DataFrame,
) -> SupermarketChain:
    """Build a fresh chain from validated frames.

    Domain errors (duplicate ids, insufficient stock for a sale...) propagate
    unchanged; the partially built chain is discarded with them.
    """
    chain = SupermarketChain()
    for row in stores.to_dict(orient="records"):
        schedule = {}
        opening, closing = parse_time(row.get("opening_time")), parse_time(row.get("closing_time"))
        if opening is not None:
            schedule["opening_time"] = opening
        if closing is not None:
            schedule["closing_time"] = closing
        chain.add_supermarket(Supermarket(
            as_int(row["id"]),
            str(row["name"]).strip(),
            open_days=parse_days(row.get("open_days")),
            **schedule,
        ))

    catalog: dict[int, Product] = {}
    for row in products.to_dict(orient="records"):
        product = Product(id=as_int(row["id"]), name=str(row["name"]).strip(), price=float(row["price"]))
        if product.id in catalog:
            raise ValueError(f"Product id {product.id} appears more than once")
        catalog[product.id] = product

    for row in inventory.to_dict(orient="records"):
        supermarket = chain.get_supermarket(as_int(row["store_id"]))
        product = _lookup(catalog, as_int(row["product_id"]))
        if not supermarket.has_product(product.id):
            supermarket.register_product(product)
        supermarket.add_stock(product.id, as_int(row["quantity"]))

    for row in sales.to_dict(orient="records"):
        supermarket = chain.get_supermarket(as_int(row["store_id"]))
        supermarket.register_sale(as_int(row["product_id"]), as_int(row["units"]))

    logger.info(
        "Built chain: %d supermarkets, %d products, %d stock rows, %d sales",
        len(chain), len(catalog), len(inventory), len(sales),
    )
    return chain


def _lookup(catalog: dict[int, Product], product_id: int) -> Product:
    try:
        return catalog[product_id]
    except KeyError:
        raise UnknownProductError(product_id) from None
