from __future__ import annotations

import random

from vendix.db import kv_remove
from vendix.schema import KEY_PRODUCTS, KEY_SALES
from vendix.services.catalog import Product, list_products, replace_products

DEMO_PRODUCTS = [
    ("Rice 1kg", 325.0, "7501000000011"),
    ("Black beans 1kg", 425.0, "7501000000028"),
    ("Cooking oil 1L", 535.0, "7501000000035"),
    ("Sugar 1kg", 250.0, "7501000000042"),
    ("Spaghetti 500g", 155.0, "7501000000059"),
    ("Coffee 250g", 750.0, "7501000000066"),
    ("Bottled water 1.5L", 100.0, "7501000000073"),
    ("Soap bar", 125.0, "7501000000080"),
]


def load_demo_products(conn, *, seed: int = 7) -> list[Product]:
    """
    Appends the demo catalog, skipping barcodes that are already present.
    Prices are in HTG, the default base currency.
    """
    rng = random.Random(seed)
    products = list_products(conn)
    known = {p.barcode for p in products}

    for i, (name, price, barcode) in enumerate(DEMO_PRODUCTS):
        if barcode in known:
            continue
        products.append(
            Product(
                id=f"P-DEMO-{i + 1:03d}",
                name=name,
                price=float(price),
                barcode=barcode,
                stock=rng.randint(0, 40),
            )
        )

    replace_products(conn, products)
    return products


def wipe_all(conn) -> None:
    # Catalog and sale log only; account, settings and license survive.
    for key in (KEY_PRODUCTS, KEY_SALES):
        kv_remove(conn, key)
