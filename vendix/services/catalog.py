from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import Optional

from vendix.db import load_json, save_json
from vendix.schema import KEY_PRODUCTS
from vendix.utils import epoch_ms

logger = logging.getLogger(__name__)


@dataclass
class Product:
    id: str
    name: str
    price: float  # base currency
    barcode: str = ""
    stock: int = 0
    image: str = ""  # data URI

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            price=float(data.get("price", 0) or 0),
            barcode=str(data.get("barcode", "") or ""),
            stock=int(data.get("stock", 0) or 0),
            image=str(data.get("image", "") or ""),
        )

    def to_dict(self) -> dict:
        return asdict(self)


def new_product_id() -> str:
    return f"P-{epoch_ms()}"


def list_products(conn) -> list[Product]:
    return [Product.from_dict(p) for p in load_json(conn, KEY_PRODUCTS, [])]


def get_product(conn, product_id: str) -> Optional[Product]:
    return next((p for p in list_products(conn) if p.id == str(product_id)), None)


def replace_products(conn, products: list[Product]) -> None:
    save_json(conn, KEY_PRODUCTS, [p.to_dict() for p in products])


def _validate_product(product: Product) -> Product:
    name = str(product.name or "").strip()
    if not name:
        raise ValueError("Product name is required.")

    try:
        price = float(product.price)
    except (TypeError, ValueError):
        raise ValueError("Price must be a number.")
    if price < 0:
        raise ValueError("Price must be >= 0.")

    try:
        stock = int(product.stock)
    except (TypeError, ValueError):
        raise ValueError("Stock must be a whole number.")
    if stock < 0:
        raise ValueError("Stock must be >= 0.")

    return Product(
        id=str(product.id or new_product_id()),
        name=name,
        price=price,
        barcode=str(product.barcode or "").strip(),
        stock=stock,
        image=str(product.image or ""),
    )


def save_product(conn, product: Product) -> Product:
    """
    Upsert by id: replaces the product in place when it already exists,
    otherwise appends it to the end of the catalog.
    """
    clean = _validate_product(product)
    products = list_products(conn)

    if any(p.id == clean.id for p in products):
        products = [clean if p.id == clean.id else p for p in products]
    else:
        products.append(clean)

    replace_products(conn, products)
    return clean


def delete_product(conn, product_id: str) -> None:
    products = list_products(conn)
    replace_products(conn, [p for p in products if p.id != str(product_id)])


def search_products(products: list[Product], query: str) -> list[Product]:
    needle = str(query or "").strip()
    if not needle:
        return list(products)
    lowered = needle.lower()
    return [p for p in products if lowered in p.name.lower() or needle in p.barcode]


def export_products_json(products: list[Product]) -> str:
    return json.dumps([p.to_dict() for p in products], indent=2, ensure_ascii=False)


def import_products_json(conn, text: str) -> list[Product]:
    """
    Replaces the whole catalog with the products in `text`.
    Only the outer shape is checked: the document must be a JSON array.
    """
    try:
        data = json.loads(text)
    except ValueError:
        raise ValueError("Import failed: file is not valid JSON.")
    if not isinstance(data, list):
        raise ValueError("Import failed: expected a JSON array of products.")

    try:
        products = [Product.from_dict(d) for d in data]
    except (KeyError, TypeError, ValueError, AttributeError):
        raise ValueError("Import failed: every product needs an id, a name and numeric price/stock.")
    replace_products(conn, products)
    logger.info("Imported %d product(s)", len(products))
    return products
