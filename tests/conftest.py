import os
import sys

import pytest

# Allow running pytest from the repo root or from within `tests/`.
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from vendix.db import _connect, ensure_schema  # noqa: E402
from vendix.services.business import BusinessSettings  # noqa: E402
from vendix.services.catalog import Product, replace_products  # noqa: E402


@pytest.fixture
def conn(tmp_path):
    c = _connect(tmp_path / "vendix.db")
    ensure_schema(c)
    yield c
    c.close()


@pytest.fixture
def htg_settings():
    return BusinessSettings(default_currency="HTG", conversion_rate=130.0)


@pytest.fixture
def usd_settings():
    return BusinessSettings(default_currency="USD", conversion_rate=130.0)


@pytest.fixture
def catalog(conn):
    products = [
        Product(id="P-1", name="Rice 1kg", price=325.0, barcode="111", stock=10),
        Product(id="P-2", name="Coffee 250g", price=750.0, barcode="222", stock=2),
        Product(id="P-3", name="Soap bar", price=125.0, barcode="333", stock=0),
    ]
    replace_products(conn, products)
    return products
