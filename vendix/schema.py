SCHEMA_SQL = r"""
-- Whole-document key/value store: one JSON string per key
-- (user, session, products, sales, settings, license)
CREATE TABLE IF NOT EXISTS kv (
  key TEXT PRIMARY KEY,
  value TEXT NOT NULL,
  updated_at TEXT NOT NULL               -- ISO datetime
);
"""

KEY_USER = "user"
KEY_SESSION = "session"
KEY_PRODUCTS = "products"
KEY_SALES = "sales"
KEY_SETTINGS = "settings"
KEY_LICENSE = "license"
