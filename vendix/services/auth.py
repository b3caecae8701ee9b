from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import asdict, dataclass
from typing import Optional

from passlib.context import CryptContext

from vendix.db import kv_get, kv_remove, kv_set, load_json, save_json
from vendix.schema import KEY_SESSION, KEY_USER

logger = logging.getLogger(__name__)

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class User:
    username: str
    password_hash: str


def hash_password(password: str) -> str:
    return _pwd_context.hash(str(password))


def is_legacy_hash(hashed: Optional[str]) -> bool:
    # Stores written before bcrypt hold unsalted sha256 hex.
    return bool(hashed) and not str(hashed).startswith("$2")


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    if is_legacy_hash(hashed):
        legacy = hashlib.sha256(str(password).encode("utf-8")).hexdigest()
        return hmac.compare_digest(legacy, hashed)
    return _pwd_context.verify(str(password), hashed)


def needs_rehash(hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    return is_legacy_hash(hashed) or _pwd_context.needs_update(hashed)


def get_user(conn) -> Optional[User]:
    data = load_json(conn, KEY_USER)
    if not data:
        return None
    return User(username=str(data["username"]), password_hash=str(data["password_hash"]))


def is_session_active(conn) -> bool:
    return kv_get(conn, KEY_SESSION) is not None


def _require_fields(username: str, password: str) -> str:
    u = str(username or "").strip()
    if not u or not password:
        raise ValueError("Please fill in all fields.")
    return u


def sign_in(conn, username: str, password: str) -> User:
    """
    First run creates the single local account; later runs check credentials
    against it. Either way the session flag is set on success.
    """
    u = _require_fields(username, password)
    existing = get_user(conn)

    if existing is None:
        user = User(username=u, password_hash=hash_password(password))
        save_json(conn, KEY_USER, asdict(user))
        logger.info("Created local account %s", u)
    else:
        if u != existing.username or not verify_password(password, existing.password_hash):
            raise ValueError("Invalid credentials.")
        user = existing
        if needs_rehash(existing.password_hash):
            user = User(username=existing.username, password_hash=hash_password(password))
            save_json(conn, KEY_USER, asdict(user))
            logger.info("Upgraded password hash for %s", user.username)

    kv_set(conn, KEY_SESSION, "active")
    return user


def sign_out(conn) -> None:
    kv_remove(conn, KEY_SESSION)
