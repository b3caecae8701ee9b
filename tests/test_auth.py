import hashlib

import pytest

from vendix.db import save_json
from vendix.schema import KEY_USER
from vendix.services.auth import (
    get_user,
    hash_password,
    is_session_active,
    needs_rehash,
    sign_in,
    sign_out,
    verify_password,
)


def test_first_sign_in_creates_account(conn):
    assert get_user(conn) is None

    user = sign_in(conn, " admin ", "secret")

    assert user.username == "admin"
    assert user.password_hash.startswith("$2")
    assert verify_password("secret", user.password_hash)
    assert not verify_password("wrong", user.password_hash)
    assert get_user(conn) == user
    assert is_session_active(conn)


def test_sign_in_checks_credentials(conn):
    sign_in(conn, "admin", "secret")
    sign_out(conn)

    with pytest.raises(ValueError, match="Invalid credentials"):
        sign_in(conn, "admin", "wrong")
    with pytest.raises(ValueError, match="Invalid credentials"):
        sign_in(conn, "someone", "secret")
    assert not is_session_active(conn)

    sign_in(conn, "admin", "secret")
    assert is_session_active(conn)


def test_sign_in_requires_fields(conn):
    with pytest.raises(ValueError, match="fill in all fields"):
        sign_in(conn, "", "secret")
    with pytest.raises(ValueError, match="fill in all fields"):
        sign_in(conn, "admin", "")
    assert get_user(conn) is None


def test_sign_out_keeps_account(conn):
    sign_in(conn, "admin", "secret")
    sign_out(conn)
    assert not is_session_active(conn)
    assert get_user(conn) is not None


def test_password_hash_is_salted():
    a = hash_password("secret")
    b = hash_password("secret")

    assert a != b
    assert verify_password("secret", a)
    assert verify_password("secret", b)
    assert a != hashlib.sha256(b"secret").hexdigest()
    assert not verify_password("secret", "")


def test_legacy_sha256_account_is_upgraded_on_sign_in(conn):
    legacy = hashlib.sha256(b"secret").hexdigest()
    save_json(conn, KEY_USER, {"username": "admin", "password_hash": legacy})
    assert needs_rehash(legacy)

    with pytest.raises(ValueError, match="Invalid credentials"):
        sign_in(conn, "admin", "wrong")
    assert get_user(conn).password_hash == legacy

    sign_in(conn, "admin", "secret")

    stored = get_user(conn).password_hash
    assert stored.startswith("$2")
    assert not needs_rehash(stored)
    assert verify_password("secret", stored)
