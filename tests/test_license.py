from datetime import date, datetime

from vendix.db import kv_get, kv_set
from vendix.schema import KEY_LICENSE
from vendix.services import license as lic
from vendix.services.license import (
    activate_license,
    check_stored_license,
    needs_expiry_warning,
    validate_license,
)

KEY = "VENDIX-20261231-AB12"


def test_valid_key_reports_days_remaining():
    status = validate_license(KEY, today=date(2026, 10, 18))
    assert status.valid
    assert status.days_remaining == 74
    assert status.expiry_display == "31/12/2026"
    assert not needs_expiry_warning(status)


def test_key_is_normalized():
    status = validate_license("  vendix-20261231-ab12 ", today=date(2026, 1, 1))
    assert status.valid
    assert status.key == KEY


def test_time_of_day_is_ignored():
    status = validate_license(KEY, today=datetime(2026, 12, 31, 23, 59))
    assert status.valid
    assert status.days_remaining == 0


def test_expired_key_after_expiry_date():
    status = validate_license(KEY, today=date(2027, 1, 1))
    assert not status.valid
    assert status.reason == "expired"


def test_unknown_key_is_invalid_regardless_of_date():
    for today in (date(2020, 1, 1), date(2031, 1, 1)):
        status = validate_license("FAKE-20300101-ZZ99", today=today)
        assert not status.valid
        assert status.reason == "invalid key"


def test_allow_list_is_checked_before_format(monkeypatch):
    monkeypatch.setattr(lic, "LICENSE_KEYS", frozenset({"VENDIX-2026-12-31", "VENDIX-2026AB31-X"}))

    assert validate_license("VENDIX-2026-12-31").reason == "bad format"
    assert validate_license("VENDIX-2026AB31-X").reason == "bad format"
    assert validate_license("VENDIX-20261231").reason == "invalid key"


def test_impossible_date_is_bad_format(monkeypatch):
    monkeypatch.setattr(lic, "LICENSE_KEYS", frozenset({"VENDIX-20261340-AB12"}))
    assert validate_license("VENDIX-20261340-AB12").reason == "bad format"


def test_expiry_warning_threshold():
    assert needs_expiry_warning(validate_license(KEY, today=date(2026, 12, 24)))
    assert not needs_expiry_warning(validate_license(KEY, today=date(2026, 12, 23)))
    assert not needs_expiry_warning(validate_license("FAKE-20300101-ZZ99"))


def test_no_stored_key(conn):
    status = check_stored_license(conn, today=date(2026, 10, 18))
    assert not status.valid
    assert status.reason == "no-key"


def test_activate_persists_normalized_key(conn):
    status = activate_license(conn, "vendix-20261231-ab12", today=date(2026, 10, 18))
    assert status.valid
    assert kv_get(conn, KEY_LICENSE) == KEY
    assert check_stored_license(conn, today=date(2026, 10, 18)).valid


def test_rejected_activation_keeps_previous_key(conn):
    activate_license(conn, KEY, today=date(2026, 10, 18))
    status = activate_license(conn, "FAKE-20300101-ZZ99", today=date(2026, 10, 18))
    assert status.reason == "invalid key"
    assert kv_get(conn, KEY_LICENSE) == KEY


def test_expired_stored_key_is_purged(conn):
    kv_set(conn, KEY_LICENSE, KEY)
    status = check_stored_license(conn, today=date(2027, 1, 1))
    assert status.reason == "expired"
    assert kv_get(conn, KEY_LICENSE) is None
    assert check_stored_license(conn, today=date(2027, 1, 1)).reason == "no-key"
