import time

import pytest

from vendix.services.receipts import display_date
from vendix.utils import decode_data_uri, encode_data_uri, local_day, to_local


@pytest.fixture
def five_hours_behind_utc(monkeypatch):
    monkeypatch.setenv("TZ", "EST5")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_local_day_follows_local_time(five_hours_behind_utc):
    # 03:00 UTC is still the previous evening locally.
    assert local_day("2026-03-14T03:00:00+00:00") == "2026-03-13"
    assert local_day("2026-03-14T15:09:26+00:00") == "2026-03-14"
    assert display_date("2026-03-14T03:00:00+00:00") == "13/03/2026 22:00"


def test_unparseable_timestamps():
    assert to_local("yesterday") is None
    assert local_day("yesterday") == ""
    assert display_date("yesterday") == "yesterday"


def test_data_uri_roundtrip_and_rejects():
    uri = encode_data_uri(b"\x89PNG", "image/png")
    assert uri.startswith("data:image/png;base64,")
    assert decode_data_uri(uri) == b"\x89PNG"
    assert decode_data_uri("") is None
    assert decode_data_uri("https://example.com/x.png") is None
