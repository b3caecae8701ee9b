import pytest

from vendix.services.business import BusinessSettings
from vendix.services.pricing import Currency, convert, format_money, normalize_currency


def test_convert_same_currency_is_identity(htg_settings):
    assert convert(1234.5, "HTG", htg_settings) == 1234.5
    assert convert(12.0, Currency.USD, BusinessSettings(default_currency="USD")) == 12.0


def test_convert_usd_base_to_htg_multiplies(usd_settings):
    assert convert(10.0, Currency.HTG, usd_settings) == pytest.approx(1300.0)


def test_convert_htg_base_to_usd_divides(htg_settings):
    assert convert(1300.0, Currency.USD, htg_settings) == pytest.approx(10.0)


def test_convert_does_not_round(htg_settings):
    assert convert(100.0, "USD", htg_settings) == pytest.approx(100.0 / 130.0)


def test_zero_rate_is_not_guarded():
    settings = BusinessSettings(default_currency="HTG", conversion_rate=0.0)
    with pytest.raises(ZeroDivisionError):
        convert(100.0, "USD", settings)


def test_format_money_rounds_for_display_only():
    assert format_money(1234.5, "HTG") == "1,234.50 G"
    assert format_money(10 / 3, Currency.USD) == "3.33 $"


def test_normalize_currency_rejects_unknown():
    assert normalize_currency(" usd ") == Currency.USD
    with pytest.raises(ValueError):
        normalize_currency("EUR")
