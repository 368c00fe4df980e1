import logging
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from freelance_api.logging_config import LOGGER_NAME, configure_logging
from freelance_api.settings import get_settings
from freelance_api.utils import (
    duration_ms,
    format_currency,
    format_duration,
    is_valid_email,
    ms_to_hours,
    parse_date,
    parse_datetime,
    percent,
)


class TestParsing:
    def test_parse_datetime_variants(self):
        assert parse_datetime("2025-06-01T10:00:00Z") == datetime(2025, 6, 1, 10, 0, 0)
        assert parse_datetime("2025-06-01") == datetime(2025, 6, 1)
        assert parse_datetime(date(2025, 6, 1)) == datetime(2025, 6, 1)
        aware = datetime(2025, 6, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert parse_datetime(aware) == datetime(2025, 6, 1, 10, 0)
        assert parse_datetime(None) is None
        assert parse_datetime("") is None

    def test_parse_datetime_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_datetime("31/01/2025")

    def test_parse_date(self):
        assert parse_date("2025-01-31T23:30:00") == date(2025, 1, 31)
        assert parse_date(date(2025, 1, 31)) == date(2025, 1, 31)
        assert parse_date(None) is None

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("a@b.co", True),
            ("sarah@techcorp.com", True),
            ("no-at-sign.com", False),
            ("missing@tld", False),
            ("spa ce@x.io", False),
        ],
    )
    def test_is_valid_email(self, value, expected):
        assert is_valid_email(value) is expected


class TestFormatting:
    @pytest.mark.parametrize(
        "ms, expected",
        [
            (0, "0h 0m"),
            (None, "0h 0m"),
            (300000, "5m"),
            (5400000, "1h 30m"),
            (7200000, "2h 0m"),
        ],
    )
    def test_format_duration(self, ms, expected):
        assert format_duration(ms) == expected

    def test_format_currency(self):
        assert format_currency(Decimal("12450")) == "$12,450.00"
        assert format_currency(0) == "$0.00"
        assert format_currency(99.5) == "$99.50"

    def test_durations_and_ratios(self):
        assert duration_ms(datetime(2025, 1, 1, 9), datetime(2025, 1, 1, 9, 1, 0, 500000)) == 60500
        assert ms_to_hours(5400000) == 1.5
        assert percent(1, 3) == 33
        assert percent(1, 8) == 13
        assert percent(5, 0) == 0


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("CORS_ALLOW_ORIGINS", "SIMULATE_LATENCY", "SEED_FIXTURES", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = get_settings()
        assert settings.cors_allow_origins == ["*"]
        assert settings.simulate_latency is True
        assert settings.seed_fixtures is True
        assert settings.log_level == "INFO"

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://localhost:3000, https://app.example.com")
        monkeypatch.setenv("SIMULATE_LATENCY", "off")
        monkeypatch.setenv("SEED_FIXTURES", "0")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        settings = get_settings()
        assert settings.cors_allow_origins == ["http://localhost:3000", "https://app.example.com"]
        assert settings.simulate_latency is False
        assert settings.seed_fixtures is False
        assert settings.log_level == "DEBUG"

    def test_unknown_log_level_falls_back(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        assert get_settings().log_level == "INFO"


def test_configure_logging_is_idempotent():
    logger = configure_logging("DEBUG")
    handlers = list(logger.handlers)
    configure_logging("WARNING")
    assert logger.name == LOGGER_NAME
    assert logger.handlers == handlers
    assert logger.level == logging.WARNING
