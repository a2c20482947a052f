from __future__ import annotations

import logging
import sys
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend.core import rates
from backend.core.rates import default_tiers, display_rate, labor_cost, price_labor, sort_tiers
from backend.core.validation import ValidationError, validate_markup_percentage, validate_rate_tier

TWO_TIERS = [
    {"id": 1, "max_hours": 3, "rate": 50},
    {"id": 2, "max_hours": 5, "rate": 60},
]


def test_default_tiers_come_from_yaml():
    tiers = default_tiers()
    assert [tier.max_hours for tier in tiers] == [3, 5]
    assert [tier.rate for tier in tiers] == [Decimal("50"), Decimal("60")]


def test_crossing_threshold_reprices_every_hour_at_top_rate():
    assert labor_cost(3.5, 0, TWO_TIERS) == Decimal("240")
    assert display_rate(3.5, TWO_TIERS) == Decimal("60")


def test_staying_under_threshold_bills_the_minimum():
    assert labor_cost(2.0, 0, TWO_TIERS) == Decimal("150")
    assert labor_cost(0.25, 0, TWO_TIERS) == Decimal("150")
    assert display_rate(2.0, TWO_TIERS) == Decimal("50")


def test_threshold_itself_is_not_crossed():
    assert labor_cost(3, 0, TWO_TIERS) == Decimal("150")
    assert labor_cost(0.1 + 0.2 + 2.7, 0, TWO_TIERS) == Decimal("150")


def test_overtime_rounds_up_at_top_rate():
    assert labor_cost(0, 1.2, TWO_TIERS) == Decimal("120")
    assert labor_cost(2, 1, TWO_TIERS) == Decimal("210")


def test_zero_hours_cost_nothing():
    assert labor_cost(0, 0, TWO_TIERS) == Decimal("0")


def test_only_lowest_and_highest_tiers_are_consulted():
    tiers = [
        {"max_hours": 8, "rate": 75},
        {"max_hours": 3, "rate": 50},
        {"max_hours": 5, "rate": 60},
    ]
    assert [tier.max_hours for tier in sort_tiers(tiers)] == [3, 5, 8]
    assert labor_cost(4, 0, tiers) == Decimal("300")
    assert labor_cost(1, 0, tiers) == Decimal("150")


def test_open_ended_tier_sorts_last():
    tiers = [{"max_hours": None, "rate": 90}, {"max_hours": 2, "rate": 40}]
    assert labor_cost(6, 0, tiers) == Decimal("540")


def test_empty_tier_list_uses_defaults():
    assert labor_cost(3.5, 0, []) == Decimal("240")


def test_price_labor_with_configured_tiers():
    quote = price_labor(3.5, 0, lambda: TWO_TIERS)
    assert quote.total_cost == Decimal("240")
    assert quote.hourly_rate == Decimal("60")
    assert quote.degraded is False


def test_price_labor_without_configuration_uses_defaults():
    quote = price_labor(2, 0, lambda: [])
    assert quote.total_cost == Decimal("150")
    assert not quote.degraded


def test_price_labor_uses_defaults_when_configuration_is_unavailable(caplog):
    def offline_loader():
        raise RuntimeError("rate store offline")

    with caplog.at_level(logging.WARNING):
        quote = price_labor(3.5, 0, offline_loader)

    assert quote.total_cost == Decimal("240")
    assert quote.hourly_rate == Decimal("60")
    assert quote.degraded is False
    assert "Configured hourly rates unusable" in caplog.text


def test_price_labor_uses_defaults_for_unusable_stored_tier():
    quote = price_labor(3.5, 0, lambda: [{"id": 1, "max_hours": 3, "rate": "n/a"}])
    assert quote.total_cost == Decimal("240")
    assert not quote.degraded


def test_price_labor_flat_charge_when_defaults_fail(monkeypatch, caplog):
    def broken_defaults():
        raise RuntimeError("defaults unreadable")

    monkeypatch.setattr(rates, "default_tiers", broken_defaults)
    with caplog.at_level(logging.ERROR):
        quote = price_labor(3.5, 1, lambda: [])

    assert quote.degraded is True
    assert quote.total_cost == Decimal("130")
    assert quote.hourly_rate == Decimal("60")
    assert "Default hourly rate tiers unavailable" in caplog.text

    assert price_labor(2, 0, None).total_cost == Decimal("60")


def test_validate_rate_tier_collects_errors():
    validate_rate_tier({"min_hours": 0, "max_hours": 3, "rate": 50})
    with pytest.raises(ValidationError, match="Minimum hours cannot be greater than maximum hours"):
        validate_rate_tier({"min_hours": 5, "max_hours": 3, "rate": 50})
    with pytest.raises(ValidationError) as excinfo:
        validate_rate_tier({"min_hours": -1, "max_hours": 3, "rate": -5})
    assert str(excinfo.value) == "Minimum hours cannot be negative, Rate cannot be negative"
    with pytest.raises(ValidationError):
        validate_rate_tier({"max_hours": "lots"})


def test_validate_markup_percentage():
    validate_markup_percentage(None)
    validate_markup_percentage("12.5")
    with pytest.raises(ValidationError):
        validate_markup_percentage(150)
