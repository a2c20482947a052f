"""Tiered hourly-rate pricing for labor entries.

Only the lowest and the highest configured tier are consulted.  Crossing the
lowest tier's ``max_hours`` reprices *all* rounded hours at the highest rate;
staying under it bills at least ``max_hours`` hours at the lowest rate.
Overtime always bills at the highest rate.
"""

from __future__ import annotations

import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping

import yaml

from backend.core.schema import LaborQuote, RateTier

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"

BUILTIN_RATE_DEFAULTS: dict[str, Any] = {
    "hourly_rates": [
        {"max_hours": 3, "rate": 50},
        {"max_hours": 5, "rate": 60},
    ],
    "fallback_charge": {"regular": 60, "overtime": 70},
}


def _load_rate_defaults() -> dict:
    path = CONFIG_DIR / "hourly_rates.yaml"
    if not path.exists():
        return BUILTIN_RATE_DEFAULTS
    with path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    return {
        "hourly_rates": data.get("hourly_rates") or BUILTIN_RATE_DEFAULTS["hourly_rates"],
        "fallback_charge": data.get("fallback_charge") or BUILTIN_RATE_DEFAULTS["fallback_charge"],
    }


RATE_DEFAULTS = _load_rate_defaults()


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _as_tier(tier: RateTier | Mapping[str, Any]) -> RateTier:
    if isinstance(tier, RateTier):
        return tier
    return RateTier(**tier)


def default_tiers() -> list[RateTier]:
    return [RateTier(**tier) for tier in RATE_DEFAULTS["hourly_rates"]]


def sort_tiers(tiers: Iterable[RateTier | Mapping[str, Any]]) -> list[RateTier]:
    resolved = [_as_tier(tier) for tier in tiers]
    if not resolved:
        resolved = default_tiers()
    return sorted(resolved, key=lambda tier: (tier.max_hours is None, tier.max_hours or 0))


def _rounded_up_hours(hours: float) -> int:
    # settle float noise to the second before rounding up
    return math.ceil(round(float(hours) * 3600) / 3600)


def _threshold(tier: RateTier) -> Decimal | None:
    return None if tier.max_hours is None else Decimal(str(tier.max_hours))


def display_rate(regular_hours: float, tiers: Iterable[RateTier | Mapping[str, Any]]) -> Decimal:
    ordered = sort_tiers(tiers)
    first, last = ordered[0], ordered[-1]
    threshold = _threshold(first)
    if threshold is not None and _rounded_up_hours(regular_hours) > threshold:
        return last.rate
    return first.rate


def labor_cost(
    regular_hours: float,
    overtime_hours: float,
    tiers: Iterable[RateTier | Mapping[str, Any]],
) -> Decimal:
    ordered = sort_tiers(tiers)
    first, last = ordered[0], ordered[-1]
    threshold = _threshold(first)

    cost = Decimal("0")
    if regular_hours and regular_hours > 0:
        full_hours = Decimal(_rounded_up_hours(regular_hours))
        if threshold is not None and full_hours > threshold:
            cost += full_hours * last.rate
        else:
            minimum = threshold if threshold is not None else full_hours
            cost += max(minimum, full_hours) * first.rate

    if overtime_hours and overtime_hours > 0:
        cost += Decimal(_rounded_up_hours(overtime_hours)) * last.rate

    return _quantize(cost)


def fallback_quote(regular_hours: float, overtime_hours: float) -> LaborQuote:
    """Flat per-presence charge used when no tier set can be resolved."""

    charge = RATE_DEFAULTS["fallback_charge"]
    regular_charge = Decimal(str(charge["regular"]))
    overtime_charge = Decimal(str(charge["overtime"]))
    total = Decimal("0")
    if regular_hours and regular_hours > 0:
        total += regular_charge
    if overtime_hours and overtime_hours > 0:
        total += overtime_charge
    return LaborQuote(hourly_rate=regular_charge, total_cost=_quantize(total), degraded=True)


def _quote(regular_hours: float, overtime_hours: float, tiers: Iterable[RateTier | Mapping[str, Any]]) -> LaborQuote:
    ordered = sort_tiers(tiers)
    return LaborQuote(
        hourly_rate=display_rate(regular_hours, ordered),
        total_cost=labor_cost(regular_hours, overtime_hours, ordered),
    )


def price_labor(
    regular_hours: float,
    overtime_hours: float,
    load_tiers: Callable[[], Iterable[RateTier | Mapping[str, Any]] | None] | None = None,
) -> LaborQuote:
    """Price a labor entry with configured tiers, then defaults, then a flat charge.

    An unavailable or unusable configuration is priced with the default tiers.
    The flat charge applies only when the default tiers themselves fail.
    """

    if load_tiers is not None:
        try:
            configured = list(load_tiers() or [])
            if configured:
                return _quote(regular_hours, overtime_hours, configured)
            logger.info("No hourly rates configured, using default tiers")
        except Exception:
            logger.warning("Configured hourly rates unusable, using default tiers", exc_info=True)

    try:
        return _quote(regular_hours, overtime_hours, default_tiers())
    except Exception:
        logger.exception(
            "Default hourly rate tiers unavailable, charging flat fallback for regular=%s overtime=%s",
            regular_hours,
            overtime_hours,
        )
        return fallback_quote(regular_hours, overtime_hours)
