"""Price computation for tool invocations.

Prices are a pure function of the tool's ``ToolPricing`` and the call
parameters. Per-unit tools derive the unit count from a well-known parameter:

===========  ==============  ==========================================
unit type    parameter       fallback
===========  ==============  ==========================================
second       ``duration``    5 (strings like ``"8s"`` are parsed as 8)
minute       ``duration``    30 seconds, converted to minutes
image        ``num_images``  1
step         ``steps``       1000
===========  ==============  ==========================================
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping

from .models import PriceQuote, ToolPricing, UnitType
from .validation import coerce_number

DEFAULT_SECONDS = 5
DEFAULT_MINUTE_DURATION_SECONDS = 30
DEFAULT_IMAGES = 1
DEFAULT_STEPS = 1000

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _leading_int(text: str) -> int:
    match = _LEADING_INT.match(text.replace("s", "", 1))
    return int(match.group(1)) if match else 0


def _seconds(raw: Any) -> float:
    if isinstance(raw, bool):
        return DEFAULT_SECONDS
    if isinstance(raw, (int, float)):
        return raw
    if isinstance(raw, str):
        return _leading_int(raw) or DEFAULT_SECONDS
    return DEFAULT_SECONDS


def billable_units(unit_type: UnitType, params: Mapping[str, Any]) -> float:
    """Number of metered units a call with ``params`` consumes."""
    if unit_type is UnitType.second:
        return _seconds(params.get("duration"))
    if unit_type is UnitType.minute:
        return (coerce_number(params.get("duration")) or DEFAULT_MINUTE_DURATION_SECONDS) / 60
    if unit_type is UnitType.image:
        return coerce_number(params.get("num_images")) or DEFAULT_IMAGES
    if unit_type is UnitType.step:
        return coerce_number(params.get("steps")) or DEFAULT_STEPS
    return 1


def to_micro_units(usd: float) -> str:
    """Render a USD amount as an integer count of millionths, rounding half up."""
    return str(math.floor(usd * 1_000_000 + 0.5))


def quote(pricing: ToolPricing, params: Mapping[str, Any]) -> PriceQuote:
    """
    Compute the price of one invocation.

    Args:
        pricing: The tool's pricing block.
        params: The call parameters as supplied by the caller.

    Returns:
        PriceQuote: marked-up USD, credits and USD micro-units.
    """
    usd = pricing.base_usd_cost
    credits = pricing.credits

    if pricing.per_unit_cost and pricing.unit_type is not None:
        units = billable_units(pricing.unit_type, params)
        usd = pricing.per_unit_cost * units
        credits = (pricing.per_unit_credits or pricing.credits) * units

    marked_up = usd * pricing.markup
    return PriceQuote(usd=marked_up, credits=credits, metering_units=to_micro_units(marked_up))
