"""Pricing rule and price quotes.

Each booked hour is priced on its own: 08:00 to 18:00 slots are normal rate,
19:00 to 02:00 slots are night rate. The quote shown before booking and the
total stored on the booking both come from ``calculate_quote``.
"""

from dataclasses import dataclass

from futsal.services.operating_hours import OPERATIONAL_HOURS, check_duration

# Price tier constants
TIER_NORMAL = "normal"
TIER_NIGHT = "night"

# Per-hour rates (RM)
NORMAL_RATE = 50
NIGHT_RATE = 80

NORMAL_FIRST_HOUR = 8
NORMAL_LAST_HOUR = 18


@dataclass(frozen=True)
class PriceQuote:
    normal_hours: int
    night_hours: int
    total_price: int

    @property
    def duration(self) -> int:
        return self.normal_hours + self.night_hours

    @property
    def normal_amount(self) -> int:
        return self.normal_hours * NORMAL_RATE

    @property
    def night_amount(self) -> int:
        return self.night_hours * NIGHT_RATE


def determine_price_tier(hour: int) -> str:
    if NORMAL_FIRST_HOUR <= hour <= NORMAL_LAST_HOUR:
        return TIER_NORMAL
    return TIER_NIGHT


def rate_for(hour: int) -> int:
    return NORMAL_RATE if determine_price_tier(hour) == TIER_NORMAL else NIGHT_RATE


def calculate_quote(start_hour, duration: int) -> PriceQuote:
    """Price a booking of ``duration`` hours from ``start_hour``.

    Raises InvalidHour, InvalidDuration or Exceeded under the same conditions
    as the operational calendar.
    """
    start_index = check_duration(start_hour, duration)

    normal = night = 0
    for hour in OPERATIONAL_HOURS[start_index : start_index + duration]:
        if determine_price_tier(hour) == TIER_NORMAL:
            normal += 1
        else:
            night += 1

    return PriceQuote(
        normal_hours=normal,
        night_hours=night,
        total_price=normal * NORMAL_RATE + night * NIGHT_RATE,
    )
