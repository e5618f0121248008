# epex_monitor/timeslots.py
"""Normalize ENTSO-E day-ahead documents into timeslots and pick the current one"""
import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Published as ct/kWh (price / 10), so 1000 EUR/MWh is the 100 ct/kWh ceiling
# of the consuming temperature characteristic.
FALLBACK_PRICE = 1000.0

RESOLUTION_MINUTES = {
    'PT15M': 15,
    'PT60M': 60,
}
DEFAULT_RESOLUTION_MINUTES = 60

_LEADING_INT = re.compile(r"\s*[+-]?\d+")

# The last slot is assumed to last one hour, whatever its resolution
LAST_SLOT_DURATION = timedelta(hours=1)


@dataclass(frozen=True)
class TimeSlot:
    """A single price observation starting at `start` (UTC), price in EUR/MWh"""
    start: datetime
    price: float


def make_fallback_slot(now: Optional[datetime] = None) -> TimeSlot:
    """Slot published whenever no trustworthy price can be resolved"""
    if now is None:
        now = datetime.now(timezone.utc)
    return TimeSlot(start=_as_utc(now), price=FALLBACK_PRICE)


def ensure_list(value: Any) -> List:
    """Coerce an XML node that may be missing, single or repeated into a list"""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def resolution_to_minutes(resolution: Optional[str]) -> int:
    if not resolution:
        return DEFAULT_RESOLUTION_MINUTES
    return RESOLUTION_MINUTES.get(str(resolution).strip(), DEFAULT_RESOLUTION_MINUTES)


def parse_price_amount(raw: Any) -> float:
    """Parse `price.amount`, mapping absent or malformed values to 0"""
    if raw is None:
        return 0.0
    try:
        price = float(str(raw).strip())
    except ValueError:
        return 0.0
    if not math.isfinite(price):
        return 0.0
    return price


def parse_position(raw: Any) -> int:
    """Leading integer of `position`, 1 when absent or unreadable"""
    if raw is None:
        return 1
    match = _LEADING_INT.match(str(raw))
    if not match:
        return 1
    return int(match.group())


def parse_instant(value: str) -> datetime:
    """Parse an ENTSO-E instant such as '2025-01-06T00:00Z' into UTC"""
    timestamp = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    return _as_utc(timestamp)


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken to be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def normalize_timeslots(document: Optional[Dict]) -> List[TimeSlot]:
    """
    Flatten every Point of every Period of every TimeSeries into timeslots

    Args:
        document: Parsed XML tree of a Publication_MarketDocument

    Returns:
        Timeslots sorted ascending by start. Empty when the document has no
        TimeSeries at all.
    """
    market_document = (document or {}).get('Publication_MarketDocument') or {}
    time_series = market_document.get('TimeSeries')

    if not time_series:
        logger.warning("No TimeSeries found in ENTSO-E response")
        return []

    timeslots = []

    for series in ensure_list(time_series):
        for period in ensure_list(series.get('Period')):
            time_interval = period.get('timeInterval') or {}
            period_start_str = time_interval.get('start')
            if not period_start_str:
                logger.warning("Period missing timeInterval.start")
                continue

            period_start = parse_instant(period_start_str)
            minutes_per_slot = resolution_to_minutes(period.get('resolution'))

            for point in ensure_list(period.get('Point')):
                position = parse_position(point.get('position'))
                price = parse_price_amount(point.get('price.amount'))
                slot_start = period_start + timedelta(minutes=(position - 1) * minutes_per_slot)
                timeslots.append(TimeSlot(start=slot_start, price=price))

    timeslots.sort(key=lambda slot: slot.start)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"--- ENTSO-E Full-Day Timeslots ---\n{format_timeslot_matrix(timeslots)}")

    return timeslots


def format_timeslot_matrix(timeslots: List[TimeSlot]) -> str:
    lines = ['DateTime(UTC),Price (ct/kWh)']
    for slot in timeslots:
        lines.append(f"{slot.start.isoformat()},{slot.price / 10}")
    return '\n'.join(lines)


def resolve_current_slot(timeslots: List[TimeSlot], now: datetime, fallback: TimeSlot) -> TimeSlot:
    """
    Select the timeslot covering `now`

    A slot covers [start, next.start); the last slot covers one hour from its
    start. Returns `fallback` when nothing covers `now`.
    """
    if not timeslots:
        logger.warning(f"No timeslots available. Falling back to price={fallback.price / 10}.")
        return fallback

    now = _as_utc(now)
    first = timeslots[0]
    last = timeslots[-1]

    if now < first.start:
        logger.warning("ENTSO-E API did not return complete data!")
        logger.warning(f"All timeslots are in the future (now < {first.start.isoformat()})")
        logger.warning(f"Falling back to price={fallback.price / 10}.")
        return fallback

    if now >= last.start + LAST_SLOT_DURATION:
        logger.warning(f"All slots ended by {last.start.isoformat()}. Falling back to price={fallback.price / 10}.")
        return fallback

    for index, slot in enumerate(timeslots):
        if index == len(timeslots) - 1:
            return slot
        if slot.start <= now < timeslots[index + 1].start:
            return slot

    logger.warning(f"No suitable slot found. Falling back to price={fallback.price / 10}.")
    return fallback


def format_slot_window(slot: TimeSlot, tz=None) -> str:
    """Local 'YYYY-MM-DD HH:MM - HH:MM' label for a slot, assuming one hour"""
    local_start = slot.start.astimezone(tz)
    end_hour = (local_start.hour + 1) % 24
    return f"{local_start:%Y-%m-%d %H:%M} - {end_hour:02d}:{local_start:%M}"
