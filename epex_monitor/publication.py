# epex_monitor/publication.py
"""Convert resolved slots to ct/kWh and hold the latest published price"""
import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from epex_monitor.timeslots import TimeSlot, format_slot_window

logger = logging.getLogger(__name__)

PRICE_UNIT = 'ct/kWh'


def to_display_price(price: float) -> float:
    """Convert EUR/MWh to ct/kWh"""
    return price / 10


def publish_price(slot: TimeSlot, previous_hour: Optional[int], tz=None) -> Tuple[float, int]:
    """
    Convert a slot's price and log it when the local slot hour changed

    Returns:
        (display_price, slot_hour) where slot_hour is the hour to remember
    """
    display_price = to_display_price(slot.price)
    slot_hour = slot.start.astimezone(tz).hour

    if previous_hour != slot_hour:
        logger.info(f"Current time slot (local time) is {format_slot_window(slot, tz)}, "
                    f"EPEX price (Euro/MWh)={slot.price}")
        logger.info(f"Published current EPEX Energy Price ({PRICE_UNIT}): {display_price}")
    else:
        logger.debug(f"Still hour {slot_hour}; no new log.")

    return display_price, slot_hour


class PriceStore:
    """Latest known price, shared between the polling job and its readers"""

    def __init__(self):
        self._lock = threading.Lock()
        self._current_price = None
        self._current_slot = None
        self._last_slot_hour = None
        self._timeslots = []
        self._updated_at = None
        self._subscribers = []
        logger.info("PriceStore initialized")

    def get_current_price(self) -> Optional[float]:
        with self._lock:
            return self._current_price

    @property
    def last_slot_hour(self) -> Optional[int]:
        with self._lock:
            return self._last_slot_hour

    @property
    def timeslots(self) -> List[TimeSlot]:
        with self._lock:
            return list(self._timeslots)

    def update_timeslots(self, timeslots: List[TimeSlot]):
        """Replace the in-memory price data with the latest fetch"""
        with self._lock:
            self._timeslots = list(timeslots)

    def subscribe(self, callback: Callable[[Optional[float]], None]):
        """Register a consumer called with the new price after every publish"""
        with self._lock:
            self._subscribers.append(callback)

    def publish(self, slot: TimeSlot, tz=None) -> float:
        """Publish a resolved slot; the price is overwritten even if unchanged"""
        with self._lock:
            display_price, slot_hour = publish_price(slot, self._last_slot_hour, tz)
            self._last_slot_hour = slot_hour
            self._current_price = display_price
            self._current_slot = slot
            self._updated_at = datetime.now(timezone.utc)
            subscribers = list(self._subscribers)

        self._notify(subscribers, display_price)
        return display_price

    def _notify(self, subscribers, price):
        for callback in subscribers:
            try:
                callback(price)
            except Exception as e:
                logger.error(f"Error notifying price consumer {callback!r}: {e}")

    def snapshot(self) -> Dict:
        with self._lock:
            slot = self._current_slot
            return {
                'current_price': self._current_price,
                'unit': PRICE_UNIT,
                'last_slot_hour': self._last_slot_hour,
                'current_slot_start': slot.start.isoformat() if slot else None,
                'current_slot_price': slot.price if slot else None,
                'timeslot_count': len(self._timeslots),
                'updated_at': self._updated_at.isoformat() if self._updated_at else None,
            }
