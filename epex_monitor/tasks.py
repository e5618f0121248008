# epex_monitor/tasks.py
"""Background task that refreshes the current EPEX price"""
import logging
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from epex_monitor.api_clients import get_entsoe_client, parse_publication_document
from epex_monitor.timeslots import make_fallback_slot, normalize_timeslots, resolve_current_slot

logger = logging.getLogger(__name__)

PRICE_STORE_KEY = 'epex_price_store'


def get_local_timezone(config):
    """Timezone used for slot hours in logs; None means system local time"""
    name = (config.get('LOCAL_TIMEZONE') or '').strip()
    return ZoneInfo(name) if name else None


def poll_epex_price(client, store, now=None, tz=None):
    """
    Run one fetch -> normalize -> resolve -> publish cycle

    Every failure publishes the fallback price instead.

    Args:
        client: EntsoeAPIClient, or None when no API key is configured
        store: PriceStore receiving the result
        now: Instant to resolve for (default: current UTC time)
        tz: Local timezone for the slot hour

    Returns:
        The published price in ct/kWh
    """
    if now is None:
        now = datetime.now(timezone.utc)

    if client is None:
        logger.warning("ENTSO-E API key is missing. Cannot fetch energy price data.")
        store.update_timeslots([])
        return store.publish(make_fallback_slot(now), tz)

    try:
        xml_text = client.get_day_ahead_prices(now)
        document = parse_publication_document(xml_text)
        timeslots = normalize_timeslots(document)
        store.update_timeslots(timeslots)
        current_slot = resolve_current_slot(timeslots, now, make_fallback_slot(now))
    except Exception as e:
        logger.warning(f"Error fetching or parsing ENTSO-E data: {e}")
        store.update_timeslots([])
        current_slot = make_fallback_slot(now)

    return store.publish(current_slot, tz)


def run_poll_cycle(app):
    """Scheduler entry point: poll using the app's config and price store"""
    with app.app_context():
        client = get_entsoe_client(app.config)
        store = app.extensions[PRICE_STORE_KEY]
        return poll_epex_price(client, store, tz=get_local_timezone(app.config))
