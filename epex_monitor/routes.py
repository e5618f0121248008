# epex_monitor/routes.py
from flask import Blueprint, current_app, jsonify
import logging

from epex_monitor.publication import PRICE_UNIT, to_display_price
from epex_monitor.tasks import PRICE_STORE_KEY, get_local_timezone, poll_epex_price
from epex_monitor.api_clients import get_entsoe_client

logger = logging.getLogger(__name__)

bp = Blueprint('main', __name__)


def _get_store():
    return current_app.extensions[PRICE_STORE_KEY]


@bp.route('/api/current-price')
def current_price():
    """Latest published price, null until the first cycle has run"""
    price = _get_store().get_current_price()
    if price is None:
        logger.warning("Current price requested before the first price was published")
    return jsonify({'price': price, 'unit': PRICE_UNIT})


@bp.route('/api/status')
def api_status():
    status = _get_store().snapshot()
    status['configured'] = bool((current_app.config.get('ENTSOE_API_KEY') or '').strip())
    status['refresh_interval_minutes'] = current_app.config.get('REFRESH_INTERVAL_MINUTES')
    return jsonify(status)


@bp.route('/api/timeslots')
def timeslots():
    """All timeslots of the last fetch, typically 48 hours"""
    return jsonify([
        {
            'start': slot.start.isoformat(),
            'price': slot.price,
            'price_ct_kwh': to_display_price(slot.price),
        }
        for slot in _get_store().timeslots
    ])


@bp.route('/api/sensors')
def sensors():
    return jsonify([sensor.to_dict() for sensor in current_app.extensions.get('epex_sensors', [])])


@bp.route('/api/refresh', methods=['POST'])
def refresh():
    """Run one polling cycle now"""
    logger.info("Manual price refresh requested")
    price = poll_epex_price(
        get_entsoe_client(current_app.config),
        _get_store(),
        tz=get_local_timezone(current_app.config)
    )
    return jsonify({'price': price, 'unit': PRICE_UNIT})
