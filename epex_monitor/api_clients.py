# epex_monitor/api_clients.py
"""API client for the ENTSO-E transparency platform"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

import requests
import xmltodict

logger = logging.getLogger(__name__)

ENTSOE_BASE_URL = "https://web-api.tp.entsoe.eu/api"
DEFAULT_IN_DOMAIN = "10YNL----------L"
DAY_AHEAD_PRICES_DOCUMENT = "A44"
REQUEST_WINDOW = timedelta(hours=48)


def to_entsoe_date_string(value: datetime) -> str:
    """Format an instant as the ENTSO-E 'YYYYMMDDHHMM' UTC string"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime('%Y%m%d%H%M')


def get_entsoe_window_for_48h(now: Optional[datetime] = None) -> Tuple[str, str]:
    """Request window from today's UTC midnight to 48 hours later"""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    today_midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    window_end = today_midnight + REQUEST_WINDOW

    logger.debug(f"Current UTC time: {now.isoformat()}")
    logger.debug(f"Today's midnight UTC: {today_midnight.isoformat()}")
    logger.debug(f"48 hours from today's midnight UTC: {window_end.isoformat()}")

    return to_entsoe_date_string(today_midnight), to_entsoe_date_string(window_end)


def parse_publication_document(xml_text) -> Dict:
    """Parse an ENTSO-E XML response into a nested dict"""
    return xmltodict.parse(xml_text)


class EntsoeAPIClient:
    """Client for the ENTSO-E day-ahead price API"""

    def __init__(self, api_token, in_domain=DEFAULT_IN_DOMAIN, base_url=ENTSOE_BASE_URL, timeout=30):
        self.api_token = api_token
        self.in_domain = in_domain or DEFAULT_IN_DOMAIN
        self.base_url = base_url or ENTSOE_BASE_URL
        self.timeout = timeout
        logger.info(f"EntsoeAPIClient initialized for domain {self.in_domain}")

    def build_params(self, period_start, period_end) -> Dict:
        return {
            'documentType': DAY_AHEAD_PRICES_DOCUMENT,
            'in_Domain': self.in_domain,
            'out_Domain': self.in_domain,
            'periodStart': period_start,
            'periodEnd': period_end,
            'securityToken': self.api_token,
        }

    def get_day_ahead_prices(self, now=None) -> str:
        """Fetch the raw day-ahead XML for today and tomorrow"""
        period_start, period_end = get_entsoe_window_for_48h(now)
        logger.info(f"Fetching ENTSO-E day-ahead prices {period_start} - {period_end}")
        response = requests.get(
            self.base_url,
            params=self.build_params(period_start, period_end),
            timeout=self.timeout
        )
        response.raise_for_status()
        logger.debug(f"ENTSO-E response: {len(response.text)} bytes")
        return response.text

    def test_connection(self):
        """Test the API connection"""
        try:
            logger.info("Testing ENTSO-E API connection")
            self.get_day_ahead_prices()
            logger.info("ENTSO-E API connection successful")
            return True, "Connected"
        except requests.exceptions.RequestException as e:
            logger.error(f"ENTSO-E API connection failed: {e}")
            return False, str(e)


def get_entsoe_client(config) -> Optional[EntsoeAPIClient]:
    """Build a client from app config; None when no API key is configured"""
    api_key = (config.get('ENTSOE_API_KEY') or '').strip()
    if not api_key:
        return None
    return EntsoeAPIClient(
        api_key,
        in_domain=config.get('ENTSOE_IN_DOMAIN'),
        base_url=config.get('ENTSOE_BASE_URL'),
        timeout=config.get('ENTSOE_TIMEOUT', 30)
    )
