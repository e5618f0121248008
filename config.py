# config.py
import os
from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, '.env'))

DEFAULT_REFRESH_INTERVAL_MINUTES = 15
DEFAULT_ENTSOE_TIMEOUT = 30


def _read_positive_int(name, default):
    value = os.environ.get(name, '').strip()
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_bool(name, default):
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    # Without an API key every cycle publishes the fallback price
    ENTSOE_API_KEY = os.environ.get('ENTSOE_API_KEY', '')
    ENTSOE_IN_DOMAIN = os.environ.get('ENTSOE_IN_DOMAIN') or '10YNL----------L'
    ENTSOE_BASE_URL = os.environ.get('ENTSOE_BASE_URL') or 'https://web-api.tp.entsoe.eu/api'
    ENTSOE_TIMEOUT = _read_positive_int('ENTSOE_TIMEOUT', DEFAULT_ENTSOE_TIMEOUT)

    REFRESH_INTERVAL_MINUTES = _read_positive_int('REFRESH_INTERVAL_MINUTES', DEFAULT_REFRESH_INTERVAL_MINUTES)
    SCHEDULER_ENABLED = _read_bool('SCHEDULER_ENABLED', True)

    # IANA name such as 'Europe/Amsterdam'; empty uses the system timezone
    LOCAL_TIMEZONE = os.environ.get('LOCAL_TIMEZONE', '')

    LOG_LEVEL = (os.environ.get('LOG_LEVEL') or 'INFO').upper()
    LOG_FILE = os.environ.get('LOG_FILE', '')


class TestingConfig(Config):
    TESTING = True
    ENTSOE_API_KEY = ''
    SCHEDULER_ENABLED = False
    LOCAL_TIMEZONE = 'UTC'
