# conftest.py
from datetime import datetime, timezone

import pytest

from config import TestingConfig
from epex_monitor import create_app
from epex_monitor.publication import PriceStore


def build_publication_xml(periods):
    """
    Build an ENTSO-E Publication_MarketDocument

    Args:
        periods: list of (period_start, resolution, [(position, price), ...])
    """
    series = []
    for period_start, resolution, points in periods:
        point_xml = ''.join(
            f"<Point><position>{position}</position><price.amount>{price}</price.amount></Point>"
            for position, price in points
        )
        series.append(
            "<TimeSeries><mRID>1</mRID><Period>"
            f"<timeInterval><start>{period_start}</start><end>{period_start}</end></timeInterval>"
            f"<resolution>{resolution}</resolution>{point_xml}"
            "</Period></TimeSeries>"
        )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<Publication_MarketDocument xmlns="urn:iec62325.351:tc57wg16:451-3:publicationdocument:7:3">'
        '<mRID>abc</mRID>'
        f"{''.join(series)}"
        '</Publication_MarketDocument>'
    )


class FakeEntsoeClient:
    """Stands in for EntsoeAPIClient, returning canned XML or raising"""

    def __init__(self, xml_text=None, error=None):
        self.xml_text = xml_text
        self.error = error
        self.calls = []

    def get_day_ahead_prices(self, now=None):
        self.calls.append(now)
        if self.error is not None:
            raise self.error
        return self.xml_text


@pytest.fixture
def sample_xml():
    return build_publication_xml([
        ('2025-01-06T00:00Z', 'PT60M', [(1, '50'), (2, '60'), (3, '70')]),
    ])


@pytest.fixture
def sample_now():
    return datetime(2025, 1, 6, 1, 30, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return PriceStore()


@pytest.fixture
def app():
    return create_app(TestingConfig)


@pytest.fixture
def client(app):
    return app.test_client()
