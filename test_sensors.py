#!/usr/bin/env python3
"""Tests for price sensors"""

from datetime import datetime, timezone

from epex_monitor.sensors import PriceSensor, register_sensors
from epex_monitor.timeslots import TimeSlot


def test_unknown_price_keeps_last_value():
    sensor = PriceSensor('PriceMonitor1', 'Kitchen')
    assert sensor.current_temperature is None

    sensor.update_price(12.3)
    sensor.update_price(None)

    assert sensor.current_temperature == 12.3


def test_sensor_defaults_name():
    assert PriceSensor('x').name == 'Default Name'


def test_register_sensors_seeds_and_subscribes(store):
    store.publish(TimeSlot(datetime(2025, 1, 6, 1, tzinfo=timezone.utc), 60.0), timezone.utc)

    sensors = register_sensors(store, [{'id': 'a', 'name': 'A'}, {'id': 'b', 'name': 'B'}])
    assert [s.current_temperature for s in sensors] == [6.0, 6.0]

    store.publish(TimeSlot(datetime(2025, 1, 6, 2, tzinfo=timezone.utc), 70.0), timezone.utc)
    assert [s.current_temperature for s in sensors] == [7.0, 7.0]
