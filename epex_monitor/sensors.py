# epex_monitor/sensors.py
"""Price sensors fed by the price store"""
import logging
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_DEVICES = [
    {'id': 'PriceMonitor1', 'name': 'EPEX Price Monitor'},
]


class PriceSensor:
    """Exposes the current price as a temperature-style reading"""

    def __init__(self, device_id, name=None, manufacturer='ENTSO-E',
                 model='Energy Price Monitor', serial_number='123-456-789'):
        self.device_id = device_id
        self.name = name or 'Default Name'
        self.manufacturer = manufacturer
        self.model = model
        self.serial_number = serial_number
        self._value = None

    def update_price(self, price: Optional[float]):
        """Update the reading; an unknown price leaves the last value in place"""
        if price is None:
            logger.warning(f"Price unavailable for {self.name}.")
            return
        logger.debug(f"Updating price for {self.name}: {price}")
        self._value = price

    @property
    def current_temperature(self) -> Optional[float]:
        if self._value is None:
            logger.warning(f"Current price is unavailable for {self.name}")
        return self._value

    def to_dict(self) -> Dict:
        return {
            'id': self.device_id,
            'name': self.name,
            'manufacturer': self.manufacturer,
            'model': self.model,
            'serial_number': self.serial_number,
            'current_temperature': self._value,
        }


def register_sensors(store, devices=None) -> List[PriceSensor]:
    """Create a sensor per device and subscribe it to price updates"""
    sensors = []
    for device in devices if devices is not None else DEFAULT_DEVICES:
        sensor = PriceSensor(device['id'], device.get('name'))
        current_price = store.get_current_price()
        if current_price is not None:
            sensor.update_price(current_price)
        store.subscribe(sensor.update_price)
        logger.info(f"Adding new sensor: {sensor.name}")
        sensors.append(sensor)
    return sensors
