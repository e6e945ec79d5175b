# Models package
from .device import Device
from .reading import SensorReading

__all__ = ['Device', 'SensorReading']
