"""Traffic generator module."""

from .generator import ITrafficGenerator, TrafficGenerator

__all__ = ["ITrafficGenerator", "TrafficGenerator"]
