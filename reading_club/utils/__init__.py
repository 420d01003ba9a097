"""
Utility modules for the Reading Club backend
"""
from .clock import SystemClock, FixedClock, clock_from_config

__all__ = ['SystemClock', 'FixedClock', 'clock_from_config']
