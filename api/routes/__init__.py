"""
API Routes for Signal Radar.
"""

from . import signals

__all__ = ["signals"]
