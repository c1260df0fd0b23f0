"""
API Module for Signal Radar.

FastAPI application with routes for:
- Weighted and three-tier classification
- Structured extraction
- Full analysis with alert preview / delivery
- Batch scoring
"""

from .main import create_app, app

__all__ = ["create_app", "app"]
