"""Test fixtures: simulated time and insights documents."""

from .clock import FakeClock
from .insights import MISSING, insights_output, make_insights

__all__ = ["FakeClock", "MISSING", "insights_output", "make_insights"]
