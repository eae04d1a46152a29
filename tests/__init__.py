"""
Expose common test helpers so tests can import directly:
    from tests import FakeResponse, NOW_MS
"""

from .utils import HOUR_MS, NOW_MS, FakeResponse, write_raw_snapshot

__all__ = ["FakeResponse", "HOUR_MS", "NOW_MS", "write_raw_snapshot"]
