"""
Shared constants and stand-ins used across the test suite.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from finance_toolkit.rate_store import CACHE_KEY, RateSnapshotModel

NOW_MS = 1_760_000_000_000
HOUR_MS = 60 * 60 * 1000


class FakeResponse:
    """Stand-in for ``requests.Response`` with a canned status and JSON body."""

    def __init__(self, status_code=200, payload=None, json_error=False):
        self.status_code = status_code
        self._payload = payload
        self._json_error = json_error

    def json(self):
        if self._json_error:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


def write_raw_snapshot(url, rates_json, timestamp=NOW_MS, key=CACHE_KEY):
    """Store ``rates_json`` verbatim, bypassing ``RateStore.save`` encoding."""
    engine = create_engine(url, future=True)
    with Session(engine) as session:
        session.add(RateSnapshotModel(key=key, timestamp=timestamp, rates_json=rates_json))
        session.commit()
    engine.dispose()
