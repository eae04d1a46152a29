"""
Pytest configuration and shared fixtures.
"""

from decimal import Decimal

import pytest
import requests

from finance_toolkit.data_models import RateTable
from finance_toolkit.rate_store import RateStore
from tests.utils import HOUR_MS, NOW_MS


@pytest.fixture
def fake_get(monkeypatch):
    """Patch ``requests.get``; call the fixture with a response or exception.

    Returns the list of URLs that were requested.
    """
    calls = []

    def install(outcome):
        def _get(url, timeout=None, **kwargs):
            calls.append(url)
            if isinstance(outcome, Exception):
                raise outcome
            if callable(outcome):
                return outcome()
            return outcome

        monkeypatch.setattr(requests, "get", _get)
        return calls

    return install

@pytest.fixture
def live_payload():
    return {"base": "USD", "rates": {"EUR": 0.92, "TRY": 41.5, "GBP": 0.79, "XYZ": 7.0}}

@pytest.fixture
def rate_store(tmp_path):
    store = RateStore(f"sqlite:///{tmp_path / 'rates.sqlite3'}")
    yield store
    store.dispose()

@pytest.fixture
def cached_table():
    return RateTable(
        rates={"USD": Decimal("1"), "EUR": Decimal("0.5"), "GBP": Decimal("0.25")},
        fetched_at=NOW_MS - HOUR_MS,
    )

@pytest.fixture
def network_down():
    return requests.ConnectionError("connection refused")
