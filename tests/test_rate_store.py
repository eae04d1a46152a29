from decimal import Decimal

import pytest

from finance_toolkit.data_models import RateTable
from finance_toolkit.rate_store import CACHE_KEY, RateStore
from tests.utils import NOW_MS, write_raw_snapshot


def test_empty_store_has_no_snapshot(rate_store):
    assert rate_store.key == CACHE_KEY
    assert rate_store.load() is None


def test_save_then_load(rate_store, cached_table):
    rate_store.save(cached_table)
    assert rate_store.load() == cached_table


def test_save_replaces_the_single_record(rate_store, cached_table):
    rate_store.save(cached_table)
    newer = RateTable(rates={"USD": Decimal("1"), "EUR": Decimal("0.93")}, fetched_at=NOW_MS)
    rate_store.save(newer)
    loaded = rate_store.load()
    assert loaded == newer
    assert "GBP" not in loaded.rates


def test_unfetched_table_cannot_be_cached(rate_store):
    with pytest.raises(ValueError):
        rate_store.save(RateTable(rates={"USD": Decimal("1")}))


def test_clear(rate_store, cached_table):
    rate_store.save(cached_table)
    rate_store.clear()
    assert rate_store.load() is None


def test_snapshot_survives_a_new_store(tmp_path, cached_table):
    url = f"sqlite:///{tmp_path / 'shared.sqlite3'}"
    first = RateStore(url)
    first.save(cached_table)
    first.dispose()
    second = RateStore(url)
    assert second.load() == cached_table
    second.dispose()


def test_stores_with_different_keys_are_independent(tmp_path, cached_table):
    url = f"sqlite:///{tmp_path / 'keys.sqlite3'}"
    a = RateStore(url, key="a")
    b = RateStore(url, key="b")
    a.save(cached_table)
    assert b.load() is None
    a.dispose()
    b.dispose()


@pytest.mark.parametrize(
    "rates_json",
    ['{"USD": "1", "EUR": "abc"}', "[1, 2]", '"USD"', '{"USD": "NaN"}', "not json"],
)
def test_malformed_record_raises_value_error(tmp_path, rates_json):
    url = f"sqlite:///{tmp_path / 'corrupt.sqlite3'}"
    store = RateStore(url)
    write_raw_snapshot(url, rates_json)
    with pytest.raises(ValueError):
        store.load()
    store.dispose()
