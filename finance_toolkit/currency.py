"""Currency conversion over a USD-pivoted rate table.

All rates are expressed relative to the pivot currency, whose own rate is 1,
so converting between two currencies is ``amount * rate[to] / rate[from]``.

``RateService`` owns the process-wide rate table. It starts from the built-in
defaults, restores a cached snapshot when one younger than 24 hours exists,
and then issues one live fetch. A successful fetch replaces the whole table
and is written back to the cache; any failure leaves the table untouched and
reports the ``offline`` status.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from decimal import Decimal
from typing import Callable, Dict, Optional, Tuple

import requests
from sqlalchemy.exc import SQLAlchemyError

from .config import DEFAULT_RATES_URL
from .data_models import FetchResult, RateStatus, RateTable
from .rate_store import RateStore
from .utils import ZERO, to_decimal

logger = logging.getLogger(__name__)

PIVOT = "USD"
CACHE_TTL_MS = 24 * 60 * 60 * 1000

DEFAULT_RATES: Dict[str, Decimal] = {
    "USD": Decimal("1"),
    "EUR": Decimal("0.91"),
    "TRY": Decimal("34.0"),
    "GBP": Decimal("0.77"),
    "AUD": Decimal("1.48"),
    "CAD": Decimal("1.35"),
    "JPY": Decimal("155.0"),
}


def now_ms() -> int:
    return int(time.time() * 1000)


def default_table() -> RateTable:
    return RateTable(rates=dict(DEFAULT_RATES))


def convert(amount: object, from_code: str, to_code: str, table: RateTable) -> Decimal:
    """Convert ``amount`` between two currency codes.

    The same code on both sides returns the amount unchanged. A code missing
    from the table (or with a non-positive rate) makes the pair unconvertible
    and the result is ``0``.
    """
    value = to_decimal(amount)
    if from_code.upper() == to_code.upper():
        return value
    from_rate = table.get(from_code)
    to_rate = table.get(to_code)
    if from_rate is None or to_rate is None or from_rate <= 0:
        logger.debug("Cannot convert %s -> %s with the current table", from_code, to_code)
        return ZERO
    return value * to_rate / from_rate


def swap(from_code: str, to_code: str) -> Tuple[str, str]:
    return to_code, from_code


def is_cache_valid(table: Optional[RateTable], now: int) -> bool:
    """A cached snapshot is usable if it is under 24 hours old and its pivot is 1.

    A snapshot stamped in the future is never usable.
    """
    if table is None or table.fetched_at is None:
        return False
    if not 0 <= now - table.fetched_at < CACHE_TTL_MS:
        return False
    return table.get(PIVOT) == Decimal("1")


def merge_rates(fetched: Dict[str, object]) -> Dict[str, Decimal]:
    """Overlay fetched rates on the defaults, keeping only known currency codes.

    Entries that are missing, non-numeric or not positive keep their default
    value. The pivot is always 1.
    """
    merged = dict(DEFAULT_RATES)
    for code in DEFAULT_RATES:
        rate = to_decimal(fetched.get(code))
        if rate > 0:
            merged[code] = rate
    merged[PIVOT] = Decimal("1")
    return merged


def fetch_live_rates(url: str = DEFAULT_RATES_URL, *, timeout: float = 10.0, now: Optional[int] = None) -> FetchResult:
    """Fetch live rates with a single HTTP GET.

    Non-200 responses, transport errors, invalid JSON and payloads without a
    ``rates`` mapping are all reported as a failed ``FetchResult``.
    """
    try:
        resp = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        return FetchResult.failure(f"network error: {exc}")
    if resp.status_code != 200:
        return FetchResult.failure(f"HTTP {resp.status_code} for {url}")
    try:
        data = resp.json()
    except ValueError as exc:
        return FetchResult.failure(f"invalid JSON: {exc}")
    rates = data.get("rates") if isinstance(data, dict) else None
    if not isinstance(rates, dict):
        return FetchResult.failure("payload has no 'rates' mapping")
    stamp = now_ms() if now is None else now
    return FetchResult.success(RateTable(rates=merge_rates(rates), fetched_at=stamp))


class RateService:
    """Owner of the current rate table and its refresh lifecycle.

    The table is only ever replaced as a whole, so readers never observe a
    partially updated snapshot.
    """

    def __init__(
        self,
        store: Optional[RateStore] = None,
        *,
        url: str = DEFAULT_RATES_URL,
        timeout: float = 10.0,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._store = store
        self._url = url
        self._timeout = timeout
        self._clock = clock
        self._table = default_table()
        self._status = RateStatus.OFFLINE
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def table(self) -> RateTable:
        return self._table

    @property
    def status(self) -> RateStatus:
        return self._status

    def start(self) -> FetchResult:
        """Restore the cached snapshot if valid, then fetch live rates once."""
        self.load_cached()
        return self.refresh()

    def load_cached(self) -> bool:
        if self._store is None:
            return False
        try:
            cached = self._store.load()
        except (SQLAlchemyError, ValueError) as exc:
            logger.warning("Could not read the rate cache: %s", exc)
            return False
        if not is_cache_valid(cached, self._clock()):
            logger.info("Rate cache %s is missing or stale", self._store.key)
            return False
        logger.info("Using cached rates from %s", cached.fetched_at)
        self._table = cached
        return True

    def refresh(self) -> FetchResult:
        """Fetch live rates synchronously and apply the result."""
        self._status = RateStatus.LOADING
        return self._fetch_and_apply()

    def refresh_async(self) -> "Future[FetchResult]":
        """Start a fetch in the background; the table is swapped before the future resolves."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="rate-fetch")
        self._status = RateStatus.LOADING
        return self._executor.submit(self._fetch_and_apply)

    def convert(self, amount: object, from_code: str, to_code: str) -> Decimal:
        return convert(amount, from_code, to_code, self._table)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        if self._store is not None:
            self._store.dispose()

    def __enter__(self) -> "RateService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _fetch_and_apply(self) -> FetchResult:
        result = fetch_live_rates(self._url, timeout=self._timeout, now=self._clock())
        if not result.ok:
            logger.warning("Live rate fetch failed: %s", result.error)
            self._status = RateStatus.OFFLINE
            return result
        self._table = result.table
        self._status = RateStatus.LIVE
        if self._store is not None:
            try:
                self._store.save(result.table)
            except SQLAlchemyError as exc:
                logger.warning("Could not write the rate cache: %s", exc)
        return result
