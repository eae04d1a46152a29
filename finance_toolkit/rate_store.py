"""Persistence layer for the cached exchange-rate snapshot.

The converter keeps exactly one persisted record: the last successfully
fetched rate table together with its fetch timestamp (epoch milliseconds),
stored under a fixed key. It defaults to SQLite for local use, but accepts any
SQLAlchemy-compatible URL.
"""

from __future__ import annotations

import json
from decimal import Decimal, InvalidOperation
from typing import Optional

from sqlalchemy import BigInteger, Column, String, Text, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .data_models import RateTable

Base = declarative_base()

CACHE_KEY = "fx_rates_usd_v1"


class RateSnapshotModel(Base):
    __tablename__ = "rate_snapshots"

    key = Column(String(64), primary_key=True)
    timestamp = Column(BigInteger, nullable=False)
    rates_json = Column(Text, nullable=False)


class RateStore:
    """Database-backed single-record rate cache."""

    def __init__(self, url: str, *, key: str = CACHE_KEY) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> Optional[RateTable]:
        """Return the stored table, or ``None`` when nothing is cached."""
        with self._session_factory() as session:
            row = session.get(RateSnapshotModel, self._key)
            if row is None:
                return None
            return self._to_table(row)

    def save(self, table: RateTable) -> None:
        """Replace the stored record with ``table``."""
        if table.fetched_at is None:
            raise ValueError("Only fetched rate tables carry a timestamp to cache")
        payload = json.dumps({code: str(rate) for code, rate in table.rates.items()})
        with self._session_factory() as session:
            row = session.get(RateSnapshotModel, self._key)
            if row is None:
                session.add(
                    RateSnapshotModel(key=self._key, timestamp=table.fetched_at, rates_json=payload)
                )
            else:
                row.timestamp = table.fetched_at
                row.rates_json = payload
            session.commit()

    def clear(self) -> None:
        with self._session_factory() as session:
            row = session.get(RateSnapshotModel, self._key)
            if row is not None:
                session.delete(row)
                session.commit()

    def dispose(self) -> None:
        self._engine.dispose()

    @staticmethod
    def _to_table(row: RateSnapshotModel) -> RateTable:
        """Decode a stored row; any malformed content raises ``ValueError``."""
        payload = json.loads(row.rates_json)
        if not isinstance(payload, dict):
            raise ValueError(f"Cached rates for {row.key} are not a mapping")
        rates = {}
        for code, value in payload.items():
            try:
                rate = Decimal(str(value))
            except InvalidOperation as exc:
                raise ValueError(f"Cached rate for {code} is not a number: {value!r}") from exc
            if not rate.is_finite():
                raise ValueError(f"Cached rate for {code} is not finite: {value!r}")
            rates[str(code)] = rate
        return RateTable(rates=rates, fetched_at=int(row.timestamp))


def create_store_from_env(url: Optional[str]) -> RateStore:
    return RateStore(url or "sqlite:///rate_cache.sqlite3")
