"""
Durable key-value slots for the prescription store.

A storage object holds one string value under one fixed key.  The store only
calls ``load()`` and ``save()``, so the SQL table can be swapped for Redis (or
a real database schema) without touching the workflow.
"""

import logging
from typing import Callable, Optional, Protocol

import redis
from sqlalchemy.orm import Session

from ..models.key_value import KeyValue

logger = logging.getLogger(__name__)


class PrescriptionStorage(Protocol):
    def load(self) -> Optional[str]:
        ...

    def save(self, value: str) -> None:
        ...


class SQLStorage:
    """Keeps the value in the ``key_values`` table."""

    def __init__(self, session_factory: Callable[[], Session], key: str):
        self.session_factory = session_factory
        self.key = key

    def load(self) -> Optional[str]:
        db = self.session_factory()
        try:
            row = db.get(KeyValue, self.key)
            return row.value if row else None
        finally:
            db.close()

    def save(self, value: str) -> None:
        db = self.session_factory()
        try:
            row = db.get(KeyValue, self.key)
            if row is None:
                db.add(KeyValue(key=self.key, value=value))
            else:
                row.value = value
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


class RedisStorage:
    """Keeps the value in a single Redis string."""

    def __init__(self, client: redis.Redis, key: str):
        self.client = client
        self.key = key

    def load(self) -> Optional[str]:
        value = self.client.get(self.key)
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def save(self, value: str) -> None:
        self.client.set(self.key, value)
