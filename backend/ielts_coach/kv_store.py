"""Local key-value persistence used for learner preferences."""
from __future__ import annotations

import threading
from typing import Callable, Dict, Optional, Protocol

from sqlalchemy.orm import Session

from .db import SessionLocal
from .models import KeyValueEntry


class KeyValueStore(Protocol):
	def get(self, key: str) -> Optional[str]:
		...

	def set(self, key: str, value: str) -> None:
		...


class MemoryKeyValueStore:
	"""Process-local store, used by tests and as a scratch store."""

	def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
		self._data: Dict[str, str] = dict(initial or {})
		self._lock = threading.Lock()

	def get(self, key: str) -> Optional[str]:
		with self._lock:
			return self._data.get(key)

	def set(self, key: str, value: str) -> None:
		with self._lock:
			self._data[key] = value


class SqlKeyValueStore:
	"""Key-value store persisted in the ``key_value_store`` table.

	Each ``set`` is a single upsert committed in its own transaction, so a
	concurrent ``get`` sees either the previous value or the new one.
	"""

	def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
		self._session_factory = session_factory

	def get(self, key: str) -> Optional[str]:
		db = self._session_factory()
		try:
			row = db.get(KeyValueEntry, key)
			return row.value if row is not None else None
		finally:
			db.close()

	def set(self, key: str, value: str) -> None:
		db = self._session_factory()
		try:
			db.merge(KeyValueEntry(key=key, value=value))
			db.commit()
		except Exception:
			db.rollback()
			raise
		finally:
			db.close()
