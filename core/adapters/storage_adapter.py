"""Adapters over the simulated browser local storage.

In a browser the ledger would call window.localStorage directly. Here the same
getItem/setItem/removeItem surface is backed either by the storage_stub table
(DatabaseStorage) or by a plain dict (MemoryStorage). Both enforce a byte quota
so "quota exceeded" failures can be reproduced.
"""

from django.conf import settings
from django.db.models.functions import Length
from django.db.models import Sum

from storage_stub.models import StorageItem


class StorageError(Exception):
	"""Raised when the underlying storage cannot be read or written."""


class StorageQuotaExceeded(StorageError):
	"""Raised when a write would push the namespace over its quota."""


def _entry_size(key: str, value: str) -> int:
	# Browsers count UTF-16 code units for both key and value
	return 2 * (len(key) + len(value))


class MemoryStorage:
	"""
	Dict-backed storage with the localStorage contract
	"""

	def __init__(self, quota_bytes: int | None = None):
		self._items: dict[str, str] = {}
		self.quota_bytes = quota_bytes

	def get_item(self, key: str) -> str | None:
		return self._items.get(key)

	def set_item(self, key: str, value: str) -> None:
		if not isinstance(value, str):
			raise StorageError(f"value for {key} must be a string")
		if self.quota_bytes:
			used = sum(_entry_size(k, v) for k, v in self._items.items() if k != key)
			if used + _entry_size(key, value) > self.quota_bytes:
				raise StorageQuotaExceeded(f"quota of {self.quota_bytes} bytes exceeded writing {key}")
		self._items[key] = value

	def remove_item(self, key: str) -> None:
		self._items.pop(key, None)

	def clear(self) -> None:
		self._items.clear()

	def keys(self) -> list[str]:
		return sorted(self._items)


class DatabaseStorage:
	"""
	localStorage for one namespace, persisted in the storage_stub table
	"""

	def __init__(self, namespace: str | None = None, quota_bytes: int | None = None):
		self.namespace = namespace or settings.LOCAL_STORAGE_NAMESPACE
		self.quota_bytes = quota_bytes if quota_bytes is not None else settings.LOCAL_STORAGE_QUOTA_BYTES

	def _qs(self):
		return StorageItem.objects.filter(namespace=self.namespace)

	def get_item(self, key: str) -> str | None:
		row = self._qs().filter(key=key).only("value").first()
		return row.value if row else None

	def set_item(self, key: str, value: str) -> None:
		if not isinstance(value, str):
			raise StorageError(f"value for {key} must be a string")
		if self.quota_bytes:
			agg = self._qs().exclude(key=key).aggregate(k=Sum(Length("key")), v=Sum(Length("value")))
			used = 2 * ((agg["k"] or 0) + (agg["v"] or 0))
			if used + _entry_size(key, value) > self.quota_bytes:
				raise StorageQuotaExceeded(f"quota of {self.quota_bytes} bytes exceeded writing {key}")
		StorageItem.objects.update_or_create(namespace=self.namespace, key=key, defaults={"value": value})

	def remove_item(self, key: str) -> None:
		self._qs().filter(key=key).delete()

	def clear(self) -> None:
		self._qs().delete()

	def keys(self) -> list[str]:
		return list(self._qs().order_by("key").values_list("key", flat=True))
