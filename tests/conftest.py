"""Pytest fixtures for ledger, signing and HTTP flow tests."""

from datetime import datetime, timedelta, timezone as dt_timezone

import pytest

from core.adapters.storage_adapter import DatabaseStorage, MemoryStorage, StorageQuotaExceeded
from core.ledger import LedgerStore


class FakeClock:
	"""Settable clock; 06:00 UTC is noon in Dhaka so 'today' is unambiguous."""

	def __init__(self, now=None):
		self.now = now or datetime(2026, 10, 19, 6, 0, tzinfo=dt_timezone.utc)

	def __call__(self):
		return self.now

	def advance(self, **kwargs):
		self.now = self.now + timedelta(**kwargs)


class FlakyStorage(MemoryStorage):
	"""MemoryStorage whose writes to the keys in `fail_on` run out of quota."""

	def __init__(self):
		super().__init__()
		self.fail_on = set()

	def set_item(self, key, value):
		if key in self.fail_on:
			raise StorageQuotaExceeded(f"quota exceeded writing {key}")
		super().set_item(key, value)


@pytest.fixture
def clock():
	return FakeClock()


@pytest.fixture
def memory_storage():
	return MemoryStorage()


@pytest.fixture
def ledger(memory_storage, clock):
	"""In-memory ledger with the default wallet already seeded."""
	store = LedgerStore(memory_storage, clock=clock)
	store.ensure_wallet()
	return store


@pytest.fixture
def flaky_storage():
	return FlakyStorage()


@pytest.fixture
def flaky_ledger(flaky_storage, clock):
	store = LedgerStore(flaky_storage, clock=clock)
	store.ensure_wallet()
	return store


@pytest.fixture
def db_ledger(db, clock):
	store = LedgerStore(DatabaseStorage(namespace="test"), clock=clock)
	store.ensure_wallet()
	return store


@pytest.fixture
def payment_settings(settings):
	settings.PAYMENT_SECRET = "dev-secret"
	settings.PAYMENT_BASE_URL = "http://localhost:3000"
	settings.PAYMENT_CONSTANT_TIME_COMPARE = False
	settings.PAYMENT_CONFIRM_REVERIFY = False
	settings.PAYMENT_CONFIRM_REJECT_REPLAY = False
	return settings
