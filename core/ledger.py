"""Local ledger store: wallet, transactions and top-ups kept in local storage.

One LedgerStore wraps one storage backend (one simulated browser profile).
Every read is decoded and validated; corrupt data is logged and the key reset
to a safe default instead of being left in place. Writers notify subscribers
registered per storage key.

Balance updates are read-modify-write without locking: two requests crediting
the same namespace concurrently can lose an update.
"""

import json
import logging
from collections import defaultdict
from decimal import Decimal
from typing import Any, Callable

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.utils import timezone

from .adapters.storage_adapter import DatabaseStorage, StorageError
from .constants import STORAGE_KEYS, TRANSACTION_STATUSES, TRANSACTION_TYPES, generate_transaction_id
from .schemas import DailyStats, Err, TopUp, Transaction, Wallet, decode_topup, decode_transaction, decode_wallet, parse_amount

logger = logging.getLogger(__name__)


class LedgerStore:
	"""
	Injected replacement for a global storage singleton.

	storage: any object with get_item/set_item/remove_item (see storage_adapter)
	clock: zero-arg callable returning an aware datetime (defaults to timezone.now)
	"""

	def __init__(self, storage, *, clock: Callable | None = None, user_id: str | None = None, currency: str | None = None):
		self.storage = storage
		self.clock = clock or timezone.now
		self.user_id = user_id or settings.DEMO_USER_ID
		self.currency = currency or settings.WALLET_CURRENCY
		self._subscribers: dict[str, list[Callable]] = defaultdict(list)

	# --- Subscriptions -------------------------------------------------------

	def subscribe(self, key: str, callback: Callable) -> Callable[[], None]:
		"""
		Register callback(data) for writes to `key`; returns an unsubscribe function
		"""
		if key not in STORAGE_KEYS:
			raise KeyError(f"unknown storage key: {key}")
		self._subscribers[key].append(callback)

		def unsubscribe():
			self._subscribers[key] = [cb for cb in self._subscribers[key] if cb is not callback]

		return unsubscribe

	def _notify(self, key: str, data: Any) -> None:
		for callback in list(self._subscribers.get(key, [])):
			callback(data)

	# --- Raw JSON helpers ----------------------------------------------------

	def _read_json(self, key: str):
		"""
		Returns parsed JSON, None when the key is absent. Raises ValueError/StorageError.
		"""
		raw = self.storage.get_item(STORAGE_KEYS[key])
		if raw is None or raw == "":
			return None
		return json.loads(raw)

	def _write_json(self, key: str, data: Any) -> None:
		self.storage.set_item(STORAGE_KEYS[key], json.dumps(data, cls=DjangoJSONEncoder))

	def _clear(self, key: str, empty: Any) -> None:
		try:
			self.storage.remove_item(STORAGE_KEYS[key])
		except StorageError:
			logger.exception("Error clearing %s data", key)
			return
		self._notify(key, empty)

	# --- Wallet --------------------------------------------------------------

	def default_wallet(self) -> Wallet:
		now = self.clock()
		return Wallet(
			id="1",
			user_id=self.user_id,
			balance=Decimal("0"),
			currency=self.currency,
			is_active=True,
			created_at=now,
			updated_at=now,
		)

	def get_wallet(self) -> Wallet | None:
		try:
			data = self._read_json("wallet")
		except (ValueError, StorageError) as e:
			logger.error("Error parsing wallet data: %s", e)
			self._clear("wallet", None)
			return None
		if data is None:
			return None
		result = decode_wallet(data)
		if isinstance(result, Err):
			logger.warning("Invalid wallet data in local storage (%s), resetting", result.reason)
			self._clear("wallet", None)
			return None
		return result.value

	def set_wallet(self, wallet: Wallet) -> Wallet | None:
		"""
		Validate and persist; returns the wallet, or None when rejected or the write failed
		"""
		payload = wallet.to_json() if isinstance(wallet, Wallet) else wallet
		result = decode_wallet(payload)
		if isinstance(result, Err):
			logger.error("Invalid wallet data provided: %s", result.reason)
			return None
		try:
			self._write_json("wallet", payload)
		except StorageError:
			# the previously stored wallet is left in place
			logger.exception("Error saving wallet data")
			return None
		self._notify("wallet", result.value)
		return result.value

	def ensure_wallet(self) -> Wallet | None:
		"""
		Return the stored wallet, creating the zero-balance default when absent
		"""
		return self.get_wallet() or self.set_wallet(self.default_wallet())

	def update_wallet_balance(self, amount: Decimal, type: str = "credit") -> Wallet | None:
		wallet = self.get_wallet()
		if wallet is None:
			return None
		amount = Decimal(amount)
		wallet.balance = wallet.balance + amount if type == "credit" else wallet.balance - amount
		wallet.updated_at = self.clock()
		return self.set_wallet(wallet)

	# --- Transactions --------------------------------------------------------

	def get_transactions(self) -> list[Transaction]:
		try:
			data = self._read_json("transactions")
		except (ValueError, StorageError) as e:
			logger.error("Error parsing transactions data: %s", e)
			self._clear("transactions", [])
			return []
		if data is None:
			return []
		if not isinstance(data, list):
			logger.warning("Invalid transactions data in local storage, resetting")
			self._clear("transactions", [])
			return []

		valid = []
		for item in data:
			result = decode_transaction(item)
			if isinstance(result, Err):
				logger.debug("Dropping transaction: %s", result.reason)
				continue
			valid.append(result.value)
		if len(valid) != len(data):
			logger.warning("Filtered out %d invalid transactions", len(data) - len(valid))
			self._set_transactions(valid)
		return valid

	def _set_transactions(self, transactions: list[Transaction]) -> None:
		try:
			self._write_json("transactions", [t.to_json() for t in transactions])
		except StorageError:
			logger.exception("Error saving transactions data")
			return
		self._notify("transactions", transactions)

	def add_transaction(self, data: dict) -> Transaction | None:
		"""
		Prepend a transaction; a 'success' one also moves the wallet balance.

		`data` uses the persisted camelCase shape without id/createdAt/updatedAt.
		Returns None without mutating anything when the input is invalid or the
		write fails.
		"""
		if not isinstance(data, dict):
			logger.error("Invalid transaction data provided")
			return None
		amount = parse_amount(data.get("amount"))
		if amount is None or amount <= 0 or data.get("type") not in TRANSACTION_TYPES or data.get("status") not in TRANSACTION_STATUSES:
			logger.error("Invalid transaction data provided")
			return None

		now = self.clock()
		payload = {
			"userId": self.user_id,
			"currency": self.currency,
			"description": "",
			**data,
			"amount": str(amount),
			"id": generate_transaction_id(),
			"createdAt": now.isoformat(),
			"updatedAt": now.isoformat(),
		}
		result = decode_transaction(payload)
		if isinstance(result, Err):
			logger.error("Invalid transaction data provided: %s", result.reason)
			return None
		transaction = result.value

		previous = self.get_transactions()
		before = self.snapshot("transactions")
		transactions = [transaction, *previous]
		try:
			self._write_json("transactions", [t.to_json() for t in transactions])
		except StorageError:
			logger.exception("Error saving transaction")
			return None

		if transaction.status == "success" and self.update_wallet_balance(transaction.amount, transaction.type) is None:
			logger.error("Wallet update failed for %s, dropping the transaction", transaction.id)
			self.restore(before)
			return None
		self._notify("transactions", transactions)
		return transaction

	# --- Top-ups -------------------------------------------------------------

	def get_topups(self) -> list[TopUp]:
		try:
			data = self._read_json("topups")
		except (ValueError, StorageError) as e:
			logger.error("Error parsing top-up data: %s", e)
			self._clear("topups", [])
			return []
		if not isinstance(data, list):
			if data is not None:
				logger.warning("Invalid top-up data in local storage, resetting")
				self._clear("topups", [])
			return []
		topups = []
		for item in data:
			result = decode_topup(item)
			if isinstance(result, Err):
				logger.warning("Dropping top-up record: %s", result.reason)
				continue
			topups.append(result.value)
		return topups

	def add_topup(self, topup: TopUp) -> list[TopUp]:
		"""
		Prepend a top-up receipt. Storage failures propagate to the caller.
		"""
		topups = [topup, *self.get_topups()]
		self._write_json("topups", [t.to_json() for t in topups])
		self._notify("topups", topups)
		return topups

	# --- Aggregates ----------------------------------------------------------

	def get_daily_stats(self) -> DailyStats:
		"""
		Totals for transactions created on today's calendar date (TIME_ZONE)
		"""
		today = timezone.localdate(self.clock())
		stats = DailyStats()
		for t in self.get_transactions():
			if timezone.localdate(t.created_at) != today:
				continue
			stats.transactions += 1
			if t.type == "debit":
				stats.sent += t.amount
			else:
				stats.received += t.amount
		return stats

	# --- Snapshots -----------------------------------------------------------

	def snapshot(self, *keys: str) -> dict[str, str | None]:
		"""
		Raw stored values for `keys` (all ledger keys when none given), for restore()
		"""
		keys = keys or ("wallet", "transactions", "topups")
		return {key: self.storage.get_item(STORAGE_KEYS[key]) for key in keys}

	def restore(self, snapshot: dict[str, str | None]) -> None:
		"""
		Put the raw values from snapshot() back, removing keys that were absent
		"""
		for key, raw in snapshot.items():
			try:
				if raw is None:
					self.storage.remove_item(STORAGE_KEYS[key])
				else:
					self.storage.set_item(STORAGE_KEYS[key], raw)
			except StorageError:
				logger.exception("Error restoring %s data", key)

	def clear_all_data(self) -> None:
		try:
			for key in STORAGE_KEYS.values():
				self.storage.remove_item(key)
		except StorageError:
			logger.exception("Error clearing all data")
			return
		self._notify("wallet", None)
		self._notify("transactions", [])
		self._notify("topups", [])


def demo_ledger() -> LedgerStore:
	"""
	Build the ledger for the demo user's storage namespace and seed the wallet
	"""
	ledger = LedgerStore(DatabaseStorage())
	ledger.ensure_wallet()
	return ledger
