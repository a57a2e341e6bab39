"""Records kept in local storage and their JSON decoders.

Records:
- Wallet: the single simulated BDT balance of the demo user
- Transaction: append-only credit/debit history entry
- TopUp: gateway confirmation receipt (one per confirmed tx)
- DailyStats: today's sent/received totals

Decoders never raise: they return Ok(record) or Err(reason) so the ledger can
drop bad data and reset the key instead of propagating exceptions. Persisted
JSON uses camelCase keys, string amounts and ISO-8601 timestamps.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Generic, TypeVar

from .constants import TRANSACTION_STATUSES, TRANSACTION_TYPES

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
	value: T


@dataclass(frozen=True)
class Err:
	reason: str


@dataclass
class Wallet:
	id: str
	user_id: str
	balance: Decimal
	currency: str
	is_active: bool
	created_at: datetime
	updated_at: datetime

	def to_json(self) -> dict:
		return {
			"id": self.id,
			"userId": self.user_id,
			"balance": str(self.balance),
			"currency": self.currency,
			"isActive": self.is_active,
			"createdAt": self.created_at.isoformat(),
			"updatedAt": self.updated_at.isoformat(),
		}


@dataclass
class Transaction:
	id: str
	user_id: str
	type: str  # 'credit' | 'debit'
	amount: Decimal
	currency: str
	status: str  # 'pending' | 'success' | 'failed'
	description: str
	created_at: datetime
	updated_at: datetime
	mfs_provider: str | None = None
	recipient_mfs: str | None = None
	account: str | None = None
	note: str | None = None

	def to_json(self) -> dict:
		data = {
			"id": self.id,
			"userId": self.user_id,
			"type": self.type,
			"amount": str(self.amount),
			"currency": self.currency,
			"status": self.status,
			"description": self.description,
			"createdAt": self.created_at.isoformat(),
			"updatedAt": self.updated_at.isoformat(),
		}
		for key, value in (
			("mfsProvider", self.mfs_provider),
			("recipientMfs", self.recipient_mfs),
			("account", self.account),
			("note", self.note),
		):
			if value is not None:
				data[key] = value
		return data

	@property
	def signed_amount(self) -> Decimal:
		return self.amount if self.type == "credit" else -self.amount


@dataclass
class TopUp:
	id: str
	session_id: str
	provider: str
	amount: Decimal
	status: str
	created_at: datetime

	def to_json(self) -> dict:
		return {
			"id": self.id,
			"sessionId": self.session_id,
			"provider": self.provider,
			"amount": str(self.amount),
			"status": self.status,
			"createdAt": self.created_at.isoformat(),
		}


@dataclass
class DailyStats:
	sent: Decimal = field(default_factory=lambda: Decimal("0"))
	received: Decimal = field(default_factory=lambda: Decimal("0"))
	transactions: int = 0

	def to_json(self) -> dict:
		return {"sent": str(self.sent), "received": str(self.received), "transactions": self.transactions}


# --- Field decoders ----------------------------------------------------------

def parse_amount(value: Any) -> Decimal | None:
	"""
	Numbers or numeric strings -> finite Decimal; anything else -> None
	"""
	if isinstance(value, bool):
		return None
	if isinstance(value, float):
		value = str(value)
	if not isinstance(value, (int, str, Decimal)):
		return None
	try:
		amount = Decimal(value.strip() if isinstance(value, str) else value)
	except (InvalidOperation, ValueError):
		return None
	return amount if amount.is_finite() else None


def parse_timestamp(value: Any) -> datetime | None:
	if isinstance(value, datetime):
		dt = value
	elif isinstance(value, str):
		try:
			dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
		except ValueError:
			return None
	else:
		return None
	return dt if dt.tzinfo else dt.replace(tzinfo=dt_timezone.utc)


def _optional_str(data: dict, key: str) -> tuple[bool, str | None]:
	value = data.get(key)
	return (value is None or isinstance(value, str)), value


# --- Record decoders ---------------------------------------------------------

def decode_wallet(data: Any) -> Ok[Wallet] | Err:
	if not isinstance(data, dict):
		return Err("wallet is not an object")
	for key in ("id", "userId", "currency"):
		if not isinstance(data.get(key), str):
			return Err(f"wallet.{key} must be a string")
	if not isinstance(data.get("isActive"), bool):
		return Err("wallet.isActive must be a boolean")
	balance = parse_amount(data.get("balance"))
	if balance is None:
		return Err("wallet.balance must be a number")
	created_at = parse_timestamp(data.get("createdAt"))
	updated_at = parse_timestamp(data.get("updatedAt"))
	if created_at is None or updated_at is None:
		return Err("wallet timestamps must be ISO-8601 strings")
	return Ok(Wallet(
		id=data["id"],
		user_id=data["userId"],
		balance=balance,
		currency=data["currency"],
		is_active=data["isActive"],
		created_at=created_at,
		updated_at=updated_at,
	))


def decode_transaction(data: Any) -> Ok[Transaction] | Err:
	if not isinstance(data, dict):
		return Err("transaction is not an object")
	for key in ("id", "userId", "currency", "description"):
		if not isinstance(data.get(key), str):
			return Err(f"transaction.{key} must be a string")
	if data.get("type") not in TRANSACTION_TYPES:
		return Err(f"transaction.type must be one of {TRANSACTION_TYPES}")
	if data.get("status") not in TRANSACTION_STATUSES:
		return Err(f"transaction.status must be one of {TRANSACTION_STATUSES}")
	amount = parse_amount(data.get("amount"))
	if amount is None:
		return Err("transaction.amount must be a number")
	created_at = parse_timestamp(data.get("createdAt"))
	updated_at = parse_timestamp(data.get("updatedAt"))
	if created_at is None or updated_at is None:
		return Err("transaction timestamps must be ISO-8601 strings")
	optional = {}
	for key in ("mfsProvider", "recipientMfs", "account", "note"):
		ok, value = _optional_str(data, key)
		if not ok:
			return Err(f"transaction.{key} must be a string")
		optional[key] = value
	return Ok(Transaction(
		id=data["id"],
		user_id=data["userId"],
		type=data["type"],
		amount=amount,
		currency=data["currency"],
		status=data["status"],
		description=data["description"],
		created_at=created_at,
		updated_at=updated_at,
		mfs_provider=optional["mfsProvider"],
		recipient_mfs=optional["recipientMfs"],
		account=optional["account"],
		note=optional["note"],
	))


def decode_topup(data: Any) -> Ok[TopUp] | Err:
	if not isinstance(data, dict):
		return Err("top-up is not an object")
	for key in ("id", "provider", "status"):
		if not isinstance(data.get(key), str):
			return Err(f"topup.{key} must be a string")
	ok, session_id = _optional_str(data, "sessionId")
	if not ok:
		return Err("topup.sessionId must be a string")
	amount = parse_amount(data.get("amount"))
	if amount is None:
		return Err("topup.amount must be a number")
	created_at = parse_timestamp(data.get("createdAt"))
	if created_at is None:
		return Err("topup.createdAt must be an ISO-8601 string")
	return Ok(TopUp(
		id=data["id"],
		session_id=session_id or "",
		provider=data["provider"],
		amount=amount,
		status=data["status"],
		created_at=created_at,
	))
