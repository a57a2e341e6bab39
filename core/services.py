"""Business orchestration for the demo.

This module coordinates: payment session → mock gateway verification →
confirmation (top-up receipt + credit transaction), and the direct add-money path.
Confirmation writes are wrapped in transaction.atomic and a ledger snapshot, so a
failed step leaves no partial record on any storage backend.
"""

import hashlib
import hmac
import logging
from dataclasses import dataclass
from decimal import Decimal
from urllib.parse import urlencode

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from .adapters.storage_adapter import StorageError
from .constants import DEFAULT_PROVIDER, MAX_AMOUNT_BDT, MFS_LIMITS, calculate_add_money_fee, generate_transaction_id, provider_name, validate_amount, validate_phone_number
from .ledger import LedgerStore
from .schemas import TopUp, Transaction, parse_amount

logger = logging.getLogger(__name__)

CONFIRM_FAILED_MESSAGE = "Failed to record payment. Please contact support."
CONFIRM_OK_MESSAGE = "Payment confirmed! Redirecting..."


@dataclass(frozen=True)
class PaymentSession:
	session_id: str
	tx: str
	provider: str
	amount: str
	signature: str
	redirect_url: str

	def to_json(self) -> dict:
		return {"sessionId": self.session_id, "tx": self.tx, "redirectUrl": self.redirect_url}


@dataclass
class ConfirmationResult:
	ok: bool
	message: str
	topup: TopUp | None = None
	transaction: Transaction | None = None


# --- Signing -----------------------------------------------------------------

def _js_str(value) -> str:
	"""
	Render a value the way a JS template literal would (1000.0 -> "1000")
	"""
	if isinstance(value, bool):
		return "true" if value else "false"
	if isinstance(value, float) and value.is_integer():
		return str(int(value))
	if value is None:
		return "null"
	return str(value)


def build_payload(session_id: str, tx: str, provider: str, amount: str) -> str:
	"""
	Pipe-joined signing payload; values are taken verbatim, no escaping
	"""
	return f"{session_id}|{tx}|{provider}|{amount}"


def sign_payload(payload: str, secret: str | None = None) -> str:
	secret = secret if secret is not None else settings.PAYMENT_SECRET
	return hmac.new(key=secret.encode("utf-8"), msg=payload.encode("utf-8"), digestmod=hashlib.sha256).hexdigest()


def verify_gateway_signature(session_id: str, tx: str, provider: str, amount: str, sig: str, secret: str | None = None) -> bool:
	"""
	Recompute the HMAC over the carried fields and compare with `sig`.

	Plain string equality unless PAYMENT_CONSTANT_TIME_COMPARE is enabled.
	"""
	expected = sign_payload(build_payload(session_id, tx, provider, amount), secret)
	if getattr(settings, "PAYMENT_CONSTANT_TIME_COMPARE", False):
		return hmac.compare_digest(expected.encode("utf-8"), (sig or "").encode("utf-8"))
	return sig == expected


def gateway_params(query) -> dict:
	"""
	Pull the five signed fields from a query dict, applying gateway defaults
	"""
	return {
		"sessionId": query.get("sessionId") or "",
		"tx": query.get("tx") or "",
		"provider": query.get("provider") or DEFAULT_PROVIDER,
		"amount": query.get("amount") or "0",
		"sig": query.get("sig") or "",
	}


def base_url() -> str:
	return settings.PAYMENT_BASE_URL.rstrip("/")


# --- Issuer ------------------------------------------------------------------

def create_payment_session(provider=None, amount=None, *, now_ms: int | None = None) -> PaymentSession:
	"""
	Mint a signed session and the redirect URL to the mock gateway (stateless)
	"""
	provider = _js_str(provider if provider is not None else DEFAULT_PROVIDER)
	amount = _js_str(amount if amount is not None else 0)
	if now_ms is None:
		now_ms = int(timezone.now().timestamp() * 1000)

	session_id = f"sess_{now_ms}"
	tx = f"TXN_{now_ms}"
	signature = sign_payload(build_payload(session_id, tx, provider, amount))

	params = urlencode({"sessionId": session_id, "tx": tx, "provider": provider, "amount": amount, "sig": signature})
	redirect_url = f"{base_url()}/api/payment/mock-gateway?{params}"

	logger.info("Issued payment session %s (%s %s)", session_id, provider, amount)
	return PaymentSession(session_id=session_id, tx=tx, provider=provider, amount=amount, signature=signature, redirect_url=redirect_url)


def gateway_links(params: dict) -> dict:
	"""
	Confirm/cancel targets for the gateway page; the signed fields travel unchanged
	"""
	query = urlencode({k: params[k] for k in ("sessionId", "tx", "provider", "amount", "sig")})
	return {
		"confirm_url": f"{base_url()}/add-money/confirm?{query}",
		"cancel_url": f"{base_url()}/add-money",
	}


# --- Confirmation ------------------------------------------------------------

class _ConfirmFailed(Exception):
	pass


def confirm_payment(ledger: LedgerStore, query) -> ConfirmationResult:
	"""
	Record a gateway-confirmed top-up and credit the wallet.

	The carried signature is trusted as already verified by the gateway unless
	PAYMENT_CONFIRM_REVERIFY is on. The same URL confirmed twice credits twice
	unless PAYMENT_CONFIRM_REJECT_REPLAY is on.
	"""
	session_id = query.get("sessionId") or ""
	tx = query.get("tx") or ""
	provider = query.get("provider") or "unknown"
	raw_amount = query.get("amount") or "0"
	sig = query.get("sig") or ""
	status = (query.get("status") or "success").lower()

	if getattr(settings, "PAYMENT_CONFIRM_REVERIFY", False):
		if not verify_gateway_signature(session_id, tx, provider, raw_amount, sig):
			logger.warning("Confirm for %s rejected: signature mismatch", tx)
			return ConfirmationResult(ok=False, message=CONFIRM_FAILED_MESSAGE)

	amount = parse_amount(raw_amount)
	if amount is None:
		logger.warning("Confirm for %s rejected: amount %r is not a number", tx, raw_amount)
		return ConfirmationResult(ok=False, message=CONFIRM_FAILED_MESSAGE)

	if not tx:
		tx = generate_transaction_id()
	if amount < 0:
		# a negative credit is kept as a failed receipt and never moves the balance
		logger.warning("Confirm for %s: negative amount %s recorded as failed", tx, amount)
		status = "failed"

	before = ledger.snapshot()
	try:
		with transaction.atomic():
			if getattr(settings, "PAYMENT_CONFIRM_REJECT_REPLAY", False):
				if any(t.id == tx for t in ledger.get_topups()):
					logger.warning("Confirm for %s rejected: already recorded", tx)
					raise _ConfirmFailed()

			topup = TopUp(
				id=tx,
				session_id=session_id,
				provider=provider,
				amount=amount,
				status="success" if status == "success" else "failed",
				created_at=ledger.clock(),
			)
			ledger.add_topup(topup)

			txn = None
			if amount > 0:
				txn = ledger.add_transaction({
					"type": "credit",
					"amount": amount,
					"status": topup.status,
					"description": f"Added money from {provider_name(provider)}",
					"mfsProvider": provider,
					"note": f"TxnID: {tx}",
				})
				if txn is None:
					raise StorageError(f"could not record transaction for {tx}")
				if txn.status == "success" and ledger.get_wallet() is None:
					raise StorageError(f"wallet update lost for {tx}")
	except (_ConfirmFailed, StorageError, ValueError) as e:
		if not isinstance(e, _ConfirmFailed):
			logger.error("Failed to record payment %s: %s", tx, e)
			ledger.restore(before)
		return ConfirmationResult(ok=False, message=CONFIRM_FAILED_MESSAGE)

	logger.info("Confirmed top-up %s: %s %s (%s)", tx, provider, amount, topup.status)
	return ConfirmationResult(ok=True, message=CONFIRM_OK_MESSAGE, topup=topup, transaction=txn)


# --- Direct add-money --------------------------------------------------------

def top_up_wallet(ledger: LedgerStore, provider: str, amount, account: str) -> Transaction:
	"""
	Add money straight from an MFS account, enforcing per-provider limits.

	Raises ValidationError with a user-facing message when a limit is broken.
	"""
	limits = MFS_LIMITS.get(provider)
	if limits is None:
		raise ValidationError(f"Unsupported provider: {provider}")

	amt = parse_amount(amount)
	if amt is None or amt <= 0:
		raise ValidationError("Amount must be > 0")
	if amt < limits["min"] or amt > limits["max"]:
		raise ValidationError(f"Amount must be between {limits['min']} and {limits['max']} BDT for {provider_name(provider)}")
	if not validate_amount(amt):
		raise ValidationError(f"Amount must not exceed {MAX_AMOUNT_BDT:,} BDT")

	digits = "".join(ch for ch in (account or "") if ch.isdigit())
	if not validate_phone_number(digits) or len(digits) != limits["length"] or not digits.startswith(limits["prefix"]):
		raise ValidationError(f"Invalid {provider_name(provider)} account number")

	stats = ledger.get_daily_stats()
	if stats.received + amt > limits["daily"]:
		raise ValidationError(f"Daily deposit limit ({limits['daily']:,} BDT) exceeded for {provider}")

	txn_id = generate_transaction_id()
	with transaction.atomic():
		txn = ledger.add_transaction({
			"type": "credit",
			"amount": amt,
			"status": "success",
			"description": f"Added money from {provider_name(provider)}",
			"mfsProvider": provider,
			"account": digits,
			"note": f"TxnID: {txn_id}",
		})
		if txn is None:
			raise StorageError("could not record top-up")
	return txn


def quote_top_up(provider: str, amount) -> dict:
	"""
	Fee preview for the add-money form
	"""
	amt = parse_amount(amount) or Decimal("0")
	fee = calculate_add_money_fee(amt)
	return {"provider": provider, "amount": str(amt), "fee": str(fee), "total": str(amt + fee)}
