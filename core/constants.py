"""MFS catalogue and helpers shared across the demo.


- PROVIDERS / provider_name: the simulated Mobile Financial Services
- MFS_LIMITS: per-provider top-up bounds (single min/max, daily total, account shape)
- STORAGE_KEYS: fixed local storage keys holding the JSON blobs
- fee and validation helpers used by the add-money path
"""

import re
import secrets
import time
from decimal import Decimal

PROVIDERS = ("bkash", "rocket", "nagad", "upay", "tapp", "mycash")
DEFAULT_PROVIDER = "bkash"

PROVIDER_NAMES = {
	"bkash": "bKash",
	"rocket": "Rocket",
	"nagad": "Nagad",
	"upay": "Upay",
	"tapp": "Tapp",
	"mycash": "MyCash",
}

MFS_LIMITS = {
	"bkash": {"min": Decimal("10"), "max": Decimal("50000"), "daily": Decimal("100000"), "prefix": "01", "length": 11},
	"nagad": {"min": Decimal("10"), "max": Decimal("40000"), "daily": Decimal("80000"), "prefix": "01", "length": 11},
	"rocket": {"min": Decimal("10"), "max": Decimal("30000"), "daily": Decimal("60000"), "prefix": "018", "length": 11},
	"upay": {"min": Decimal("10"), "max": Decimal("25000"), "daily": Decimal("50000"), "prefix": "01", "length": 11},
}

STORAGE_KEYS = {
	"wallet": "probaho_wallet",
	"topups": "probaho_topups",
	"transactions": "probaho_transactions",
	"user": "probaho_user",
	"settings": "probaho_settings",
}

TRANSACTION_TYPES = ("credit", "debit")
TRANSACTION_STATUSES = ("pending", "success", "failed")

# Max 1 lakh BDT per operation
MAX_AMOUNT_BDT = Decimal("100000")

_PHONE_RE = re.compile(r"^(880|0)?1[3-9]\d{8}$")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def provider_name(provider: str) -> str:
	return PROVIDER_NAMES.get(provider, provider)


def validate_amount(amount: Decimal) -> bool:
	return Decimal("0") < amount <= MAX_AMOUNT_BDT


def validate_phone_number(phone: str) -> bool:
	"""
	Bangladesh mobile number, with or without the 880 / 0 prefix
	"""
	cleaned = re.sub(r"\D", "", phone or "")
	return bool(_PHONE_RE.match(cleaned))


def calculate_add_money_fee(amount: Decimal) -> Decimal:
	"""
	Tiered flat fee for pulling money in from an MFS account
	"""
	if amount <= 1000:
		return Decimal("5")
	if amount <= 5000:
		return Decimal("10")
	if amount <= 10000:
		return Decimal("15")
	return Decimal("20")


def _to_base36(n: int) -> str:
	out = ""
	while True:
		n, r = divmod(n, 36)
		out = _BASE36[r] + out
		if n == 0:
			return out


def generate_transaction_id() -> str:
	"""
	TXN_<base36 millis>_<12 random hex>, uppercased
	"""
	millis = int(time.time() * 1000)
	return f"TXN_{_to_base36(millis)}_{secrets.token_hex(6)}".upper()
