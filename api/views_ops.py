"""Operational endpoints that move the flow forward (issue/verify/top-up)."""

import json
import logging
from django.http import JsonResponse, HttpResponseBadRequest
from django.shortcuts import render
from django.views.decorators.csrf import csrf_exempt
from django.core.exceptions import ValidationError
from django.middleware.csrf import get_token
from core.adapters.storage_adapter import StorageError
from core.ledger import demo_ledger
from core.services import create_payment_session, gateway_links, gateway_params, quote_top_up, top_up_wallet, verify_gateway_signature

logger = logging.getLogger(__name__)


def health(request):
	return JsonResponse({"ok": True})


def csrf(request):
	# Forces creation/rotation of the CSRF token AND sets 'csrftoken' cookie
	return JsonResponse({"csrftoken": get_token(request)})


def _wallet_json(ledger):
	wallet = ledger.get_wallet()
	return wallet.to_json() if wallet else None


def _json_body(request):
	"""
	Parse a JSON object body (empty -> {}); unparseable or non-object bodies -> None
	"""
	try:
		body = json.loads(request.body or b"{}")
	except ValueError:
		return None
	return body if isinstance(body, dict) else None


@csrf_exempt
def payment_create(request):
	"""
	POST: Mint a signed payment session and return the mock gateway redirect URL
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	# Malformed bodies fall back to the defaults, like an empty body
	body = _json_body(request) or {}
	session = create_payment_session(body.get("provider"), body.get("amount"))
	return JsonResponse(session.to_json())


def mock_gateway(request):
	"""
	GET: Verify the signed redirect and render the simulated provider page
	"""
	params = gateway_params(request.GET)
	if not verify_gateway_signature(params["sessionId"], params["tx"], params["provider"], params["amount"], params["sig"]):
		logger.warning("Mock gateway rejected session %r: invalid signature", params["sessionId"])
		return JsonResponse({"error": "Invalid signature"}, status=400)

	return render(request, "api/mock_gateway.html", {**params, **gateway_links(params)})


@csrf_exempt
def wallet_topup(request):
	"""
	POST: Add money from an MFS account, subject to per-provider and daily limits
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	body = _json_body(request)
	if body is None:
		return HttpResponseBadRequest("Invalid JSON")
	provider = body.get("provider")
	amount = body.get("amount")
	if not provider or amount is None:
		return HttpResponseBadRequest("provider and amount required")

	ledger = demo_ledger()
	try:
		txn = top_up_wallet(ledger, provider, amount, body.get("account", ""))
	except ValidationError as e:
		return JsonResponse({"error": e.message}, status=400)
	except StorageError:
		return JsonResponse({"error": "Transaction failed. Please try again."}, status=400)

	return JsonResponse({
		"transaction": txn.to_json(),
		"wallet": _wallet_json(ledger),
	}, status=201)


def topup_quote(request):
	"""
	GET: Fee and total for adding `amount` from `provider`
	"""
	provider = request.GET.get("provider", "")
	amount = request.GET.get("amount", "0")
	return JsonResponse(quote_top_up(provider, amount))


@csrf_exempt
def transaction_add(request):
	"""
	POST: Append a transaction record; invalid shapes are rejected untouched
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	body = _json_body(request)
	if body is None:
		return HttpResponseBadRequest("Invalid JSON")

	ledger = demo_ledger()
	txn = ledger.add_transaction(body)
	if txn is None:
		return JsonResponse({"error": "Invalid transaction data provided"}, status=400)
	return JsonResponse({"transaction": txn.to_json(), "wallet": _wallet_json(ledger)}, status=201)
