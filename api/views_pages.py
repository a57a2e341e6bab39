"""Browser-facing pages the gateway flow navigates through (confirm, history)."""

from django.conf import settings
from django.shortcuts import render
from core.ledger import demo_ledger
from core.services import confirm_payment


def confirm(request):
	"""
	GET: Record the confirmed top-up, then bounce to /history after a short delay
	"""
	result = confirm_payment(demo_ledger(), request.GET)
	return render(request, "api/confirm.html", {
		"result": result,
		"redirect_url": "/history",
		"delay_ms": settings.CONFIRM_REDIRECT_DELAY_MS,
	})


def history(request):
	"""
	GET: Wallet balance and transaction history, newest first
	"""
	ledger = demo_ledger()
	return render(request, "api/history.html", {
		"wallet": ledger.get_wallet(),
		"transactions": ledger.get_transactions(),
		"stats": ledger.get_daily_stats(),
	})
