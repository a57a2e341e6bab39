"""Read-only endpoints to inspect the demo state (wallet, history, top-ups, stats)."""

from django.http import JsonResponse
from core.constants import MFS_LIMITS, PROVIDERS, provider_name
from core.ledger import demo_ledger


def wallet(request):
	"""
	GET: Current wallet (created with a zero balance on first access)
	"""
	w = demo_ledger().get_wallet()
	return JsonResponse({"wallet": w.to_json() if w else None})


def transactions(request):
	"""
	GET: Transaction history, newest first
	"""
	rows = demo_ledger().get_transactions()
	return JsonResponse([t.to_json() for t in rows], safe=False)


def topups(request):
	"""
	GET: Gateway top-up receipts, newest first
	"""
	rows = demo_ledger().get_topups()
	return JsonResponse([t.to_json() for t in rows], safe=False)


def daily_stats(request):
	"""
	GET: Today's sent/received totals and transaction count
	"""
	return JsonResponse(demo_ledger().get_daily_stats().to_json())


def providers(request):
	"""
	GET: Supported MFS providers with display names and top-up limits (if any)
	"""
	data = []
	for p in PROVIDERS:
		limits = MFS_LIMITS.get(p)
		data.append({
			"id": p,
			"name": provider_name(p),
			"limits": {k: str(v) for k, v in limits.items()} if limits else None,
		})
	return JsonResponse(data, safe=False)
