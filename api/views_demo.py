"""Demo helpers: seed the wallet and wipe the simulated local storage."""

from django.http import JsonResponse, HttpResponseBadRequest
from django.views.decorators.csrf import csrf_exempt
from core.adapters.storage_adapter import DatabaseStorage
from core.ledger import LedgerStore


@csrf_exempt
def seed(request):
	"""
	POST: Create/fetch the demo wallet for this run
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	w = LedgerStore(DatabaseStorage()).ensure_wallet()
	return JsonResponse({"wallet": w.to_json() if w else None})


@csrf_exempt
def clear(request):
	"""
	POST: Remove every probaho_* key from the simulated local storage
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	storage = DatabaseStorage()
	LedgerStore(storage).clear_all_data()
	return JsonResponse({"ok": True, "keys": storage.keys()})
