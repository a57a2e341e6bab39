"""HTTP endpoints for the local storage stub (optional to call directly).

The ledger uses the storage adapter for determinism; these endpoints mirror what
browser dev tools expose (list keys, read/write/remove a raw value) and let the
demo plant corrupt data by hand.
"""

from django.http import JsonResponse, HttpResponseBadRequest
from django.views.decorators.csrf import csrf_exempt
from core.adapters.storage_adapter import DatabaseStorage, StorageQuotaExceeded


def keys(request):
	"""
	GET: Keys stored in the demo namespace
	"""
	return JsonResponse({"keys": DatabaseStorage().keys()})


@csrf_exempt
def item(request, key: str):
	"""
	GET: raw value of `key`; PUT: replace it with the request body; DELETE: remove it
	"""
	storage = DatabaseStorage()
	if request.method == "GET":
		value = storage.get_item(key)
		if value is None:
			return JsonResponse({"error": "Not found"}, status=404)
		return JsonResponse({"key": key, "value": value})
	if request.method == "PUT":
		try:
			storage.set_item(key, request.body.decode("utf-8"))
		except UnicodeDecodeError:
			return HttpResponseBadRequest("Body must be UTF-8")
		except StorageQuotaExceeded as e:
			return JsonResponse({"error": str(e)}, status=413)
		return JsonResponse({"key": key}, status=201)
	if request.method == "DELETE":
		storage.remove_item(key)
		return JsonResponse({"ok": True})
	return HttpResponseBadRequest("GET, PUT or DELETE only")
