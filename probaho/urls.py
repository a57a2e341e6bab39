"""URL routing for API + browser-facing pages + local storage stub.


The /api/ namespace exposes the payment session issuer, the mock gateway and
read/ops endpoints; /add-money/confirm and /history are the client routes the
gateway redirects through; /stub/storage/* exposes the simulated local storage.
"""

from django.urls import path, include
from api.views_pages import confirm, history


urlpatterns = [
	path("api/", include("api.urls")),
	path("add-money/confirm", confirm, name="add_money_confirm"),
	path("history", history, name="history"),
	path("stub/storage/", include("storage_stub.urls")),
]
