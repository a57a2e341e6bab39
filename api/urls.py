"""Public API surface for the wallet demo.

- /payment/create, /payment/mock-gateway: signed session issuer + gateway page
- /wallet/topup, /transactions/add: ledger mutations (limits / validation applied)
- /wallet, /transactions, /topups, /stats/daily, /providers: read-only views
- /demo/*: convenience helpers to seed or wipe the simulated local storage
"""

from django.urls import path
from .views_demo import seed, clear
from .views_ops import health, csrf, payment_create, mock_gateway, wallet_topup, topup_quote, transaction_add
from .views_read import wallet, transactions, topups, daily_stats, providers


urlpatterns = [
	path("health", health),
	path("csrf", csrf),
	path("payment/create", payment_create, name="payment_create"),
	path("payment/mock-gateway", mock_gateway, name="mock_gateway"),
	path("wallet", wallet),
	path("wallet/topup", wallet_topup),
	path("wallet/topup/quote", topup_quote),
	path("transactions", transactions),
	path("transactions/add", transaction_add),
	path("topups", topups),
	path("stats/daily", daily_stats),
	path("providers", providers),
	path("demo/seed", seed),
	path("demo/clear", clear),
]
