import json
from urllib.parse import urlencode, urlparse

import pytest

from core.constants import STORAGE_KEYS
from core.ledger import LedgerStore
from core.services import CONFIRM_FAILED_MESSAGE, CONFIRM_OK_MESSAGE, build_payload, sign_payload

pytestmark = pytest.mark.django_db


def _local(url):
	parsed = urlparse(url)
	return f"{parsed.path}?{parsed.query}"


def _create(client, **body):
	resp = client.post("/api/payment/create", data=json.dumps(body), content_type="application/json")
	assert resp.status_code == 200
	return resp.json()


def _balance(client):
	return client.get("/api/wallet").json()["wallet"]["balance"]


def _signed_query(amount="1000", provider="bkash", tx="TXN_1", session_id="sess_1"):
	sig = sign_payload(build_payload(session_id, tx, provider, amount))
	return {"sessionId": session_id, "tx": tx, "provider": provider, "amount": amount, "sig": sig}


# --- Issuer + gateway --------------------------------------------------------

def test_create_returns_session_and_redirect(client, payment_settings):
	data = _create(client, provider="bkash", amount=1000)

	assert set(data) == {"sessionId", "tx", "redirectUrl"}
	assert data["sessionId"].startswith("sess_")
	assert data["tx"] == "TXN_" + data["sessionId"][len("sess_"):]
	assert data["redirectUrl"].startswith("http://localhost:3000/api/payment/mock-gateway?")


def test_create_tolerates_empty_or_bad_body(client, payment_settings):
	resp = client.post("/api/payment/create", data="not json", content_type="application/json")
	assert resp.status_code == 200

	gateway = client.get(_local(resp.json()["redirectUrl"]))
	assert gateway.status_code == 200
	assert gateway.context["provider"] == "bkash"
	assert gateway.context["amount"] == "0"


def test_create_is_post_only(client):
	assert client.get("/api/payment/create").status_code == 400


def test_gateway_renders_confirmation_for_valid_signature(client, payment_settings):
	data = _create(client, provider="nagad", amount=500)
	resp = client.get(_local(data["redirectUrl"]))

	assert resp.status_code == 200
	assert resp["Content-Type"].startswith("text/html")
	assert b"Mock nagad Payment" in resp.content
	assert resp.context["confirm_url"].startswith("http://localhost:3000/add-money/confirm?")
	assert resp.context["cancel_url"] == "http://localhost:3000/add-money"


def test_gateway_rejects_tampered_amount(client, payment_settings):
	query = _signed_query(amount="1000")
	assert client.get("/api/payment/mock-gateway", query).status_code == 200

	query["amount"] = "1001"
	resp = client.get("/api/payment/mock-gateway", query)
	assert resp.status_code == 400
	assert resp.json() == {"error": "Invalid signature"}


def test_gateway_rejects_missing_fields(client, payment_settings):
	resp = client.get("/api/payment/mock-gateway")
	assert resp.status_code == 400
	assert resp.json() == {"error": "Invalid signature"}


# --- Confirmation ------------------------------------------------------------

def test_full_top_up_flow_credits_wallet(client, payment_settings):
	data = _create(client, provider="bkash", amount=1000)
	gateway = client.get(_local(data["redirectUrl"]))
	resp = client.get(_local(gateway.context["confirm_url"]))

	assert resp.status_code == 200
	assert resp.context["result"].ok
	assert CONFIRM_OK_MESSAGE.encode() in resp.content
	assert b'"/history"' in resp.content
	assert _balance(client) == "1000"

	topups = client.get("/api/topups").json()
	assert [(t["id"], t["sessionId"], t["provider"], t["status"]) for t in topups] == [(data["tx"], data["sessionId"], "bkash", "success")]

	txns = client.get("/api/transactions").json()
	assert len(txns) == 1
	assert txns[0]["type"] == "credit"
	assert txns[0]["mfsProvider"] == "bkash"
	assert txns[0]["note"] == f"TxnID: {data['tx']}"
	assert txns[0]["description"] == "Added money from bKash"


def test_replayed_confirmation_credits_twice_by_default(client, payment_settings):
	url = "/add-money/confirm?" + urlencode(_signed_query(amount="300"))
	client.get(url)
	client.get(url)

	assert _balance(client) == "600"
	assert len(client.get("/api/topups").json()) == 2


def test_replay_rejected_when_enabled(client, payment_settings):
	payment_settings.PAYMENT_CONFIRM_REJECT_REPLAY = True
	url = "/add-money/confirm?" + urlencode(_signed_query(amount="300"))

	assert client.get(url).context["result"].ok
	second = client.get(url)
	assert not second.context["result"].ok
	assert CONFIRM_FAILED_MESSAGE.encode() in second.content
	assert _balance(client) == "300"


def test_confirm_trusts_carried_signature_by_default(client, payment_settings):
	query = _signed_query(amount="100")
	query["amount"] = "9999"

	assert client.get("/add-money/confirm", query).context["result"].ok
	assert _balance(client) == "9999"


def test_confirm_reverifies_when_enabled(client, payment_settings):
	payment_settings.PAYMENT_CONFIRM_REVERIFY = True
	query = _signed_query(amount="100")
	tampered = {**query, "amount": "9999"}

	assert not client.get("/add-money/confirm", tampered).context["result"].ok
	assert client.get("/add-money/confirm", query).context["result"].ok
	assert _balance(client) == "100"


def test_failed_status_records_without_credit(client, payment_settings):
	query = {**_signed_query(amount="100"), "status": "failed"}
	resp = client.get("/add-money/confirm", query)

	assert resp.context["result"].ok
	assert _balance(client) == "0"
	assert client.get("/api/topups").json()[0]["status"] == "failed"
	assert client.get("/api/transactions").json()[0]["status"] == "failed"


def test_confirm_rolls_back_when_transaction_write_fails(client, payment_settings, monkeypatch):
	monkeypatch.setattr(LedgerStore, "add_transaction", lambda self, data: None)
	resp = client.get("/add-money/confirm", _signed_query(amount="100"))

	assert not resp.context["result"].ok
	assert CONFIRM_FAILED_MESSAGE.encode() in resp.content
	assert b"setTimeout" not in resp.content
	assert client.get("/api/topups").json() == []
	assert _balance(client) == "0"


def test_confirm_with_non_numeric_amount_fails(client, payment_settings):
	resp = client.get("/add-money/confirm", _signed_query(amount="lots"))

	assert not resp.context["result"].ok
	assert client.get("/api/topups").json() == []


# --- Ledger endpoints --------------------------------------------------------

def test_topup_within_limits(client):
	resp = client.post("/api/wallet/topup", data=json.dumps({"provider": "bkash", "amount": 2000, "account": "01712345678"}), content_type="application/json")

	assert resp.status_code == 201
	body = resp.json()
	assert body["wallet"]["balance"] == "2000"
	assert body["transaction"]["account"] == "01712345678"
	assert client.get("/api/stats/daily").json() == {"sent": "0", "received": "2000", "transactions": 1}


@pytest.mark.parametrize("payload, fragment", [
	({"provider": "bkash", "amount": 5, "account": "01712345678"}, "between"),
	({"provider": "upay", "amount": 30000, "account": "01712345678"}, "between"),
	({"provider": "rocket", "amount": 100, "account": "01712345678"}, "account"),
	({"provider": "bkash", "amount": 100, "account": "12345"}, "account"),
	({"provider": "tapp", "amount": 100, "account": "01712345678"}, "Unsupported"),
	({"provider": "bkash", "amount": "x", "account": "01712345678"}, "Amount"),
])
def test_topup_rejections(client, payload, fragment):
	resp = client.post("/api/wallet/topup", data=json.dumps(payload), content_type="application/json")

	assert resp.status_code == 400
	assert fragment in resp.json()["error"]
	assert _balance(client) == "0"


def test_topup_daily_limit(client):
	body = {"provider": "upay", "amount": 25000, "account": "01712345678"}
	for _ in range(2):
		assert client.post("/api/wallet/topup", data=json.dumps(body), content_type="application/json").status_code == 201

	resp = client.post("/api/wallet/topup", data=json.dumps({**body, "amount": 10}), content_type="application/json")
	assert resp.status_code == 400
	assert "Daily deposit limit (50,000 BDT) exceeded for upay" == resp.json()["error"]
	assert _balance(client) == "50000"


def test_topup_quote(client):
	assert client.get("/api/wallet/topup/quote", {"provider": "bkash", "amount": "6000"}).json() == {
		"provider": "bkash", "amount": "6000", "fee": "15", "total": "6015",
	}


def test_add_transaction_endpoint(client):
	ok = client.post("/api/transactions/add", data=json.dumps({"type": "debit", "amount": 40, "status": "success", "description": "Sent"}), content_type="application/json")
	assert ok.status_code == 201
	assert ok.json()["wallet"]["balance"] == "-40"

	bad = client.post("/api/transactions/add", data=json.dumps({"type": "debit", "amount": -1, "status": "success"}), content_type="application/json")
	assert bad.status_code == 400
	assert len(client.get("/api/transactions").json()) == 1


def test_add_transaction_endpoint_rejects_when_wallet_update_fails(client, monkeypatch):
	monkeypatch.setattr(LedgerStore, "update_wallet_balance", lambda self, amount, type="credit": None)
	resp = client.post("/api/transactions/add", data=json.dumps({"type": "credit", "amount": 500, "status": "success"}), content_type="application/json")

	assert resp.status_code == 400
	assert client.get("/api/transactions").json() == []
	assert _balance(client) == "0"

def test_providers_listing(client):
	data = {p["id"]: p for p in client.get("/api/providers").json()}

	assert data["bkash"]["name"] == "bKash"
	assert data["rocket"]["limits"]["prefix"] == "018"
	assert data["mycash"]["limits"] is None


def test_history_page_lists_transactions(client, payment_settings):
	client.get("/add-money/confirm", _signed_query(amount="750"))
	resp = client.get("/history")

	assert resp.status_code == 200
	assert b"Added money from bKash" in resp.content
	assert resp.context["wallet"].balance == 750


# --- Storage stub + demo helpers ---------------------------------------------

def test_corrupt_wallet_planted_via_stub_heals(client):
	client.post("/api/demo/seed")
	resp = client.put(f"/stub/storage/item/{STORAGE_KEYS['wallet']}", data="{not json", content_type="text/plain")
	assert resp.status_code == 201
	assert client.get(f"/stub/storage/item/{STORAGE_KEYS['wallet']}").json()["value"] == "{not json"

	assert _balance(client) == "0"
	assert json.loads(client.get(f"/stub/storage/item/{STORAGE_KEYS['wallet']}").json()["value"])["currency"] == "BDT"


def test_stub_item_not_found_and_delete(client):
	assert client.get("/stub/storage/item/missing").status_code == 404
	client.put("/stub/storage/item/probaho_settings", data="{}", content_type="application/json")
	assert "probaho_settings" in client.get("/stub/storage/keys").json()["keys"]

	client.delete("/stub/storage/item/probaho_settings")
	assert "probaho_settings" not in client.get("/stub/storage/keys").json()["keys"]


def test_stub_put_over_quota(client, settings):
	settings.LOCAL_STORAGE_QUOTA_BYTES = 10
	resp = client.put("/stub/storage/item/probaho_user", data="x" * 50, content_type="text/plain")
	assert resp.status_code == 413


def test_demo_clear_wipes_storage(client, payment_settings):
	client.get("/add-money/confirm", _signed_query(amount="10"))
	resp = client.post("/api/demo/clear")

	assert resp.json() == {"ok": True, "keys": []}
	assert client.get("/api/transactions").json() == []


def test_health(client):
	assert client.get("/api/health").json() == {"ok": True}
