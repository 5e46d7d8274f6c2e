from datetime import datetime, timezone

import pytest
import stripe

from expense_app.models.platform import Platform
from expense_app.services import stripe_service
from expense_app.services.stripe_service import StripeAccount, UpstreamError
from tests.conftest import stripe_list, stripe_object

ACCOUNT = StripeAccount(account_id="acct_123", platform=Platform.US)
NOW = datetime(2024, 3, 10, 15, 30, tzinfo=timezone.utc)


def _balance_tx(id_, created, amount, type_="issuing_transaction"):
    return {
        "id": id_,
        "object": "balance_transaction",
        "created": int(created.timestamp()),
        "amount": amount,
        "type": type_,
        "currency": "usd",
        "description": None,
        "status": "available",
    }


class _Recorder:
    def __init__(self, result):
        self.result = result
        self.calls = []

    def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        return self.result


def test_balance_transactions_request_and_chart(monkeypatch):
    listing = _Recorder(stripe_list([
        _balance_tx("txn_1", NOW, 1050),
        _balance_tx("txn_2", datetime(2024, 3, 1, 9, tzinfo=timezone.utc), -500),
        _balance_tx("txn_3", NOW, -700, "issuing_authorization_hold"),
    ]))
    monkeypatch.setattr(stripe.BalanceTransaction, "list", listing)

    result = stripe_service.get_balance_transactions(ACCOUNT, "usd", now=NOW)

    _, kwargs = listing.calls[0]
    assert kwargs["created"] == {
        "gte": int(datetime(2024, 3, 1, tzinfo=timezone.utc).timestamp()),
        "lte": int(NOW.timestamp()),
    }
    assert kwargs["limit"] == 100
    assert kwargs["api_key"] == "sk_test_us"
    assert kwargs["stripe_account"] == "acct_123"

    chart = result.balance_funds_flow_chart_data
    assert chart.currency == "usd"
    assert chart.balance_transactions_dates[0] == "Mar 01"
    assert chart.balance_transactions_dates[-1] == "Mar 10"
    assert chart.balance_transactions_funds_in[-1] == 10.50
    assert chart.balance_transactions_funds_out[0] == 5.00
    assert chart.balance_transactions_funds_out[-1] == 0.0
    assert [tx.id for tx in result.balance_transactions] == ["txn_1", "txn_2"]


def test_balance_transactions_warns_when_truncated(monkeypatch, caplog):
    monkeypatch.setattr(
        stripe.BalanceTransaction, "list", _Recorder(stripe_list([], has_more=True))
    )

    with caplog.at_level("WARNING"):
        stripe_service.get_balance_transactions(ACCOUNT, "usd", now=NOW)

    assert "truncated" in caplog.text


def test_stripe_errors_propagate(monkeypatch):
    def fail(**kwargs):
        raise stripe.AuthenticationError("Invalid API Key provided")

    monkeypatch.setattr(stripe.BalanceTransaction, "list", fail)

    with pytest.raises(stripe.AuthenticationError):
        stripe_service.get_balance_transactions(ACCOUNT, "usd", now=NOW)


def test_unconfigured_platform_is_rejected():
    with pytest.raises(ValueError):
        stripe_service.get_balance(StripeAccount(account_id="acct_eu", platform=Platform.EU))


def _authorization(id_, approved, amount):
    return {"id": id_, "object": "issuing.authorization", "approved": approved, "amount": amount}


def test_card_details_counts_only_approved_authorizations(monkeypatch):
    authorizations = _Recorder(stripe_list([
        _authorization("iauth_1", True, 1200),
        _authorization("iauth_2", False, 5000),
        _authorization("iauth_3", True, 300),
    ]))
    card = {"id": "ic_1", "object": "issuing.card", "cardholder": {"id": "ich_1", "name": "Jane"}}
    retrieve = _Recorder(stripe_object(card))
    monkeypatch.setattr(stripe.issuing.Authorization, "list", authorizations)
    monkeypatch.setattr(stripe.issuing.Card, "retrieve", retrieve)

    details = stripe_service.get_card_details(ACCOUNT, "ic_1")

    assert details["current_spend"] == 1500
    assert details["card_details"] == card
    assert details["card_authorizations"][1] == _authorization("iauth_2", False, 5000)
    assert len(details["card_authorizations"]) == 3
    assert authorizations.calls[0][1]["card"] == "ic_1"
    assert authorizations.calls[0][1]["limit"] == 10
    args, kwargs = retrieve.calls[0]
    assert args == ("ic_1",)
    assert kwargs["expand"] == ["cardholder"]


def test_list_adapters_return_plain_data(monkeypatch):
    cardholders = _Recorder(stripe_list([{"id": "ich_1", "object": "issuing.cardholder"}]))
    cards = _Recorder(stripe_list([]))
    authorizations = _Recorder(stripe_list([], has_more=True))
    monkeypatch.setattr(stripe.issuing.Cardholder, "list", cardholders)
    monkeypatch.setattr(stripe.issuing.Card, "list", cards)
    monkeypatch.setattr(stripe.issuing.Authorization, "list", authorizations)

    result = stripe_service.get_cardholders(ACCOUNT)
    assert type(result["cardholders"]) is dict
    assert result["cardholders"]["data"] == [{"id": "ich_1", "object": "issuing.cardholder"}]
    assert stripe_service.get_cards(ACCOUNT)["cards"]["data"] == []
    assert stripe_service.get_authorizations(ACCOUNT)["authorizations"]["has_more"] is True

    assert cardholders.calls[0][1]["limit"] == 100
    assert cards.calls[0][1]["limit"] == 100
    assert authorizations.calls[0][1]["limit"] == 10
    for recorder in (cardholders, cards, authorizations):
        assert recorder.calls[0][1]["stripe_account"] == "acct_123"


def test_balance_and_authorization_are_plain_data(monkeypatch):
    balance = {"object": "balance", "issuing": {"available": [{"amount": 1000, "currency": "usd"}]}}
    monkeypatch.setattr(stripe.Balance, "retrieve", _Recorder(stripe_object(balance)))
    retrieve = _Recorder(stripe_object(_authorization("iauth_1", True, 900)))
    monkeypatch.setattr(stripe.issuing.Authorization, "retrieve", retrieve)

    assert stripe_service.get_balance(ACCOUNT) == {"balance": balance}
    assert stripe_service.get_authorization_details(ACCOUNT, "iauth_1") == {
        "authorization": _authorization("iauth_1", True, 900)
    }
    assert retrieve.calls[0][0] == ("iauth_1",)


def test_delete_connected_account(monkeypatch):
    delete = _Recorder(stripe_object({"id": "acct_new", "deleted": True}))
    monkeypatch.setattr(stripe.Account, "delete", delete)

    stripe_service.delete_connected_account(Platform.US, "acct_new")

    assert delete.calls[0] == (("acct_new",), {"api_key": "sk_test_us"})


@pytest.mark.parametrize("country, expected", [
    ("GB", "gb_bank_transfer"),
    ("US", "us_bank_transfer"),
    ("DE", "eu_bank_transfer"),
    ("FR", "eu_bank_transfer"),
])
def test_bank_transfer_type(country, expected):
    assert stripe_service.get_bank_transfer_type(country) == expected


class _Response:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self.ok = status_code < 400
        self.reason = "Bad Request"
        self._body = body

    def json(self):
        return self._body


def test_create_funding_instructions_posts_form(monkeypatch):
    body = {"object": "funding_instructions", "currency": "gbp", "funding_type": "bank_transfer"}
    post = _Recorder(_Response(200, body))
    monkeypatch.setattr(stripe_service.requests, "post", post)
    account = StripeAccount(account_id="acct_uk", platform=Platform.UK)

    assert stripe_service.create_funding_instructions(account, "GB", "gbp") == body

    args, kwargs = post.calls[0]
    assert args[0] == "https://api.stripe.com/v1/issuing/funding_instructions"
    assert kwargs["headers"]["Stripe-Account"] == "acct_uk"
    assert kwargs["headers"]["Authorization"] == "Bearer sk_test_uk"
    assert kwargs["data"] == {
        "currency": "gbp",
        "funding_type": "bank_transfer",
        "bank_transfer[type]": "gb_bank_transfer",
    }


def test_create_funding_instructions_raises_on_error(monkeypatch):
    post = _Recorder(_Response(400, {"error": {"message": "Invalid currency"}}))
    monkeypatch.setattr(stripe_service.requests, "post", post)

    with pytest.raises(UpstreamError) as excinfo:
        stripe_service.create_funding_instructions(ACCOUNT, "US", "xyz")

    assert excinfo.value.status_code == 400
    assert str(excinfo.value) == "Invalid currency"


def test_create_connected_account(monkeypatch):
    create = _Recorder(stripe_object({"id": "acct_new", "object": "account"}))
    monkeypatch.setattr(stripe.Account, "create", create)

    assert stripe_service.create_connected_account(Platform.UK, "GB", "jane@example.com") == "acct_new"

    kwargs = create.calls[0][1]
    assert kwargs["country"] == "GB"
    assert kwargs["api_key"] == "sk_test_uk"
    assert kwargs["capabilities"]["card_issuing"] == {"requested": True}
