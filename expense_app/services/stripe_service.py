"""Thin adapters over the Stripe issuing and balance APIs"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, Optional

import requests
import stripe

from expense_app.config import settings
from expense_app.models.platform import Platform
from expense_app.schemas.balance import BalanceTransaction, FundsFlowResult
from expense_app.services.funds_flow import aggregate, minor_unit_divisor
from expense_app.utils.stripe_authentication import get_stripe_secret_key

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Stripe answered a raw HTTP call with an error status"""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class StripeAccount:
    """Connected account and the platform whose keys reach it"""
    account_id: str
    platform: Platform


def _request_options(stripe_account: StripeAccount) -> Dict[str, Any]:
    api_key = get_stripe_secret_key(stripe_account.platform)
    if not api_key:
        raise ValueError(f"Platform {stripe_account.platform.value} is not configured")
    return {"api_key": api_key, "stripe_account": stripe_account.account_id}


def get_cardholders(stripe_account: StripeAccount) -> Dict[str, Any]:
    cardholders = stripe.issuing.Cardholder.list(
        limit=100, **_request_options(stripe_account)
    )
    return {"cardholders": cardholders.to_dict()}


def get_cards(stripe_account: StripeAccount) -> Dict[str, Any]:
    cards = stripe.issuing.Card.list(
        limit=100, **_request_options(stripe_account)
    )
    return {"cards": cards.to_dict()}


def get_card_details(stripe_account: StripeAccount, card_id: str) -> Dict[str, Any]:
    """
    Card with its cardholder, last 10 authorizations and current spend.

    Current spend only counts approved authorizations.
    """
    options = _request_options(stripe_account)

    card_authorizations = stripe.issuing.Authorization.list(
        card=card_id, limit=10, **options
    )

    current_spend = 0
    for authorization in card_authorizations.data:
        if authorization.approved:
            current_spend += authorization.amount

    card_details = stripe.issuing.Card.retrieve(
        card_id, expand=["cardholder"], **options
    )

    return {
        "card_authorizations": [a.to_dict() for a in card_authorizations.data],
        "current_spend": current_spend,
        "card_details": card_details.to_dict(),
    }


def get_authorizations(stripe_account: StripeAccount) -> Dict[str, Any]:
    authorizations = stripe.issuing.Authorization.list(
        limit=10, **_request_options(stripe_account)
    )
    return {"authorizations": authorizations.to_dict()}


def get_authorization_details(
    stripe_account: StripeAccount, authorization_id: str
) -> Dict[str, Any]:
    authorization = stripe.issuing.Authorization.retrieve(
        authorization_id, **_request_options(stripe_account)
    )
    return {"authorization": authorization.to_dict()}


def get_balance(stripe_account: StripeAccount) -> Dict[str, Any]:
    balance = stripe.Balance.retrieve(**_request_options(stripe_account))
    return {"balance": balance.to_dict()}


def get_balance_transactions(
    stripe_account: StripeAccount,
    currency: str,
    now: Optional[datetime] = None,
) -> FundsFlowResult:
    """
    Fetches balance transactions of the trailing window and builds the chart.

    Only the first page (BALANCE_TRANSACTIONS_LIMIT records) is fetched, so
    windows with more transactions are truncated.
    """
    now = now or datetime.now(timezone.utc)
    window_days = settings.FUNDS_FLOW_WINDOW_DAYS
    end_date: date = now.date()
    start_date = end_date - timedelta(days=window_days - 1)
    start = datetime.combine(start_date, time.min, tzinfo=timezone.utc)

    response = stripe.BalanceTransaction.list(
        created={
            "gte": int(start.timestamp()),
            "lte": int(now.timestamp()),
        },
        limit=settings.BALANCE_TRANSACTIONS_LIMIT,
        **_request_options(stripe_account)
    )

    if response.has_more:
        logger.warning(
            "Balance transactions for %s exceed %d, funds flow is truncated",
            stripe_account.account_id, settings.BALANCE_TRANSACTIONS_LIMIT
        )

    transactions = [BalanceTransaction.from_stripe(tx) for tx in response.data]

    return aggregate(
        transactions,
        window_end_date=end_date,
        window_size_days=window_days,
        date_label_format=settings.FUNDS_FLOW_DATE_FORMAT,
        currency=currency,
        minor_units=minor_unit_divisor(currency),
    )


def get_bank_transfer_type(country: str) -> str:
    if country == "GB":
        return "gb_bank_transfer"
    if country == "US":
        return "us_bank_transfer"
    return "eu_bank_transfer"


def create_funding_instructions(
    stripe_account: StripeAccount, country: str, currency: str
) -> Dict[str, Any]:
    """
    Creates bank transfer funding instructions for the issuing balance.

    The SDK has no binding for this endpoint, so it is called directly.
    """
    api_key = _request_options(stripe_account)["api_key"]
    data = {
        "currency": currency,
        "funding_type": "bank_transfer",
        "bank_transfer[type]": get_bank_transfer_type(country),
    }

    response = requests.post(
        f"{settings.STRIPE_API_BASE}/v1/issuing/funding_instructions",
        headers={
            "Stripe-Account": stripe_account.account_id,
            "Authorization": f"Bearer {api_key}",
        },
        data=data,
        timeout=30,
    )

    body = response.json()
    if not response.ok:
        message = body.get("error", {}).get("message", response.reason)
        logger.error(
            "Funding instructions failed for %s: %s %s",
            stripe_account.account_id, response.status_code, message
        )
        raise UpstreamError(message, response.status_code)

    return body


def create_connected_account(platform: Platform, country: str, email: str) -> str:
    """Creates a Custom connected account able to issue cards, returns its id"""
    api_key = get_stripe_secret_key(platform)
    if not api_key:
        raise ValueError(f"Platform {platform.value} is not configured")

    account = stripe.Account.create(
        type="custom",
        country=country,
        email=email,
        capabilities={
            "card_issuing": {"requested": True},
            "transfers": {"requested": True},
        },
        api_key=api_key,
    )
    logger.info("Created connected account %s on platform %s", account.id, platform.value)
    return account.id


def delete_connected_account(platform: Platform, account_id: str) -> None:
    """Removes a connected account that never got a user"""
    stripe.Account.delete(account_id, api_key=get_stripe_secret_key(platform))
    logger.info("Deleted connected account %s on platform %s", account_id, platform.value)
