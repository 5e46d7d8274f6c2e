from fastapi import APIRouter, Depends
from typing import Any, Dict

from expense_app.dependencies import get_stripe_account
from expense_app.services import stripe_service
from expense_app.services.stripe_service import StripeAccount

router = APIRouter(prefix="/issuing", tags=["issuing"])


@router.get("/cardholders")
def list_cardholders(
    stripe_account: StripeAccount = Depends(get_stripe_account)
) -> Dict[str, Any]:
    """Cardholders of the connected account"""
    return stripe_service.get_cardholders(stripe_account)


@router.get("/cards")
def list_cards(
    stripe_account: StripeAccount = Depends(get_stripe_account)
) -> Dict[str, Any]:
    """Cards of the connected account"""
    return stripe_service.get_cards(stripe_account)


@router.get("/cards/{card_id}")
def card_details(
    card_id: str,
    stripe_account: StripeAccount = Depends(get_stripe_account)
) -> Dict[str, Any]:
    """Card with its recent authorizations and current spend"""
    return stripe_service.get_card_details(stripe_account, card_id)


@router.get("/authorizations")
def list_authorizations(
    stripe_account: StripeAccount = Depends(get_stripe_account)
) -> Dict[str, Any]:
    """Last 10 authorizations"""
    return stripe_service.get_authorizations(stripe_account)


@router.get("/authorizations/{authorization_id}")
def authorization_details(
    authorization_id: str,
    stripe_account: StripeAccount = Depends(get_stripe_account)
) -> Dict[str, Any]:
    return stripe_service.get_authorization_details(stripe_account, authorization_id)
