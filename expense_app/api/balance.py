"""Balance, funds flow and funding endpoints"""
from fastapi import APIRouter, Depends, Query
from typing import Any, Dict

from expense_app.dependencies import get_current_user, get_stripe_account
from expense_app.models.user import User
from expense_app.schemas.balance import FundingInstructionsRequest, FundsFlowResult
from expense_app.services import stripe_service
from expense_app.services.stripe_service import StripeAccount

router = APIRouter(prefix="/balance", tags=["balance"])


@router.get("")
def get_balance(
    stripe_account: StripeAccount = Depends(get_stripe_account)
) -> Dict[str, Any]:
    """Issuing balance of the connected account"""
    return stripe_service.get_balance(stripe_account)


@router.get("/transactions", response_model=FundsFlowResult)
def get_balance_transactions(
    currency: str = Query("usd", min_length=3, max_length=3),
    stripe_account: StripeAccount = Depends(get_stripe_account)
) -> FundsFlowResult:
    """
    Balance transactions of the last days and the funds flow chart built
    from them. Authorization holds and releases are left out of both.
    """
    return stripe_service.get_balance_transactions(stripe_account, currency.lower())


@router.post("/funding-instructions")
def create_funding_instructions(
    funding_request: FundingInstructionsRequest,
    current_user: User = Depends(get_current_user),
    stripe_account: StripeAccount = Depends(get_stripe_account)
) -> Dict[str, Any]:
    """Bank details to top up the issuing balance by bank transfer"""
    return stripe_service.create_funding_instructions(
        stripe_account, current_user.country, funding_request.currency.lower()
    )
