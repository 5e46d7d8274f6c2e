"""Schemas for balance data and the funds flow chart"""
from pydantic import BaseModel, Field
from typing import Any, List, Optional


class BalanceTransaction(BaseModel):
    """Read-only view of a Stripe balance transaction"""
    id: str
    created: int  # Unix seconds
    amount: int  # signed, minor currency units
    type: str
    currency: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def from_stripe(cls, obj: Any) -> "BalanceTransaction":
        """Builds the view from a stripe.BalanceTransaction"""
        return cls(
            id=obj.id,
            created=obj.created,
            amount=obj.amount,
            type=obj.type,
            currency=getattr(obj, "currency", None),
            description=getattr(obj, "description", None),
            status=getattr(obj, "status", None),
        )

    class Config:
        frozen = True


class FundsFlowChartSeries(BaseModel):
    """Parallel per-day series for the funds flow chart, oldest day first"""
    currency: str
    balance_transactions_dates: List[str]
    balance_transactions_funds_in: List[float]
    balance_transactions_funds_out: List[float]


class FundsFlowResult(BaseModel):
    balance_transactions: List[BalanceTransaction]
    balance_funds_flow_chart_data: FundsFlowChartSeries


class FundingInstructionsRequest(BaseModel):
    """Request for bank transfer funding instructions"""
    currency: str = Field(..., min_length=3, max_length=3)
