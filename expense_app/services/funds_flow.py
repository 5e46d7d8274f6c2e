"""Aggregation of balance transactions into the funds flow chart"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List

from expense_app.schemas.balance import (
    BalanceTransaction, FundsFlowChartSeries, FundsFlowResult
)

WINDOW_SIZE = 10
DATE_LABEL_FORMAT = "%b %d"

# Provisional holds, settled funds show up in the capture transaction
EXCLUDED_TYPES = frozenset({
    "issuing_authorization_release",
    "issuing_authorization_hold",
})

# Stripe currencies without a minor unit
ZERO_DECIMAL_CURRENCIES = frozenset({
    "bif", "clp", "djf", "gnf", "jpy", "kmf", "krw", "mga",
    "pyg", "rwf", "ugx", "vnd", "vuv", "xaf", "xof", "xpf",
})


@dataclass
class DateBucket:
    day: date
    label: str
    funds_in: float = 0.0
    funds_out: float = 0.0


def minor_unit_divisor(currency: str) -> int:
    """Number of minor units in one major unit of the currency"""
    return 1 if currency.lower() in ZERO_DECIMAL_CURRENCIES else 100


def transaction_date(transaction: BalanceTransaction) -> date:
    """Calendar day (UTC) on which the transaction was created"""
    return datetime.fromtimestamp(transaction.created, tz=timezone.utc).date()


def aggregate(
    transactions: Iterable[BalanceTransaction],
    window_end_date: date,
    window_size_days: int = WINDOW_SIZE,
    date_label_format: str = DATE_LABEL_FORMAT,
    currency: str = "usd",
    minor_units: int = 100,
) -> FundsFlowResult:
    """
    Buckets balance transactions by day into funds in and funds out.

    One bucket is created for every day in
    [window_end_date - (window_size_days - 1), window_end_date], so days
    without transactions are reported as zeros. Buckets are keyed by the
    full date; the label format is only used for display.

    Authorization holds and releases are dropped entirely. Every other
    transaction is returned, including those outside the window, which
    simply do not contribute to any bucket. A strictly positive amount is
    funds in, anything else (zero included) is funds out.

    Returns:
        FundsFlowResult with the filtered transactions in input order and the
        chart series ordered oldest day first.
    """
    if window_size_days < 1:
        raise ValueError("window_size_days must be at least 1")

    # Newest first
    days = [window_end_date - timedelta(days=i) for i in range(window_size_days)]
    buckets: Dict[date, DateBucket] = {
        day: DateBucket(day=day, label=day.strftime(date_label_format))
        for day in days
    }

    transaction_list: List[BalanceTransaction] = []

    for transaction in transactions:
        if transaction.type in EXCLUDED_TYPES:
            continue

        bucket = buckets.get(transaction_date(transaction))
        if bucket is not None:
            amount = abs(transaction.amount) / minor_units
            if transaction.amount > 0:
                bucket.funds_in += amount
            else:
                bucket.funds_out += amount

        transaction_list.append(transaction)

    ordered = [buckets[day] for day in reversed(days)]

    chart = FundsFlowChartSeries(
        currency=currency,
        balance_transactions_dates=[b.label for b in ordered],
        balance_transactions_funds_in=[round(b.funds_in, 2) for b in ordered],
        balance_transactions_funds_out=[round(b.funds_out, 2) for b in ordered],
    )

    return FundsFlowResult(
        balance_transactions=transaction_list,
        balance_funds_flow_chart_data=chart,
    )
