"""Monthly payment reports and tabular exports.

Builds the month summary handed to report generators and flattens payment
snapshots into pandas DataFrames for export and ad-hoc analysis. Money
columns hold ``Decimal`` objects so no binary floating point enters a sum.
"""
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List

import pandas as pd
from pydantic import BaseModel, Field

from payment_reports.core.config import settings
from payment_reports.core.logging import LogTimer, get_logger
from payment_reports.domain.payment import Payment, YearMonth
from payment_reports.services.payment_service import PaymentService, items_of, sum_decimals

logger = get_logger(__name__)

ITEM_COLUMNS = ["payment_id", "payment_date", "year_month", "user_email",
                "item_name", "regular_price", "final_price", "discount"]
SUMMARY_COLUMNS = ["year_month", "payments", "items", "total", "discount"]


class MonthlyReport(BaseModel):
    """Aggregated figures for one calendar month."""
    year_month: str
    currency: str
    payment_count: int
    item_count: int
    total: Decimal
    discount: Decimal
    products: List[str] = Field(default_factory=list)
    generated_at: datetime


def build_monthly_report(service: PaymentService, year_month: YearMonth) -> MonthlyReport:
    """Collect the month's payment count, totals and product names.

    All figures come from one snapshot; ``generated_at`` is read from the
    service's clock.

    Args:
        service: Service to query
        year_month: Month to report on

    Returns:
        MonthlyReport with products sorted alphabetically
    """
    report_logger = get_logger(__name__, {"year_month": str(year_month)})
    with LogTimer(report_logger, "monthly_report"):
        payments = service.find_payments_for_given_month(year_month)
        items = items_of(payments)
        total = sum_decimals(item.final_price for item in items)
        report = MonthlyReport(
            year_month=str(year_month),
            currency=settings.currency,
            payment_count=len(payments),
            item_count=len(items),
            total=total,
            discount=sum_decimals(item.regular_price for item in items) - total,
            products=sorted({item.name for item in items}),
            generated_at=service.date_time_provider.zoned_date_time_now(),
        )
    return report


def payments_to_frame(payments: Iterable[Payment]) -> pd.DataFrame:
    """Flatten payments to one row per line item, in encounter order."""
    rows = [
        {
            "payment_id": payment.id,
            "payment_date": payment.payment_date,
            "year_month": str(payment.year_month),
            "user_email": payment.user.email,
            "item_name": item.name,
            "regular_price": item.regular_price,
            "final_price": item.final_price,
            "discount": item.discount,
        }
        for payment in payments
        for item in payment.payment_items
    ]
    return pd.DataFrame(rows, columns=ITEM_COLUMNS)


def summarize_by_month(payments: Iterable[Payment]) -> pd.DataFrame:
    """Per-month payment counts, totals and discounts, latest month first.

    Args:
        payments: Any payment snapshot

    Returns:
        DataFrame with columns year_month, payments, items, total, discount
    """
    payments = list(payments)
    df = payments_to_frame(payments)
    if df.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    payment_counts = pd.Series([str(p.year_month) for p in payments]).value_counts()
    summary = (
        df.groupby("year_month")
        .agg(
            items=("item_name", "size"),
            total=("final_price", sum_decimals),
            discount=("discount", sum_decimals),
        )
        .reset_index()
    )
    summary["payments"] = summary["year_month"].map(payment_counts).astype(int)
    summary = summary.sort_values("year_month", ascending=False).reset_index(drop=True)
    logger.debug(f"Summarized {len(payments)} payments into {len(summary)} months",
                 extra={"snapshot_size": len(payments), "result_size": len(summary)})
    return summary[SUMMARY_COLUMNS]
