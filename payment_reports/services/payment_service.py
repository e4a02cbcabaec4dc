"""Query and aggregation service over payment snapshots.

Every operation fetches one fresh snapshot from the repository, applies a
filter/sort/reduce pipeline in memory and returns the result. The service
keeps no state besides its two collaborators.
"""
from decimal import Decimal
from functools import reduce
from operator import add
from typing import Iterable, List, Set, Tuple, Union

from payment_reports.core.logging import get_logger
from payment_reports.domain.payment import Payment, PaymentItem, YearMonth
from payment_reports.infrastructure.clock import DateTimeProvider
from payment_reports.infrastructure.repository import PaymentRepository

logger = get_logger(__name__)

ZERO = Decimal(0)


# ----------------
# HELPER FUNCTIONS
# ----------------

def date_sort_key(payment: Payment) -> Tuple[int, int, int]:
    """Ordering projection: (year, month, day-of-year)."""
    return payment.year, payment.month, payment.day_of_year


def in_month(payment: Payment, year_month: YearMonth) -> bool:
    return payment.year == year_month.year and payment.month == year_month.month


def owned_by(payment: Payment, email: str) -> bool:
    return payment.user.email == email


def sum_decimals(values: Iterable[Decimal]) -> Decimal:
    """Exact decimal sum, zero for an empty input."""
    return reduce(add, values, ZERO)


def items_of(payments: Iterable[Payment]) -> List[PaymentItem]:
    return [item for payment in payments for item in payment.payment_items]


def to_decimal(value: Union[int, float, str, Decimal]) -> Decimal:
    """Exact decimal for an amount; floats go through their shortest repr."""
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


class PaymentService:
    """Reporting queries over the payments held by a repository.

    Args:
        payment_repository: Source of the full payment snapshot
        date_time_provider: Source of "now"
    """

    def __init__(self, payment_repository: PaymentRepository, date_time_provider: DateTimeProvider):
        self._payment_repository = payment_repository
        self._date_time_provider = date_time_provider

    @property
    def payment_repository(self) -> PaymentRepository:
        return self._payment_repository

    @property
    def date_time_provider(self) -> DateTimeProvider:
        return self._date_time_provider

    def _snapshot(self) -> List[Payment]:
        payments = self._payment_repository.find_all()
        logger.debug(f"Fetched snapshot of {len(payments)} payments",
                     extra={"snapshot_size": len(payments)})
        return payments

    def _payments_in_month(self, year_month: YearMonth) -> List[Payment]:
        return [payment for payment in self._snapshot() if in_month(payment, year_month)]

    @staticmethod
    def _log_result(operation: str, result_size: int, **extra) -> None:
        logger.debug(f"{operation} returned {result_size} results",
                     extra={"operation": operation, "result_size": result_size, **extra})

    # ----------------
    # ORDERING & FILTERS
    # ----------------

    def find_payments_sorted_by_date_desc(self) -> List[Payment]:
        """All payments, latest first.

        Ordered by (year, month, day-of-year) descending. Payments on the same
        day keep their snapshot order.
        """
        result = sorted(self._snapshot(), key=date_sort_key, reverse=True)
        self._log_result("find_payments_sorted_by_date_desc", len(result))
        return result

    def find_payments_for_current_month(self) -> List[Payment]:
        year_month = self._date_time_provider.year_month_now()
        result = self._payments_in_month(year_month)
        self._log_result("find_payments_for_current_month", len(result), year_month=str(year_month))
        return result

    def find_payments_for_given_month(self, year_month: YearMonth) -> List[Payment]:
        result = self._payments_in_month(year_month)
        self._log_result("find_payments_for_given_month", len(result), year_month=str(year_month))
        return result

    def find_payments_for_given_last_days(self, days: int) -> List[Payment]:
        """Payments from the last ``days`` days of the current calendar year.

        Keeps payments whose year equals the current year and whose day-of-year
        is at least today's day-of-year minus ``days``. Days falling in the
        previous year are not included even when inside the window.
        """
        now = self._date_time_provider.zoned_date_time_now()
        earliest_day = now.timetuple().tm_yday - days
        result = [
            payment for payment in self._snapshot()
            if payment.year == now.year and payment.day_of_year >= earliest_day
        ]
        self._log_result("find_payments_for_given_last_days", len(result))
        return result

    def find_payments_with_one_payment_item(self) -> Set[Payment]:
        result = {payment for payment in self._snapshot() if len(payment.payment_items) == 1}
        self._log_result("find_payments_with_one_payment_item", len(result))
        return result

    def find_products_sold_in_current_month(self) -> Set[str]:
        year_month = self._date_time_provider.year_month_now()
        result = {item.name for item in items_of(self._payments_in_month(year_month))}
        self._log_result("find_products_sold_in_current_month", len(result), year_month=str(year_month))
        return result

    def get_payment_items_for_user_with_email(self, user_email: str) -> List[PaymentItem]:
        """Line items of every payment owned by ``user_email``.

        The match is exact and case-sensitive. Items come back in encounter
        order and are not deduplicated.
        """
        result = items_of(payment for payment in self._snapshot() if owned_by(payment, user_email))
        self._log_result("get_payment_items_for_user_with_email", len(result))
        return result

    def find_payments_with_value_over(self, value: Union[int, float, str, Decimal]) -> Set[Payment]:
        """Payments whose summed item final prices are strictly above ``value``.

        Float thresholds are read by their decimal repr, so ``99.99`` means
        exactly ``Decimal("99.99")``.
        """
        threshold = to_decimal(value)
        result = {payment for payment in self._snapshot() if payment.total_final_price > threshold}
        self._log_result("find_payments_with_value_over", len(result))
        return result

    # ----------------
    # AGGREGATES
    # ----------------

    def sum_total_for_given_month(self, year_month: YearMonth) -> Decimal:
        """Sum of item final prices over the payments of ``year_month``."""
        items = items_of(self._payments_in_month(year_month))
        total = sum_decimals(item.final_price for item in items)
        self._log_result("sum_total_for_given_month", len(items), year_month=str(year_month))
        return total

    def sum_discount_for_given_month(self, year_month: YearMonth) -> Decimal:
        """Regular price sum minus final price sum over the payments of ``year_month``.

        Both sums run over the same filtered set, taken from a single snapshot.
        """
        items = items_of(self._payments_in_month(year_month))
        regular = sum_decimals(item.regular_price for item in items)
        final = sum_decimals(item.final_price for item in items)
        self._log_result("sum_discount_for_given_month", len(items), year_month=str(year_month))
        return regular - final
