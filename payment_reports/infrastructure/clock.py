"""Time sources for the reporting layer.

Services never read the system clock directly; they receive a
``DateTimeProvider`` so tests can pin "now" to a fixed instant.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timezone, tzinfo
from typing import Optional

from payment_reports.core.config import settings
from payment_reports.domain.payment import YearMonth


class DateTimeProvider(ABC):
    """Capability interface supplying the current month and instant."""

    @abstractmethod
    def year_month_now(self) -> YearMonth:
        """Current calendar month."""

    @abstractmethod
    def zoned_date_time_now(self) -> datetime:
        """Current timezone-aware timestamp."""


class SystemDateTimeProvider(DateTimeProvider):
    """Reads the wall clock in the configured reporting timezone."""

    def __init__(self, tz: Optional[tzinfo] = None):
        """Initialize the provider.

        Args:
            tz: Timezone to read the clock in (defaults to ``settings.timezone``)
        """
        self.tz = tz or settings.tzinfo

    def year_month_now(self) -> YearMonth:
        return YearMonth.from_date(self.zoned_date_time_now())

    def zoned_date_time_now(self) -> datetime:
        return datetime.now(self.tz)


class FixedDateTimeProvider(DateTimeProvider):
    """Clock frozen at a single instant. Used by tests and report backfills."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            raise ValueError("FixedDateTimeProvider requires a timezone-aware datetime")
        self.instant = instant

    @classmethod
    def for_year_month(cls, year_month: YearMonth, day: int = 1,
                       tz: tzinfo = timezone.utc) -> "FixedDateTimeProvider":
        """Clock fixed at midnight of ``day`` within ``year_month``."""
        return cls(datetime(year_month.year, year_month.month, day, tzinfo=tz))

    def year_month_now(self) -> YearMonth:
        return YearMonth.from_date(self.instant)

    def zoned_date_time_now(self) -> datetime:
        return self.instant
