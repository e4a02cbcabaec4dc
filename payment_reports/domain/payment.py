"""Domain models for payments, their line items and owning users."""
import re
import uuid
from datetime import date
from decimal import Decimal
from typing import Annotated, Optional, Tuple

import email_validator
from pydantic import AfterValidator, BaseModel, ConfigDict, Field

YEAR_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})$")


class YearMonth(BaseModel):
    """A calendar month within a specific year, with no day component."""
    model_config = ConfigDict(frozen=True)

    year: int
    month: int = Field(ge=1, le=12)

    @classmethod
    def of(cls, year: int, month: int) -> "YearMonth":
        return cls(year=year, month=month)

    @classmethod
    def from_date(cls, value: date) -> "YearMonth":
        """Year-month of a date or datetime."""
        return cls(year=value.year, month=value.month)

    @classmethod
    def parse(cls, text: str) -> "YearMonth":
        """Parse a ``YYYY-MM`` string.

        Raises:
            ValueError: If the text is not in ``YYYY-MM`` form or the month is out of range
        """
        match = YEAR_MONTH_PATTERN.match(text.strip())
        if not match:
            raise ValueError(f"Invalid year-month '{text}', expected YYYY-MM")
        month = int(match.group(2))
        if not 1 <= month <= 12:
            raise ValueError(f"Invalid month {month} in '{text}'")
        return cls(year=int(match.group(1)), month=month)

    def previous(self) -> "YearMonth":
        if self.month == 1:
            return YearMonth(year=self.year - 1, month=12)
        return YearMonth(year=self.year, month=self.month - 1)

    def next(self) -> "YearMonth":
        if self.month == 12:
            return YearMonth(year=self.year + 1, month=1)
        return YearMonth(year=self.year, month=self.month + 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def check_email(value: str) -> str:
    """Validate an address and return it exactly as given.

    Raises:
        ValueError: If the address is not a valid email
    """
    email_validator.validate_email(value, check_deliverability=False)
    return value


Email = Annotated[str, AfterValidator(check_email)]


class User(BaseModel):
    """Payment owner. The email address is the lookup key.

    Attributes:
        email: User's email address
        name: Optional display name
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "email": "jan.kowalski@example.com",
                "name": "Jan Kowalski"
            }
        }
    )

    email: Email
    name: Optional[str] = None


class PaymentItem(BaseModel):
    """Single line item of a payment.

    ``final_price`` is the post-discount amount. It is expected to be at most
    ``regular_price`` but this is not enforced; a higher final price yields a
    negative discount.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "name": "Headphones",
                "regular_price": "199.99",
                "final_price": "149.99"
            }
        }
    )

    name: str
    regular_price: Decimal
    final_price: Decimal

    @property
    def discount(self) -> Decimal:
        return self.regular_price - self.final_price


class Payment(BaseModel):
    """Payment made by one user on a given date, composed of line items.

    Payments are immutable and hashable so reports can collect them into
    sets. The generated ``id`` keeps payments with otherwise identical
    content distinct.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    payment_date: date
    user: User
    payment_items: Tuple[PaymentItem, ...] = ()

    @property
    def year(self) -> int:
        return self.payment_date.year

    @property
    def month(self) -> int:
        return self.payment_date.month

    @property
    def day_of_year(self) -> int:
        return self.payment_date.timetuple().tm_yday

    @property
    def year_month(self) -> YearMonth:
        return YearMonth.from_date(self.payment_date)

    @property
    def total_final_price(self) -> Decimal:
        return sum((item.final_price for item in self.payment_items), Decimal(0))

    @property
    def total_regular_price(self) -> Decimal:
        return sum((item.regular_price for item in self.payment_items), Decimal(0))
