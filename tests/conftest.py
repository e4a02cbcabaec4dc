"""Pytest configuration and shared fixtures."""
import os
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

os.environ.setdefault("ENVIRONMENT", "test")

from payment_reports.domain.payment import Payment, PaymentItem, User, YearMonth
from payment_reports.infrastructure.clock import FixedDateTimeProvider
from payment_reports.infrastructure.repository import InMemoryPaymentRepository
from payment_reports.services.payment_service import PaymentService


def make_item(name, regular, final=None):
    """Line item with prices given as strings."""
    return PaymentItem(
        name=name,
        regular_price=Decimal(regular),
        final_price=Decimal(final if final is not None else regular),
    )


def make_payment(payment_date, email="anna@example.com", items=(), payment_id=None):
    kwargs = {"id": payment_id} if payment_id else {}
    return Payment(payment_date=payment_date, user=User(email=email), payment_items=tuple(items), **kwargs)


@pytest.fixture
def may_2024():
    return YearMonth(year=2024, month=5)


@pytest.fixture
def fixed_clock():
    """Clock fixed to 2024-05-20 12:00 UTC."""
    return FixedDateTimeProvider(datetime(2024, 5, 20, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def may_payments():
    """Three May 2024 payments with final-price sums 50.00, 150.00 and 99.99."""
    return [
        make_payment(date(2024, 5, 3), "anna@example.com",
                     [make_item("Book", "60.00", "50.00")], payment_id="p1"),
        make_payment(date(2024, 5, 17), "piotr@example.com",
                     [make_item("Headphones", "120.00", "100.00"),
                      make_item("Cable", "50.00", "50.00")], payment_id="p2"),
        make_payment(date(2024, 5, 10), "anna@example.com",
                     [make_item("Mouse", "99.99")], payment_id="p3"),
    ]


@pytest.fixture
def mixed_payments(may_payments):
    """May 2024 payments plus payments from other months and years."""
    return may_payments + [
        make_payment(date(2024, 4, 28), "piotr@example.com",
                     [make_item("Book", "60.00", "45.00")], payment_id="p4"),
        make_payment(date(2023, 5, 12), "anna@example.com",
                     [make_item("Lamp", "80.00", "70.00")], payment_id="p5"),
        make_payment(date(2024, 6, 1), "ewa@example.com",
                     [make_item("Desk", "500.00", "450.00"),
                      make_item("Chair", "300.00", "250.00"),
                      make_item("Lamp", "80.00")], payment_id="p6"),
    ]


@pytest.fixture
def may_service(may_payments, fixed_clock):
    return PaymentService(InMemoryPaymentRepository(may_payments), fixed_clock)


@pytest.fixture
def mixed_service(mixed_payments, fixed_clock):
    return PaymentService(InMemoryPaymentRepository(mixed_payments), fixed_clock)


@pytest.fixture
def empty_service(fixed_clock):
    return PaymentService(InMemoryPaymentRepository(), fixed_clock)
