"""Unit tests for payment repositories."""
from datetime import date
from decimal import Decimal

import pytest

from conftest import make_item, make_payment
from payment_reports.infrastructure.repository import CsvPaymentRepository, InMemoryPaymentRepository

CSV_TEXT = """payment_id,payment_date,user_email,user_name,item_name,regular_price,final_price
A-1,2024-05-03,anna@example.com,Anna Nowak,Book,60.00,50.00
A-2,2024-05-17,piotr@example.com,,Headphones,120.00,100.00
A-2,2024-05-17,piotr@example.com,,Cable,50.00,50.00
A-3,2024-04-28,anna@example.com,Anna Nowak,Sticker,0.10,0.10
"""


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "payments.csv"
    path.write_text(CSV_TEXT, encoding="utf-8")
    return path


class TestInMemoryPaymentRepository:
    """Test the in-memory repository."""

    def test_find_all_returns_copy(self):
        """Test callers cannot change the stored payments through the result."""
        payment = make_payment(date(2024, 5, 1), items=[make_item("Pen", "2.00")])
        repository = InMemoryPaymentRepository([payment])

        result = repository.find_all()
        result.clear()

        assert repository.find_all() == [payment]

    def test_empty_by_default(self):
        """Test repository without payments."""
        assert InMemoryPaymentRepository().find_all() == []


class TestCsvPaymentRepository:
    """Test loading payments from a CSV export."""

    def test_groups_rows_into_payments(self, csv_file):
        """Test rows sharing a payment id form one payment, in file order."""
        payments = CsvPaymentRepository(csv_file).find_all()

        assert [p.id for p in payments] == ["A-1", "A-2", "A-3"]
        assert [item.name for item in payments[1].payment_items] == ["Headphones", "Cable"]

    def test_parses_dates_users_and_decimals(self, csv_file):
        """Test field conversion."""
        first, second, third = CsvPaymentRepository(csv_file).find_all()

        assert first.payment_date == date(2024, 5, 3)
        assert first.user.email == "anna@example.com"
        assert first.user.name == "Anna Nowak"
        assert second.user.name is None
        assert third.payment_items[0].final_price == Decimal("0.10")
        assert second.total_final_price == Decimal("150.00")

    def test_file_read_once(self, csv_file):
        """Test later calls are served from memory."""
        repository = CsvPaymentRepository(csv_file)
        first = repository.find_all()
        csv_file.unlink()

        assert repository.find_all() == first

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            CsvPaymentRepository(tmp_path / "absent.csv").find_all()

    def test_missing_columns(self, tmp_path):
        """Test a file without the required columns raises ValueError."""
        path = tmp_path / "bad.csv"
        path.write_text("payment_id,payment_date\nA-1,2024-05-03\n", encoding="utf-8")

        with pytest.raises(ValueError) as exc_info:
            CsvPaymentRepository(path).find_all()

        assert "user_email" in str(exc_info.value)

    def test_path_defaults_to_settings(self, monkeypatch):
        """Test the default path comes from settings."""
        from payment_reports.core.config import settings
        monkeypatch.setattr(settings, "payments_csv_path", "exports/may.csv")

        assert str(CsvPaymentRepository().path).replace("\\", "/") == "exports/may.csv"
