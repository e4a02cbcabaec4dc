"""Payment snapshot sources.

Repositories hand back the full, unfiltered collection of payments on every
call. All filtering happens client-side in the reporting services.
"""
from abc import ABC, abstractmethod
from decimal import Decimal
from pathlib import Path
from typing import Iterable, List, Optional, Union

import pandas as pd

from payment_reports.core.config import settings
from payment_reports.core.logging import get_logger
from payment_reports.domain.payment import Payment, PaymentItem, User

logger = get_logger(__name__)

CSV_COLUMNS = ["payment_id", "payment_date", "user_email", "item_name", "regular_price", "final_price"]


class PaymentRepository(ABC):
    """Base class for payment snapshot sources."""

    @abstractmethod
    def find_all(self) -> List[Payment]:
        """Return every stored payment, in no guaranteed order.

        Returns:
            List[Payment]: A fresh list; callers may not rely on its ordering
        """


class InMemoryPaymentRepository(PaymentRepository):
    """In-memory repository, primarily for tests and ad-hoc reports."""

    def __init__(self, payments: Optional[Iterable[Payment]] = None):
        self._payments: List[Payment] = list(payments or [])

    def find_all(self) -> List[Payment]:
        return list(self._payments)


class CsvPaymentRepository(PaymentRepository):
    """Repository backed by a CSV export of payment line items.

    Each row is one line item; rows sharing a ``payment_id`` form one payment.
    Expected columns: payment_id, payment_date, user_email, item_name,
    regular_price, final_price. An optional ``user_name`` column is carried
    onto the user.

    The file is read once per repository instance and served from memory
    afterwards.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """Initialize the repository.

        Args:
            path: CSV file location (defaults to ``settings.payments_csv_path``)
        """
        self.path = Path(path or settings.payments_csv_path)
        self._payments: Optional[List[Payment]] = None

    def find_all(self) -> List[Payment]:
        if self._payments is None:
            self._payments = self._load()
        return list(self._payments)

    def _load(self) -> List[Payment]:
        """Read the CSV and group its rows into payments, keeping file order.

        Raises:
            FileNotFoundError: If the CSV file does not exist
            ValueError: If required columns are missing
        """
        if not self.path.exists():
            raise FileNotFoundError(f"Payments file not found: {self.path}")

        # Prices stay strings so they can be parsed as exact decimals
        df = pd.read_csv(self.path, dtype=str, keep_default_na=False)
        missing = [col for col in CSV_COLUMNS if col not in df.columns]
        if missing:
            raise ValueError(f"Payments file {self.path} is missing columns: {', '.join(missing)}")

        has_user_name = "user_name" in df.columns
        payments = []
        for payment_id, rows in df.groupby("payment_id", sort=False):
            first = rows.iloc[0]
            items = tuple(
                PaymentItem(
                    name=row["item_name"],
                    regular_price=Decimal(row["regular_price"].strip()),
                    final_price=Decimal(row["final_price"].strip()),
                )
                for _, row in rows.iterrows()
            )
            user = User(
                email=first["user_email"].strip(),
                name=(first["user_name"] or None) if has_user_name else None,
            )
            payments.append(Payment(
                id=str(payment_id),
                payment_date=pd.Timestamp(first["payment_date"]).date(),
                user=user,
                payment_items=items,
            ))

        logger.info(
            f"Loaded {len(payments)} payments ({len(df)} items) from {self.path}",
            extra={"source": str(self.path), "snapshot_size": len(payments)}
        )
        return payments
