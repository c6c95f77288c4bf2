"""SQL persistence for invoices.

Every operation issues exactly one parameterized statement and commits it.
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import delete, insert, update

from app.models import Invoice


class StoreError(Exception):
    """Raised when an invoice statement fails at the database."""


class InvoiceStore:
    """Run invoice insert/update/delete statements on a SQLAlchemy session."""

    def __init__(self, session) -> None:
        self.session = session
        self.table = Invoice.__table__

    def _execute(self, stmt) -> int:
        """Run ``stmt``, commit, and return the affected row count."""
        try:
            rowcount = self.session.execute(stmt).rowcount
            self.session.commit()
        except Exception as exc:
            # Driver errors such as sqlite3's OverflowError are not wrapped
            # by SQLAlchemy.
            self.session.rollback()
            raise StoreError(str(exc)) from exc
        return rowcount

    def insert(
        self, customer_id: str, amount: int, status: str, invoice_date: date
    ) -> str:
        """Insert an invoice and return its generated id."""
        invoice_id = str(uuid.uuid4())
        self._execute(
            insert(self.table).values(
                id=invoice_id,
                customer_id=customer_id,
                amount=amount,
                status=status,
                date=invoice_date,
            )
        )
        return invoice_id

    def update(
        self, invoice_id: str, customer_id: str, amount: int, status: str
    ) -> int:
        """Update customer, amount and status; ``id`` and ``date`` stay put."""
        return self._execute(
            update(self.table)
            .where(self.table.c.id == invoice_id)
            .values(customer_id=customer_id, amount=amount, status=status)
        )

    def delete(self, invoice_id: str) -> int:
        return self._execute(
            delete(self.table).where(self.table.c.id == invoice_id)
        )
