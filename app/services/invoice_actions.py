"""Create, update and delete handlers for invoices.

Each handler validates its input, runs a single store statement, then
revalidates the invoice list.  Handlers never raise for bad input or
database failures; they return one of two outcomes:

* :class:`Return` carries a :class:`State` back to the caller.
* :class:`Navigate` tells the caller to leave for ``destination``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Mapping, Optional, Union

from app.forms import ValidationFailure, to_minor_units, validate_invoice
from app.services.invoice_store import InvoiceStore, StoreError


@dataclass(frozen=True)
class State:
    """Result reported to the caller on every non-navigating path."""

    message: Optional[str] = None
    errors: Optional[Dict[str, List[str]]] = None

    def to_dict(self) -> dict:
        data: dict = {}
        if self.message is not None:
            data["message"] = self.message
        if self.errors is not None:
            data["errors"] = {k: list(v) for k, v in self.errors.items()}
        return data


@dataclass(frozen=True)
class Return:
    state: State
    ok: bool = True


@dataclass(frozen=True)
class Navigate:
    destination: str


Outcome = Union[Return, Navigate]


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class InvoiceActions:
    """Invoice mutation handlers bound to a store and a cache invalidator."""

    def __init__(
        self,
        store: InvoiceStore,
        revalidate: Callable[[str], None],
        list_path: str,
        logger: Optional[logging.Logger] = None,
        today: Callable[[], date] = _utc_today,
    ) -> None:
        self.store = store
        self.revalidate = revalidate
        self.list_path = list_path
        self.logger = logger or logging.getLogger(__name__)
        self.today = today

    def _finish(self) -> Navigate:
        self.revalidate(self.list_path)
        return Navigate(self.list_path)

    def create_invoice(
        self, prev_state: Optional[State], formdata: Mapping
    ) -> Outcome:
        """Insert a new invoice dated today and navigate to the list."""
        result = validate_invoice(formdata, action="Create")
        if isinstance(result, ValidationFailure):
            return Return(
                State(message=result.message, errors=result.errors), ok=False
            )

        fields = result.data
        amount_in_cents = to_minor_units(fields.amount)
        invoice_date = self.today()

        try:
            invoice_id = self.store.insert(
                fields.customer_id, amount_in_cents, fields.status, invoice_date
            )
        except StoreError:
            self.logger.exception("Database Error: failed to create invoice")
            return Return(
                State(message="Database Error: Failed to Create Invoice."),
                ok=False,
            )

        self.logger.info("Created invoice %s", invoice_id)
        return self._finish()

    def update_invoice(
        self, invoice_id: str, prev_state: Optional[State], formdata: Mapping
    ) -> Outcome:
        """Replace customer, amount and status of ``invoice_id``."""
        result = validate_invoice(formdata, action="Update")
        if isinstance(result, ValidationFailure):
            return Return(
                State(message=result.message, errors=result.errors), ok=False
            )

        fields = result.data
        amount_in_cents = to_minor_units(fields.amount)

        try:
            self.store.update(
                invoice_id, fields.customer_id, amount_in_cents, fields.status
            )
        except StoreError:
            self.logger.exception(
                "Database Error: failed to update invoice %s", invoice_id
            )
            return Return(
                State(message="Database Error: Failed to Update Invoice."),
                ok=False,
            )

        self.logger.info("Updated invoice %s", invoice_id)
        return self._finish()

    def delete_invoice(
        self, invoice_id: str, prev_state: Optional[State] = None
    ) -> Return:
        """Delete ``invoice_id``.

        Deleting an id that matches no row still reports success.
        """
        try:
            deleted = self.store.delete(invoice_id)
        except StoreError:
            self.logger.exception(
                "Database Error: failed to delete invoice %s", invoice_id
            )
            return Return(
                State(message="Database Error: Failed to Delete Invoice."),
                ok=False,
            )

        self.logger.info("Deleted invoice %s (%s row(s))", invoice_id, deleted)
        self.revalidate(self.list_path)
        return Return(State(message="Invoice deleted successfully."))
