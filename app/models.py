import uuid
from datetime import date
from decimal import Decimal

from app import db

INVOICE_STATUSES = ("paid", "pending")


def _new_id() -> str:
    return str(uuid.uuid4())


class Customer(db.Model):
    __tablename__ = "customers"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    image_url = db.Column(db.String(255))

    invoices = db.relationship("Invoice", backref="customer", lazy=True)


class Invoice(db.Model):
    __tablename__ = "invoices"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    customer_id = db.Column(
        db.String(36), db.ForeignKey("customers.id"), nullable=False, index=True
    )
    # Stored in minor units (cents).
    amount = db.Column(db.BigInteger, nullable=False)
    status = db.Column(db.String(20), nullable=False)
    date = db.Column(db.Date, nullable=False, default=date.today, index=True)

    __table_args__ = (
        db.CheckConstraint(
            "status IN ('paid', 'pending')", name="ck_invoices_status"
        ),
    )

    @property
    def amount_major(self) -> Decimal:
        """Return the amount in major currency units."""
        return Decimal(self.amount or 0) / 100
