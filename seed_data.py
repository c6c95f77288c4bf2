from datetime import date

from app import create_app, db
from app.models import Customer, Invoice

CUSTOMERS = [
    ("Evil Rabbit", "evil@rabbit.com", "/customers/evil-rabbit.png"),
    ("Delba de Oliveira", "delba@oliveira.com", "/customers/delba-de-oliveira.png"),
    ("Lee Robinson", "lee@robinson.com", "/customers/lee-robinson.png"),
    ("Michael Novotny", "michael@novotny.com", "/customers/michael-novotny.png"),
    ("Amy Burns", "amy@burns.com", "/customers/amy-burns.png"),
    ("Balazs Orban", "balazs@orban.com", "/customers/balazs-orban.png"),
]

# (customer email, amount in cents, status, date)
INVOICES = [
    ("evil@rabbit.com", 15795, "pending", date(2022, 12, 6)),
    ("delba@oliveira.com", 20348, "pending", date(2022, 11, 14)),
    ("amy@burns.com", 3040, "paid", date(2022, 10, 29)),
    ("michael@novotny.com", 44800, "paid", date(2023, 9, 10)),
    ("balazs@orban.com", 34577, "pending", date(2023, 8, 5)),
    ("lee@robinson.com", 54246, "pending", date(2023, 7, 16)),
]


def seed_initial_data() -> None:
    """Seed sample customers and invoices into an empty database."""
    app = create_app([])
    with app.app_context():
        db.create_all()
        if Customer.query.count():
            print("Customers already present; nothing seeded.")
            return

        customers = {}
        for name, email, image_url in CUSTOMERS:
            customer = Customer(name=name, email=email, image_url=image_url)
            db.session.add(customer)
            customers[email] = customer
        db.session.flush()

        for email, amount, status, invoice_date in INVOICES:
            db.session.add(
                Invoice(
                    customer_id=customers[email].id,
                    amount=amount,
                    status=status,
                    date=invoice_date,
                )
            )
        db.session.commit()
        print(f"Seeded {len(CUSTOMERS)} customers and {len(INVOICES)} invoices.")


if __name__ == "__main__":
    seed_initial_data()
