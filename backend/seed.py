"""
Wipe the database and fill it with demo data.

Usage (from backend/):
    python seed.py

Every seeded user can log in as user<n>@example.com with password Password<n>!
"""

import logging
import random
from collections import Counter
from datetime import timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlmodel import Session, delete

from app.auth.security import hash_password
from app.database import engine, init_db
from app.logging_config import configure_logging
from app.utils.clock import as_utc, utcnow
from app.models import Invoice, InvoiceStatus, Payment, PaymentMethod, User, UserContactLink

logger = logging.getLogger("seed")

USER_COUNT = 40
PHONE_PREFIXES = ["+34", "+33", "+49", "+39", "+351", "+44", "+31", "+32"]
COUNTRIES = ["ES", "FR", "DE", "IT", "PT", "GB", "NL", "BE", "AT", "SE"]
SERVICES = ["Consulting", "Development", "Design", "Marketing", "Support"]


def seed_password(n: int) -> str:
    return f"Password{n}!"


def invoice_number(n: int, year: Optional[int] = None) -> str:
    return f"INV-{year or utcnow().year}-{n:06d}"


def _random_phone(rng: random.Random) -> Optional[str]:
    if rng.random() < 0.5:
        return None
    return rng.choice(PHONE_PREFIXES) + "".join(str(rng.randint(0, 9)) for _ in range(9))


def _random_country(rng: random.Random) -> Optional[str]:
    if rng.random() < 0.3:
        return None
    return rng.choice(COUNTRIES)


def _random_amount(rng: random.Random, low: int = 100, high: int = 5000) -> Decimal:
    return Decimal(str(round(rng.uniform(low, high), 2))).quantize(Decimal("0.01"))


def wipe(session: Session) -> None:
    # Children before parents
    for model in (Payment, Invoice, UserContactLink, User):
        session.exec(delete(model))
    session.commit()


def create_users(session: Session, rng: random.Random, count: int) -> List[User]:
    users = []
    for n in range(1, count + 1):
        user = User(
            email=f"user{n}@example.com",
            password=hash_password(seed_password(n)),
            name=f"FirstName{n}",
            surnames=f"LastName{n} Surname{n}",
            phone=_random_phone(rng),
            country=_random_country(rng),
            image_url=None if rng.random() < 0.2 else f"https://i.pravatar.cc/200?u={n}",
        )
        session.add(user)
        users.append(user)
    session.commit()
    for user in users:
        session.refresh(user)
    return users


def create_invoices(session: Session, rng: random.Random, users: List[User]) -> Tuple[List[Invoice], Counter]:
    """0-8 invoices per issuer, each to some other user."""
    invoices: List[Invoice] = []
    relations: Counter = Counter()
    now = utcnow()
    counter = 1

    for issuer in users:
        for _ in range(rng.randint(0, 8)):
            debtor = rng.choice([u for u in users if u.id != issuer.id])
            issued = now - timedelta(days=rng.randint(0, 365))
            number = invoice_number(counter)
            counter += 1

            invoice = Invoice(
                invoice_number=number,
                issuer_user_id=issuer.id,
                debtor_user_id=debtor.id,
                subject=f"Service Invoice {number}",
                description=f"Professional services rendered - {rng.choice(SERVICES)}",
                amount=_random_amount(rng),
                status=InvoiceStatus.PENDING,
                issue_date=issued,
                due_date=issued + timedelta(days=rng.randint(15, 90)),
                invoice_pdf_url=f"https://storage.example.com/invoices/{number}.pdf",
            )
            session.add(invoice)
            invoices.append(invoice)
            relations[(issuer.id, debtor.id)] += 1

    session.commit()
    for invoice in invoices:
        session.refresh(invoice)
    return invoices, relations


def create_payments(session: Session, rng: random.Random, invoices: List[Invoice]) -> List[Payment]:
    """Settle 75-85% of invoices; a share of the rest goes overdue."""
    share = 0.75 + rng.random() * 0.10
    paid = rng.sample(invoices, int(len(invoices) * share))
    paid_ids = {invoice.id for invoice in paid}

    payments = []
    for invoice in paid:
        issued = as_utc(invoice.issue_date)
        window = max(1, (as_utc(invoice.due_date) - issued).days)
        payment = Payment(
            invoice_id=invoice.id,
            payment_date=issued + timedelta(days=rng.randint(1, window)),
            payment_method=rng.choice(list(PaymentMethod)),
            payment_reference=f"PAY-{invoice.invoice_number}-{rng.randint(1000, 9999)}",
            receipt_pdf_url=f"https://storage.example.com/receipts/{invoice.invoice_number}.pdf",
            subject=f"Payment for {invoice.invoice_number}" if rng.random() < 0.7 else None,
        )
        invoice.status = InvoiceStatus.PAID
        session.add(payment)
        session.add(invoice)
        payments.append(payment)

    pending = [invoice for invoice in invoices if invoice.id not in paid_ids]
    for invoice in pending[: int(len(pending) * 0.3)]:
        invoice.status = InvoiceStatus.OVERDUE
        invoice.due_date = utcnow() - timedelta(days=rng.randint(1, 30))
        session.add(invoice)

    session.commit()
    return payments


def create_contacts(session: Session, rng: random.Random, users: List[User], relations: Counter) -> int:
    """Link each user to the people they invoice with most, one direction per pair."""
    partners: Dict[int, Counter] = {user.id: Counter() for user in users}
    for (issuer_id, debtor_id), count in relations.items():
        partners[issuer_id][debtor_id] += count
        partners[debtor_id][issuer_id] += count

    pairs = set()
    for user in users:
        for other_id, _ in partners[user.id].most_common(rng.randint(2, 8)):
            pair = tuple(sorted((user.id, other_id)))
            if pair in pairs:
                continue
            pairs.add(pair)
            session.add(UserContactLink(user_id=user.id, contact_id=other_id))

    session.commit()
    return len(pairs)


def seed(session: Session, user_count: int = USER_COUNT, rng: Optional[random.Random] = None) -> Dict[str, int]:
    rng = rng or random.Random()

    wipe(session)
    users = create_users(session, rng, user_count)
    invoices, relations = create_invoices(session, rng, users)
    payments = create_payments(session, rng, invoices)
    contacts = create_contacts(session, rng, users, relations)

    summary = {
        "users": len(users),
        "invoices": len(invoices),
        "payments": len(payments),
        "contacts": contacts,
    }
    logger.info("seed complete: %s", ", ".join(f"{k}={v}" for k, v in summary.items()))
    return summary


def main():
    configure_logging("INFO")
    init_db()
    with Session(engine) as session:
        seed(session)


if __name__ == "__main__":
    main()
