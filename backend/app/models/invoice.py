from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String
from sqlmodel import Column, Field, Relationship, SQLModel

from app.utils.clock import utcnow

if TYPE_CHECKING:
    from app.models.payment import Payment
    from app.models.user import User


class InvoiceStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELED = "CANCELED"


class Invoice(SQLModel, table=True):
    __tablename__ = "invoices"

    id: Optional[int] = Field(default=None, primary_key=True)
    invoice_number: str = Field(unique=True, index=True)  # INV-<year>-<000001>
    issuer_user_id: int = Field(foreign_key="users.id", index=True)
    debtor_user_id: int = Field(foreign_key="users.id", index=True)
    subject: str
    description: str
    amount: Decimal = Field(max_digits=10, decimal_places=2)
    status: InvoiceStatus = Field(
        default=InvoiceStatus.PENDING,
        sa_column=Column(String, nullable=False, default=InvoiceStatus.PENDING.value),
    )
    issue_date: datetime
    due_date: Optional[datetime] = None
    invoice_pdf_url: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow, sa_column_kwargs={"onupdate": utcnow})

    # Relationships
    issuer: "User" = Relationship(
        back_populates="issued_invoices", sa_relationship_kwargs={"foreign_keys": "Invoice.issuer_user_id"}
    )
    debtor: "User" = Relationship(
        back_populates="debts", sa_relationship_kwargs={"foreign_keys": "Invoice.debtor_user_id"}
    )
    payments: List["Payment"] = Relationship(back_populates="invoice")
