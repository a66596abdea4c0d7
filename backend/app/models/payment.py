from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String
from sqlmodel import Column, Field, Relationship, SQLModel

from app.utils.clock import utcnow

if TYPE_CHECKING:
    from app.models.invoice import Invoice


class PaymentMethod(str, Enum):
    PAYPAL = "PAYPAL"
    VISA = "VISA"
    MASTERCARD = "MASTERCARD"
    OTHER = "OTHER"


class Payment(SQLModel, table=True):
    __tablename__ = "payments"

    id: Optional[int] = Field(default=None, primary_key=True)
    invoice_id: int = Field(foreign_key="invoices.id", unique=True, index=True)  # one payment settles one invoice
    payment_date: datetime
    payment_method: PaymentMethod = Field(sa_column=Column(String, nullable=False))
    payment_reference: Optional[str] = None
    receipt_pdf_url: str
    subject: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow, sa_column_kwargs={"onupdate": utcnow})

    # Relationships
    invoice: "Invoice" = Relationship(back_populates="payments")
