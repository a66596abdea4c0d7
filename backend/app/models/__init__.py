from app.models.invoice import Invoice, InvoiceStatus
from app.models.payment import Payment, PaymentMethod
from app.models.user import User, UserContactLink

__all__ = [
    "User",
    "UserContactLink",
    "Invoice",
    "InvoiceStatus",
    "Payment",
    "PaymentMethod",
]
