from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

from app.utils.clock import utcnow

if TYPE_CHECKING:
    from app.models.invoice import Invoice


class UserContactLink(SQLModel, table=True):
    """Directed contact edge: ``user_id`` keeps ``contact_id`` in its contact list."""

    __tablename__ = "user_contacts"

    user_id: int = Field(foreign_key="users.id", primary_key=True)
    contact_id: int = Field(foreign_key="users.id", primary_key=True, index=True)


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True)
    password: str = Field(max_length=255)  # password hash, never serialized
    name: str
    surnames: str
    phone: Optional[str] = Field(default=None, max_length=20)
    country: Optional[str] = Field(default=None)
    image_url: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow, sa_column_kwargs={"onupdate": utcnow})

    # Relationships
    contacts: List["User"] = Relationship(
        back_populates="contact_of",
        link_model=UserContactLink,
        sa_relationship_kwargs={
            "primaryjoin": "User.id == UserContactLink.user_id",
            "secondaryjoin": "User.id == UserContactLink.contact_id",
        },
    )
    contact_of: List["User"] = Relationship(
        back_populates="contacts",
        link_model=UserContactLink,
        sa_relationship_kwargs={
            "primaryjoin": "User.id == UserContactLink.contact_id",
            "secondaryjoin": "User.id == UserContactLink.user_id",
        },
    )
    issued_invoices: List["Invoice"] = Relationship(
        back_populates="issuer", sa_relationship_kwargs={"foreign_keys": "Invoice.issuer_user_id"}
    )
    debts: List["Invoice"] = Relationship(
        back_populates="debtor", sa_relationship_kwargs={"foreign_keys": "Invoice.debtor_user_id"}
    )
