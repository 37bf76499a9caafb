"""
SQLAlchemy Models for the Back Office
"""
from datetime import datetime, date
from decimal import Decimal
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Date, Numeric,
    ForeignKey, Index, CheckConstraint
)
from sqlalchemy.orm import relationship
import enum

from backoffice.core.database import Base


# ==================== ENUMS ====================

class PartyType(enum.Enum):
    CUSTOMER = "customer"
    SUPPLIER = "supplier"


class InvoiceType(enum.Enum):
    SALE = "sale"
    PURCHASE = "purchase"


class InvoiceStatus(enum.Enum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"


class PaymentType(enum.Enum):
    IN = "in"
    OUT = "out"


# ==================== INVENTORY MODELS ====================

class Item(Base):
    """Stocked item or product"""
    __tablename__ = 'items'

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, unique=True)
    hsn_sac = Column(String(50), nullable=True)
    unit = Column(String(20), nullable=False)
    purchase_rate = Column(Numeric(15, 2), default=Decimal("0.00"))
    sale_rate = Column(Numeric(15, 2), default=Decimal("0.00"))
    tax_rate = Column(Numeric(7, 2), default=Decimal("18.00"))
    current_stock = Column(Numeric(15, 2), default=Decimal("0.00"))
    low_stock_alert = Column(Numeric(15, 2), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    invoice_items = relationship("InvoiceItem", back_populates="item")

    __table_args__ = (
        CheckConstraint('current_stock >= 0', name='ck_items_stock_non_negative'),
    )

    @property
    def is_low_stock(self) -> bool:
        if self.low_stock_alert is None:
            return False
        return self.current_stock <= self.low_stock_alert


# ==================== PARTY MODELS ====================

class Party(Base):
    """Customer or supplier with a running ledger balance"""
    __tablename__ = 'parties'

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False, default=PartyType.CUSTOMER.value)  # PartyType value
    contact = Column(String(100), nullable=True)
    address = Column(Text, nullable=True)
    gstin = Column(String(20), nullable=True)
    opening_balance = Column(Numeric(15, 2), default=Decimal("0.00"))
    current_balance = Column(Numeric(15, 2), default=Decimal("0.00"))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    invoices = relationship("Invoice", back_populates="party")
    payments = relationship("Payment", back_populates="party")

    __table_args__ = (
        Index('ix_parties_name', 'name'),
    )


# ==================== INVOICE MODELS ====================

class Invoice(Base):
    """Sale or purchase invoice"""
    __tablename__ = 'invoices'

    id = Column(Integer, primary_key=True)
    invoice_number = Column(String(50), nullable=False, unique=True)
    type = Column(String(20), nullable=False)
    date = Column(Date, nullable=False, default=date.today)
    site_name = Column(String(255), nullable=True)
    particular = Column(Text, nullable=True)
    sub_total = Column(Numeric(15, 2), default=Decimal("0.00"))
    cgst_rate = Column(Numeric(7, 2), default=Decimal("9.00"))
    cgst_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    sgst_rate = Column(Numeric(7, 2), default=Decimal("9.00"))
    sgst_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    igst_rate = Column(Numeric(7, 2), default=Decimal("0.00"))
    igst_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    tax_total = Column(Numeric(15, 2), default=Decimal("0.00"))
    discount = Column(Numeric(15, 2), default=Decimal("0.00"))
    round_off = Column(Numeric(15, 2), default=Decimal("0.00"))
    grand_total = Column(Numeric(15, 2), default=Decimal("0.00"))
    amount_in_words = Column(String(500), nullable=True)
    paid_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    balance = Column(Numeric(15, 2), default=Decimal("0.00"))
    status = Column(String(20), default=InvoiceStatus.UNPAID.value)
    party_id = Column(Integer, ForeignKey('parties.id'), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    party = relationship("Party", back_populates="invoices")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.id"
    )
    payments = relationship("Payment", back_populates="invoice")

    __table_args__ = (
        Index('ix_invoices_party_id', 'party_id'),
    )


class InvoiceItem(Base):
    """Invoice line; item_id is null for pure service lines"""
    __tablename__ = 'invoice_items'

    id = Column(Integer, primary_key=True)
    description = Column(String(255), nullable=True)
    quantity = Column(Numeric(15, 2), nullable=False)
    rate = Column(Numeric(15, 2), nullable=False)
    tax_rate = Column(Numeric(7, 2), default=Decimal("0.00"))
    amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    tax_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    total = Column(Numeric(15, 2), default=Decimal("0.00"))
    item_id = Column(Integer, ForeignKey('items.id'), nullable=True)
    invoice_id = Column(Integer, ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    item = relationship("Item", back_populates="invoice_items")
    invoice = relationship("Invoice", back_populates="items")

    __table_args__ = (
        Index('ix_invoice_items_item_id', 'item_id'),
    )


# ==================== PAYMENT MODELS ====================

class Payment(Base):
    """Money received from (in) or paid to (out) a party"""
    __tablename__ = 'payments'

    id = Column(Integer, primary_key=True)
    type = Column(String(10), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    mode = Column(String(50), default="cash")
    note = Column(Text, default="")
    party_id = Column(Integer, ForeignKey('parties.id'), nullable=False)
    invoice_id = Column(Integer, ForeignKey('invoices.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    party = relationship("Party", back_populates="payments")
    invoice = relationship("Invoice", back_populates="payments")

    __table_args__ = (
        CheckConstraint('amount > 0', name='ck_payments_amount_positive'),
        Index('ix_payments_party_id', 'party_id'),
        Index('ix_payments_invoice_id', 'invoice_id'),
    )


# ==================== NUMBERING ====================

class DocumentSequence(Base):
    """Counter behind human-readable document numbers"""
    __tablename__ = 'document_sequences'

    name = Column(String(20), primary_key=True)
    current_number = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
