"""
Pydantic Schemas for API Validation
"""
from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import List, Optional
from datetime import datetime, date as DateType
from decimal import Decimal
from enum import Enum


# ==================== ENUMS ====================

class PartyTypeEnum(str, Enum):
    CUSTOMER = "customer"
    SUPPLIER = "supplier"


class InvoiceTypeEnum(str, Enum):
    SALE = "sale"
    PURCHASE = "purchase"


class PaymentTypeEnum(str, Enum):
    IN = "in"
    OUT = "out"


class RequestModel(BaseModel):
    """Base for request bodies: unknown fields are rejected"""
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


# ==================== COMMON ====================

class MessageResponse(BaseModel):
    message: str


# ==================== ITEM SCHEMAS ====================

class ItemCreate(RequestModel):
    name: str = Field(..., min_length=1, max_length=255)
    hsn_sac: Optional[str] = Field(None, max_length=50)
    unit: str = Field(..., min_length=1, max_length=20)
    purchase_rate: Decimal = Field(default=Decimal("0"), ge=0, max_digits=15, decimal_places=2)
    sale_rate: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2)
    tax_rate: Decimal = Field(default=Decimal("18"), ge=0, max_digits=7, decimal_places=2)
    current_stock: Decimal = Field(default=Decimal("0"), ge=0, max_digits=15, decimal_places=2)
    low_stock_alert: Optional[Decimal] = Field(None, ge=0, max_digits=15, decimal_places=2)


class ItemUpdate(RequestModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    hsn_sac: Optional[str] = Field(None, max_length=50)
    unit: Optional[str] = Field(None, min_length=1, max_length=20)
    purchase_rate: Optional[Decimal] = Field(None, ge=0, max_digits=15, decimal_places=2)
    sale_rate: Optional[Decimal] = Field(None, ge=0, max_digits=15, decimal_places=2)
    tax_rate: Optional[Decimal] = Field(None, ge=0, max_digits=7, decimal_places=2)
    current_stock: Optional[Decimal] = Field(None, ge=0, max_digits=15, decimal_places=2)
    low_stock_alert: Optional[Decimal] = Field(None, ge=0, max_digits=15, decimal_places=2)


class ItemResponse(BaseModel):
    id: int
    name: str
    hsn_sac: Optional[str] = None
    unit: str
    purchase_rate: float
    sale_rate: float
    tax_rate: float
    current_stock: float
    low_stock_alert: Optional[float] = None
    is_low_stock: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ==================== PARTY SCHEMAS ====================

class PartyCreate(RequestModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: PartyTypeEnum
    contact: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None
    gstin: Optional[str] = Field(None, max_length=20)
    opening_balance: Decimal = Field(default=Decimal("0"), max_digits=15, decimal_places=2)


class PartyUpdate(RequestModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[PartyTypeEnum] = None
    contact: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None
    gstin: Optional[str] = Field(None, max_length=20)


class PartySummary(BaseModel):
    id: int
    name: str
    type: str

    model_config = ConfigDict(from_attributes=True)


class PartyResponse(PartySummary):
    contact: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = None
    opening_balance: float
    current_balance: float
    created_at: datetime


# ==================== INVOICE SCHEMAS ====================

class InvoiceItemCreate(RequestModel):
    item_id: Optional[int] = None
    description: Optional[str] = Field(None, max_length=255)
    quantity: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2)
    rate: Optional[Decimal] = Field(None, ge=0, max_digits=15, decimal_places=2)
    tax_rate: Optional[Decimal] = Field(None, ge=0, max_digits=7, decimal_places=2)

    @model_validator(mode="after")
    def check_rate_source(self):
        if self.rate is None and self.item_id is None:
            raise ValueError("rate is required for lines without an item")
        return self


class InvoiceCreate(RequestModel):
    type: InvoiceTypeEnum
    party_id: int
    items: List[InvoiceItemCreate] = Field(..., min_length=1)
    date: Optional[DateType] = None
    site_name: Optional[str] = Field(None, max_length=255)
    particular: Optional[str] = None
    discount: Decimal = Field(default=Decimal("0"), ge=0, max_digits=15, decimal_places=2)
    paid_amount: Decimal = Field(default=Decimal("0"), ge=0, max_digits=15, decimal_places=2)
    cgst_rate: Optional[Decimal] = Field(None, ge=0, max_digits=7, decimal_places=2)
    sgst_rate: Optional[Decimal] = Field(None, ge=0, max_digits=7, decimal_places=2)
    igst_rate: Optional[Decimal] = Field(None, ge=0, max_digits=7, decimal_places=2)


class InvoiceItemResponse(BaseModel):
    id: int
    item_id: Optional[int] = None
    description: Optional[str] = None
    quantity: float
    rate: float
    tax_rate: float
    amount: float
    tax_amount: float
    total: float

    model_config = ConfigDict(from_attributes=True)


class InvoiceSummary(BaseModel):
    id: int
    invoice_number: str
    type: str
    date: DateType
    grand_total: float
    paid_amount: float
    balance: float
    status: str

    model_config = ConfigDict(from_attributes=True)


class InvoiceResponse(InvoiceSummary):
    party_id: int
    site_name: Optional[str] = None
    particular: Optional[str] = None
    sub_total: float
    cgst_rate: float
    cgst_amount: float
    sgst_rate: float
    sgst_amount: float
    igst_rate: float
    igst_amount: float
    tax_total: float
    discount: float
    round_off: float
    amount_in_words: Optional[str] = None
    created_at: datetime


class InvoiceWithItems(InvoiceResponse):
    party: Optional[PartySummary] = None
    items: List[InvoiceItemResponse] = []


# ==================== PAYMENT SCHEMAS ====================

class PaymentCreate(RequestModel):
    type: PaymentTypeEnum
    party_id: int
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    mode: str = Field(default="cash", max_length=50)
    note: str = ""
    invoice_id: Optional[int] = None


class PaymentUpdate(RequestModel):
    type: Optional[PaymentTypeEnum] = None
    party_id: Optional[int] = None
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=15, decimal_places=2)
    mode: Optional[str] = Field(None, max_length=50)
    note: Optional[str] = None
    invoice_id: Optional[int] = None


class PaymentResponse(BaseModel):
    id: int
    type: str
    party_id: int
    amount: float
    mode: str
    note: Optional[str] = None
    invoice_id: Optional[int] = None
    created_at: datetime
    party: Optional[PartySummary] = None
    invoice: Optional[InvoiceSummary] = None

    model_config = ConfigDict(from_attributes=True)


class PartyDetail(PartyResponse):
    invoices: List[InvoiceSummary] = []
    payments: List[PaymentResponse] = []
