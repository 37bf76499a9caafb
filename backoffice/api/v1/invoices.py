"""
Invoice API Routes - Sales and purchase invoices
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from backoffice.api.deps import get_settings
from backoffice.core.config import Settings
from backoffice.core.database import get_db
from backoffice.schemas import (
    InvoiceCreate, InvoiceWithItems, InvoiceTypeEnum, MessageResponse
)
from backoffice.services.invoice_service import InvoiceService

router = APIRouter(prefix="/invoices", tags=["Invoices"])


def get_invoice_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> InvoiceService:
    return InvoiceService(db, settings)


@router.get("", response_model=List[InvoiceWithItems])
def list_invoices(
    type: Optional[InvoiceTypeEnum] = Query(None),
    status: Optional[str] = Query(None),
    party_id: Optional[int] = Query(None),
    service: InvoiceService = Depends(get_invoice_service)
):
    """List invoices, newest first"""
    return service.get_all(type=type.value if type else None, status=status, party_id=party_id)


@router.get("/next-number")
def get_next_invoice_number(service: InvoiceService = Depends(get_invoice_service)):
    """Number the next invoice will receive"""
    return {"invoice_number": service.get_next_number()}


@router.post("", response_model=InvoiceWithItems, status_code=status.HTTP_201_CREATED)
def create_invoice(invoice_data: InvoiceCreate, service: InvoiceService = Depends(get_invoice_service)):
    """Create an invoice, moving stock and posting to the party ledger"""
    return service.create(invoice_data)


@router.get("/{invoice_id}", response_model=InvoiceWithItems)
def get_invoice(invoice_id: int, service: InvoiceService = Depends(get_invoice_service)):
    """Get invoice with items"""
    return service.get(invoice_id)


@router.put("/{invoice_id}", response_model=InvoiceWithItems)
def update_invoice(
    invoice_id: int,
    invoice_data: InvoiceCreate,
    service: InvoiceService = Depends(get_invoice_service)
):
    """Replace an invoice that has no payments recorded"""
    return service.update(invoice_id, invoice_data)


@router.delete("/{invoice_id}", response_model=MessageResponse)
def delete_invoice(invoice_id: int, service: InvoiceService = Depends(get_invoice_service)):
    """Delete an invoice and undo its stock and ledger effects"""
    service.delete(invoice_id)
    return {"message": "Invoice deleted successfully"}
