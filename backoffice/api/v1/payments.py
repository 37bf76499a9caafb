"""
Payment API Routes
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from backoffice.api.deps import get_settings
from backoffice.core.config import Settings
from backoffice.core.database import get_db
from backoffice.schemas import (
    PaymentCreate, PaymentUpdate, PaymentResponse, PaymentTypeEnum, MessageResponse
)
from backoffice.services.payment_service import PaymentService

router = APIRouter(prefix="/payments", tags=["Payments"])


def get_payment_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> PaymentService:
    return PaymentService(db, settings)


@router.get("", response_model=List[PaymentResponse])
def list_payments(
    type: Optional[PaymentTypeEnum] = Query(None),
    party_id: Optional[int] = Query(None),
    invoice_id: Optional[int] = Query(None),
    mode: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    service: PaymentService = Depends(get_payment_service)
):
    """List payments, newest first"""
    return service.get_all(
        type=type.value if type else None,
        party_id=party_id,
        invoice_id=invoice_id,
        mode=mode,
        search=search
    )


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def create_payment(payment_data: PaymentCreate, service: PaymentService = Depends(get_payment_service)):
    """Record a payment"""
    return service.create(payment_data)


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(payment_id: int, service: PaymentService = Depends(get_payment_service)):
    """Get payment by ID"""
    return service.get(payment_id)


@router.put("/{payment_id}", response_model=PaymentResponse)
def update_payment(
    payment_id: int,
    payment_data: PaymentUpdate,
    service: PaymentService = Depends(get_payment_service)
):
    """Edit a payment, moving its effects to the new party or invoice"""
    return service.update(payment_id, payment_data)


@router.delete("/{payment_id}", response_model=MessageResponse)
def delete_payment(payment_id: int, service: PaymentService = Depends(get_payment_service)):
    """Delete a payment and undo its effects"""
    service.delete(payment_id)
    return {"message": "Payment deleted successfully"}
