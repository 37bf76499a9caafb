"""
CRM API Routes - Parties (customers and suppliers)
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from backoffice.core.database import get_db
from backoffice.schemas import (
    PartyCreate, PartyUpdate, PartyResponse, PartyDetail, PartyTypeEnum, MessageResponse
)
from backoffice.services.crm_service import PartyService

router = APIRouter(prefix="/parties", tags=["CRM"])


@router.get("", response_model=List[PartyResponse])
def list_parties(
    type: Optional[PartyTypeEnum] = Query(None),
    db: Session = Depends(get_db)
):
    """List parties, optionally only customers or suppliers"""
    return PartyService(db).get_all(type=type.value if type else None)


@router.post("", response_model=PartyResponse, status_code=status.HTTP_201_CREATED)
def create_party(party_data: PartyCreate, db: Session = Depends(get_db)):
    """Create a new party"""
    return PartyService(db).create(party_data)


@router.get("/{party_id}", response_model=PartyDetail)
def get_party(party_id: int, db: Session = Depends(get_db)):
    """Get party with its invoices and payments"""
    return PartyService(db).get_with_activity(party_id)


@router.put("/{party_id}", response_model=PartyResponse)
def update_party(party_id: int, party_data: PartyUpdate, db: Session = Depends(get_db)):
    """Update party details"""
    return PartyService(db).update(party_id, party_data)


@router.delete("/{party_id}", response_model=MessageResponse)
def delete_party(party_id: int, db: Session = Depends(get_db)):
    """Delete a party with no invoices or payments"""
    PartyService(db).delete(party_id)
    return {"message": "Party deleted successfully"}
