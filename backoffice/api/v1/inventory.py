"""
Inventory API Routes - Items
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from backoffice.core.database import get_db
from backoffice.schemas import ItemCreate, ItemUpdate, ItemResponse, MessageResponse
from backoffice.services.inventory_service import ItemService

router = APIRouter(prefix="/items", tags=["Inventory"])


@router.get("", response_model=List[ItemResponse])
def list_items(db: Session = Depends(get_db)):
    """List all items, newest first"""
    return ItemService(db).get_all()


@router.get("/low-stock", response_model=List[ItemResponse])
def list_low_stock_items(db: Session = Depends(get_db)):
    """Items at or below their low stock alert"""
    return ItemService(db).get_low_stock()


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(item_data: ItemCreate, db: Session = Depends(get_db)):
    """Create a new item"""
    return ItemService(db).create(item_data)


@router.get("/{item_id}", response_model=ItemResponse)
def get_item(item_id: int, db: Session = Depends(get_db)):
    """Get item by ID"""
    return ItemService(db).get(item_id)


@router.put("/{item_id}", response_model=ItemResponse)
def update_item(item_id: int, item_data: ItemUpdate, db: Session = Depends(get_db)):
    """Update an item"""
    return ItemService(db).update(item_id, item_data)


@router.delete("/{item_id}", response_model=MessageResponse)
def delete_item(item_id: int, db: Session = Depends(get_db)):
    """Delete an item that no invoice references"""
    ItemService(db).delete(item_id)
    return {"message": "Item deleted successfully"}
