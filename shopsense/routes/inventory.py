from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List

from shopsense import models, schemas
from shopsense.database import get_db
from shopsense.dependencies import get_shop

router = APIRouter(
    prefix="/shops/{shop_id}/inventory",
    tags=["Inventory"]
)


def find_by_name(db: Session, shop_id: int, name: str):
    return (
        db.query(models.InventoryItem)
        .filter(
            models.InventoryItem.shop_id == shop_id,
            func.lower(models.InventoryItem.item_name) == name.strip().lower(),
        )
        .first()
    )


def get_item_or_404(db: Session, shop_id: int, item_id: int) -> models.InventoryItem:
    item = (
        db.query(models.InventoryItem)
        .filter(
            models.InventoryItem.id == item_id,
            models.InventoryItem.shop_id == shop_id,
        )
        .first()
    )
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


# ------------------------
# CREATE ITEM
# ------------------------
@router.post("/", response_model=schemas.InventoryItemResponse, status_code=201)
def create_item(
    item: schemas.InventoryItemCreate,
    shop: models.Shop = Depends(get_shop),
    db: Session = Depends(get_db)
):
    if find_by_name(db, shop.id, item.item_name):
        raise HTTPException(status_code=400, detail="Item already exists")

    new_item = models.InventoryItem(
        shop_id=shop.id,
        item_name=item.item_name.strip(),
        unit=item.unit.strip().lower() or "pcs",
        quantity_on_hand=item.quantity_on_hand,
        cost_price=item.cost_price,
        selling_price=item.selling_price,
    )
    db.add(new_item)
    db.commit()
    db.refresh(new_item)
    return new_item


# ------------------------
# LIST ALL ITEMS
# ------------------------
@router.get("/", response_model=List[schemas.InventoryItemResponse])
def list_items(shop: models.Shop = Depends(get_shop), db: Session = Depends(get_db)):
    return (
        db.query(models.InventoryItem)
        .filter(models.InventoryItem.shop_id == shop.id)
        .order_by(models.InventoryItem.item_name)
        .all()
    )


# ------------------------
# SEARCH ITEMS
# ------------------------
@router.get("/search", response_model=List[schemas.InventoryItemResponse])
def search_items(q: str, shop: models.Shop = Depends(get_shop), db: Session = Depends(get_db)):
    return (
        db.query(models.InventoryItem)
        .filter(
            models.InventoryItem.shop_id == shop.id,
            models.InventoryItem.item_name.ilike(f"%{q.strip()}%"),
        )
        .order_by(models.InventoryItem.item_name)
        .all()
    )


# ------------------------
# UPDATE ITEM
# ------------------------
@router.put("/{item_id}", response_model=schemas.InventoryItemResponse)
def update_item(
    item_id: int,
    changes: schemas.InventoryItemUpdate,
    shop: models.Shop = Depends(get_shop),
    db: Session = Depends(get_db)
):
    item = get_item_or_404(db, shop.id, item_id)

    data = changes.model_dump(exclude_unset=True, exclude_none=True)

    if "item_name" in data:
        existing = find_by_name(db, shop.id, data["item_name"])
        if existing and existing.id != item.id:
            raise HTTPException(status_code=400, detail="Item already exists")
        data["item_name"] = data["item_name"].strip()

    if "unit" in data:
        data["unit"] = data["unit"].strip().lower() or "pcs"

    for field, value in data.items():
        setattr(item, field, value)

    db.commit()
    db.refresh(item)
    return item


# ------------------------
# DELETE ITEM
# ------------------------
@router.delete("/{item_id}")
def delete_item(
    item_id: int,
    shop: models.Shop = Depends(get_shop),
    db: Session = Depends(get_db)
):
    item = get_item_or_404(db, shop.id, item_id)

    # Past bills keep their snapshot lines, only the link goes
    db.query(models.BillItem).filter(
        models.BillItem.inventory_id == item.id
    ).update({models.BillItem.inventory_id: None}, synchronize_session=False)

    db.delete(item)
    db.commit()
    return {"message": "Item deleted"}
