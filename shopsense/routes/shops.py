from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shopsense import models, schemas
from shopsense.database import get_db
from shopsense.dependencies import get_shop

router = APIRouter(prefix="/shops", tags=["Shops"])


@router.post("/", response_model=schemas.ShopResponse, status_code=201)
def create_shop(shop: schemas.ShopCreate, db: Session = Depends(get_db)):
    new_shop = models.Shop(
        name=shop.name,
        owner_name=shop.owner_name,
        phone=shop.phone,
        address=shop.address,
        bill_counter=0,
    )
    db.add(new_shop)
    db.commit()
    db.refresh(new_shop)
    return new_shop


@router.get("/{shop_id}", response_model=schemas.ShopResponse)
def get_shop_details(shop: models.Shop = Depends(get_shop)):
    return shop
