from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from shopsense import models
from shopsense.cart import BillingSession, SessionStore
from shopsense.database import get_db


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_shop(shop_id: int, db: Session = Depends(get_db)) -> models.Shop:
    shop = db.get(models.Shop, shop_id)
    if not shop:
        raise HTTPException(status_code=404, detail="Shop not found")
    return shop


def get_billing_session(
    session_id: str,
    shop: models.Shop = Depends(get_shop),
    store: SessionStore = Depends(get_session_store),
) -> BillingSession:
    return store.get(shop.id, session_id)


def find_billing_session(
    session_id: str,
    shop: models.Shop = Depends(get_shop),
    store: SessionStore = Depends(get_session_store),
) -> Optional[BillingSession]:
    # read-only paths: an unknown session id must not open a new cart
    return store.find(shop.id, session_id)
