import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shopsense import models, schemas
from shopsense.cart import BillingSession, SessionStore
from shopsense.database import get_db
from shopsense.dependencies import (
    find_billing_session,
    get_billing_session,
    get_session_store,
    get_shop,
)
from shopsense.services.bill_committer import commit_bill
from shopsense.utils.item_matcher import load_catalog
from shopsense.utils.order_parser import parse_order_line

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/shops/{shop_id}",
    tags=["Cart"]
)


def empty_cart_response(session_id: str) -> dict:
    return {"session_id": session_id, "entries": [], "total_amount": 0, "total_cost": 0}


def cart_response(session: BillingSession) -> dict:
    snapshot = session.cart.snapshot()
    return {
        "session_id": session.session_id,
        "entries": [
            {
                "entry_id": e.entry_id,
                "inventory_id": e.inventory_id,
                "item_name": e.item_name,
                "quantity": e.quantity,
                "unit": e.unit,
                "selling_price": e.selling_price,
                "cost_price": e.cost_price,
                "available_stock": e.available_stock,
                "amount": round(e.amount, 2),
            }
            for e in snapshot.entries
        ],
        "total_amount": snapshot.total_amount,
        "total_cost": snapshot.total_cost,
    }


def add_text_to_cart(text: str, session: BillingSession, db: Session) -> dict:
    # Fresh catalog snapshot on every line so stock ceilings are current
    catalog = load_catalog(db, session.shop_id)
    result = parse_order_line(text, catalog)
    session.cart.add_item(result)
    return cart_response(session)


# -------------------------
# PARSE PREVIEW (no cart change)
# -------------------------
@router.post("/parse", response_model=schemas.ParsePreview)
def parse_text(
    payload: schemas.OrderText,
    shop: models.Shop = Depends(get_shop),
    db: Session = Depends(get_db)
):
    result = parse_order_line(payload.text, load_catalog(db, shop.id))

    if result.matched:
        return {
            "matched": True,
            "exact": result.exact,
            "inventory_id": result.inventory_id,
            "item_name": result.item.item_name,
            "quantity": result.quantity,
            "unit": result.unit,
            "quantity_defaulted": result.quantity_defaulted,
            "available_stock": result.item.quantity_on_hand,
        }

    return {
        "matched": False,
        "item_name": result.phrase,
        "quantity": result.quantity,
        "unit": result.unit,
        "quantity_defaulted": result.quantity_defaulted,
        "suggestions": result.suggestions,
    }


# -------------------------
# VIEW / DISCARD CART
# -------------------------
@router.get("/cart/{session_id}", response_model=schemas.CartResponse)
def view_cart(
    session_id: str,
    session: BillingSession | None = Depends(find_billing_session)
):
    if session is None:
        return empty_cart_response(session_id)
    return cart_response(session)


@router.delete("/cart/{session_id}")
def discard_cart(
    session_id: str,
    shop: models.Shop = Depends(get_shop),
    store: SessionStore = Depends(get_session_store)
):
    store.discard(shop.id, session_id)
    return {"message": "Cart discarded"}


# -------------------------
# ADD ITEM FROM TEXT
# -------------------------
@router.post("/cart/{session_id}/items", response_model=schemas.CartResponse)
def add_item(
    payload: schemas.OrderText,
    session: BillingSession = Depends(get_billing_session),
    db: Session = Depends(get_db)
):
    return add_text_to_cart(payload.text, session, db)


# -------------------------
# ADD FREE-TEXT LINE (not in inventory)
# -------------------------
@router.post("/cart/{session_id}/custom-items", response_model=schemas.CartResponse)
def add_custom_item(
    item: schemas.CustomItemCreate,
    session: BillingSession = Depends(get_billing_session)
):
    session.cart.add_custom_item(
        item_name=item.item_name,
        quantity=item.quantity,
        selling_price=item.selling_price,
        cost_price=item.cost_price,
        unit=item.unit,
    )
    return cart_response(session)


# -------------------------
# UPDATE / REMOVE LINE
# -------------------------
@router.patch("/cart/{session_id}/items/{entry_id}", response_model=schemas.CartResponse)
def update_quantity(
    entry_id: str,
    payload: schemas.QuantityUpdate,
    session: BillingSession = Depends(get_billing_session)
):
    session.cart.update_quantity(entry_id, payload.quantity)
    return cart_response(session)


@router.delete("/cart/{session_id}/items/{entry_id}", response_model=schemas.CartResponse)
def remove_item(
    entry_id: str,
    session: BillingSession = Depends(get_billing_session)
):
    session.cart.remove_item(entry_id)
    return cart_response(session)


# -------------------------
# GENERATE BILL
# -------------------------
@router.post("/cart/{session_id}/commit", response_model=schemas.BillCommitResponse, status_code=201)
def commit_cart(
    session: BillingSession = Depends(get_billing_session),
    store: SessionStore = Depends(get_session_store),
    db: Session = Depends(get_db)
):
    # A double-submitted commit waits here, then finds the cart already empty
    with session.lock:
        result = commit_bill(db, session.shop_id, session.cart.snapshot())
        session.cart.clear()

    # a session with the microphone still open keeps its listen token
    if not session.listener.is_listening:
        store.discard(session.shop_id, session.session_id, session)

    return {
        "bill_id": result.bill_id,
        "bill_number": result.bill_number,
        "total_amount": result.total_amount,
        "total_cost": result.total_cost,
        "item_count": result.item_count,
        "created_at": result.created_at,
    }
