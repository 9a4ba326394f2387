"""
Turns a cart snapshot into a persisted bill.

Everything happens in the caller's SQLAlchemy session and is committed once:
bill number, bill row, bill items and the stock decrements either all land
or none do. Stock is decremented with a conditional UPDATE whose row count
is checked, so two tills selling the last units of the same item cannot both
succeed. Nothing here retries.
"""
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import cast, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shopsense import models
from shopsense.cart import CartSnapshot
from shopsense.errors import (
    BillingError,
    CommitConflict,
    EmptyCart,
    InvalidQuantity,
    ShopNotFound,
    TransactionFailure,
)
from shopsense.utils.quantity_parser import QUANTITY_SCALE, quantize_quantity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommitResult:
    bill_id: int
    bill_number: int
    total_amount: float
    total_cost: float
    item_count: int
    created_at: datetime


def next_bill_number(db: Session, shop_id: int) -> int:
    # First write of the bill transaction: holds the shop's counter until commit
    bumped = db.execute(
        update(models.Shop)
        .where(models.Shop.id == shop_id)
        .values(bill_counter=models.Shop.bill_counter + 1)
        .execution_options(synchronize_session=False)
    )
    if bumped.rowcount != 1:
        raise ShopNotFound(shop_id)

    return db.execute(
        select(models.Shop.bill_counter).where(models.Shop.id == shop_id)
    ).scalar_one()


def decrement_stock(db: Session, shop_id: int, inventory_id: int, quantity: float) -> bool:
    """Guarded decrement: applies only if quantity_on_hand stays >= 0."""
    quantity = quantize_quantity(quantity)
    on_hand = models.InventoryItem.quantity_on_hand

    # both sides at QUANTITY_SCALE: 0.3 on hand covers a 0.1 + 0.2 cart line
    result = db.execute(
        update(models.InventoryItem)
        .where(
            models.InventoryItem.id == inventory_id,
            models.InventoryItem.shop_id == shop_id,
            func.round(on_hand, QUANTITY_SCALE) >= quantity,
        )
        .values(
            quantity_on_hand=func.round(cast(on_hand - quantity, models.Quantity), QUANTITY_SCALE),
            updated_at=datetime.utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def commit_bill(db: Session, shop_id: int, snapshot: CartSnapshot) -> CommitResult:
    if snapshot.is_empty:
        raise EmptyCart()

    for entry in snapshot.entries:
        if entry.quantity <= 0:
            raise InvalidQuantity(f"Invalid quantity for {entry.item_name}.")

    # Totals come from the prices captured in the cart, never live inventory
    total_amount = snapshot.total_amount
    total_cost = snapshot.total_cost

    try:
        bill_number = next_bill_number(db, shop_id)

        bill = models.Bill(
            shop_id=shop_id,
            bill_number=bill_number,
            total_amount=total_amount,
            total_cost=total_cost,
            created_at=datetime.utcnow(),
        )
        for entry in snapshot.entries:
            bill.items.append(
                models.BillItem(
                    inventory_id=entry.inventory_id,
                    item_name=entry.item_name,
                    quantity=entry.quantity,
                    unit=entry.unit,
                    cost_price=entry.cost_price,
                    selling_price=entry.selling_price,
                )
            )
        db.add(bill)
        db.flush()

        for entry in snapshot.entries:
            if entry.inventory_id is None:
                continue
            if not decrement_stock(db, shop_id, entry.inventory_id, entry.quantity):
                raise CommitConflict(entry.item_name, entry.inventory_id, entry.quantity)

        db.commit()

    except BillingError as e:
        db.rollback()
        logger.warning("Bill for shop %s rolled back: %s", shop_id, e.message)
        raise

    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Bill transaction failed for shop %s", shop_id)
        raise TransactionFailure(e.__class__.__name__) from e

    logger.info(
        "Bill #%s saved for shop %s: %s lines, total %.2f",
        bill_number, shop_id, len(snapshot), total_amount,
    )

    return CommitResult(
        bill_id=bill.id,
        bill_number=bill_number,
        total_amount=total_amount,
        total_cost=total_cost,
        item_count=len(snapshot),
        created_at=bill.created_at,
    )
