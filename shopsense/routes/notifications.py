from datetime import datetime, timedelta
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from shopsense import models, schemas
from shopsense.config import settings
from shopsense.database import get_db
from shopsense.dependencies import get_shop
from shopsense.pdf_utils import format_quantity

router = APIRouter(
    prefix="/shops/{shop_id}/notifications",
    tags=["Notifications"]
)


def low_stock_alerts(db: Session, shop_id: int) -> list[dict]:
    items = (
        db.query(models.InventoryItem)
        .filter(
            models.InventoryItem.shop_id == shop_id,
            models.InventoryItem.quantity_on_hand <= settings.low_stock_threshold,
        )
        .order_by(models.InventoryItem.item_name)
        .all()
    )
    return [
        {
            "type": "low_stock",
            "severity": "warning",
            "item_name": item.item_name,
            "message": (
                f"Low Stock: {item.item_name} is running low "
                f"({format_quantity(item.quantity_on_hand)} {item.unit} left)."
            ),
        }
        for item in items
    ]


def margin_alert(db: Session, shop_id: int, now: datetime = None) -> dict | None:
    """Loss or thin margin over the last `margin_window_days` of bills."""
    since = (now or datetime.utcnow()) - timedelta(days=settings.margin_window_days)

    revenue, cost = (
        db.query(func.sum(models.Bill.total_amount), func.sum(models.Bill.total_cost))
        .filter(
            models.Bill.shop_id == shop_id,
            models.Bill.created_at >= since,
        )
        .one()
    )
    if not revenue:
        return None

    margin = revenue - (cost or 0)
    percentage = margin / revenue * 100

    if margin < 0:
        return {
            "type": "loss",
            "severity": "critical",
            "message": "Loss Warning: You are operating at a loss this month.",
        }
    if percentage < settings.low_margin_percent:
        return {
            "type": "low_profit",
            "severity": "alert",
            "message": f"Low Profit Margin: Your margin is only {percentage:.1f}% this month.",
        }
    return None


@router.get("/", response_model=List[schemas.Notification])
def list_notifications(
    shop: models.Shop = Depends(get_shop),
    db: Session = Depends(get_db)
):
    notifications = low_stock_alerts(db, shop.id)

    alert = margin_alert(db, shop.id)
    if alert:
        notifications.append(alert)

    return notifications
