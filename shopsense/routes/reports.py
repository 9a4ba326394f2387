from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session
from datetime import date, datetime

from shopsense import models
from shopsense.database import get_db
from shopsense.dependencies import get_shop

router = APIRouter(
    prefix="/shops/{shop_id}/reports",
    tags=["Reports"]
)


@router.get("/daily")
def daily_report(
    report_date: date | None = None,
    shop: models.Shop = Depends(get_shop),
    db: Session = Depends(get_db)
):
    """
    Daily sales report.
    If no date is provided, defaults to today.
    """
    if report_date is None:
        report_date = date.today()

    start_dt = datetime.combine(report_date, datetime.min.time())
    end_dt = datetime.combine(report_date, datetime.max.time())

    bills = (
        db.query(models.Bill)
        .filter(
            models.Bill.shop_id == shop.id,
            models.Bill.created_at >= start_dt,
            models.Bill.created_at <= end_dt
        )
        .all()
    )

    total_sales = round(sum(b.total_amount for b in bills), 2)
    total_cost = round(sum(b.total_cost for b in bills), 2)

    return {
        "date": report_date,
        "total_bills": len(bills),
        "total_sales": total_sales,
        "total_cost": total_cost,
        "profit": round(total_sales - total_cost, 2),
    }


@router.get("/top-sellers")
def top_sellers(
    limit: int = 5,
    shop: models.Shop = Depends(get_shop),
    db: Session = Depends(get_db)
):
    revenue = func.sum(models.BillItem.selling_price * models.BillItem.quantity)

    rows = (
        db.query(
            models.BillItem.item_name,
            func.sum(models.BillItem.quantity).label("quantity"),
            revenue.label("revenue"),
        )
        .join(models.Bill, models.BillItem.bill_id == models.Bill.id)
        .filter(models.Bill.shop_id == shop.id)
        .group_by(models.BillItem.item_name)
        .order_by(revenue.desc())
        .limit(limit)
        .all()
    )

    return [
        {
            "item_name": row.item_name,
            "quantity": row.quantity,
            "revenue": round(row.revenue, 2),
        }
        for row in rows
    ]
