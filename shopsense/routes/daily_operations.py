import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from shopsense import models, schemas
from shopsense.database import get_db
from shopsense.dependencies import get_shop

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/shops/{shop_id}/daily-operations",
    tags=["Daily Operations"]
)

ACTIVE = "active"
CLOSED = "closed"
PAST_SESSIONS = 7


def get_active_session(db: Session, shop_id: int) -> Optional[models.DailySession]:
    return (
        db.query(models.DailySession)
        .filter(
            models.DailySession.shop_id == shop_id,
            models.DailySession.status == ACTIVE,
        )
        .first()
    )


def bills_between(db: Session, shop_id: int, start: datetime, end: datetime = None):
    q = db.query(models.Bill).filter(
        models.Bill.shop_id == shop_id,
        models.Bill.created_at >= start,
    )
    if end is not None:
        q = q.filter(models.Bill.created_at <= end)
    return q.order_by(models.Bill.bill_number).all()


# -------------------------
# ACTIVE DAY
# -------------------------
@router.get("/active", response_model=Optional[schemas.DailySessionResponse])
def active_session(
    shop: models.Shop = Depends(get_shop),
    db: Session = Depends(get_db)
):
    return get_active_session(db, shop.id)


# -------------------------
# BILLS OF THE CURRENT DAY
# -------------------------
@router.get("/today-bills", response_model=List[schemas.TodayBill])
def today_bills(
    start_time: datetime | None = None,
    shop: models.Shop = Depends(get_shop),
    db: Session = Depends(get_db)
):
    """
    Bills since `start_time`, or since the active day started.
    Empty when neither is available.
    """
    if start_time is None:
        day = get_active_session(db, shop.id)
        if day is None:
            return []
        start_time = day.start_time

    return bills_between(db, shop.id, start_time)


# -------------------------
# PAST DAYS
# -------------------------
@router.get("/past", response_model=List[schemas.DailySessionResponse])
def past_sessions(
    shop: models.Shop = Depends(get_shop),
    db: Session = Depends(get_db)
):
    return (
        db.query(models.DailySession)
        .filter(
            models.DailySession.shop_id == shop.id,
            models.DailySession.status == CLOSED,
        )
        .order_by(models.DailySession.end_time.desc())
        .limit(PAST_SESSIONS)
        .all()
    )


# -------------------------
# START / END DAY
# -------------------------
@router.post("/start", response_model=schemas.DailySessionResponse, status_code=201)
def start_day(
    shop: models.Shop = Depends(get_shop),
    db: Session = Depends(get_db)
):
    if get_active_session(db, shop.id):
        raise HTTPException(status_code=400, detail="Day already started")

    day = models.DailySession(
        shop_id=shop.id,
        status=ACTIVE,
        start_time=datetime.utcnow(),
    )
    db.add(day)
    db.commit()
    db.refresh(day)

    logger.info("Day started for shop %s", shop.id)
    return day


@router.put("/end", response_model=schemas.DailySessionResponse)
def end_day(
    shop: models.Shop = Depends(get_shop),
    db: Session = Depends(get_db)
):
    day = get_active_session(db, shop.id)
    if not day:
        raise HTTPException(status_code=404, detail="No active day to end")

    # Totals come from the bills saved during the day, not from the client
    end_time = datetime.utcnow()
    bills = bills_between(db, shop.id, day.start_time, end_time)

    day.status = CLOSED
    day.end_time = end_time
    day.total_bills = len(bills)
    day.total_sales = round(sum(b.total_amount for b in bills), 2)
    day.total_cost = round(sum(b.total_cost for b in bills), 2)

    db.commit()
    db.refresh(day)

    logger.info(
        "Day ended for shop %s: %s bills, sales %.2f",
        shop.id, day.total_bills, day.total_sales,
    )
    return day
