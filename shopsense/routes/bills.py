from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List

from shopsense import models, schemas
from shopsense.database import get_db
from shopsense.dependencies import get_shop
from shopsense.pdf_utils import generate_receipt_pdf

router = APIRouter(
    prefix="/shops/{shop_id}/bills",
    tags=["Bills"]
)


def get_bill_or_404(db: Session, shop_id: int, bill_number: int) -> models.Bill:
    bill = (
        db.query(models.Bill)
        .filter(
            models.Bill.shop_id == shop_id,
            models.Bill.bill_number == bill_number,
        )
        .first()
    )
    if not bill:
        raise HTTPException(status_code=404, detail="Bill not found")
    return bill


def bill_summary(bill: models.Bill) -> dict:
    return {
        "bill_id": bill.id,
        "bill_number": bill.bill_number,
        "total_amount": bill.total_amount,
        "total_cost": bill.total_cost,
        "created_at": bill.created_at,
    }


# -------------------------
# LIST BILLS (HISTORY)
# -------------------------
@router.get("/", response_model=List[schemas.BillSummary])
def list_bills(
    from_date: str | None = None,  # YYYY-MM-DD
    to_date: str | None = None,    # YYYY-MM-DD
    shop: models.Shop = Depends(get_shop),
    db: Session = Depends(get_db)
):
    q = db.query(models.Bill).filter(models.Bill.shop_id == shop.id)

    if from_date is not None:
        q = q.filter(func.date(models.Bill.created_at) >= from_date)

    if to_date is not None:
        q = q.filter(func.date(models.Bill.created_at) <= to_date)

    bills = q.order_by(models.Bill.bill_number.desc()).all()
    return [bill_summary(b) for b in bills]


# -------------------------
# BILL DETAILS (with items)
# -------------------------
@router.get("/{bill_number}", response_model=schemas.BillDetail)
def get_bill(
    bill_number: int,
    shop: models.Shop = Depends(get_shop),
    db: Session = Depends(get_db)
):
    bill = get_bill_or_404(db, shop.id, bill_number)
    return {
        **bill_summary(bill),
        "items": [schemas.BillItemResponse.model_validate(i) for i in bill.items],
    }


# -------------------------
# RECEIPT PDF
# -------------------------
@router.get("/{bill_number}/pdf")
def bill_receipt_pdf(
    bill_number: int,
    shop: models.Shop = Depends(get_shop),
    db: Session = Depends(get_db)
):
    bill = get_bill_or_404(db, shop.id, bill_number)

    pdf_path = generate_receipt_pdf(bill=bill, shop=shop, items=bill.items)

    return FileResponse(
        path=pdf_path,
        media_type="application/pdf",
        filename=f"Bill-{bill.bill_number}.pdf"
    )
