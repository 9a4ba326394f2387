from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional


# ------------------------
# SHOP
# ------------------------

class ShopCreate(BaseModel):
    name: str = Field(..., min_length=1)
    owner_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class ShopResponse(BaseModel):
    id: int
    name: str
    owner_name: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    bill_counter: int

    class Config:
        from_attributes = True


# ------------------------
# INVENTORY
# ------------------------

class InventoryItemCreate(BaseModel):
    item_name: str = Field(..., min_length=1)
    unit: str = "pcs"
    quantity_on_hand: float = Field(0, ge=0)
    cost_price: float = Field(0, ge=0)
    selling_price: float = Field(..., ge=0)


class InventoryItemUpdate(BaseModel):
    item_name: Optional[str] = Field(None, min_length=1)
    unit: Optional[str] = None
    quantity_on_hand: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    selling_price: Optional[float] = Field(None, ge=0)


class InventoryItemResponse(BaseModel):
    id: int
    item_name: str
    unit: str
    quantity_on_hand: float
    cost_price: float
    selling_price: float

    class Config:
        from_attributes = True


# ------------------------
# PARSING / CART
# ------------------------

class OrderText(BaseModel):
    text: str


class ParsePreview(BaseModel):
    matched: bool
    exact: bool = False
    inventory_id: Optional[int] = None
    item_name: str
    quantity: float
    unit: str
    quantity_defaulted: bool = False
    available_stock: Optional[float] = None
    suggestions: List[dict] = []


class CustomItemCreate(BaseModel):
    item_name: str = Field(..., min_length=1)
    quantity: float = Field(..., gt=0)
    unit: str = "pcs"
    selling_price: float = Field(..., ge=0)
    cost_price: float = Field(0, ge=0)


class QuantityUpdate(BaseModel):
    quantity: float


class CartEntryResponse(BaseModel):
    entry_id: str
    inventory_id: Optional[int]
    item_name: str
    quantity: float
    unit: str
    selling_price: float
    cost_price: float
    available_stock: Optional[float]
    amount: float

    class Config:
        from_attributes = True


class CartResponse(BaseModel):
    session_id: str
    entries: List[CartEntryResponse]
    total_amount: float
    total_cost: float


# ------------------------
# VOICE
# ------------------------

class VoiceStarted(BaseModel):
    token: str


class VoiceResult(BaseModel):
    token: str
    text: str


class VoiceError(BaseModel):
    token: str
    message: str


# ------------------------
# BILLS
# ------------------------

class BillCommitResponse(BaseModel):
    bill_id: int
    bill_number: int
    total_amount: float
    total_cost: float
    item_count: int
    created_at: datetime


class BillItemResponse(BaseModel):
    inventory_id: Optional[int]
    item_name: str
    quantity: float
    unit: Optional[str]
    cost_price: float
    selling_price: float
    subtotal: float

    class Config:
        from_attributes = True


class BillSummary(BaseModel):
    bill_id: int
    bill_number: int
    total_amount: float
    total_cost: float
    created_at: datetime


class BillDetail(BillSummary):
    items: List[BillItemResponse]


# ------------------------
# DAILY OPERATIONS
# ------------------------

class DailySessionResponse(BaseModel):
    id: int
    status: str
    start_time: datetime
    end_time: Optional[datetime]
    total_bills: int
    total_sales: float
    total_cost: float

    class Config:
        from_attributes = True


class TodayBill(BaseModel):
    bill_number: int
    total_amount: float
    total_cost: float
    created_at: datetime

    class Config:
        from_attributes = True


# ------------------------
# NOTIFICATIONS
# ------------------------

class Notification(BaseModel):
    type: str
    severity: str
    message: str
    item_name: Optional[str] = None
