from sqlalchemy import (
    CheckConstraint,
    Column,
    Integer,
    String,
    Float,
    Numeric,
    DateTime,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime

from shopsense.database import Base

# Three-decimal quantities; read back as float so arithmetic matches the cart
Quantity = Numeric(12, 3, asdecimal=False)


# ------------------------
# SHOP (bill owner)
# ------------------------

class Shop(Base):
    __tablename__ = "shops"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    owner_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)

    # last issued bill number, bumped inside every bill transaction
    bill_counter = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)

    inventory = relationship(
        "InventoryItem",
        back_populates="shop",
        cascade="all, delete-orphan"
    )
    bills = relationship(
        "Bill",
        back_populates="shop",
        cascade="all, delete-orphan"
    )
    daily_sessions = relationship(
        "DailySession",
        back_populates="shop",
        cascade="all, delete-orphan"
    )


# ------------------------
# INVENTORY
# ------------------------

class InventoryItem(Base):
    __tablename__ = "inventory_items"
    __table_args__ = (
        UniqueConstraint("shop_id", "item_name", name="uq_inventory_shop_name"),
        CheckConstraint("quantity_on_hand >= 0", name="ck_inventory_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id"), nullable=False, index=True)

    item_name = Column(String, nullable=False, index=True)
    unit = Column(String, nullable=False, default="pcs")
    quantity_on_hand = Column(Quantity, nullable=False, default=0)

    cost_price = Column(Float, nullable=False, default=0)
    selling_price = Column(Float, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow
    )

    shop = relationship("Shop", back_populates="inventory")


# ------------------------
# BILL
# ------------------------

class Bill(Base):
    __tablename__ = "bills"
    __table_args__ = (
        UniqueConstraint("shop_id", "bill_number", name="uq_bill_shop_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id"), nullable=False, index=True)
    bill_number = Column(Integer, nullable=False)

    # Snapshot totals, never recalculated from live inventory
    total_amount = Column(Float, nullable=False, default=0)
    total_cost = Column(Float, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    shop = relationship("Shop", back_populates="bills")
    items = relationship(
        "BillItem",
        back_populates="bill",
        cascade="all, delete-orphan"
    )


# ------------------------
# BILL ITEMS
# ------------------------

class BillItem(Base):
    __tablename__ = "bill_items"

    id = Column(Integer, primary_key=True, index=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=False)

    # NULL for free-text lines and for items later removed from inventory
    inventory_id = Column(
        Integer,
        ForeignKey("inventory_items.id", ondelete="SET NULL"),
        nullable=True
    )

    item_name = Column(String, nullable=False)
    quantity = Column(Quantity, nullable=False)
    unit = Column(String, nullable=True)
    cost_price = Column(Float, nullable=False)
    selling_price = Column(Float, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    bill = relationship("Bill", back_populates="items")

    @property
    def subtotal(self):
        return round(self.quantity * self.selling_price, 2)


# ------------------------
# DAILY OPERATIONS (start / end of a trading day)
# ------------------------

class DailySession(Base):
    __tablename__ = "daily_sessions"

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id"), nullable=False, index=True)

    # "active" until the day is ended, then "closed"
    status = Column(String, nullable=False, default="active", index=True)
    start_time = Column(DateTime, nullable=False, default=datetime.utcnow)
    end_time = Column(DateTime, nullable=True)

    # filled in from the day's bills when the day is ended
    total_bills = Column(Integer, nullable=False, default=0)
    total_sales = Column(Float, nullable=False, default=0)
    total_cost = Column(Float, nullable=False, default=0)

    shop = relationship("Shop", back_populates="daily_sessions")
