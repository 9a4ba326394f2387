"""
Working cart for one billing session.

Entries are immutable; every change swaps an entry for a new one, so a
CartSnapshot handed to the bill committer can never change underneath it.
Every rejection raises a BillingError before the entry list is touched.
"""
import logging
import threading
import time
import uuid
from dataclasses import dataclass, replace
from typing import Optional

from shopsense.errors import (
    CartEntryNotFound,
    InsufficientStock,
    InvalidLine,
    InvalidPrice,
    InvalidQuantity,
    ItemNotFound,
    OutOfStock,
)
from shopsense.utils.order_parser import ParseResult
from shopsense.utils.quantity_parser import quantize_quantity
from shopsense.utils.transcription import TranscriptionListener

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartEntry:
    entry_id: str
    inventory_id: Optional[int]
    item_name: str
    quantity: float
    unit: str
    selling_price: float
    cost_price: float
    # quantity_on_hand when the entry was created; None = no stock ceiling
    available_stock: Optional[float]

    @property
    def amount(self) -> float:
        return self.selling_price * self.quantity

    @property
    def cost(self) -> float:
        return self.cost_price * self.quantity


@dataclass(frozen=True)
class CartSnapshot:
    entries: tuple

    @property
    def total_amount(self) -> float:
        return round(sum(e.amount for e in self.entries), 2)

    @property
    def total_cost(self) -> float:
        return round(sum(e.cost for e in self.entries), 2)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def __len__(self):
        return len(self.entries)


def _new_entry_id() -> str:
    return uuid.uuid4().hex


class Cart:
    def __init__(self):
        self._entries: list[CartEntry] = []

    def snapshot(self) -> CartSnapshot:
        return CartSnapshot(entries=tuple(self._entries))

    def get(self, entry_id: str) -> CartEntry:
        return self._entries[self._index(entry_id)]

    def _find_inventory_entry(self, inventory_id: int):
        for index, entry in enumerate(self._entries):
            if entry.inventory_id == inventory_id:
                return index, entry
        return None, None

    def _index(self, entry_id: str) -> int:
        for index, entry in enumerate(self._entries):
            if entry.entry_id == entry_id:
                return index
        raise CartEntryNotFound(entry_id)

    # -------------------------
    # ADD
    # -------------------------
    def add_item(self, result: ParseResult) -> CartSnapshot:
        if not result.matched:
            logger.info("Rejected %r: not in inventory", result.phrase)
            raise ItemNotFound(result.phrase, suggestions=result.suggestions)

        item = result.item
        if item.quantity_on_hand <= 0:
            logger.info("Rejected %s: out of stock", item.item_name)
            raise OutOfStock(item.item_name)

        index, existing = self._find_inventory_entry(item.id)

        if existing is not None:
            merged = quantize_quantity(existing.quantity + result.quantity)
            if merged > existing.available_stock:
                logger.info(
                    "Rejected %s x%g: %g already in cart, %g available",
                    item.item_name, result.quantity, existing.quantity, existing.available_stock,
                )
                raise InsufficientStock(
                    item.item_name, merged, existing.available_stock, existing.unit
                )
            self._entries[index] = replace(existing, quantity=merged)
        else:
            if result.quantity > item.quantity_on_hand:
                logger.info(
                    "Rejected %s x%g: %g available",
                    item.item_name, result.quantity, item.quantity_on_hand,
                )
                raise InsufficientStock(
                    item.item_name, result.quantity, item.quantity_on_hand, item.unit
                )
            self._entries.append(
                CartEntry(
                    entry_id=_new_entry_id(),
                    inventory_id=item.id,
                    item_name=item.item_name,
                    quantity=result.quantity,
                    unit=item.unit,
                    selling_price=item.selling_price,
                    cost_price=item.cost_price,
                    available_stock=item.quantity_on_hand,
                )
            )

        logger.info("Added %g %s %s", result.quantity, item.unit, item.item_name)
        return self.snapshot()

    def add_custom_item(
        self,
        item_name: str,
        quantity: float,
        selling_price: float,
        cost_price: float = 0,
        unit: str = "pcs",
    ) -> CartSnapshot:
        """Free-text line that is not linked to inventory (no stock ceiling)."""
        item_name = (item_name or "").strip()
        if not item_name:
            raise InvalidLine("Item name is required.")
        if quantity is not None:
            quantity = quantize_quantity(quantity)
        if quantity is None or quantity <= 0:
            raise InvalidQuantity("Quantity must be greater than zero.")
        if selling_price < 0 or cost_price < 0:
            raise InvalidPrice("Prices cannot be negative.")

        self._entries.append(
            CartEntry(
                entry_id=_new_entry_id(),
                inventory_id=None,
                item_name=item_name,
                quantity=quantity,
                unit=unit or "pcs",
                selling_price=selling_price,
                cost_price=cost_price,
                available_stock=None,
            )
        )
        return self.snapshot()

    # -------------------------
    # UPDATE / REMOVE
    # -------------------------
    def update_quantity(self, entry_id: str, quantity: float) -> CartSnapshot:
        index = self._index(entry_id)
        entry = self._entries[index]

        quantity = quantize_quantity(quantity)
        if quantity <= 0:
            return self.remove_item(entry_id)

        if entry.available_stock is not None and quantity > entry.available_stock:
            raise InsufficientStock(
                entry.item_name, quantity, entry.available_stock, entry.unit
            )

        self._entries[index] = replace(entry, quantity=quantity)
        return self.snapshot()

    def remove_item(self, entry_id: str) -> CartSnapshot:
        index = self._index(entry_id)
        del self._entries[index]
        return self.snapshot()

    def clear(self):
        self._entries = []


class BillingSession:
    """One operator's open bill: the cart plus its voice listener."""

    def __init__(self, shop_id: int, session_id: str, now: float = 0.0):
        self.shop_id = shop_id
        self.session_id = session_id
        self.cart = Cart()
        self.listener = TranscriptionListener()
        # held while the cart is being turned into a bill
        self.lock = threading.Lock()
        self.last_used = now


class SessionStore:
    """
    Billing sessions keyed by (shop, session id); kept on the app object.

    Only writes create a session. Sessions idle for longer than `ttl` seconds
    are dropped on the next write, unless a commit is holding them.
    """

    def __init__(self, ttl: Optional[float] = None, clock=time.monotonic):
        self._sessions: dict[tuple, BillingSession] = {}
        self._lock = threading.Lock()
        self.ttl = ttl
        self._clock = clock

    def __len__(self):
        return len(self._sessions)

    def get(self, shop_id: int, session_id: str) -> BillingSession:
        key = (shop_id, session_id)
        now = self._clock()
        with self._lock:
            self._sweep(now)
            session = self._sessions.get(key)
            if session is None:
                session = BillingSession(shop_id, session_id, now)
                self._sessions[key] = session
            session.last_used = now
            return session

    def find(self, shop_id: int, session_id: str) -> Optional[BillingSession]:
        """Existing session or None; never creates one."""
        with self._lock:
            session = self._sessions.get((shop_id, session_id))
            if session is not None:
                session.last_used = self._clock()
            return session

    def discard(self, shop_id: int, session_id: str, session: BillingSession = None):
        """Drop the session; with `session`, only if it is still the stored one."""
        key = (shop_id, session_id)
        with self._lock:
            if session is None or self._sessions.get(key) is session:
                self._sessions.pop(key, None)

    def sweep(self) -> int:
        with self._lock:
            return self._sweep(self._clock())

    def _sweep(self, now: float) -> int:
        if self.ttl is None:
            return 0
        idle = [
            key for key, session in self._sessions.items()
            if now - session.last_used > self.ttl and not session.lock.locked()
        ]
        for key in idle:
            del self._sessions[key]
        if idle:
            logger.info("Dropped %d idle billing sessions", len(idle))
        return len(idle)
