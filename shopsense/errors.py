"""
Billing error taxonomy.

Every rejection raised by the cart or the bill committer is a BillingError.
The API layer turns them into JSON responses using `code` and `status_code`;
the cart (or inventory) is never modified when one is raised.
"""


class BillingError(Exception):
    code = "BILLING_ERROR"
    status_code = 400

    def __init__(self, message: str, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.message, **self.extra}


# ------------------------
# ADD / UPDATE (cart left unchanged)
# ------------------------

class ItemNotFound(BillingError):
    code = "ITEM_NOT_FOUND"
    status_code = 404

    def __init__(self, phrase: str, suggestions=None):
        super().__init__(
            f'"{phrase}" is not in your inventory.',
            phrase=phrase,
            suggestions=suggestions or [],
        )


class OutOfStock(BillingError):
    code = "OUT_OF_STOCK"
    status_code = 409

    def __init__(self, item_name: str):
        super().__init__(f"{item_name} is out of stock.", item_name=item_name)


class InsufficientStock(BillingError):
    code = "INSUFFICIENT_STOCK"
    status_code = 409

    def __init__(self, item_name: str, requested: float, available: float, unit: str = ""):
        self.requested = requested
        self.available = available
        self.shortfall = round(requested - available, 3)
        amount = f"{available:g} {unit}" if unit else f"{available:g}"
        super().__init__(
            f"Only {amount} {item_name} available.",
            item_name=item_name,
            requested=requested,
            available=available,
            shortfall=self.shortfall,
        )


class CartEntryNotFound(BillingError):
    code = "CART_ENTRY_NOT_FOUND"
    status_code = 404

    def __init__(self, entry_id: str):
        super().__init__(f"Cart entry {entry_id} not found.", entry_id=entry_id)


class InvalidLine(BillingError):
    code = "INVALID_LINE"
    status_code = 422


class InvalidQuantity(InvalidLine):
    code = "INVALID_QUANTITY"


class InvalidPrice(InvalidLine):
    code = "INVALID_PRICE"


# ------------------------
# COMMIT (whole bill rolled back, cart kept)
# ------------------------

class EmptyCart(BillingError):
    code = "EMPTY_CART"
    status_code = 400

    def __init__(self):
        super().__init__("Cannot generate a bill from an empty cart.")


class ShopNotFound(BillingError):
    code = "SHOP_NOT_FOUND"
    status_code = 404

    def __init__(self, shop_id: int):
        super().__init__(f"Shop {shop_id} not found.", shop_id=shop_id)


class CommitConflict(BillingError):
    code = "COMMIT_CONFLICT"
    status_code = 409

    def __init__(self, item_name: str, inventory_id: int, quantity: float):
        super().__init__(
            f"Not enough {item_name} left in stock to bill {quantity:g}; "
            "inventory changed since it was added to the cart.",
            item_name=item_name,
            inventory_id=inventory_id,
            quantity=quantity,
        )


class TransactionFailure(BillingError):
    code = "TRANSACTION_FAILURE"
    status_code = 500

    def __init__(self, reason: str):
        super().__init__(f"Bill could not be saved: {reason}")


# ------------------------
# VOICE
# ------------------------

class StaleTranscription(BillingError):
    code = "STALE_TRANSCRIPTION"
    status_code = 409

    def __init__(self):
        super().__init__("Listening session is no longer active; result discarded.")
