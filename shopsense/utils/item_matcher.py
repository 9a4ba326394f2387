from dataclasses import dataclass

from sqlalchemy.orm import Session

from shopsense import models
from shopsense.utils.number_normalizer import strip_punctuation
from shopsense.utils.quantity_parser import quantize_quantity


@dataclass(frozen=True)
class CatalogItem:
    """Read-only snapshot of one inventory row, taken when a line is parsed."""
    id: int
    item_name: str
    unit: str
    quantity_on_hand: float
    cost_price: float
    selling_price: float

    @classmethod
    def from_model(cls, item: models.InventoryItem) -> "CatalogItem":
        return cls(
            id=item.id,
            item_name=item.item_name,
            unit=item.unit or "pcs",
            quantity_on_hand=quantize_quantity(item.quantity_on_hand),
            cost_price=item.cost_price,
            selling_price=item.selling_price,
        )

    def as_dict(self):
        return {
            "item_id": self.id,
            "name": self.item_name,
            "rate": self.selling_price,
            "unit": self.unit,
        }


def load_catalog(db: Session, shop_id: int) -> list[CatalogItem]:
    items = (
        db.query(models.InventoryItem)
        .filter(models.InventoryItem.shop_id == shop_id)
        .order_by(models.InventoryItem.item_name)
        .all()
    )
    return [CatalogItem.from_model(item) for item in items]


def sort_catalog(catalog):
    # Deterministic scan order regardless of how the snapshot was produced
    return sorted(catalog, key=lambda item: (item.item_name.lower(), item.id))


def match_item_exact(raw_input: str, catalog):
    """
    The untouched input names a catalog item ("Rice", "rice!").
    Compared after lowercasing and punctuation stripping on both sides.
    """
    normalized = strip_punctuation(raw_input)
    if not normalized:
        return None

    for item in sort_catalog(catalog):
        if strip_punctuation(item.item_name) == normalized:
            return item
    return None


def match_item_phrase(phrase: str, catalog):
    """First catalog item (by name) whose name contains the phrase."""
    phrase = (phrase or "").strip().lower()
    if not phrase:
        return None

    for item in sort_catalog(catalog):
        if phrase in item.item_name.lower():
            return item
    return None


def suggest_items(name: str, catalog, limit: int = 5):
    """
    Suggest closest items using partial token matching.
    Shown to the operator when a line could not be matched.
    """
    if not name:
        return []

    tokens = [t.lower() for t in name.split() if len(t) >= 3]
    if not tokens:
        return []

    results = [
        item
        for item in sort_catalog(catalog)
        if any(token in item.item_name.lower() for token in tokens)
    ]

    return [item.as_dict() for item in results[:limit]]
