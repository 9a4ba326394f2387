import re
from dataclasses import dataclass

# <number><unit>? <remainder>, anchored at the start of the normalized line
QUANTITY_RE = re.compile(r"^(\d+(?:\.\d+)?)([^\s\d]*)\s*(.*)$")

# Quantities are kept to three decimals (grams of a kg, ml of a litre)
QUANTITY_SCALE = 3

UNIT_ALIASES = {
    "kg": "kg",
    "kgs": "kg",
    "kilo": "kg",
    "kilos": "kg",
    "kilogram": "kg",
    "kilograms": "kg",
    "g": "g",
    "gm": "g",
    "gms": "g",
    "gram": "g",
    "grams": "g",
    "l": "litre",
    "lt": "litre",
    "ltr": "litre",
    "ltrs": "litre",
    "liter": "litre",
    "liters": "litre",
    "litre": "litre",
    "litres": "litre",
    "ml": "ml",
    "pack": "pack",
    "packs": "pack",
    "packet": "pack",
    "packets": "pack",
    "pkt": "pack",
    "pc": "pcs",
    "pcs": "pcs",
    "piece": "pcs",
    "pieces": "pcs",
    "dozen": "dozen",
    "box": "box",
    "boxes": "box",
    "bottle": "bottle",
    "bottles": "bottle",
}


@dataclass(frozen=True)
class Extraction:
    quantity: float
    unit: str
    remainder: str
    # True when no usable leading number was found and quantity fell back to 1
    quantity_defaulted: bool = False


def quantize_quantity(value) -> float:
    """Round to QUANTITY_SCALE so 0.1 + 0.2 compares equal to 0.3."""
    return round(float(value), QUANTITY_SCALE)


def canonical_unit(unit: str) -> str:
    return UNIT_ALIASES.get(unit, unit)


def extract_quantity(text: str) -> Extraction:
    """
    Split a normalized order line into quantity, unit and item phrase.

    "2kg rice"   → (2, "kg", "rice")
    "2 kilo rice" → (2, "kg", "rice")
    "rice"       → (1, "", "rice"), quantity_defaulted
    """
    text = (text or "").strip()

    match = QUANTITY_RE.match(text)
    if not match:
        return Extraction(quantity=1, unit="", remainder=text, quantity_defaulted=True)

    quantity = quantize_quantity(match.group(1))
    if quantity <= 0:
        # "0 rice" is read as an item phrase, never as a zero quantity
        return Extraction(quantity=1, unit="", remainder=text, quantity_defaulted=True)

    unit = match.group(2)
    remainder = match.group(3).strip()

    if unit:
        if not remainder and unit not in UNIT_ALIASES:
            # "2rice": the glued run is the item, not a unit
            return Extraction(quantity=quantity, unit="", remainder=unit)
        return Extraction(quantity=quantity, unit=canonical_unit(unit), remainder=remainder)

    # "2 kg rice": a known unit word separated by a space
    head, _, rest = remainder.partition(" ")
    if head in UNIT_ALIASES and rest:
        return Extraction(quantity=quantity, unit=canonical_unit(head), remainder=rest.strip())

    return Extraction(quantity=quantity, unit="", remainder=remainder)
