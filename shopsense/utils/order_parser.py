"""
Order line parsing: raw text → ParseResult.

    raw → normalize_text → extract_quantity → translate_phrase → matcher

A ParseResult is either Matched (points at a catalog item) or Unmatched
(only the phrase the operator typed). Callers branch on the type.
"""
import logging
from dataclasses import dataclass, field
from typing import Union

from shopsense.utils.item_matcher import (
    CatalogItem,
    match_item_exact,
    match_item_phrase,
    suggest_items,
)
from shopsense.utils.number_normalizer import normalize_text
from shopsense.utils.quantity_parser import extract_quantity
from shopsense.utils.term_translator import translate_phrase

logger = logging.getLogger(__name__)

DEFAULT_UNIT = "pcs"


@dataclass(frozen=True)
class Matched:
    item: CatalogItem
    quantity: float
    unit: str
    phrase: str
    exact: bool = False
    quantity_defaulted: bool = False

    matched = True

    @property
    def inventory_id(self) -> int:
        return self.item.id


@dataclass(frozen=True)
class Unmatched:
    phrase: str
    quantity: float
    unit: str
    quantity_defaulted: bool = False
    suggestions: list = field(default_factory=list)

    matched = False


ParseResult = Union[Matched, Unmatched]


def parse_order_line(raw: str, catalog) -> ParseResult:
    catalog = list(catalog)

    # 1️⃣ Whole input is an item name: one unit of whatever it is stocked in
    exact = match_item_exact(raw, catalog)
    if exact:
        return Matched(
            item=exact,
            quantity=1,
            unit=exact.unit,
            phrase=exact.item_name.lower(),
            exact=True,
        )

    extraction = extract_quantity(normalize_text(raw))
    phrase = translate_phrase(extraction.remainder)

    # 2️⃣ Catalog name containing the (translated) phrase
    item = match_item_phrase(phrase, catalog)
    if item:
        return Matched(
            item=item,
            quantity=extraction.quantity,
            unit=extraction.unit or item.unit,
            phrase=phrase,
            quantity_defaulted=extraction.quantity_defaulted,
        )

    # 3️⃣ Nothing in stock by that name
    logger.debug("No catalog match for %r (phrase %r)", raw, phrase)
    return Unmatched(
        phrase=phrase,
        quantity=extraction.quantity,
        unit=extraction.unit or DEFAULT_UNIT,
        quantity_defaulted=extraction.quantity_defaulted,
        suggestions=suggest_items(phrase, catalog),
    )
