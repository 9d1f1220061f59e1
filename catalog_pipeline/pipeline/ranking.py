# catalog_pipeline/pipeline/ranking.py
import logging
import re
from typing import Iterable, List, Set

from ..errors import MalformedPriceFault
from ..models import ListingRecord, RankedProduct

logger = logging.getLogger(__name__)

_NON_NUMERIC = re.compile(r"[^0-9.\-]+")


def parse_price(raw: str) -> float:
    """Turns a displayed price such as '$1,299.00' into 1299.0."""
    cleaned = _NON_NUMERIC.sub("", raw or "")
    try:
        return float(cleaned)
    except ValueError:
        raise MalformedPriceFault(raw) from None


def rank_products(records: Iterable[ListingRecord], n: int) -> List[RankedProduct]:
    """
    Returns at most n products with distinct prices, most expensive first.

    When several records share a price only the first one in input order is
    kept. Records whose price cannot be parsed are skipped with a warning.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")

    seen_prices: Set[float] = set()
    unique: List[RankedProduct] = []
    for record in records:
        try:
            price = parse_price(record.price)
        except MalformedPriceFault as e:
            logger.warning("Skipping '%s': %s", record.name, e)
            continue
        if price in seen_prices:
            continue
        seen_prices.add(price)
        unique.append(RankedProduct(name=record.name, price=price, image=record.image, link=record.link))

    unique.sort(key=lambda product: product.price, reverse=True)
    logger.debug("%d records with distinct prices, keeping top %d", len(unique), n)
    return unique[:n]
