# catalog_pipeline/models/product_models.py

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Placeholder for any field the source document does not provide.
NOT_AVAILABLE = "N/A"

LISTING_COLUMNS = ("name", "price", "image", "link")
DETAIL_FIELDS = ("title", "price", "description", "sku", "category")


def _text_or_default(value: Any) -> str:
    if value is None:
        return NOT_AVAILABLE
    text = str(value).strip()
    return text if text else NOT_AVAILABLE


@dataclass(frozen=True)
class ListingRecord:
    """
    One product card as it was rendered on the listing page.
    The price is kept exactly as displayed, currency symbol included.
    """
    name: str
    price: str
    image: str
    link: str

    @classmethod
    def from_projection(cls, data: Dict[str, Any]) -> "ListingRecord":
        return cls(**{column: _text_or_default(data.get(column)) for column in LISTING_COLUMNS})

    def as_row(self) -> List[str]:
        return [self.name, self.price, self.image, self.link]


@dataclass(frozen=True)
class RankedProduct:
    """A listing whose price has been parsed into a number for ranking."""
    name: str
    price: float
    image: str
    link: str


@dataclass(frozen=True)
class DetailRecord:
    """
    Fields read from an individual product page. Each one falls back to
    NOT_AVAILABLE on its own when the page lacks the element.
    """
    title: str = NOT_AVAILABLE
    price: str = NOT_AVAILABLE
    description: str = NOT_AVAILABLE
    sku: str = NOT_AVAILABLE
    category: str = NOT_AVAILABLE

    @classmethod
    def from_projection(cls, data: Optional[Dict[str, Any]]) -> "DetailRecord":
        data = data or {}
        return cls(**{name: _text_or_default(data.get(name)) for name in DETAIL_FIELDS})


@dataclass(frozen=True)
class DetailOutcome:
    """Result of enriching a single product: either a detail or the error that stopped it."""
    product: RankedProduct
    detail: Optional[DetailRecord] = None
    error: Optional[Exception] = None

    def __post_init__(self):
        if (self.detail is None) == (self.error is None):
            raise ValueError("DetailOutcome needs exactly one of detail or error")

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class DetailBatch:
    """Outcomes of one enrichment run, outcomes[i] belonging to the i-th input product."""
    outcomes: List[DetailOutcome] = field(default_factory=list)

    @property
    def successes(self) -> List[DetailOutcome]:
        return [outcome for outcome in self.outcomes if outcome.ok]

    @property
    def failures(self) -> List[DetailOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def records(self) -> List[DetailRecord]:
        return [outcome.detail for outcome in self.outcomes if outcome.ok]

    def __len__(self) -> int:
        return len(self.outcomes)
