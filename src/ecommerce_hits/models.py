"""
Pydantic models for decoded ecommerce hits.
"""
from enum import Enum
from typing import Iterator

from pydantic import BaseModel, ConfigDict, Field

# Canonical field name -> value, e.g. {"item_id": "SKU1", "price": "9.99"}
Product = dict[str, str]


# =============================================================================
# Enums
# =============================================================================

class Api(str, Enum):
    """How the page hands ecommerce data to the tag."""

    GTAG = "gtag"              # gtag('event', name, params)
    DATA_LAYER = "dataLayer"   # dataLayer.push({...})


class KnownSchema(str, Enum):
    """Ecommerce schema an API call most likely belongs to."""

    UNKNOWN = "unknown"
    UNKNOWN_GTAG = "gtag-unknown"
    GTM_UA = "ua-gtm"
    GTM_LEGACY_GA4 = "ga4-gtm"
    GTAG_UA = "ua-gtag"
    UNIFIED = "ga4-gtag"


class HitSource(str, Enum):
    """Which recognition predicate matched a hit."""

    GA4 = "ga4"
    UA_LEGACY = "ua-legacy"
    UA_GA4 = "ua-ga4"


# =============================================================================
# Decoded Hit Models
# =============================================================================

class ImpressionList(BaseModel):
    """A named impression list from a measurement protocol hit."""
    model_config = ConfigDict(frozen=True)

    name: str | None = None
    impressions: dict[int, Product] = Field(default_factory=dict)

    def iter_impressions(self) -> Iterator[tuple[int, Product]]:
        """Yield (index, impression) pairs in ascending index order."""
        yield from sorted(self.impressions.items())


class EventRecord(BaseModel):
    """
    Structured event reconstructed from one hit URL.

    Indexed sections are sparse: keys come straight from the URL, may start
    above zero and may have gaps. Gaps are never filled in.
    """
    model_config = ConfigDict(frozen=True)

    event: str | None = None
    products: dict[int, Product] = Field(default_factory=dict)
    impressions: dict[int, ImpressionList] | None = None  # measurement protocol only
    promos: dict[int, Product] | None = None  # measurement protocol only
    params: dict[str, str] | None = None

    def iter_products(self) -> Iterator[tuple[int, Product]]:
        """Yield (index, product) pairs in ascending index order."""
        yield from sorted(self.products.items())

    def iter_impressions(self) -> Iterator[tuple[int, ImpressionList]]:
        """Yield (index, impression list) pairs in ascending index order."""
        yield from sorted((self.impressions or {}).items())

    def iter_promos(self) -> Iterator[tuple[int, Product]]:
        """Yield (index, promo) pairs in ascending index order."""
        yield from sorted((self.promos or {}).items())

    @property
    def has_ecommerce_data(self) -> bool:
        """Check if any product, impression, promo or param was decoded."""
        return any([
            self.products,
            self.impressions,
            self.promos,
            self.params,
        ])


class HitReport(BaseModel):
    """One decoder's view of a captured hit."""
    source: HitSource
    record: EventRecord
    summary: str
    command: str | None = None  # gtag command, GA4 hits only
