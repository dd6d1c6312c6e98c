"""
Ecommerce data from GA4 hits.

A GA4 hit is a request to the unified collection endpoint (``/g/collect``).
Its query string carries:

- ``en``: the event name
- ``ep.<name>`` / ``epn.<name>``: event parameters (text / numeric)
- ``pr<N>``: one product per index, packed as ``~``-separated fields where
  each field is a two-character code followed by the value

A literal ``~`` inside a product value is written as ``~~``, so splitting
``nmFoo~~Bar`` on ``~`` gives ``["nmFoo", "", "Bar"]``. The empty part is
the marker that has to be folded back in.

Nothing here is percent-decoded; values come back exactly as captured.
"""

import re

from .models import EventRecord, Product

# Path segment that marks a GA4 hit
GA4_PATH_MARKER = "/g/collect?"

# Group 1 is the product index, group 2 the packed product fields.
# Indexes are one to nine ASCII digits; anything longer is not a product.
GA4_PRODUCT_REGEX = re.compile(r"&pr(\d{1,9})=([^&]*)", re.ASCII)

# Group 1 is the parameter name, group 2 the value
GA4_PARAM_REGEX = re.compile(r"&epn?\.([^=]+)=([^&]*)", re.ASCII)

GA4_EVENT_NAME_REGEX = re.compile(r"&en=([^&]*)", re.ASCII)

PRODUCT_FIELD_SEPARATOR = "~"

# =============================================================================
# PRODUCT FIELD CODES
# =============================================================================

GA4_PRODUCT_FIELDS = {
    "id": "item_id",
    "nm": "item_name",
    "br": "item_brand",
    "ca": "item_category",
    "c2": "item_category2",
    "c3": "item_category3",
    "c4": "item_category4",
    "c5": "item_category5",
    "va": "item_variant",
    "pr": "price",
    "qt": "quantity",
    "cp": "coupon",
    "ln": "item_list_name",
    "li": "item_list_id",
    "lp": "index",
    "ds": "discount",
    "af": "affiliation",
    "pi": "promotion_id",
    "pn": "promotion_name",
    "cn": "creative_name",
    "cs": "creative_slot",
    "lo": "Location ID",
}


def is_ga4_hit(url: str, path_marker: str = GA4_PATH_MARKER) -> bool:
    """Check if a URL is a hit sent by a GA4 tag."""
    if not url:
        return False
    return path_marker in url


def split_product_fields(payload: str) -> list[str]:
    """
    Split a packed product into its fields, restoring escaped tildes.

    Examples:
        >>> split_product_fields("id12345~nmFoo~~Bar")
        ['id12345', 'nmFoo~Bar']

        >>> split_product_fields("nmA~~~~B")
        ['nmA~~B']
    """
    parts = payload.split(PRODUCT_FIELD_SEPARATOR)
    fields = []

    i = 0
    while i < len(parts):
        field = parts[i]
        # An empty part after this one means the separator was doubled
        while i + 1 < len(parts) and not parts[i + 1]:
            field += PRODUCT_FIELD_SEPARATOR
            if i + 2 < len(parts) and parts[i + 2]:
                field += parts[i + 2]
            i += 2
        fields.append(field)
        i += 1

    return fields


def parse_product(payload: str) -> Product:
    """Decode one packed ``pr<N>`` value into canonical fields."""
    product: Product = {}
    for field in split_product_fields(payload):
        name = GA4_PRODUCT_FIELDS.get(field[:2])
        if name is None:
            continue
        product[name] = field[2:]
    return product


def parse_ga4_hit(url: str) -> EventRecord:
    """
    Extract the event name, parameters and products from a GA4 hit.

    Args:
        url: Full hit URL as captured

    Returns:
        EventRecord with ``products`` and ``params`` always set (possibly
        empty) and ``event`` set only if the hit names one.

    Examples:
        >>> record = parse_ga4_hit(
        ...     "https://example.com/g/collect?v=2&en=purchase&pr1=idA~nmShoe"
        ... )
        >>> record.event, record.products
        ('purchase', {1: {'item_id': 'A', 'item_name': 'Shoe'}})
    """
    if not url:
        return EventRecord(params={})

    products: dict[int, Product] = {}
    for match in GA4_PRODUCT_REGEX.finditer(url):
        products[int(match.group(1))] = parse_product(match.group(2))

    params: dict[str, str] = {}
    for match in GA4_PARAM_REGEX.finditer(url):
        params[match.group(1)] = match.group(2)

    # Only the first event name counts
    event_match = GA4_EVENT_NAME_REGEX.search(url)

    return EventRecord(
        event=event_match.group(1) if event_match else None,
        products=dict(sorted(products.items())),
        params=params,
    )
