"""
Ecommerce data from Universal Analytics (measurement protocol) hits.

Legacy hits spread every field over its own query parameter:

- ``pr<N><CC>``: product N, field CC
- ``il<N>nm``: name of impression list N
- ``il<N>pi<M><CC>``: impression M in list N, field CC
- ``promo<N><CC>``: promotion N, field CC
- ``pa``, ``ti``, ``tr``, ...: action level parameters

Two test tags send these hits and are told apart by their event label:
``GTM`` for the tag that only speaks the legacy schema and ``GA4`` for the
tag with GA4 schema support switched on.

Field codes are translated to GA4 field names so both protocols decode
into the same EventRecord shape.
"""

import re

from .models import EventRecord, ImpressionList, Product

# Event labels of the two test tags
LEGACY_EVENT_LABEL = "GTM"
UNIFIED_EVENT_LABEL = "GA4"

# Indexes are one to nine ASCII digits in every pattern below.

# Group 1 is the product index, group 2 the field code, group 3 the value
UA_PRODUCT_REGEX = re.compile(r"&pr(\d{1,9})(\w\w)=?([^&]*)", re.ASCII)

# Group 1 is the list index, group 2 the list name
UA_LIST_NAME_REGEX = re.compile(r"&il(\d{1,9})nm=([^&]*)", re.ASCII)

# Group 1 is the list index, group 2 the impression index within the list,
# group 3 the field code, group 4 the value
UA_IMPRESSION_REGEX = re.compile(r"&il(\d{1,9})pi(\d{1,9})(\w\w)=([^&]*)", re.ASCII)

# Group 1 is the promo index, group 2 the field code, group 3 the value
UA_PROMO_REGEX = re.compile(r"&promo(\d{1,9})(\w\w)=([^&]*)", re.ASCII)

# Group 1 is the parameter code, group 2 the value
UA_PARAMS_REGEX = re.compile(r"&(pa|ti|ta|tr|tt|ts|tcc|pal|cos|col|promoa|cu)=([^&]*)", re.ASCII)

# =============================================================================
# FIELD CODES
# =============================================================================

UA_PRODUCT_FIELDS = {
    "id": "item_id",
    "nm": "item_name",
    "br": "item_brand",
    "ca": "item_category",
    "va": "item_variant",
    "qt": "quantity",
    "pr": "price",
    "cc": "coupon",
    "ps": "index",
}

UA_IMPRESSION_FIELDS = {
    "id": "item_id",
    "nm": "item_name",
    "br": "item_brand",
    "ca": "item_category",
    "va": "item_variant",
    "ps": "index",
    "pr": "price",
}

UA_PROMOTION_FIELDS = {
    "id": "item_id",
    "nm": "item_name",
    "cr": "creative_name",
    "ps": "index",
}

# Action level parameters -> GA4 event parameters
UA_PARAMS = {
    "pa": "product_action",
    "ti": "transaction_id",
    "ta": "affiliation",
    "tr": "value",
    "tt": "tax",
    "ts": "shipping",
    "tcc": "coupon",
    "pal": "item_list_name",
    "cos": "checkout_step",
    "col": "checkout_option",
    "promoa": "promo_action",
    "cu": "currency",
}


def _hit_regex(label: str) -> re.Pattern:
    return re.compile(r"/collect\?.*&el=" + re.escape(label), re.ASCII)


def is_ua_legacy_hit(url: str, label: str = LEGACY_EVENT_LABEL) -> bool:
    """Check if a URL is a hit from the legacy-schema-only UA tag."""
    if not url:
        return False
    return _hit_regex(label).search(url) is not None


def is_ua_ga4_hit(url: str, label: str = UNIFIED_EVENT_LABEL) -> bool:
    """Check if a URL is a hit from the UA tag with GA4 schema support."""
    if not url:
        return False
    return _hit_regex(label).search(url) is not None


def _parse_products(url: str) -> dict[int, Product]:
    products: dict[int, Product] = {}
    for match in UA_PRODUCT_REGEX.finditer(url):
        field = UA_PRODUCT_FIELDS.get(match.group(2))
        if field is None:
            continue
        products.setdefault(int(match.group(1)), {})[field] = match.group(3)
    return products


def _parse_impressions(url: str) -> dict[int, dict]:
    """Collect list names and impression fields into one mapping per list."""
    lists: dict[int, dict] = {}

    for match in UA_LIST_NAME_REGEX.finditer(url):
        impression_list = lists.setdefault(int(match.group(1)), {"impressions": {}})
        impression_list["name"] = match.group(2)

    for match in UA_IMPRESSION_REGEX.finditer(url):
        field = UA_IMPRESSION_FIELDS.get(match.group(3))
        if field is None:
            continue
        impression_list = lists.setdefault(int(match.group(1)), {"impressions": {}})
        impression = impression_list["impressions"].setdefault(int(match.group(2)), {})
        impression[field] = match.group(4)

    return lists


def _parse_promos(url: str) -> dict[int, Product]:
    promos: dict[int, Product] = {}
    for match in UA_PROMO_REGEX.finditer(url):
        field = UA_PROMOTION_FIELDS.get(match.group(2))
        if field is None:
            continue
        promos.setdefault(int(match.group(1)), {})[field] = match.group(3)
    return promos


def _parse_params(url: str) -> dict[str, str]:
    params: dict[str, str] = {}
    for match in UA_PARAMS_REGEX.finditer(url):
        params[UA_PARAMS[match.group(1)]] = match.group(2)
    return params


def parse_measurement_protocol_hit(url: str) -> EventRecord:
    """
    Extract products, impressions, promotions and action parameters from a
    measurement protocol hit.

    Each section is scanned independently. Fields that share an index are
    merged into the same entry, so parameter order in the URL does not
    matter. Unknown field codes are ignored.

    Args:
        url: Full hit URL as captured

    Returns:
        EventRecord with ``products``, ``impressions``, ``promos`` and
        ``params`` always set (possibly empty). ``event`` is never set;
        legacy hits carry no GA4 event name.
    """
    if not url:
        return EventRecord(impressions={}, promos={}, params={})

    impressions = {
        index: ImpressionList(
            name=impression_list.get("name"),
            impressions=dict(sorted(impression_list["impressions"].items())),
        )
        for index, impression_list in sorted(_parse_impressions(url).items())
    }

    return EventRecord(
        products=dict(sorted(_parse_products(url).items())),
        impressions=impressions,
        promos=dict(sorted(_parse_promos(url).items())),
        params=_parse_params(url),
    )
