"""
Ecommerce schema identification.

Given the API a page used and the parameter object it passed, work out
which ecommerce schema the data follows:

- ga4-gtag: gtag() with GA4 style items (item_id, item_name, ...)
- ua-gtag: gtag() with Universal Analytics style items (id, name)
- gtag-unknown: gtag() with ecommerce markers but no telling items
- ga4-gtm: dataLayer with GA4 markers, including GA4 items inside a UA
  style action object
- ua-gtm: dataLayer with the Enhanced Ecommerce action/product schema
- unknown: no ecommerce data recognised

Markers are not mutually exclusive, so the checks run in a fixed order and
the first one that matches wins.

A marker counts as present when it is truthy in the JavaScript sense.
None, False, 0, NaN and "" are absent. Lists and dicts are present even
when empty.
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from .models import Api, KnownSchema

# Enhanced Ecommerce action objects, checked in this order
ACTION_KEYS = (
    "detail",
    "click",
    "add",
    "remove",
    "purchase",
    "refund",
    "checkout",
    "checkoutStep",
    "promoView",
    "promoClick",
)


def _is_set(value: Any) -> bool:
    """JavaScript truthiness."""
    if value is None or value is False:
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # NaN is the only value not equal to itself
        return value == value and value != 0
    if isinstance(value, str):
        return value != ""
    return True


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return None


class _View:
    """Read the declared fields off an arbitrary object; missing keys are None."""

    @classmethod
    def of(cls, obj: Any):
        return cls(**{f.name: _get(obj, f.name) for f in fields(cls)})


# =============================================================================
# TYPED VIEWS
# =============================================================================

@dataclass(frozen=True)
class _ItemView(_View):
    id: Any = None
    name: Any = None
    item_id: Any = None
    item_name: Any = None
    promotion_id: Any = None
    promotion_name: Any = None
    creative_name: Any = None

    def schema(self) -> KnownSchema | None:
        # UA keys win when an item carries both
        if _is_set(self.id) or _is_set(self.name):
            return KnownSchema.GTAG_UA
        if any(_is_set(v) for v in (
            self.item_id,
            self.item_name,
            self.promotion_id,
            self.promotion_name,
            self.creative_name,
        )):
            return KnownSchema.UNIFIED
        return None


@dataclass(frozen=True)
class _GtagView(_View):
    items: Any = None
    transaction_id: Any = None
    value: Any = None
    currency: Any = None

    @property
    def has_ecommerce_markers(self) -> bool:
        return any(_is_set(v) for v in (
            self.items,
            self.transaction_id,
            self.value,
            self.currency,
        ))


@dataclass(frozen=True)
class _ActionView(_View):
    actionField: Any = None
    products: Any = None
    promotions: Any = None
    items: Any = None

    @property
    def has_ua_markers(self) -> bool:
        return any(_is_set(v) for v in (self.actionField, self.products, self.promotions))


@dataclass(frozen=True)
class _EcommerceView(_View):
    items: Any = None
    transaction_id: Any = None
    value: Any = None
    impressions: Any = None
    detail: Any = None
    click: Any = None
    add: Any = None
    remove: Any = None
    purchase: Any = None
    refund: Any = None
    checkout: Any = None
    checkoutStep: Any = None
    promoView: Any = None
    promoClick: Any = None

    @property
    def has_ga4_markers(self) -> bool:
        return any(_is_set(v) for v in (self.items, self.transaction_id, self.value))

    def first_action(self) -> _ActionView | None:
        for key in ACTION_KEYS:
            action = getattr(self, key)
            if _is_set(action):
                return _ActionView.of(action)
        return None


# =============================================================================
# IDENTIFICATION
# =============================================================================

def _identify_gtag_schema(params: Any) -> KnownSchema:
    view = _GtagView.of(params)
    if not view.has_ecommerce_markers:
        return KnownSchema.UNKNOWN

    items = view.items
    if not isinstance(items, (list, tuple)) or not items:
        # Nothing to tell UA and GA4 apart with
        return KnownSchema.UNKNOWN_GTAG

    schema = None
    for item in items:
        item_schema = _ItemView.of(item).schema()
        if item_schema is None:
            return KnownSchema.UNKNOWN_GTAG
        if schema is not None and schema != item_schema:
            # Mixed schemas
            return KnownSchema.UNKNOWN_GTAG
        schema = item_schema
    return schema


def _identify_data_layer_schema(params: Any) -> KnownSchema:
    ecommerce = _get(params, "ecommerce")
    if not _is_set(ecommerce):
        return KnownSchema.UNKNOWN

    view = _EcommerceView.of(ecommerce)
    if view.has_ga4_markers:
        return KnownSchema.GTM_LEGACY_GA4

    action = view.first_action()
    if action is not None:
        if action.has_ua_markers:
            return KnownSchema.GTM_UA
        if _is_set(action.items):
            # GA4 items inside a UA action object
            return KnownSchema.GTM_LEGACY_GA4

    if _is_set(view.impressions):
        return KnownSchema.GTM_UA

    return KnownSchema.UNKNOWN


def identify_schema(api: Api | str, params: Any) -> KnownSchema:
    """
    Identify the ecommerce schema of an API call.

    Args:
        api: Api member or its value ("gtag" or "dataLayer")
        params: Fully evaluated parameter object of the call

    Returns:
        The schema this combination most likely belongs to. Never raises;
        unrecognised APIs and shapes come back as KnownSchema.UNKNOWN.

    Examples:
        >>> identify_schema(Api.GTAG, {"items": [{"item_id": "a"}]})
        <KnownSchema.UNIFIED: 'ga4-gtag'>

        >>> identify_schema("dataLayer", {"ecommerce": {"impressions": [{}]}})
        <KnownSchema.GTM_UA: 'ua-gtm'>
    """
    try:
        api = Api(api)
    except (ValueError, TypeError):
        return KnownSchema.UNKNOWN

    if api == Api.GTAG:
        return _identify_gtag_schema(params)
    return _identify_data_layer_schema(params)
