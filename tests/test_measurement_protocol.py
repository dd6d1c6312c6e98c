"""Tests for measurement protocol (Universal Analytics) hit decoding."""

from ecommerce_hits.measurement_protocol import (
    is_ua_ga4_hit,
    is_ua_legacy_hit,
    parse_measurement_protocol_hit,
)
from ecommerce_hits.models import ImpressionList

BASE_URL = "https://www.google-analytics.com/collect?v=1&t=event&tid=UA-1-1&ec=Ecommerce"


class TestUaRecognition:
    """Test the two event-label predicates."""

    def test_legacy_label(self):
        url = f"{BASE_URL}&el=GTM&pa=detail"
        assert is_ua_legacy_hit(url) is True
        assert is_ua_ga4_hit(url) is False

    def test_ga4_label(self):
        url = f"{BASE_URL}&el=GA4&pa=detail"
        assert is_ua_ga4_hit(url) is True
        assert is_ua_legacy_hit(url) is False

    def test_label_must_follow_collect(self):
        url = "https://example.com/page?el=GTM&x=/collect?"
        assert is_ua_legacy_hit(url) is False

    def test_missing_label(self):
        assert is_ua_legacy_hit(f"{BASE_URL}&pa=detail") is False
        assert is_ua_ga4_hit(f"{BASE_URL}&pa=detail") is False

    def test_predicates_are_independent(self):
        """Both predicates may match the same string."""
        url = f"{BASE_URL}&el=GTM&el=GA4"
        assert is_ua_legacy_hit(url) is True
        assert is_ua_ga4_hit(url) is True

    def test_custom_label(self):
        url = f"{BASE_URL}&el=legacy-tag"
        assert is_ua_legacy_hit(url, label="legacy-tag") is True
        assert is_ua_legacy_hit(url) is False

    def test_label_is_literal(self):
        """Regex characters in a label are not special."""
        assert is_ua_ga4_hit(f"{BASE_URL}&el=GA4", label="G.4") is False

    def test_empty_url(self):
        assert is_ua_legacy_hit("") is False
        assert is_ua_ga4_hit("") is False


class TestUaDecoding:
    """Test parse_measurement_protocol_hit."""

    def test_combined_hit(self):
        url = (
            f"{BASE_URL}&el=GTM&pr1id=SKU1&pr1nm=Widget&il2nm=Homepage"
            "&il2pi0id=SKU2&promo3id=P9&pa=purchase&tr=19.99"
        )
        record = parse_measurement_protocol_hit(url)
        assert record.products == {1: {"item_id": "SKU1", "item_name": "Widget"}}
        assert record.impressions == {
            2: ImpressionList(name="Homepage", impressions={0: {"item_id": "SKU2"}}),
        }
        assert record.promos == {3: {"item_id": "P9"}}
        assert record.params == {"product_action": "purchase", "value": "19.99"}
        assert record.event is None

    def test_product_fields(self):
        url = (
            f"{BASE_URL}&pr1id=A&pr1nm=Shoe&pr1br=Acme&pr1ca=Shoes&pr1va=Red"
            "&pr1qt=2&pr1pr=9.99&pr1cc=SAVE&pr1ps=4"
        )
        record = parse_measurement_protocol_hit(url)
        assert record.products[1] == {
            "item_id": "A",
            "item_name": "Shoe",
            "item_brand": "Acme",
            "item_category": "Shoes",
            "item_variant": "Red",
            "quantity": "2",
            "price": "9.99",
            "coupon": "SAVE",
            "index": "4",
        }

    def test_fields_merge_across_url(self):
        """Fields for one index may be spread across the URL."""
        url = f"{BASE_URL}&pr2id=B&pa=add&pr1id=A&pr2nm=Second"
        record = parse_measurement_protocol_hit(url)
        assert record.products == {
            1: {"item_id": "A"},
            2: {"item_id": "B", "item_name": "Second"},
        }
        assert list(record.products) == [1, 2]

    def test_multi_digit_indices(self):
        record = parse_measurement_protocol_hit(f"{BASE_URL}&pr12id=L&il10pi11nm=Imp")
        assert record.products == {12: {"item_id": "L"}}
        assert record.impressions[10].impressions == {11: {"item_name": "Imp"}}

    def test_unknown_product_code_creates_nothing(self):
        record = parse_measurement_protocol_hit(f"{BASE_URL}&pr1zz=junk&pr3id=C")
        assert record.products == {3: {"item_id": "C"}}

    def test_impression_fields(self):
        url = (
            f"{BASE_URL}&il1pi1id=A&il1pi1nm=Shoe&il1pi1br=Acme&il1pi1ca=Shoes"
            "&il1pi1va=Red&il1pi1ps=1&il1pi1pr=9.99&il1pi1qt=5"
        )
        record = parse_measurement_protocol_hit(url)
        impression_list = record.impressions[1]
        assert impression_list.name is None
        assert impression_list.impressions == {1: {
            "item_id": "A",
            "item_name": "Shoe",
            "item_brand": "Acme",
            "item_category": "Shoes",
            "item_variant": "Red",
            "index": "1",
            "price": "9.99",
        }}

    def test_impression_before_list_name(self):
        """The list name merges into a list created by its impressions."""
        url = f"{BASE_URL}&il1pi2id=B&il1nm=Related&il1pi1id=A"
        impression_list = parse_measurement_protocol_hit(url).impressions[1]
        assert impression_list.name == "Related"
        assert [index for index, _ in impression_list.iter_impressions()] == [1, 2]

    def test_impression_lists_are_sparse(self):
        url = f"{BASE_URL}&il3nm=Third&il1nm=First"
        record = parse_measurement_protocol_hit(url)
        assert [index for index, _ in record.iter_impressions()] == [1, 3]
        assert record.impressions[3].impressions == {}

    def test_promotion_fields(self):
        url = f"{BASE_URL}&promo1id=P1&promo1nm=Summer&promo1cr=Banner&promo1ps=top&promo1xx=no"
        record = parse_measurement_protocol_hit(url)
        assert record.promos == {1: {
            "item_id": "P1",
            "item_name": "Summer",
            "creative_name": "Banner",
            "index": "top",
        }}

    def test_all_action_params(self):
        url = (
            f"{BASE_URL}&pa=checkout&ti=T1&ta=Store&tr=10.00&tt=1.00&ts=2.00"
            "&tcc=CODE&pal=Search&cos=2&col=Visa&promoa=click&cu=EUR"
        )
        record = parse_measurement_protocol_hit(url)
        assert record.params == {
            "product_action": "checkout",
            "transaction_id": "T1",
            "affiliation": "Store",
            "value": "10.00",
            "tax": "1.00",
            "shipping": "2.00",
            "coupon": "CODE",
            "item_list_name": "Search",
            "checkout_step": "2",
            "checkout_option": "Visa",
            "promo_action": "click",
            "currency": "EUR",
        }

    def test_unlisted_params_ignored(self):
        record = parse_measurement_protocol_hit(f"{BASE_URL}&ea=click&pax=1&el=GTM")
        assert record.params == {}

    def test_empty_url(self):
        record = parse_measurement_protocol_hit("")
        assert record.products == {}
        assert record.impressions == {}
        assert record.promos == {}
        assert record.params == {}

    def test_idempotent(self):
        url = f"{BASE_URL}&pr1id=A&il1nm=L&il1pi1id=B&promo1id=P&pa=detail"
        assert parse_measurement_protocol_hit(url) == parse_measurement_protocol_hit(url)


class TestUaTotality:
    """Test that malformed indexes are skipped instead of failing."""

    def test_oversized_product_index(self):
        record = parse_measurement_protocol_hit(f"{BASE_URL}&pr{'1' * 5000}id=A&pr2id=B")
        assert record.products == {2: {"item_id": "B"}}

    def test_oversized_impression_indexes(self):
        digits = "1" * 5000
        url = f"{BASE_URL}&il{digits}nm=L&il{digits}pi1id=A&il1pi{digits}id=B"
        assert parse_measurement_protocol_hit(url).impressions == {}

    def test_oversized_promo_index(self):
        record = parse_measurement_protocol_hit(f"{BASE_URL}&promo{'1' * 5000}id=P")
        assert record.promos == {}

    def test_largest_index(self):
        record = parse_measurement_protocol_hit(f"{BASE_URL}&pr999999999id=A")
        assert record.products == {999999999: {"item_id": "A"}}

    def test_non_ascii_indexes_ignored(self):
        url = f"{BASE_URL}&pr١id=A&il١nm=L&il1pi١id=B&promo١id=P"
        record = parse_measurement_protocol_hit(url)
        assert record.products == {}
        assert record.impressions == {}
        assert record.promos == {}
