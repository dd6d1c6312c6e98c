"""
Turn captured hit URLs into readable reports.

Every captured request goes through all recognition predicates. Each one
that matches contributes a HitReport with the decoded record, a plain
text summary and, for GA4 hits, the recommended gtag command.
"""

import logging

from .config import InspectorConfig
from .ga4 import is_ga4_hit, parse_ga4_hit
from .measurement_protocol import (
    is_ua_ga4_hit,
    is_ua_legacy_hit,
    parse_measurement_protocol_hit,
)
from .models import EventRecord, HitReport, HitSource, Product
from .recommend import build_gtag_command

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No ecommerce data found"


def _field_lines(fields: Product, indent: str) -> list[str]:
    return [f"{indent}{name}: {value}" for name, value in fields.items()]


def summarize_record(record: EventRecord) -> str:
    """
    Describe a decoded hit one field per line.

    Products, impression lists, impressions and promos are listed by
    ascending index; indexes missing from the hit are skipped.

    Example:
        Product 1
          item_id: SKU1
        Impression List 2
          Name: Homepage
          Impression 0
            item_id: SKU2
        Additional Parameters:
          value: 19.99
    """
    lines = []

    for index, product in record.iter_products():
        lines.append(f"Product {index}")
        lines.extend(_field_lines(product, "  "))

    for list_index, impression_list in record.iter_impressions():
        lines.append(f"Impression List {list_index}")
        if impression_list.name:
            lines.append(f"  Name: {impression_list.name}")
        for index, impression in impression_list.iter_impressions():
            lines.append(f"  Impression {index}")
            lines.extend(_field_lines(impression, "    "))

    for index, promo in record.iter_promos():
        lines.append(f"Promo {index}")
        lines.extend(_field_lines(promo, "  "))

    if record.params:
        lines.append("Additional Parameters:")
        lines.extend(_field_lines(record.params, "  "))

    if not lines:
        return NO_DATA_MESSAGE
    return "\n".join(lines)


def inspect_hit(url: str, config: InspectorConfig | None = None) -> list[HitReport]:
    """
    Decode a captured URL with every decoder whose predicate matches.

    Args:
        url: Full request URL as captured
        config: Recognition settings; defaults to InspectorConfig()

    Returns:
        One report per matching predicate, in the order GA4, UA legacy,
        UA with GA4 schema. Empty if the URL is not an analytics hit.
    """
    config = config or InspectorConfig()
    reports = []

    if is_ga4_hit(url, config.ga4_path_marker):
        record = parse_ga4_hit(url)
        reports.append(HitReport(
            source=HitSource.GA4,
            record=record,
            summary=summarize_record(record),
            command=build_gtag_command(record) if config.render_commands else None,
        ))

    ua_sources = [
        (HitSource.UA_LEGACY, is_ua_legacy_hit(url, config.legacy_event_label)),
        (HitSource.UA_GA4, is_ua_ga4_hit(url, config.unified_event_label)),
    ]
    for source, matched in ua_sources:
        if not matched:
            continue
        record = parse_measurement_protocol_hit(url)
        reports.append(HitReport(
            source=source,
            record=record,
            summary=summarize_record(record),
        ))

    for report in reports:
        logger.debug(
            f"{report.source.value} hit: event={report.record.event!r}, "
            f"{len(report.record.products)} products"
        )

    return reports
