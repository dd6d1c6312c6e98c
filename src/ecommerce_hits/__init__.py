"""
Ecommerce hit inspection for GA4 and Universal Analytics test pages.

Usage:
    from ecommerce_hits import setup_inspector

    inspector = setup_inspector(endpoint="/schema-test")

    # Include the decode/identify routes
    app.include_router(inspector.router, prefix="/schema-test")

    # In templates: {{ inspector.observer_script() }}

    # Or use it directly
    for report in inspector.inspect(url):
        print(report.summary)
"""

from typing import Any

from .config import InspectorConfig, InvalidConfigError
from .ga4 import is_ga4_hit, parse_ga4_hit
from .measurement_protocol import (
    LEGACY_EVENT_LABEL,
    UNIFIED_EVENT_LABEL,
    is_ua_ga4_hit,
    is_ua_legacy_hit,
    parse_measurement_protocol_hit,
)
from .models import Api, EventRecord, HitReport, HitSource, ImpressionList, KnownSchema
from .params import ParamsSyntaxError, parse_params
from .recommend import build_gtag_command
from .report import inspect_hit, summarize_record
from .routes import build_observer_script, create_inspector_router
from .schema import identify_schema

__version__ = "0.1.0"
__all__ = [
    "setup_inspector", "Inspector", "InspectorConfig", "InvalidConfigError",
    "EventRecord", "ImpressionList", "HitReport", "HitSource", "Api", "KnownSchema",
    "is_ga4_hit", "parse_ga4_hit",
    "is_ua_legacy_hit", "is_ua_ga4_hit", "parse_measurement_protocol_hit",
    "identify_schema", "build_gtag_command", "summarize_record", "inspect_hit",
    "parse_params", "ParamsSyntaxError",
]


class Inspector:
    """Main inspection interface for a test page."""

    def __init__(self, config: InspectorConfig):
        self.config = config
        self.router = create_inspector_router(config)

    def observer_script(self) -> str:
        """Generate the observer script HTML for templates."""
        return build_observer_script(self.config.observer_url)

    def inspect(self, url: str) -> list[HitReport]:
        """Decode a captured request URL with every matching decoder."""
        return inspect_hit(url, self.config)

    def classify(self, api: Api | str, params: Any) -> KnownSchema:
        """Identify the schema of a parameter object or its literal text.

        Raises:
            ParamsSyntaxError: If ``params`` is text that cannot be parsed
        """
        if isinstance(params, str):
            params = parse_params(params, max_length=self.config.max_params_length)
        return identify_schema(api, params)


def setup_inspector(
    endpoint: str = "",
    legacy_event_label: str = LEGACY_EVENT_LABEL,
    unified_event_label: str = UNIFIED_EVENT_LABEL,
    **options: Any,
) -> Inspector:
    """
    Set up hit inspection for a test page.

    Args:
        endpoint: Prefix the router will be mounted under (e.g., "/schema-test")
        legacy_event_label: Event label of the UA tag that only speaks the
            legacy schema
        unified_event_label: Event label of the UA tag with GA4 schema support
        **options: Any other InspectorConfig field

    Returns:
        Inspector instance with router, observer_script(), inspect() and classify()
    """
    return Inspector(InspectorConfig(
        endpoint=endpoint,
        legacy_event_label=legacy_event_label,
        unified_event_label=unified_event_label,
        **options,
    ))
