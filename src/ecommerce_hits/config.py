"""
Configuration for the ecommerce hit inspector.
"""
import logging
from dataclasses import dataclass

from .ga4 import GA4_PATH_MARKER
from .measurement_protocol import LEGACY_EVENT_LABEL, UNIFIED_EVENT_LABEL
from .params import MAX_PARAMS_LENGTH

logger = logging.getLogger(__name__)


class InvalidConfigError(ValueError):
    """Raised when an inspector setting can never match or parse anything."""
    pass


@dataclass
class InspectorConfig:
    """Configuration for a single inspector instance.

    Usage:
        config = InspectorConfig(
            endpoint="/schema-test",     # where the router is mounted
            legacy_event_label="GTM",    # event label of the UA-only tag
            unified_event_label="GA4",   # event label of the UA tag with GA4 schema
        )
    """

    # Mount prefix of the router, used by the observer script
    endpoint: str = ""

    # Hit recognition
    ga4_path_marker: str = GA4_PATH_MARKER
    legacy_event_label: str = LEGACY_EVENT_LABEL
    unified_event_label: str = UNIFIED_EVENT_LABEL

    # Parameter text limit for schema identification
    max_params_length: int = MAX_PARAMS_LENGTH

    # Attach recommended gtag commands to GA4 reports
    render_commands: bool = True

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_recognition()

        if self.max_params_length <= 0:
            raise InvalidConfigError(
                f"max_params_length must be positive. Got {self.max_params_length}."
            )

    def _validate_recognition(self) -> None:
        """Reject empty markers and warn about labels that overlap."""
        if not self.ga4_path_marker:
            raise InvalidConfigError("ga4_path_marker must not be empty")
        if not self.legacy_event_label or not self.unified_event_label:
            raise InvalidConfigError("Event labels must not be empty")

        if self.legacy_event_label == self.unified_event_label:
            logger.warning(
                f"Legacy and unified event labels are both {self.legacy_event_label!r}; "
                f"every UA hit will be reported twice"
            )
        elif self.unified_event_label.startswith(self.legacy_event_label) or \
                self.legacy_event_label.startswith(self.unified_event_label):
            # Labels match as prefixes, so the longer one also hits the shorter
            logger.warning(
                f"Event labels {self.legacy_event_label!r} and "
                f"{self.unified_event_label!r} overlap; some UA hits will match both"
            )

    @property
    def observer_url(self) -> str:
        """URL the observer script posts captured hits to."""
        return f"{self.endpoint.rstrip('/')}/hits"
