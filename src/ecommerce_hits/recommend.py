"""
Recommend a GA4 gtag command that sends the same data as a decoded hit.
"""

from .models import EventRecord

# Products are 1-based in the gtag command; index 0 is never rendered
FIRST_ITEM_INDEX = 1


def build_gtag_command(record: EventRecord) -> str:
    """
    Render a ``gtag('event', ...)`` call for a decoded hit.

    Values are wrapped in single quotes as-is. Quotes inside a value are not
    escaped, so the output is a recommendation to read, not code to paste
    blindly.

    Examples:
        >>> print(build_gtag_command(EventRecord(
        ...     event="purchase",
        ...     params={"value": "9.99"},
        ...     products={1: {"item_id": "X"}},
        ... )))
        gtag('event', 'purchase', {
          'value': '9.99',
          'items': [
            {
              'item_id': 'X',
            },
          ],
        });
    """
    params_string = ""
    for name, value in (record.params or {}).items():
        params_string += f"\n  '{name}': '{value}',"

    items_string = ""
    for index, product in record.iter_products():
        if index < FIRST_ITEM_INDEX:
            continue
        items_string += "    {\n"
        for field, value in product.items():
            items_string += f"      '{field}': '{value}',\n"
        items_string += "    },\n"

    if items_string:
        items_string = f"\n  'items': [\n{items_string}  ],\n"
    else:
        items_string = "\n"

    event = record.event or ""
    return f"gtag('event', '{event}', {{{params_string}{items_string}}});"
