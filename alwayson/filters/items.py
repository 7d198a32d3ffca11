"""
Item picking.

Turns a usage API response into readings and drops the intervals
that carry no information.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from alwayson.core.exceptions import ValidationError
from alwayson.core.types import Reading


logger = logging.getLogger(__name__)


def pick_items(response: Mapping[str, Any]) -> list[Reading]:
    """
    Extract readings from a usage response, dropping zero-usage items.

    Args:
        response: Mapping with an "items" list of {"timestamp", "usage", ...}
                  dicts (Reading objects are accepted as well)

    Returns:
        Readings with usage != 0, in response order

    Raises:
        ValidationError: If the response has no items list or an item is malformed
    """
    if not isinstance(response, Mapping) or "items" not in response:
        raise ValidationError("Usage response has no items list", field="items")

    items = response["items"]
    if isinstance(items, (str, bytes)) or not isinstance(items, Sequence):
        raise ValidationError(
            "Usage response items is not a list",
            field="items",
            value=type(items).__name__,
        )

    readings = [
        item if isinstance(item, Reading) else Reading.from_dict(item)
        for item in items
    ]
    picked = [r for r in readings if r.usage != 0]

    if len(picked) < len(readings):
        logger.debug(f"Dropped {len(readings) - len(picked)} zero-usage items")
    return picked
