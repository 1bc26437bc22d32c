"""Tag codec: namespace -> key -> values flattened as ``namespace:key=value``.

Separators are not escaped. A namespace containing ``:`` or a key
containing ``=`` does not survive a round trip.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from crawlgraph.codec.document import Document, FieldName
from crawlgraph.models import Tags

LOGGER = logging.getLogger(__name__)

NAMESPACE_SEPARATOR = ":"
KEY_SEPARATOR = "="


def format_tag(namespace: str, key: str, value: str) -> str:
    return f"{namespace}{NAMESPACE_SEPARATOR}{key}{KEY_SEPARATOR}{value}"


def encode_tags(document: Document, tags: Optional[Tags]) -> None:
    """Append one TAG field per value. Writes nothing for empty tags."""
    if not tags:
        return
    for namespace, keys in tags.items():
        for key, values in keys.items():
            for value in values:
                document.add(FieldName.TAG, format_tag(namespace, key, value))


def decode_tags(values: Iterable[str]) -> Tags:
    """Rebuild the nested tag structure from flat TAG values.

    Each value is split on its first ``:`` and then on the first ``=`` of the
    remainder. Values missing either separator are skipped.
    """
    tags: Tags = {}
    for raw in values:
        namespace, sep, key_value = raw.partition(NAMESPACE_SEPARATOR)
        key, sep2, value = key_value.partition(KEY_SEPARATOR)
        if not sep or not sep2:
            LOGGER.warning("Skipping malformed tag value %r", raw)
            continue
        tags.setdefault(namespace, {}).setdefault(key, set()).add(value)
    return tags
