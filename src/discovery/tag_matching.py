"""Delimiter-anchored multi-value tag helpers.

Store tags are scalar strings, so resource series pack the metric type
ids they reference into one ``mtypes`` tag as ``|id1|id2|...|``. A type id
only matches when both surrounding delimiters are present, so ``db1``
never matches a series tagged ``|db10|``.
"""

from __future__ import annotations

import re
from typing import Iterable

from core.constants import TYPE_ID_DELIMITER


def pack_type_ids(type_ids: Iterable[str]) -> str:
    """Pack ids into a delimited tag value, e.g. ``|a|b|``."""
    ids = list(type_ids)
    if not ids:
        return ""
    return TYPE_ID_DELIMITER + TYPE_ID_DELIMITER.join(ids) + TYPE_ID_DELIMITER


def anchored_token(type_id: str) -> str:
    """Return the ``|id|`` token searched for inside a packed tag value."""
    return f"{TYPE_ID_DELIMITER}{type_id}{TYPE_ID_DELIMITER}"


def type_id_pattern(type_id: str) -> str:
    """Return a full-match regex selecting packed values containing the id."""
    return ".*" + re.escape(anchored_token(type_id)) + ".*"


def has_type_id(tag_value: str | None, type_id: str) -> bool:
    """Check a packed tag value for an exact, delimiter-anchored id."""
    if not tag_value:
        return False
    return anchored_token(type_id) in tag_value
