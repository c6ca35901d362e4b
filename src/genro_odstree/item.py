# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Item - the order-preserving parsed XML unit.

An Item is a plain dict holding exactly one tag key, whose value is the
ordered list of child Items, plus two optional reserved keys:

- ``':@'``: attribute dict (string to string)
- ``'#text'``: text payload, present only on text items

A document is a list of Items. Using one single-key dict per element keeps
sibling order and repeated tag names intact, which a keyed mapping of
children could not do.

Example:
    >>> item = {'table:table-row': [], ':@': {'table:style-name': 'ro1'}}
    >>> real_key(item)
    'table:table-row'
    >>> real_key({'#text': 'hello'}) is None
    True
"""

from __future__ import annotations

from typing import Any

ATTRIB_KEY = ':@'
TEXT_KEY = '#text'

RESERVED_KEYS = frozenset((ATTRIB_KEY, TEXT_KEY))

Item = dict[str, Any]


def real_key(item: Item) -> str | None:
    """Return the tag key of an item, ignoring the reserved markers."""
    for key in item:
        if key not in RESERVED_KEYS:
            return key
    return None


def is_text(item: Item) -> bool:
    """True if the item is a text item (no tag key)."""
    return TEXT_KEY in item and real_key(item) is None


def make_element(tag: str) -> Item:
    """Return a new empty element item."""
    return {tag: []}


def make_text(value: str) -> Item:
    """Return a new text item."""
    return {TEXT_KEY: value}
