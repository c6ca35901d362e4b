# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""XML <-> Item conversion.

Parsing keeps qualified names exactly as written ('office:body',
'table:name') and turns namespace declarations into ``xmlns:*`` attributes,
so a document can be edited by tag name alone and written back with its
prefixes intact. Text and tails become text items in document order.
Comments and processing instructions are dropped.

Example:
    >>> items = parse_items(b'<a:x xmlns:a="urn:a" a:k="1">hi</a:x>')
    >>> items
    [{'a:x': [{'#text': 'hi'}], ':@': {'xmlns:a': 'urn:a', 'a:k': '1'}}]
    >>> data = build_xml(items)  # same document, with an XML declaration
"""

from __future__ import annotations

from lxml import etree

from .exceptions import XmlFormatError
from .item import ATTRIB_KEY, TEXT_KEY, Item, is_text, make_text, real_key

XML_NAMESPACE = 'http://www.w3.org/XML/1998/namespace'

_PARSER = etree.XMLParser(
    resolve_entities=False,
    no_network=True,
    remove_comments=True,
    remove_pis=True,
)


# ==================== Parsing ====================


def parse_items(data: bytes) -> list[Item]:
    """Parse XML bytes into a list of items.

    Args:
        data: The XML document.

    Returns:
        A list holding the root element item.

    Raises:
        XmlFormatError: If the XML is not well-formed.
    """
    try:
        root = etree.fromstring(data, parser=_PARSER)
    except etree.XMLSyntaxError as e:
        raise XmlFormatError(f"Malformed XML: {e}") from e
    return [_element_to_item(root, {})]


def _element_to_item(
    element: etree._Element, parent_nsmap: dict[str | None, str]
) -> Item:
    nsmap = element.nsmap
    children: list[Item] = []
    item: Item = {_element_name(element): children}

    attrib: dict[str, str] = {}
    for prefix, uri in nsmap.items():
        if parent_nsmap.get(prefix) != uri:
            attrib[f'xmlns:{prefix}' if prefix else 'xmlns'] = uri
    for key, value in element.attrib.items():
        attrib[_attribute_name(key, nsmap)] = value
    if attrib:
        item[ATTRIB_KEY] = attrib

    if element.text:
        children.append(make_text(element.text))
    for child in element:
        if isinstance(child.tag, str):
            children.append(_element_to_item(child, nsmap))
        if child.tail:
            children.append(make_text(child.tail))
    return item


def _element_name(element: etree._Element) -> str:
    localname = etree.QName(element).localname
    if element.prefix:
        return f'{element.prefix}:{localname}'
    return localname


def _attribute_name(key: str, nsmap: dict[str | None, str]) -> str:
    qname = etree.QName(key)
    if qname.namespace is None:
        return qname.localname
    if qname.namespace == XML_NAMESPACE:
        return f'xml:{qname.localname}'
    for prefix, uri in nsmap.items():
        if prefix and uri == qname.namespace:
            return f'{prefix}:{qname.localname}'
    raise XmlFormatError(f"No prefix bound to namespace '{qname.namespace}'")


# ==================== Serialization ====================


def build_xml(items: list[Item]) -> bytes:
    """Serialize a list of items back to UTF-8 XML.

    Args:
        items: Top-level items; exactly one must be an element.

    Returns:
        The XML document, with declaration.

    Raises:
        XmlFormatError: If there is not exactly one root element, or a
            prefix is used without a matching xmlns declaration.
    """
    roots = [item for item in items if real_key(item) is not None]
    if len(roots) != 1:
        raise XmlFormatError(f"Expected one root element, found {len(roots)}")
    root = _item_to_element(roots[0], {'xml': XML_NAMESPACE}, None)
    return etree.tostring(root, xml_declaration=True, encoding='UTF-8')


def _item_to_element(
    item: Item,
    scope: dict[str | None, str],
    parent: etree._Element | None,
) -> etree._Element:
    tag = real_key(item)
    attrib = item.get(ATTRIB_KEY) or {}

    declared: dict[str | None, str] = {}
    for key, value in attrib.items():
        if key == 'xmlns':
            declared[None] = value
        elif key.startswith('xmlns:'):
            declared[key[6:]] = value
    scope = {**scope, **declared}

    clark = _clark_name(tag, scope, attribute=False)
    if parent is None:
        element = etree.Element(clark, nsmap=declared or None)
    else:
        element = etree.SubElement(parent, clark, nsmap=declared or None)

    for key, value in attrib.items():
        if key == 'xmlns' or key.startswith('xmlns:'):
            continue
        element.set(_clark_name(key, scope, attribute=True), value)

    last: etree._Element | None = None
    for child in item[tag]:
        if is_text(child):
            text = child[TEXT_KEY]
            if last is None:
                element.text = (element.text or '') + text
            else:
                last.tail = (last.tail or '') + text
        elif real_key(child) is not None:
            last = _item_to_element(child, scope, element)
    return element


def _clark_name(name: str, scope: dict[str | None, str], attribute: bool) -> str:
    if ':' in name:
        prefix, localname = name.split(':', 1)
        if prefix not in scope:
            raise XmlFormatError(f"Undeclared namespace prefix in '{name}'")
        return f'{{{scope[prefix]}}}{localname}'
    # Unprefixed attributes never take the default namespace.
    if not attribute and None in scope:
        return f'{{{scope[None]}}}{name}'
    return name
