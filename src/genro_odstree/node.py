# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Node classes - live views over parsed XML items.

A Node wraps exactly one Item and keeps an ordered list of child Nodes in
1:1 correspondence with the Item's child list. Every structural mutation
goes through both lists together.

Specialized variants register themselves by tag name::

    class Table(Node, tag='table:table'):
        ...

Whenever a child Node is materialized, its Item's tag is looked up in
KNOWN_TAGS and the most specific class is used; unknown tags fall back to
plain Node.
"""

from __future__ import annotations

import copy
from types import MappingProxyType
from typing import Any, Callable, ClassVar, Generic, Iterator, Mapping, TypeVar

from .exceptions import NodeNotFoundError, StructuralInvariantError
from .item import ATTRIB_KEY, TEXT_KEY, Item, make_element, make_text, real_key

# Tag name -> node class, filled by Node.__init_subclass__
KNOWN_TAGS: dict[str, type[Node]] = {}

N = TypeVar('N', bound='Node')


class Node:
    """A node in a parsed XML document.

    Each node has:
    - item: The wrapped Item (mutated in place)
    - parent: The owning Node, or None for the document root
    - name: The item's tag (empty string for text items and the root wrapper)
    - children: Child Node views, one per child Item

    Example:
        >>> node = Node({'office:body': [{'office:spreadsheet': []}]})
        >>> node.name
        'office:body'
        >>> node.single('office:spreadsheet').parent is node
        True
    """

    __slots__ = ('item', 'parent', 'name', 'children')

    tag: ClassVar[str | None] = None

    def __init_subclass__(cls, tag: str | None = None, **kwargs: Any) -> None:
        """Register the subclass as the node class for ``tag``."""
        super().__init_subclass__(**kwargs)
        if tag is not None:
            cls.tag = tag
            KNOWN_TAGS[tag] = cls

    def __init__(self, item: Item, parent: Node | None = None) -> None:
        """Wrap an item and materialize its children.

        Args:
            item: The Item to wrap.
            parent: The owning Node, or None for a root.
        """
        self.item = item
        self.parent = parent
        self.name = real_key(item) or ''
        self.children: list[Node] = [
            self._create(child) for child in item.get(self.name, ())
        ]

    @staticmethod
    def class_for(item: Item) -> type[Node]:
        """Return the most specific node class for an item."""
        key = real_key(item)
        if key is None and TEXT_KEY in item:
            key = TEXT_KEY
        return KNOWN_TAGS.get(key, Node)

    def _create(self, item: Item) -> Node:
        return Node.class_for(item)(item, self)

    @property
    def _contained(self) -> list[Item]:
        """The wrapped item's child list."""
        return self.item[self.name]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, children={len(self.children)})"

    def as_dict(self) -> Any:
        """Return an inspection view of this subtree.

        Returns:
            Dict with 'name', plus 'attrib' when attributes are set and
            'items' when there are children.
        """
        result: dict[str, Any] = {'name': self.name}
        if self.attrib:
            result['attrib'] = dict(self.attrib)
        if self.children:
            result['items'] = [child.as_dict() for child in self.children]
        return result

    # ==================== Attributes ====================

    @property
    def attrib(self) -> Mapping[str, str]:
        """Read-only view of the item's attributes (empty if none)."""
        return MappingProxyType(self.item.get(ATTRIB_KEY, {}))

    def set_attrib(self, key: str, value: str) -> Node:
        """Set an attribute, creating the attribute map if needed.

        Returns:
            self, for chaining.
        """
        self.item.setdefault(ATTRIB_KEY, {})[key] = value
        return self

    def delete_attrib(self, key: str) -> Node:
        """Remove an attribute. Missing keys are ignored.

        Returns:
            self, for chaining.
        """
        attrib = self.item.get(ATTRIB_KEY)
        if attrib is not None:
            attrib.pop(key, None)
        return self

    # ==================== Navigation ====================

    def single(self, tag: str) -> Node:
        """Return the first child with the given tag.

        Raises:
            NodeNotFoundError: If no child has that tag.
        """
        for child in self.children:
            if child.name == tag:
                return child
        raise NodeNotFoundError(tag, self.name)

    def dig(self, *tags: str) -> Node:
        """Follow single() through each tag in turn.

        Example:
            >>> doc.dig('office:document-content', 'office:body')
        """
        node = self
        for tag in tags:
            node = node.single(tag)
        return node

    def all(self, tag: str) -> NodeSet[Node]:
        """Return every child with the given tag, in document order."""
        return NodeSet(child for child in self.children if child.name == tag)

    def walk(
        self, callback: Callable[[Node], Any] | None = None
    ) -> Iterator[Node] | None:
        """Walk this subtree in pre-order, self first.

        Args:
            callback: Optional function called on each node.
                      If provided, walk returns None.

        Yields:
            Nodes in pre-order if no callback provided.
        """
        if callback is not None:
            callback(self)
            for child in self.children:
                child.walk(callback)
            return None

        def _walk_gen(node: Node) -> Iterator[Node]:
            yield node
            for child in node.children:
                yield from _walk_gen(child)

        return _walk_gen(self)

    @property
    def root(self) -> Node:
        """Get the root node of this tree."""
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    # ==================== Mutation ====================

    def clear(self) -> Node:
        """Remove all children, from both the item and the node list."""
        self._contained.clear()
        self.children.clear()
        return self

    def add_node(self, tag: str) -> Node:
        """Append a new empty child element.

        Returns:
            The new child, already of its most specific node class.
        """
        return self._append(make_element(tag))

    def add_text(self, value: str) -> TextNode:
        """Append a new text child."""
        return self._append(make_text(value))  # type: ignore[return-value]

    def _append(self, item: Item) -> Node:
        contained = self._contained
        node = self._create(item)
        contained.append(item)
        self.children.append(node)
        return node

    def copy_contents_from(self, other: Node) -> Node:
        """Replace this node's content with a deep copy of another subtree.

        This node keeps its position among its parent's children; its item,
        name and children become those of the copy. Nothing is shared with
        ``other`` afterwards.

        Raises:
            StructuralInvariantError: If this node is not among its
                parent's children.
            TypeError: If the copied tag maps to a different node class.
        """
        parent = self.parent
        if parent is None:
            raise StructuralInvariantError("Node has no parent")
        position = next(
            (i for i, child in enumerate(parent.children) if child is self), None
        )
        if position is None:
            raise StructuralInvariantError("This node isn't in its own parent")

        clone = copy.deepcopy(other.item)
        if Node.class_for(clone) is not type(self):
            raise TypeError(
                f"Cannot copy '{real_key(clone)}' content onto a {type(self).__name__}"
            )

        self.item = clone
        self.name = real_key(clone) or ''
        self.children = [self._create(child) for child in clone.get(self.name, ())]
        parent._contained[position] = clone
        # Repeat counts may have changed along with the content.
        parent.propagate_dirty()
        return self

    # ==================== Cached state ====================

    def mark_as_dirty(self) -> None:
        """Drop cached derived state. Overridden by indexed nodes."""
        pass

    def propagate_dirty(self) -> None:
        """Mark this node and its whole subtree as dirty."""
        self.mark_as_dirty()
        for child in self.children:
            child.propagate_dirty()


class TextNode(Node, tag=TEXT_KEY):
    """A text leaf."""

    __slots__ = ()

    @property
    def _contained(self) -> list[Item]:
        raise TypeError("Text nodes have no children")

    @property
    def text(self) -> str:
        return self.item.get(TEXT_KEY, '')

    @text.setter
    def text(self, value: str | None) -> None:
        if value is None:
            self.item.pop(TEXT_KEY, None)
        else:
            self.item[TEXT_KEY] = value

    def __repr__(self) -> str:
        return repr(self.text)

    def as_dict(self) -> Any:
        return self.text


class NodeSet(list, Generic[N]):
    """An ordered list of nodes of one kind.

    Example:
        >>> tables = spreadsheet.all('table:table')
        >>> tables.index_by_attrib('table:name')['Sheet1']
    """

    def index_by_attrib(self, key: str) -> dict[str, N]:
        """Map each node's ``key`` attribute value to the node.

        Later nodes win on duplicate values; nodes without the attribute
        are skipped.
        """
        result: dict[str, N] = {}
        for node in self:
            value = node.attrib.get(key)
            if value is not None:
                result[value] = node
        return result
