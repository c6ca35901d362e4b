# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Spreadsheet nodes - typed views over an OpenDocument spreadsheet.

Rows and cells may be run-length compressed: a row carrying
``table:number-rows-repeated="3"`` stands for three identical rows. The
logical index of a row or cell is the sum of the repeat counts of its
preceding siblings. Indices are computed lazily, once for all siblings, and
cached until a structural change marks the subtree dirty.

Example:
    >>> doc = Document(items)
    >>> table = doc.spreadsheet().tables()['Sheet1']
    >>> table.insert_row(2)
    >>> table.delete_row(5)
"""

from __future__ import annotations

import logging
from typing import Callable, cast

from .exceptions import InvalidIndexError, StructuralInvariantError
from .formula import shift_row_references
from .item import Item, make_element
from .node import Node, NodeSet

logger = logging.getLogger(__name__)

# Tags
DOCUMENT_CONTENT = 'office:document-content'
BODY = 'office:body'
SPREADSHEET = 'office:spreadsheet'
TABLE = 'table:table'
TABLE_ROW = 'table:table-row'
TABLE_CELL = 'table:table-cell'

# Attributes
TABLE_NAME = 'table:name'
ROWS_REPEATED = 'table:number-rows-repeated'
COLUMNS_REPEATED = 'table:number-columns-repeated'
FORMULA = 'table:formula'
OFFICE_VALUE = 'office:value'
OFFICE_STRING_VALUE = 'office:string-value'
OFFICE_VALUE_TYPE = 'office:value-type'
CALCEXT_VALUE_TYPE = 'calcext:value-type'


def _repeat_count(node: Node, attr: str) -> int:
    return int(node.attrib.get(attr, '1'))


class Document(Node):
    """Root wrapper around a parsed content document.

    The wrapped item is synthetic (tag ''); its children are the top-level
    items, so the list passed in is the same list that gets serialized.
    """

    __slots__ = ()

    def __init__(self, items: list[Item]) -> None:
        super().__init__({'': items})

    @property
    def items(self) -> list[Item]:
        """The top-level item list."""
        return self._contained

    def spreadsheet(self) -> Spreadsheet:
        """Return the spreadsheet body.

        Raises:
            NodeNotFoundError: If the document has no
                document-content/body/spreadsheet nesting.
        """
        return cast(Spreadsheet, self.dig(DOCUMENT_CONTENT, BODY, SPREADSHEET))


class Spreadsheet(Node, tag=SPREADSHEET):
    __slots__ = ()

    def tables(self) -> dict[str, Table]:
        """Return tables by name. Later tables win on duplicate names."""
        return self.all(TABLE).index_by_attrib(TABLE_NAME)


class Table(Node, tag=TABLE):
    """A sheet: rows of cells, with row insertion and deletion.

    Row operations address rows by logical index and rewrite relative row
    references in every formula of the table.

    DANGER: a logical index that falls inside a repeated run (any row but
    the first one a compressed row stands for) cannot be addressed; runs
    are never split.
    """

    __slots__ = ()

    @property
    def table_name(self) -> str | None:
        """The table:name attribute."""
        return self.attrib.get(TABLE_NAME)

    @property
    def rows(self) -> NodeSet[Row]:
        return self.all(TABLE_ROW)  # type: ignore[return-value]

    def for_each_row(self, fn: Callable[[Row], object]) -> Table:
        for row in self.rows:
            fn(row)
        return self

    def for_each_cell(self, fn: Callable[[Cell], object]) -> Table:
        """Call fn on every cell, row by row."""
        return self.for_each_row(lambda row: row.for_each_cell(fn))

    def _find_row(self, index: int) -> Row | None:
        for row in self.rows:
            if row.row_index == index:
                return row
        return None

    def _position_of(self, row: Row) -> int:
        for position, child in enumerate(self.children):
            if child is row and self._contained[position] is row.item:
                return position
        raise StructuralInvariantError("Row is not actually in its table")

    def _adjust_formulae(self, from_index: int, delta: int) -> int:
        changed = 0
        for row in self.rows:
            for cell in row.cells:
                if cell.adjust_formulae(from_index, delta):
                    changed += 1
        return changed

    def insert_row(self, index: int) -> Row:
        """Insert an empty row before the row starting at a logical index.

        Args:
            index: Logical index of an existing row.

        Returns:
            The new row.

        Raises:
            InvalidIndexError: If no row starts at that logical index.
        """
        target = self._find_row(index)
        if target is None:
            raise InvalidIndexError(f"Invalid index to insert to: {index}")
        position = self._position_of(target)

        changed = self._adjust_formulae(index, +1)

        item = make_element(TABLE_ROW)
        row = cast(Row, self._create(item))
        self._contained.insert(position, item)
        self.children.insert(position, row)

        self.propagate_dirty()
        logger.debug(
            "Inserted row at %d (position %d) in %r, %d formulas adjusted",
            index, position, self.table_name, changed,
        )
        return row

    def delete_row(self, index: int) -> Row | None:
        """Delete the row starting at a logical index.

        Args:
            index: Logical index of an existing row.

        Returns:
            The removed row, or None if no row starts at that index.
        """
        target = self._find_row(index)
        if target is None:
            return None
        position = self._position_of(target)

        changed = self._adjust_formulae(index, -1)

        del self._contained[position]
        del self.children[position]

        self.propagate_dirty()
        logger.debug(
            "Deleted row at %d (position %d) in %r, %d formulas adjusted",
            index, position, self.table_name, changed,
        )
        return target


class Row(Node, tag=TABLE_ROW):
    __slots__ = ('_row_index',)

    def __init__(self, item: Item, parent: Node | None = None) -> None:
        self._row_index: int | None = None
        super().__init__(item, parent)

    @property
    def row_index(self) -> int:
        """Logical row index, counting repeated rows."""
        if self._row_index is None:
            self._update_row_index()
        return self._row_index  # type: ignore[return-value]

    def mark_as_dirty(self) -> None:
        self._row_index = None

    def _update_row_index(self) -> None:
        # Assign every sibling in one pass.
        total = 0
        for row in self.parent.all(TABLE_ROW):  # type: ignore[union-attr]
            row._row_index = total
            total += _repeat_count(row, ROWS_REPEATED)

    @property
    def cells(self) -> NodeSet[Cell]:
        return self.all(TABLE_CELL)  # type: ignore[return-value]

    def for_each_cell(self, fn: Callable[[Cell], object]) -> Row:
        for cell in self.cells:
            fn(cell)
        return self

    @property
    def table(self) -> Table:
        return cast(Table, self.parent)


class Cell(Node, tag=TABLE_CELL):
    __slots__ = ('_col_index',)

    def __init__(self, item: Item, parent: Node | None = None) -> None:
        self._col_index: int | None = None
        super().__init__(item, parent)

    @property
    def row_index(self) -> int:
        return self.row.row_index

    @property
    def col_index(self) -> int:
        """Logical column index, counting repeated cells."""
        if self._col_index is None:
            self._update_col_index()
        return self._col_index  # type: ignore[return-value]

    def mark_as_dirty(self) -> None:
        self._col_index = None

    def _update_col_index(self) -> None:
        total = 0
        for cell in self.parent.all(TABLE_CELL):  # type: ignore[union-attr]
            cell._col_index = total
            total += _repeat_count(cell, COLUMNS_REPEATED)

    @property
    def row(self) -> Row:
        return cast(Row, self.parent)

    @property
    def table(self) -> Table:
        return self.row.table

    @property
    def formula(self) -> str | None:
        return self.attrib.get(FORMULA)

    def adjust_formulae(self, from_index: int, delta: int) -> bool:
        """Shift relative row references after a row insert or delete.

        Args:
            from_index: Logical index of the inserted or deleted row.
            delta: +1 for an insertion, -1 for a deletion.

        Returns:
            True if the formula was rewritten.
        """
        formula = self.formula
        if not formula:
            return False
        replaced = shift_row_references(formula, from_index, delta)
        if replaced == formula:
            return False
        self.set_formula(replaced)
        return True

    def set_type(self, value_type: str) -> Cell:
        """Set the value type, kept twice by the format."""
        self.set_attrib(OFFICE_VALUE_TYPE, value_type)
        self.set_attrib(CALCEXT_VALUE_TYPE, value_type)
        return self

    def set_formula(self, formula: str, value_type: str | None = None) -> Cell:
        """Turn the cell into a formula cell.

        Literal values and child content are dropped.

        Example:
            >>> cell.set_formula('of:=SUM([.A1:.A3])', 'float')
        """
        if value_type:
            self.set_type(value_type)
        self.set_attrib(FORMULA, formula)
        self.delete_attrib(OFFICE_VALUE)
        self.delete_attrib(OFFICE_STRING_VALUE)
        self.clear()
        return self
