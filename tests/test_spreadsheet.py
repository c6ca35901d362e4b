# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for Document, Spreadsheet, Table, Row and Cell."""

import copy

import pytest

from genro_odstree import (
    ATTRIB_KEY,
    TEXT_KEY,
    Cell,
    Document,
    InvalidIndexError,
    NodeNotFoundError,
    Row,
    Spreadsheet,
    Table,
)


def cell(formula=None, value=None, repeat=None, text=None):
    attrib = {}
    if formula is not None:
        attrib['table:formula'] = formula
    if value is not None:
        attrib['office:value-type'] = 'float'
        attrib['office:value'] = value
    if repeat is not None:
        attrib['table:number-columns-repeated'] = str(repeat)
    item = {'table:table-cell': [{'text:p': [{TEXT_KEY: text}]}] if text else []}
    if attrib:
        item[ATTRIB_KEY] = attrib
    return item


def row(*cells, repeat=None):
    item = {'table:table-row': list(cells)}
    if repeat is not None:
        item[ATTRIB_KEY] = {'table:number-rows-repeated': str(repeat)}
    return item


def table(name, *rows):
    return {'table:table': list(rows), ATTRIB_KEY: {'table:name': name}}


def document(*tables):
    return [{
        'office:document-content': [
            {'office:body': [
                {'office:spreadsheet': list(tables)},
            ]},
        ],
    }]


def sheet(*rows, name='Sheet1'):
    """Build a document with one table and return that table."""
    doc = Document(document(table(name, *rows)))
    return doc.spreadsheet().tables()[name]


def plain_rows(count):
    return [row(cell(text=f'r{i}')) for i in range(count)]


class TestDocument:
    """Tests for Document and Spreadsheet."""

    def test_spreadsheet(self):
        """Test spreadsheet digs to the spreadsheet body."""
        doc = Document(document(table('Sheet1')))
        spreadsheet = doc.spreadsheet()
        assert isinstance(spreadsheet, Spreadsheet)
        assert doc.name == ''
        assert spreadsheet.root is doc

    def test_document_keeps_item_list(self):
        """Test the document wraps the very list it was given."""
        items = document(table('Sheet1'))
        doc = Document(items)
        assert doc.items is items
        doc.spreadsheet().add_node('table:table')
        assert len(items[0]['office:document-content'][0]['office:body'][0]
                   ['office:spreadsheet']) == 2

    def test_spreadsheet_malformed(self):
        """Test a document without the expected nesting raises."""
        doc = Document([{'office:document-content': [{'office:body': []}]}])
        with pytest.raises(NodeNotFoundError, match="office:spreadsheet"):
            doc.spreadsheet()

    def test_tables_by_name(self):
        """Test tables are indexed by name."""
        doc = Document(document(table('A'), table('B')))
        tables = doc.spreadsheet().tables()
        assert list(tables) == ['A', 'B']
        assert all(isinstance(t, Table) for t in tables.values())

    def test_tables_last_wins(self):
        """Test duplicate table names resolve to the later table."""
        doc = Document(document(table('A', row()), table('A', row(), row())))
        tables = doc.spreadsheet().tables()
        assert len(tables['A'].rows) == 2


class TestLogicalIndex:
    """Tests for lazily computed row and column indices."""

    def test_row_index_with_repeats(self):
        """Test row indices account for repeated rows."""
        t = sheet(row(repeat=2), row(repeat=1), row(repeat=3), row())
        assert [r.row_index for r in t.rows] == [0, 2, 3, 6]

    def test_col_index_with_repeats(self):
        """Test column indices account for repeated cells."""
        t = sheet(row(cell(repeat=3), cell(), cell(repeat=2), cell()))
        assert [c.col_index for c in t.rows[0].cells] == [0, 3, 4, 6]

    def test_cell_row_index(self):
        """Test a cell reports its row's logical index."""
        t = sheet(row(cell(), repeat=4), row(cell()))
        c = t.rows[1].cells[0]
        assert c.row_index == 4
        assert c.row is t.rows[1]
        assert c.table is t

    def test_index_is_cached(self):
        """Test indices stay cached until marked dirty."""
        t = sheet(row(), row(), row())
        assert t.rows[2].row_index == 2
        t.rows[0].set_attrib('table:number-rows-repeated', '5')
        assert t.rows[2].row_index == 2
        t.propagate_dirty()
        assert t.rows[2].row_index == 6

    def test_mark_as_dirty_only_own_index(self):
        """Test mark_as_dirty on a row leaves its cells' indices cached."""
        t = sheet(row(cell(), cell()))
        r = t.rows[0]
        assert r.cells[1].col_index == 1
        r.mark_as_dirty()
        assert r._row_index is None
        assert r.cells[1]._col_index == 1


class TestInsertRow:
    """Tests for Table.insert_row."""

    def test_insert_row(self):
        """Test a new empty row lands before the matched row."""
        t = sheet(*plain_rows(3))
        second = t.rows[1]
        new = t.insert_row(1)
        assert isinstance(new, Row)
        assert new.parent is t
        assert new.item == {'table:table-row': []}
        assert t.rows[1] is new
        assert t.rows[2] is second
        assert t.item['table:table'][1] is new.item

    def test_insert_row_reindexes(self):
        """Test indices are recomputed after an insertion."""
        t = sheet(row(repeat=2), row(repeat=1), row(repeat=3), row())
        t.insert_row(2)
        assert [r.row_index for r in t.rows] == [0, 2, 3, 4, 7]

    def test_insert_row_first(self):
        """Test inserting at index 0."""
        t = sheet(*plain_rows(2))
        new = t.insert_row(0)
        assert t.rows[0] is new
        assert t.rows[1].row_index == 1

    def test_insert_row_invalid_index(self):
        """Test an index inside a repeated run raises and changes nothing."""
        t = sheet(row(repeat=3), row())
        before = copy.deepcopy(t.item)
        with pytest.raises(InvalidIndexError, match="Invalid index"):
            t.insert_row(1)
        assert t.item == before
        assert len(t.children) == 2

    def test_insert_row_past_end(self):
        """Test an index past the last row raises."""
        t = sheet(*plain_rows(2))
        with pytest.raises(IndexError):
            t.insert_row(2)

    def test_insert_row_shifts_formulae(self):
        """Test references below the insertion point move down."""
        t = sheet(row(cell(formula='of:=[.A5]+[.B2]')), *plain_rows(5))
        t.insert_row(3)
        assert t.rows[0].cells[0].formula == 'of:=[.A6]+[.B2]'

    def test_insert_row_shifts_ranges(self):
        """Test both ends of a range are shifted independently."""
        t = sheet(*plain_rows(5), row(cell(formula='of:=SUM([.A1:.A5])')))
        t.insert_row(2)
        assert t.rows[-1].cells[0].formula == 'of:=SUM([.A1:.A6])'

    def test_insert_keeps_children_in_sync(self):
        """Test the item list and node list stay in correspondence."""
        t = sheet(*plain_rows(3))
        t.insert_row(2)
        contained = t.item['table:table']
        assert len(contained) == len(t.children) == 4
        assert all(c.item is i for c, i in zip(t.children, contained))


class TestDeleteRow:
    """Tests for Table.delete_row."""

    def test_delete_row(self):
        """Test deleting removes one physical row."""
        t = sheet(*plain_rows(3))
        second = t.rows[1]
        removed = t.delete_row(1)
        assert removed is second
        assert len(t.rows) == 2
        assert second.item not in t.item['table:table']
        assert t.rows[1].row_index == 1

    def test_delete_row_no_match(self):
        """Test deleting a missing index is a no-op."""
        t = sheet(row(repeat=3))
        before = copy.deepcopy(t.item)
        assert t.delete_row(1) is None
        assert t.delete_row(10) is None
        assert t.item == before

    def test_delete_row_shifts_formulae(self):
        """Test references below the deletion point move up."""
        t = sheet(row(cell(formula='of:=SUM([.A1:.A4])')), *plain_rows(4))
        t.delete_row(1)
        assert t.rows[0].cells[0].formula == 'of:=SUM([.A1:.A3])'

    def test_insert_then_delete_round_trip(self):
        """Test insert then delete at the same index restores the table."""
        t = sheet(
            row(cell(formula='of:=[.A2]*[.B7]'), repeat=2),
            row(cell(text='x'), cell(formula='of:=SUM([.A1:.A9])')),
            *plain_rows(4),
        )
        before = copy.deepcopy(t.item)
        t.insert_row(2)
        t.delete_row(2)
        assert t.item == before
        assert [r.row_index for r in t.rows] == [0, 2, 3, 4, 5, 6]


class TestIteration:
    """Tests for row and cell iteration."""

    def test_for_each_cell_row_major(self):
        """Test for_each_cell visits every cell row by row."""
        t = sheet(row(cell(text='a'), cell(text='b')), row(cell(text='c')))
        seen = []
        result = t.for_each_cell(
            lambda c: seen.append(c.children[0].children[0].text)
        )
        assert result is t
        assert seen == ['a', 'b', 'c']

    def test_for_each_row(self):
        """Test for_each_row visits rows in order."""
        t = sheet(*plain_rows(3))
        seen = []
        t.for_each_row(seen.append)
        assert seen == list(t.rows)

    def test_rows_skip_other_children(self):
        """Test rows only include table-row children."""
        t = sheet(*plain_rows(2))
        t.add_node('table:table-column')
        assert len(t.rows) == 2


class TestCell:
    """Tests for cell mutation."""

    def test_set_type(self):
        """Test set_type writes both value-type attributes."""
        c = sheet(row(cell())).rows[0].cells[0]
        assert c.set_type('string') is c
        assert c.attrib['office:value-type'] == 'string'
        assert c.attrib['calcext:value-type'] == 'string'

    def test_set_formula(self):
        """Test set_formula drops literal values and content."""
        c = sheet(row(cell(value='3', text='3'))).rows[0].cells[0]
        c.set_attrib('office:string-value', '3')
        c.set_formula('of:=[.A1]*2', 'float')
        assert c.formula == 'of:=[.A1]*2'
        assert 'office:value' not in c.attrib
        assert 'office:string-value' not in c.attrib
        assert c.attrib['calcext:value-type'] == 'float'
        assert c.children == []
        assert c.item['table:table-cell'] == []

    def test_set_formula_keeps_type_when_omitted(self):
        """Test set_formula without a type leaves the type alone."""
        c = sheet(row(cell(value='3'))).rows[0].cells[0]
        c.set_formula('of:=1+1')
        assert c.attrib['office:value-type'] == 'float'

    def test_adjust_formulae(self):
        """Test adjust_formulae rewrites references past the boundary."""
        c = sheet(row(cell(formula='of:=[.C10]-[.C3]'))).rows[0].cells[0]
        assert c.adjust_formulae(5, +1) is True
        assert c.formula == 'of:=[.C11]-[.C3]'

    def test_adjust_formulae_noop_leaves_cell(self):
        """Test an unchanged formula does not touch the cell."""
        c = sheet(row(cell(formula='of:=[.A1]+[.A2]', value='3', text='3'))).rows[0].cells[0]
        formula = c.attrib['table:formula']
        assert c.adjust_formulae(3, +1) is False
        assert c.attrib['table:formula'] is formula
        assert c.attrib['office:value'] == '3'
        assert len(c.children) == 1

    def test_adjust_formulae_without_formula(self):
        """Test cells without a formula are left alone."""
        c = sheet(row(cell(value='1'))).rows[0].cells[0]
        assert c.adjust_formulae(0, +1) is False
        assert 'table:formula' not in c.attrib

    def test_copy_row_template(self):
        """Test pasting a template row onto an inserted row."""
        t = sheet(row(cell(text='tpl'), repeat=1), *plain_rows(2))
        new = t.insert_row(1)
        new.copy_contents_from(t.rows[0])
        assert isinstance(new, Row)
        assert isinstance(new.cells[0], Cell)
        assert new.cells[0].children[0].children[0].text == 'tpl'
        assert t.item['table:table'][1] is new.item
        assert [r.row_index for r in t.rows] == [0, 1, 2, 3]
