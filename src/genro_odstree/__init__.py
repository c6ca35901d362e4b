# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-OdsTree - Order-preserving tree editing for OpenDocument spreadsheets.

Wraps the parsed content of an .ods archive in typed nodes (document,
spreadsheet, table, row, cell, text) that keep logical row/column numbering
and relative formula references consistent while rows are inserted or
deleted.
"""

__version__ = "0.1.0"

from .exceptions import (
    ContentMissingError,
    InvalidIndexError,
    NodeNotFoundError,
    OdsFormatError,
    OdsTreeError,
    StructuralInvariantError,
    XmlFormatError,
)
from .formula import shift_row_references
from .item import ATTRIB_KEY, TEXT_KEY, Item
from .node import KNOWN_TAGS, Node, NodeSet, TextNode
from .package import CONTENT_XML, copy_and_modify_ods, modify_ods, read_document
from .spreadsheet import Cell, Document, Row, Spreadsheet, Table
from .xmlio import build_xml, parse_items

__all__ = [
    # Core classes
    "Node",
    "NodeSet",
    "TextNode",
    "KNOWN_TAGS",
    # Spreadsheet classes
    "Document",
    "Spreadsheet",
    "Table",
    "Row",
    "Cell",
    # Items
    "Item",
    "ATTRIB_KEY",
    "TEXT_KEY",
    # Formulae
    "shift_row_references",
    # XML and packages
    "parse_items",
    "build_xml",
    "CONTENT_XML",
    "read_document",
    "copy_and_modify_ods",
    "modify_ods",
    # Exceptions
    "OdsTreeError",
    "NodeNotFoundError",
    "InvalidIndexError",
    "StructuralInvariantError",
    "OdsFormatError",
    "ContentMissingError",
    "XmlFormatError",
]
