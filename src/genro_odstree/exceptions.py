# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""OdsTree exceptions."""

from __future__ import annotations


class OdsTreeError(Exception):
    """Base exception for OdsTree errors."""

    pass


class NodeNotFoundError(OdsTreeError, KeyError):
    """Raised when a node has no child with the requested tag."""

    def __init__(self, tag: str, parent: str = '') -> None:
        self.tag = tag
        self.parent = parent
        where = f" under '{parent}'" if parent else ''
        super().__init__(f"No child '{tag}'{where}")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0])


class InvalidIndexError(OdsTreeError, IndexError):
    """Raised when a logical index does not match the start of any row."""

    pass


class StructuralInvariantError(OdsTreeError):
    """Raised when a node is not found among its own parent's children."""

    pass


class OdsFormatError(OdsTreeError):
    """Raised when a package cannot be read as an OpenDocument archive."""

    pass


class ContentMissingError(OdsFormatError):
    """Raised when the archive has no content member."""

    pass


class XmlFormatError(OdsFormatError):
    """Raised when XML cannot be parsed or serialized."""

    pass
