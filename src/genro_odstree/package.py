# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""OpenDocument package access.

Reads the content member of a spreadsheet archive into a Document, lets a
caller edit it, and writes a new archive in which only that member changed.

Example:
    >>> def add_header(doc):
    ...     table = doc.spreadsheet().tables()['Sheet1']
    ...     table.insert_row(0)
    >>> copy_and_modify_ods('in.ods', 'out.ods', add_header)
"""

from __future__ import annotations

import io
import logging
import os
import zipfile
from typing import IO, Callable, Union

from .exceptions import ContentMissingError, OdsFormatError
from .spreadsheet import Document
from .xmlio import build_xml, parse_items

logger = logging.getLogger(__name__)

CONTENT_XML = 'content.xml'

Source = Union[bytes, str, os.PathLike, IO[bytes]]
Target = Union[str, os.PathLike, IO[bytes]]


def _open_zip(source: Source) -> zipfile.ZipFile:
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    try:
        return zipfile.ZipFile(source, 'r')
    except zipfile.BadZipFile as e:
        raise OdsFormatError(f"Not a valid OpenDocument archive: {e}") from e


def _read_member(archive: zipfile.ZipFile, member: str) -> bytes:
    if member not in archive.namelist():
        raise ContentMissingError(f"No {member} in archive")
    return archive.read(member)


def read_document(source: Source, member: str = CONTENT_XML) -> Document:
    """Load the content of an archive as a Document.

    Args:
        source: Path, raw bytes, or binary file object of the archive.
        member: Name of the XML member to load.

    Raises:
        OdsFormatError: If source is not a zip archive.
        ContentMissingError: If the member is missing.
        XmlFormatError: If the member is not well-formed XML.
    """
    with _open_zip(source) as archive:
        return Document(parse_items(_read_member(archive, member)))


def copy_and_modify_ods(
    source: Source,
    target: Target,
    fn: Callable[[Document], object],
    member: str = CONTENT_XML,
) -> None:
    """Copy an archive, letting ``fn`` edit its content on the way.

    Every member other than ``member`` is copied unchanged, with its
    original entry metadata and order.

    Args:
        source: Path, raw bytes, or binary file object of the archive.
        target: Path or binary file object to write the new archive to.
        fn: Called with the Document before it is written back.
        member: Name of the XML member to edit.
    """
    with _open_zip(source) as archive:
        items = parse_items(_read_member(archive, member))
        fn(Document(items))
        data = build_xml(items)

        with zipfile.ZipFile(target, 'w') as output:
            for info in archive.infolist():
                if info.filename == member:
                    output.writestr(info, data, compress_type=zipfile.ZIP_DEFLATED)
                else:
                    output.writestr(info, archive.read(info.filename))
        logger.debug(
            "Rewrote %d members, %s is %d bytes",
            len(archive.infolist()), member, len(data),
        )


def modify_ods(
    source: Source,
    fn: Callable[[Document], object],
    member: str = CONTENT_XML,
) -> bytes:
    """Like copy_and_modify_ods, returning the new archive as bytes."""
    buffer = io.BytesIO()
    copy_and_modify_ods(source, buffer, fn, member=member)
    return buffer.getvalue()
