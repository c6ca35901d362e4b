# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Relative cell references inside OpenFormula expressions."""

from __future__ import annotations

import re

# '.A5' inside '[.A5]' or at either end of a range such as '[.A1:.B7]'
FORMULA_REFERENCE = re.compile(r'(?<=[\[:])\.([A-Z]+)(\d+)(?=[\]:])')


def shift_row_references(formula: str, from_index: int, delta: int) -> str:
    """Shift relative row references below a boundary.

    A reference moves by ``delta`` rows when its one-based row number minus
    one is greater than ``from_index``. Column letters never change.

    Args:
        formula: The formula text, e.g. 'of:=SUM([.A1:.A9])'.
        from_index: Zero-based row index of the inserted or deleted row.
        delta: +1 for an insertion, -1 for a deletion.

    Returns:
        The rewritten formula (equal to the input if nothing moved).

    Example:
        >>> shift_row_references('of:=[.A5]+[.B2]', 3, 1)
        'of:=[.A6]+[.B2]'
    """

    def _replace(match: re.Match[str]) -> str:
        column, row = match.group(1), int(match.group(2))
        if row - 1 > from_index:
            return f'.{column}{row + delta}'
        return match.group(0)

    return FORMULA_REFERENCE.sub(_replace, formula)
