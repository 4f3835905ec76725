"""Reference adjustment for fill and paste.

Only address tokens are rewritten; all other formula text is kept as written.
A relative axis moves by the source-to-target delta, an absolute ("$") axis
stays. A token that would leave the grid is kept unmodified.
"""

import re

from formula_engine.address import extract_cell_reference, format_address

# Address tokens that are not part of a longer identifier or number, and are
# not a function name such as LOG10(
ADDRESS_TOKEN_REGEX = re.compile(
    r"(?<![A-Za-z0-9_$.])\$*[A-Za-z]{1,3}\$?\d+(?![A-Za-z0-9_$.]|\s*\()"
)


def shift_formula(
    formula: str,
    source_col: int,
    source_row: int,
    target_col: int,
    target_row: int,
) -> str:
    """Adjust relative references for a copy from one cell to another."""
    if not formula.startswith("="):
        return formula

    column_delta = target_col - source_col
    row_delta = target_row - source_row
    if column_delta == 0 and row_delta == 0:
        return formula

    def _replace(match: re.Match) -> str:
        token = match.group(0)
        address = extract_cell_reference(token)
        if address is None:
            return token
        shifted = address.shifted(
            columns=0 if address.absolute_column else column_delta,
            rows=0 if address.absolute_row else row_delta,
        )
        if shifted is None or shifted.key == address.key:
            return token
        return format_address(shifted)

    return "=" + ADDRESS_TOKEN_REGEX.sub(_replace, formula[1:])


def fill_horizontal(
    formula: str, source_col: int, source_row: int, target_col: int
) -> str:
    """Fill right (or left): shift relative columns, keep rows as written."""
    return shift_formula(formula, source_col, source_row, target_col, source_row)


def fill_vertical(formula: str, source_col: int, source_row: int, target_row: int) -> str:
    """Fill down (or up): shift relative rows, keep columns as written."""
    return shift_formula(formula, source_col, source_row, source_col, target_row)
