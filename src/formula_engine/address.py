import re
from typing import NamedTuple

from openpyxl.utils import column_index_from_string, get_column_letter

from formula_engine.errors import MalformedAddress

# Last column of a spreadsheet-scale grid ("XFD")
MAX_COLUMN_INDEX = 16383

CELL_REF_REGEX = re.compile(r"^(\$+)?([A-Za-z]+)(\$)?([0-9]+)$")


class CellAddress(NamedTuple):
    """A zero-based (column, row) coordinate with per-axis absolute markers."""

    column: int
    row: int
    absolute_column: bool = False
    absolute_row: bool = False

    @property
    def key(self) -> tuple[int, int]:
        # Absolute markers never change which cell is meant
        return (self.column, self.row)

    def shifted(self, columns: int = 0, rows: int = 0) -> "CellAddress | None":
        """Return the address moved by the given deltas, or None when out of range."""
        column = self.column + columns
        row = self.row + rows
        if column < 0 or column > MAX_COLUMN_INDEX or row < 0:
            return None
        return self._replace(column=column, row=row)

    def __str__(self) -> str:
        return format_address(self)


def column_index(letters: str) -> int:
    """Convert a column letter run ("A", "AA") to a zero-based index."""
    try:
        index = column_index_from_string(letters.upper()) - 1
    except ValueError:
        raise MalformedAddress(f"Invalid column letters: {letters!r}")
    if index > MAX_COLUMN_INDEX:
        raise MalformedAddress(f"Column {letters!r} is out of range")
    return index


def column_letters(index: int) -> str:
    """Convert a zero-based column index to its letter run."""
    if not 0 <= index <= MAX_COLUMN_INDEX:
        raise MalformedAddress(f"Column index {index} is out of range")
    return get_column_letter(index + 1)


def parse_address(text: str) -> CellAddress:
    """Parse an A1-style address such as "B4", "$A$1" or "aa12"."""
    match = CELL_REF_REGEX.fullmatch(text)
    if not match:
        raise MalformedAddress(f"Invalid cell address: {text!r}")
    col_marker, letters, row_marker, digits = match.groups()
    row = int(digits)
    if row == 0:
        raise MalformedAddress(f"Row numbers start at 1: {text!r}")
    return CellAddress(
        column=column_index(letters),
        row=row - 1,
        absolute_column=bool(col_marker),
        absolute_row=bool(row_marker),
    )


def extract_cell_reference(text: str) -> CellAddress | None:
    """Parse a cell reference, returning None if invalid."""
    try:
        return parse_address(text)
    except MalformedAddress:
        return None


def format_address(address: CellAddress) -> str:
    col_prefix = "$" if address.absolute_column else ""
    row_prefix = "$" if address.absolute_row else ""
    return f"{col_prefix}{column_letters(address.column)}{row_prefix}{address.row + 1}"


def as_address(value: "str | CellAddress") -> CellAddress:
    if isinstance(value, CellAddress):
        return value
    return parse_address(value)
