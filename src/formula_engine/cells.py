import logging
import math
import re
from typing import Mapping, NamedTuple, Union

from formula_engine.address import CellAddress, as_address
from formula_engine.errors import MalformedAddress

NUMBER_REGEX = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


class CellContent(NamedTuple):
    """The state of one cell: a literal value, or a formula starting with "="."""

    value: str = ""
    formula: str | None = None

    @property
    def is_formula(self) -> bool:
        return self.formula is not None and self.formula.startswith("=")

    @classmethod
    def of(cls, raw: "RawCell") -> "CellContent":
        """Build a CellContent from the shorthand accepted in cell tables."""
        if isinstance(raw, CellContent):
            return raw
        if raw is None:
            return cls()
        if isinstance(raw, str):
            if raw.startswith("="):
                return cls(formula=raw)
            return cls(value=raw)
        if isinstance(raw, bool):
            return cls(value="1" if raw else "0")
        return cls(value=repr(raw) if isinstance(raw, float) else str(raw))


RawCell = Union[CellContent, str, int, float, None]
CellTable = Mapping[Union[str, CellAddress], RawCell]
CellIndex = dict[tuple[int, int], CellContent]


def literal_to_number(value: str | None) -> float:
    """Interpret a literal cell value in arithmetic context.

    Currency and grouping punctuation ("$", ",") is ignored and a trailing
    "%" divides by 100. Empty or non-numeric text counts as 0, and so does a
    number too large for a float.
    """
    if not value:
        return 0.0
    text = value.replace("$", "").replace(",", "").strip()
    divisor = 1.0
    if text.endswith("%"):
        text = text[:-1].strip()
        divisor = 100.0
    if not NUMBER_REGEX.match(text):
        logging.debug("Treating non-numeric literal %r as 0", value)
        return 0.0
    number = float(text)
    if not math.isfinite(number):
        logging.debug("Treating out-of-range literal %r as 0", value)
        return 0.0
    return number / divisor


def index_cell_table(cell_table: CellTable) -> CellIndex:
    """Normalize a caller's cell table into a private (column, row) index.

    Keys may be textual addresses in any case, with or without "$" markers.
    Two keys naming the same cell ("A1" and "$A$1") raise MalformedAddress.
    The caller's mapping is only read.
    """
    index: CellIndex = {}
    for key, raw in cell_table.items():
        address = as_address(key)
        if address.key in index:
            raise MalformedAddress(f"Cell {key!r} appears more than once in the table")
        index[address.key] = CellContent.of(raw)
    return index
