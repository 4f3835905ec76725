import logging
from dataclasses import dataclass, field
from typing import cast

from formula_engine.address import CellAddress, as_address, format_address
from formula_engine.ast import ASTNode, iter_references
from formula_engine.cells import CellIndex, CellTable, index_cell_table, literal_to_number
from formula_engine.errors import CircularReference, ResolutionDepthExceeded
from formula_engine.evaluator import DEFAULT_PLACES, ExpressionEvaluator, format_number
from formula_engine.parser import parse_formula


def _plain(address: CellAddress) -> str:
    """Format an address for messages, without absolute markers."""
    return format_address(CellAddress(address.column, address.row))


class EvaluationStack:
    """Tracks the addresses whose formulas are currently being resolved."""

    def __init__(self):
        self.stack: list[CellAddress] = []
        # An address is never on the stack twice, so a set mirrors it
        self.keys: set[tuple[int, int]] = set()

    def __len__(self) -> int:
        return len(self.stack)

    def push(self, address: CellAddress) -> None:
        self.stack.append(address)
        self.keys.add(address.key)

    def pop(self) -> None:
        self.keys.discard(self.stack.pop().key)

    def contains(self, address: CellAddress) -> bool:
        return address.key in self.keys

    def cycle_path(self, address: CellAddress) -> list[str]:
        """Return the loop closed by `address`, starting at its first occurrence."""
        start = next(
            i for i, entry in enumerate(self.stack) if entry.key == address.key
        )
        return [_plain(entry) for entry in self.stack[start:]] + [_plain(address)]


@dataclass
class EvaluationContext:
    """Per-call state of one top-level evaluation.

    `values` memoizes cells already resolved during this call only; it is
    discarded with the context.
    """

    cells: CellIndex
    current_address: CellAddress | None = None
    stack: EvaluationStack = field(default_factory=EvaluationStack)
    values: dict[tuple[int, int], float] = field(default_factory=dict)


class _Frame:
    __slots__ = ("address", "node", "references", "position")

    def __init__(self, address: CellAddress | None, node: ASTNode):
        self.address = address
        self.node = node
        self.references = unique_references(node)
        self.position = 0

    def next_reference(self) -> CellAddress | None:
        if self.position >= len(self.references):
            return None
        address = self.references[self.position]
        self.position += 1
        return address


def unique_references(node: ASTNode) -> list[CellAddress]:
    seen: set[tuple[int, int]] = set()
    references = []
    for reference in iter_references(node):
        if reference.address.key not in seen:
            seen.add(reference.address.key)
            references.append(reference.address)
    return references


def extract_references(formula: str) -> list[CellAddress]:
    """Return the distinct cells a formula references, in order of appearance."""
    if not formula.startswith("="):
        return []
    return unique_references(parse_formula(formula[1:]))


class ReferenceResolver:
    """Resolves formulas against a snapshot of cell contents.

    Every reference of a formula is resolved before its expression is
    evaluated. Formula cells are resolved depth-first with an explicit frame
    stack, so long dependency chains do not hit the interpreter's recursion
    limit. `max_depth` bounds how many formulas may be in progress at once.
    """

    def __init__(
        self,
        cell_table: CellTable,
        current_address: str | CellAddress | None = None,
        *,
        max_depth: int | None = None,
    ):
        self.context = EvaluationContext(
            cells=index_cell_table(cell_table),
            current_address=(
                as_address(current_address) if current_address is not None else None
            ),
        )
        self.max_depth = max_depth

    def resolve(self, formula: str) -> float:
        if not formula.startswith("="):
            return literal_to_number(formula)

        context = self.context
        context.stack = EvaluationStack()
        if context.current_address is not None:
            context.stack.push(context.current_address)

        frames = [_Frame(context.current_address, parse_formula(formula[1:]))]
        evaluator = ExpressionEvaluator(lambda address: context.values[address.key])

        while True:
            frame = frames[-1]
            address = frame.next_reference()
            if address is not None:
                self._visit(address, frames)
                continue

            value = evaluator.evaluate(frame.node)
            frames.pop()
            if not frames:
                return value
            context.stack.pop()
            context.values[frame.address.key] = value

    def _visit(self, address: CellAddress, frames: list[_Frame]) -> None:
        """Resolve a literal or missing cell, or push a frame for a formula cell."""
        context = self.context
        if address.key in context.values:
            return

        if context.stack.contains(address):
            cycle = context.stack.cycle_path(address)
            raise CircularReference(
                f"Circular reference detected: {' -> '.join(cycle)}", cycle
            )

        content = context.cells.get(address.key)
        if content is None:
            logging.debug("Cell %s is empty, using 0", _plain(address))
            context.values[address.key] = 0.0
            return

        if not content.is_formula:
            context.values[address.key] = literal_to_number(content.value)
            return

        if self.max_depth is not None and len(frames) > self.max_depth:
            raise ResolutionDepthExceeded(
                f"More than {self.max_depth} nested formulas while resolving "
                f"{_plain(address)}"
            )

        node = parse_formula(cast(str, content.formula)[1:])
        context.stack.push(address)
        frames.append(_Frame(address, node))


def resolve_formula(
    formula: str,
    cell_table: CellTable,
    current_address: str | CellAddress | None = None,
    *,
    max_depth: int | None = None,
) -> float:
    """Evaluate `formula` as if it were stored at `current_address`.

    Referenced cells are read from `cell_table`; missing cells count as 0.
    Raises a FormulaError subclass when evaluation fails.
    """
    resolver = ReferenceResolver(cell_table, current_address, max_depth=max_depth)
    return resolver.resolve(formula)


def display_value(
    formula: str,
    cell_table: CellTable,
    current_address: str | CellAddress | None = None,
    *,
    places: int = DEFAULT_PLACES,
    max_depth: int | None = None,
) -> str:
    """Evaluate `formula` and format the result for display."""
    return format_number(
        resolve_formula(formula, cell_table, current_address, max_depth=max_depth),
        places,
    )
