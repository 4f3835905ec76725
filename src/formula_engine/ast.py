from typing import NamedTuple

from formula_engine.address import CellAddress


class FunctionCall(NamedTuple):
    name: str
    arguments: "tuple[ASTNode, ...]"


class BinaryOperation(NamedTuple):
    left: "ASTNode"
    operator: str
    right: "ASTNode"


class UnaryOperation(NamedTuple):
    operator: str
    operand: "ASTNode"


class Percent(NamedTuple):
    operand: "ASTNode"


class CellReference(NamedTuple):
    address: CellAddress
    text: str


class Constant(NamedTuple):
    value: float


# Type alias for all possible AST nodes
ASTNode = (
    FunctionCall | BinaryOperation | UnaryOperation | Percent | CellReference | Constant
)


def iter_references(node: ASTNode):
    """Yield every cell reference of the tree, left to right."""
    if isinstance(node, CellReference):
        yield node
    elif isinstance(node, BinaryOperation):
        yield from iter_references(node.left)
        yield from iter_references(node.right)
    elif isinstance(node, (UnaryOperation, Percent)):
        yield from iter_references(node.operand)
    elif isinstance(node, FunctionCall):
        for argument in node.arguments:
            yield from iter_references(argument)
