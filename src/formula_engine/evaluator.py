import math
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Callable

from formula_engine.address import CellAddress
from formula_engine.ast import (
    ASTNode,
    BinaryOperation,
    CellReference,
    Constant,
    FunctionCall,
    Percent,
    UnaryOperation,
)
from formula_engine.errors import DivisionByZero, InvalidExpression
from formula_engine.functions import FORMULA_FUNCTIONS
from formula_engine.parser import parse_formula

DEFAULT_PLACES = 2

ResolveReference = Callable[[CellAddress], float]


def _checked(value: float) -> float:
    if isinstance(value, complex):
        raise InvalidExpression("Result is not a real number")
    if not math.isfinite(value):
        raise InvalidExpression("Numeric overflow")
    return value


def _divide(left: float, right: float) -> float:
    if right == 0:
        raise DivisionByZero("Division by zero")
    return left / right


def _power(left: float, right: float) -> float:
    if left == 0 and right < 0:
        raise DivisionByZero("Zero raised to a negative power")
    try:
        return left**right
    except OverflowError:
        raise InvalidExpression("Numeric overflow")


BINARY_OPERATORS: dict[str, Callable[[float, float], float]] = {
    "+": lambda left, right: left + right,
    "-": lambda left, right: left - right,
    "*": lambda left, right: left * right,
    "/": _divide,
    "^": _power,
    "=": lambda left, right: float(left == right),
    "<>": lambda left, right: float(left != right),
    "<": lambda left, right: float(left < right),
    ">": lambda left, right: float(left > right),
    "<=": lambda left, right: float(left <= right),
    ">=": lambda left, right: float(left >= right),
}


class ExpressionEvaluator:
    """Reduces a parsed expression to a float.

    Cell references are looked up through `resolve_reference`, which receives
    the referenced address and returns its numeric value.
    """

    def __init__(self, resolve_reference: ResolveReference):
        self.resolve_reference = resolve_reference

    def evaluate(self, expression: str | ASTNode) -> float:
        if isinstance(expression, str):
            expression = parse_formula(expression)
        return self._evaluate_node(expression)

    def _evaluate_node(self, node: ASTNode) -> float:
        if isinstance(node, Constant):
            return _checked(node.value)

        elif isinstance(node, BinaryOperation):
            return self._evaluate_binary_op(node)

        elif isinstance(node, UnaryOperation):
            value = self._evaluate_node(node.operand)
            return -value if node.operator == "-" else value

        elif isinstance(node, Percent):
            return self._evaluate_node(node.operand) / 100

        elif isinstance(node, CellReference):
            return _checked(float(self.resolve_reference(node.address)))

        elif isinstance(node, FunctionCall):
            return self._evaluate_function(node)

        raise InvalidExpression(f"Unknown node type: {type(node).__name__}")

    def _evaluate_binary_op(self, node: BinaryOperation) -> float:
        left = self._evaluate_node(node.left)
        right = self._evaluate_node(node.right)

        operation = BINARY_OPERATORS.get(node.operator)
        if operation is None:
            raise InvalidExpression(f"Unknown operator: {node.operator}")
        return _checked(operation(left, right))

    def _evaluate_function(self, node: FunctionCall) -> float:
        function = FORMULA_FUNCTIONS[node.name]
        if function.lazy:
            thunks = [
                (lambda arg=arg: self._evaluate_node(arg)) for arg in node.arguments
            ]
            return _checked(function.implementation(*thunks))
        return _checked(
            function.implementation(*(self._evaluate_node(arg) for arg in node.arguments))
        )


def evaluate_expression(
    expression: str | ASTNode, resolve_reference: ResolveReference
) -> float:
    """Evaluate an expression (formula text without the leading "=")."""
    return ExpressionEvaluator(resolve_reference).evaluate(expression)


def format_number(value: float, places: int = DEFAULT_PLACES) -> str:
    """Round for display: fixed decimal places, with an all-zero fraction trimmed.

    Rounds the exact binary value half away from zero, so 2.675 (stored as
    2.67499...) shows as "2.67" and 0.125 shows as "0.13".
    """
    if not math.isfinite(value):
        raise InvalidExpression(f"Cannot display non-finite value: {value}")
    # Wide enough for every finite double at the requested places
    context = Context(prec=330 + places)
    quantum = Decimal(1).scaleb(-places)
    text = str(
        Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=context)
    )
    if places > 0 and text.endswith("." + "0" * places):
        text = text[: -(places + 1)]
    if text in ("-0", "0"):
        return "0"
    return text
