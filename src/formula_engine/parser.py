import math
from typing import Callable, List, Optional

from formula_engine.address import extract_cell_reference
from formula_engine.ast import (
    ASTNode,
    BinaryOperation,
    CellReference,
    Constant,
    FunctionCall,
    Percent,
    UnaryOperation,
)
from formula_engine.errors import InvalidExpression, ParseError, UnknownFunction
from formula_engine.functions import lookup_function
from formula_engine.tokenizer import FormulaTokenizer, Token, TokenType


def parse_formula(formula: str) -> ASTNode:
    """Helper function to parse a formula string into an AST."""
    tokens = FormulaTokenizer(formula).tokenize()
    return FormulaParser(tokens).parse()


class FormulaParser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.current = 0

    def parse(self) -> ASTNode:
        """Parse tokens into an AST."""
        # Skip leading equals sign if present
        self.current = 0
        if (
            len(self.tokens) > 0
            and self.tokens[0].type == TokenType.OPERATOR
            and self.tokens[0].value == "="
        ):
            self.current = 1

        if self.current >= len(self.tokens):
            raise ParseError("Empty formula")

        node = self.parse_expression()
        if (trailing := self.peek()) is not None:
            raise ParseError(
                f"Unexpected token: {trailing.value!r} at position {trailing.position}"
            )
        return node

    def peek(self) -> Optional[Token]:
        """Look at the current token without consuming it."""
        if self.current >= len(self.tokens):
            return None
        return self.tokens[self.current]

    def read(self) -> Token:
        """Consume and return the current token."""
        if self.current >= len(self.tokens):
            raise ParseError("Unexpected end of formula")
        tok = self.tokens[self.current]
        self.current += 1
        return tok

    def read_if_match(self, *types: TokenType) -> Optional[Token]:
        """Consume and return current token if it matches any of the given types."""
        token = self.peek()
        if token is not None and token.type in types:
            self.current += 1
            return token
        return None

    def _parse_binary_operation(
        self, parse_operand: Callable[[], ASTNode], valid_operators: set[str]
    ) -> ASTNode:
        """Parse a left-associative binary operation."""
        left = parse_operand()

        while True:
            next_tok = self.peek()
            if (
                not next_tok
                or next_tok.type != TokenType.OPERATOR
                or next_tok.value not in valid_operators
            ):
                break

            self.read()  # consume operator
            right = parse_operand()
            left = BinaryOperation(left=left, operator=next_tok.value, right=right)

        return left

    def parse_expression(self) -> ASTNode:
        """Parse an expression (lowest precedence: comparisons)."""
        return self._parse_binary_operation(
            self.parse_additive, {"=", "<>", "<", ">", "<=", ">="}
        )

    def parse_additive(self) -> ASTNode:
        return self._parse_binary_operation(self.parse_term, {"+", "-"})

    def parse_term(self) -> ASTNode:
        return self._parse_binary_operation(self.parse_power, {"*", "/"})

    def parse_power(self) -> ASTNode:
        return self._parse_binary_operation(self.parse_factor, {"^"})

    def parse_factor(self) -> ASTNode:
        """Parse a signed operand. Sign binds tighter than ^, so -2^2 is 4."""
        token = self.peek()
        if token is not None and token.type == TokenType.OPERATOR and token.value in [
            "+",
            "-",
        ]:
            operator = self.read().value
            return UnaryOperation(operator=operator, operand=self.parse_factor())
        return self.parse_percent()

    def parse_percent(self) -> ASTNode:
        node = self.parse_primary()
        while self.read_if_match(TokenType.OPERATOR) is not None:
            if self.tokens[self.current - 1].value != "%":
                # Not a postfix operator, give it back to the binary levels
                self.current -= 1
                break
            node = Percent(node)
        return node

    def parse_primary(self) -> ASTNode:
        """Parse a primary (literals, references, function calls, groups)."""
        token = self.peek()
        if token is None:
            raise ParseError("Unexpected end of formula")

        if token.type == TokenType.NUMBER:
            self.read()
            value = float(token.value)
            if not math.isfinite(value):
                raise InvalidExpression(
                    f"Numeric overflow: {token.value} at position {token.position}"
                )
            return Constant(value)

        elif token.type == TokenType.BOOLEAN:
            self.read()
            return Constant(1.0 if token.value == "TRUE" else 0.0)

        elif token.type == TokenType.IDENTIFIER:
            return self.parse_identifier()

        elif token.type == TokenType.LPAREN:
            self.read()  # consume '('
            expr = self.parse_expression()
            if not self.read_if_match(TokenType.RPAREN):
                raise ParseError("Expected closing parenthesis ')'")
            return expr

        raise ParseError(f"Unexpected token: {token.value!r} at position {token.position}")

    def parse_identifier(self) -> ASTNode:
        """Parse an identifier (function call or cell reference)."""
        token = self.read()

        if self.read_if_match(TokenType.LPAREN):
            return self.parse_function_call(token.value)

        if cell_ref := extract_cell_reference(token.value):
            return CellReference(address=cell_ref, text=token.value)

        raise ParseError(
            f"Invalid cell reference: {token.value} at position {token.position}"
        )

    def parse_function_call(self, name: str) -> FunctionCall:
        """Parse a function call with its arguments."""
        function = lookup_function(name)
        if function is None:
            raise UnknownFunction(name)

        args = []
        if not self.read_if_match(TokenType.RPAREN):
            while True:
                args.append(self.parse_expression())

                next_tok = self.peek()
                if not next_tok:
                    raise ParseError("Unexpected end of formula in function call")

                if next_tok.type == TokenType.RPAREN:
                    self.read()  # consume ')'
                    break

                if next_tok.type == TokenType.COMMA:
                    self.read()  # consume ','
                    continue

                raise ParseError(
                    f"Expected ',' or ')' in function call, got {next_tok.value!r}"
                )

        function.check_arity(len(args))
        return FunctionCall(name=function.name, arguments=tuple(args))
