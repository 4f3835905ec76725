from enum import Enum, auto
from typing import List, NamedTuple

from formula_engine.errors import TokenizerError


class TokenType(Enum):
    IDENTIFIER = auto()
    NUMBER = auto()
    OPERATOR = auto()
    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()
    BOOLEAN = auto()


class Token(NamedTuple):
    type: TokenType
    value: str
    position: int


def _is_digit(char: str) -> bool:
    # str.isdigit also accepts digits such as "²" that float() rejects
    return "0" <= char <= "9"


class FormulaTokenizer:
    TWO_CHAR_OPERATORS = {"<": {"=", ">"}, ">": {"="}}

    def __init__(self, formula: str):
        self.formula = formula.strip()
        self.pos = 0
        self.length = len(self.formula)

    def tokenize(self) -> List[Token]:
        """Tokenize the formula and return list of tokens."""
        tokens = []
        while self.pos < self.length:
            char = self.formula[self.pos]

            if char.isspace():
                self.pos += 1
                continue
            elif _is_digit(char) or char == ".":
                tokens.append(self._tokenize_number())
            elif char.isalpha() or char == "_" or char == "$":
                tokens.append(self._tokenize_identifier())
            elif char in "+-*/=<>%^":
                tokens.append(self._tokenize_operator())
            elif char == "(":
                tokens.append(Token(TokenType.LPAREN, char, self.pos))
                self.pos += 1
            elif char == ")":
                tokens.append(Token(TokenType.RPAREN, char, self.pos))
                self.pos += 1
            elif char == ",":
                tokens.append(Token(TokenType.COMMA, char, self.pos))
                self.pos += 1
            else:
                raise TokenizerError(
                    f"Unexpected character: {char} at position {self.pos}"
                )

        return tokens

    def _tokenize_identifier(self) -> Token:
        """Tokenize an identifier (function name or cell reference)."""
        start = self.pos
        while self.pos < self.length and (
            self.formula[self.pos].isascii()
            and (self.formula[self.pos].isalnum() or self.formula[self.pos] in "_$")
        ):
            self.pos += 1

        if self.pos == start:
            # Non-ASCII letter, which no identifier may contain
            raise TokenizerError(
                f"Unexpected character: {self.formula[start]} at position {start}"
            )

        value = self.formula[start : self.pos]
        if value.upper() in ["TRUE", "FALSE"]:
            return Token(TokenType.BOOLEAN, value.upper(), start)
        else:
            return Token(TokenType.IDENTIFIER, value, start)

    def _tokenize_number(self) -> Token:
        """Tokenize a number (integer or decimal)."""
        start = self.pos
        seen_decimal = False
        has_digits = False
        seen_exponent = False

        while self.pos < self.length:
            char = self.formula[self.pos]

            if _is_digit(char):
                has_digits = True
                self.pos += 1
            elif char == "." and not seen_decimal and not seen_exponent:
                seen_decimal = True
                self.pos += 1
            elif char == "." and seen_decimal:
                raise TokenizerError(
                    f"Invalid number format at position {start}: multiple decimal points"
                )
            elif (char == "e" or char == "E") and not seen_exponent and has_digits:
                seen_exponent = True
                self.pos += 1
                if self.pos < self.length and (self.formula[self.pos] in "+-"):
                    self.pos += 1
                # Must have at least one digit after e/E
                if self.pos >= self.length or not _is_digit(self.formula[self.pos]):
                    raise TokenizerError(
                        f"Invalid scientific notation at position {start}: missing exponent"
                    )
            else:
                break

        value = self.formula[start : self.pos]

        if value == ".":
            raise TokenizerError(
                f"Invalid number format at position {start}: lone decimal point"
            )
        elif not has_digits:
            raise TokenizerError(
                f"Invalid number format at position {start}: no digits"
            )
        elif value.endswith("."):
            raise TokenizerError(
                f"Invalid number format at position {start}: trailing decimal point"
            )

        return Token(TokenType.NUMBER, value, start)

    def _tokenize_operator(self) -> Token:
        """Tokenize an operator (+, -, *, /, =, <, >, <=, >=, <>, %, ^)."""
        start = self.pos
        current_char = self.formula[self.pos]
        next_char = self.formula[self.pos + 1] if self.pos + 1 < self.length else None

        if (
            next_char
            and current_char in self.TWO_CHAR_OPERATORS
            and next_char in self.TWO_CHAR_OPERATORS[current_char]
        ):
            self.pos += 2
            value = self.formula[start : self.pos]
        else:
            self.pos += 1
            value = current_char

        return Token(TokenType.OPERATOR, value, start)


def tokenize(formula: str) -> List[Token]:
    return FormulaTokenizer(formula).tokenize()
