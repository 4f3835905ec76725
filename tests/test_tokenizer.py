import pytest
from formula_engine.errors import InvalidExpression, TokenizerError
from formula_engine.tokenizer import FormulaTokenizer, Token, TokenType


def tokenize(formula: str) -> list[Token]:
    """Helper function to tokenize a formula."""
    tokenizer = FormulaTokenizer(formula)
    return tokenizer.tokenize()


def assert_tokens(formula: str, expected: list[tuple[TokenType, str]]):
    """Helper function to assert tokens match expected types and values."""
    tokens = tokenize(formula)
    assert len(tokens) == len(expected), (
        f"Expected {len(expected)} tokens, got {len(tokens)}\n"
        f"Expected: {expected}\n"
        f"Got: {[(t.type, t.value) for t in tokens]}"
    )
    for token, (exp_type, exp_value) in zip(tokens, expected):
        assert token.type == exp_type, f"Expected {exp_type}, got {token.type}"
        assert token.value == exp_value, f"Expected {exp_value}, got {token.value}"


class TestFormulaTokenizer:
    def test_simple_arithmetic(self):
        """Test basic arithmetic operators and numbers."""
        assert_tokens(
            "1 + 2",
            [
                (TokenType.NUMBER, "1"),
                (TokenType.OPERATOR, "+"),
                (TokenType.NUMBER, "2"),
            ],
        )

        assert_tokens(
            "2*3^2",
            [
                (TokenType.NUMBER, "2"),
                (TokenType.OPERATOR, "*"),
                (TokenType.NUMBER, "3"),
                (TokenType.OPERATOR, "^"),
                (TokenType.NUMBER, "2"),
            ],
        )

    def test_decimal_numbers(self):
        """Test decimal number handling."""
        assert_tokens(
            "1.5 + .75",
            [
                (TokenType.NUMBER, "1.5"),
                (TokenType.OPERATOR, "+"),
                (TokenType.NUMBER, ".75"),
            ],
        )

        invalid_decimals = [
            ("1.2.3", "multiple decimal points"),
            (".", "lone decimal point"),
            ("1.", "trailing decimal point"),
        ]

        for invalid_num, error_msg in invalid_decimals:
            with pytest.raises(
                TokenizerError, match=f"Invalid number format.*{error_msg}"
            ):
                tokenize(invalid_num)

    def test_scientific_notation(self):
        assert_tokens("1.5E3", [(TokenType.NUMBER, "1.5E3")])
        assert_tokens("2e-2", [(TokenType.NUMBER, "2e-2")])

        with pytest.raises(TokenizerError, match="missing exponent"):
            tokenize("1e")

    def test_cell_references(self):
        """Test various forms of cell references."""
        assert_tokens("A1", [(TokenType.IDENTIFIER, "A1")])
        assert_tokens("$A$1", [(TokenType.IDENTIFIER, "$A$1")])

        # Mixed absolute/relative
        assert_tokens(
            "$A1 + A$1",
            [
                (TokenType.IDENTIFIER, "$A1"),
                (TokenType.OPERATOR, "+"),
                (TokenType.IDENTIFIER, "A$1"),
            ],
        )

    def test_functions(self):
        """Test function calls and arguments."""
        assert_tokens(
            "SUM(A1, B2, 3)",
            [
                (TokenType.IDENTIFIER, "SUM"),
                (TokenType.LPAREN, "("),
                (TokenType.IDENTIFIER, "A1"),
                (TokenType.COMMA, ","),
                (TokenType.IDENTIFIER, "B2"),
                (TokenType.COMMA, ","),
                (TokenType.NUMBER, "3"),
                (TokenType.RPAREN, ")"),
            ],
        )

    def test_boolean_literals(self):
        """Test boolean literal handling."""
        assert_tokens("TRUE", [(TokenType.BOOLEAN, "TRUE")])
        assert_tokens("False", [(TokenType.BOOLEAN, "FALSE")])

    def test_operators(self):
        """Test operators."""

        def _test(op):
            assert_tokens(
                f"A1 {op} B1",
                [
                    (TokenType.IDENTIFIER, "A1"),
                    (TokenType.OPERATOR, op),
                    (TokenType.IDENTIFIER, "B1"),
                ],
            )

        for op in ["+", "-", "*", "/", "^", "=", "<", ">", "<=", ">=", "<>"]:
            _test(op)

    def test_percent(self):
        assert_tokens(
            "25%*2",
            [
                (TokenType.NUMBER, "25"),
                (TokenType.OPERATOR, "%"),
                (TokenType.OPERATOR, "*"),
                (TokenType.NUMBER, "2"),
            ],
        )

    def test_token_positions(self):
        tokens = tokenize("A1 + 22")
        assert [t.position for t in tokens] == [0, 3, 5]

    def test_rejects_unknown_characters(self):
        """Anything outside the closed grammar is rejected."""
        for formula in ['"text"', "A1 & B1", "A1:B2", "x;y", "{1,2}", "1 # 2"]:
            with pytest.raises(TokenizerError, match="Unexpected character"):
                tokenize(formula)

        # "." starts a number but has no digits
        with pytest.raises(TokenizerError, match="lone decimal point"):
            tokenize("a.b")

    def test_rejects_non_ascii_letters(self):
        with pytest.raises(TokenizerError, match="Unexpected character: é"):
            tokenize("é1")

    def test_tokenizer_errors_are_invalid_expressions(self):
        with pytest.raises(InvalidExpression):
            tokenize("__import__('os')")

    def test_rejects_non_ascii_digits(self):
        """Superscript and other non-ASCII digits are not number characters."""
        with pytest.raises(TokenizerError, match="Unexpected character: ²"):
            tokenize("2²")
        with pytest.raises(TokenizerError, match="Unexpected character: ٣"):
            tokenize("٣")
        with pytest.raises(TokenizerError, match="missing exponent"):
            tokenize("1e²")
