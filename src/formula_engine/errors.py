class FormulaError(Exception):
    """Base class for all formula engine errors.

    `code` is the spreadsheet-style value a host application can display in
    the offending cell.
    """

    code = "#VALUE!"


class MalformedAddress(FormulaError, ValueError):
    code = "#REF!"


class CircularReference(FormulaError):
    code = "#CYCLE!"

    def __init__(self, message: str, cycle: list[str] | None = None):
        super().__init__(message)
        self.cycle = cycle or []


class ResolutionDepthExceeded(FormulaError):
    code = "#CYCLE!"


class UnknownFunction(FormulaError):
    code = "#NAME?"

    def __init__(self, name: str):
        super().__init__(f"Unknown function: {name}")
        self.name = name


class InvalidExpression(FormulaError):
    code = "#VALUE!"


class TokenizerError(InvalidExpression):
    pass


class ParseError(InvalidExpression):
    pass


class DivisionByZero(FormulaError, ZeroDivisionError):
    code = "#DIV/0!"
