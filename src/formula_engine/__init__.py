from formula_engine.address import (
    MAX_COLUMN_INDEX,
    CellAddress,
    column_index,
    column_letters,
    format_address,
    parse_address,
)
from formula_engine.cells import CellContent, CellTable, literal_to_number
from formula_engine.errors import (
    CircularReference,
    DivisionByZero,
    FormulaError,
    InvalidExpression,
    MalformedAddress,
    ParseError,
    ResolutionDepthExceeded,
    TokenizerError,
    UnknownFunction,
)
from formula_engine.evaluator import DEFAULT_PLACES, evaluate_expression, format_number
from formula_engine.fill import fill_horizontal, fill_vertical, shift_formula
from formula_engine.resolver import (
    EvaluationContext,
    ReferenceResolver,
    display_value,
    extract_references,
    resolve_formula,
)
from formula_engine.validation import (
    AnswerKeyEntry,
    FormulaValidation,
    completion_percentage,
    is_accepted,
    normalize_formula,
    validate_formula,
)

evaluate = resolve_formula

__all__ = [
    "MAX_COLUMN_INDEX",
    "DEFAULT_PLACES",
    "AnswerKeyEntry",
    "CellAddress",
    "CellContent",
    "CellTable",
    "CircularReference",
    "DivisionByZero",
    "EvaluationContext",
    "FormulaError",
    "FormulaValidation",
    "InvalidExpression",
    "MalformedAddress",
    "ParseError",
    "ReferenceResolver",
    "ResolutionDepthExceeded",
    "TokenizerError",
    "UnknownFunction",
    "column_index",
    "column_letters",
    "completion_percentage",
    "display_value",
    "evaluate",
    "evaluate_expression",
    "extract_references",
    "fill_horizontal",
    "fill_vertical",
    "format_address",
    "format_number",
    "is_accepted",
    "literal_to_number",
    "normalize_formula",
    "parse_address",
    "resolve_formula",
    "shift_formula",
    "validate_formula",
]
