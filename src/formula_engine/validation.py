"""Answer-key acceptance of user-entered formulas.

Acceptance is textual: formulas are compared after normalization, never
evaluated.
"""

import logging
import math
import re
from typing import Iterable, Mapping, NamedTuple

WHITESPACE_REGEX = re.compile(r"\s+")


class AnswerKeyEntry(NamedTuple):
    accepted: frozenset[str]
    hint: str | None = None
    explanation: str | None = None
    points: int = 0


class FormulaValidation(NamedTuple):
    is_correct: bool
    points: int = 0
    expected_formula: str | None = None
    hint: str | None = None
    explanation: str | None = None


AnswerKey = Mapping[str, AnswerKeyEntry]


def normalize_formula(formula: str) -> str:
    return WHITESPACE_REGEX.sub("", formula).upper()


def is_accepted(cell_id: str, candidate: str, accepted_formulas: Iterable[str]) -> bool:
    """Return True if `candidate` matches one of the accepted formulas."""
    normalized = normalize_formula(candidate)
    accepted = {normalize_formula(formula) for formula in accepted_formulas}
    result = normalized in accepted
    logging.debug(
        "Formula %r for %s is %s", candidate, cell_id, "accepted" if result else "rejected"
    )
    return result


def validate_formula(
    cell_id: str, candidate: str, answer_key: AnswerKey
) -> FormulaValidation:
    """Grade a formula for one cell against the answer key.

    Cells absent from the key need no particular formula and are accepted
    with no points. A rejected formula reports the hint and one expected
    formula; an accepted one reports the explanation and the points.
    """
    entry = answer_key.get(cell_id.upper())
    if entry is None:
        return FormulaValidation(is_correct=True)

    if is_accepted(cell_id, candidate, entry.accepted):
        return FormulaValidation(
            is_correct=True, points=entry.points, explanation=entry.explanation
        )
    return FormulaValidation(
        is_correct=False,
        expected_formula=min(entry.accepted) if entry.accepted else None,
        hint=entry.hint,
    )


def completion_percentage(completed_cells: Iterable[str], answer_key: AnswerKey) -> int:
    """Rounded percentage of answer-key cells found in `completed_cells`."""
    if not answer_key:
        return 0
    completed = {cell.upper() for cell in completed_cells}
    done = sum(1 for cell in answer_key if cell.upper() in completed)
    # Halves round up
    return math.floor(done * 100 / len(answer_key) + 0.5)
