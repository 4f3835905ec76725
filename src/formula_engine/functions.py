from typing import Callable, NamedTuple, Optional

from formula_engine.errors import InvalidExpression


class FormulaFunction(NamedTuple):
    name: str
    implementation: Callable[..., float]
    min_args: int
    max_args: int | None
    # Lazy functions receive zero-argument callables instead of values
    lazy: bool = False

    def check_arity(self, count: int) -> None:
        if count < self.min_args or (
            self.max_args is not None and count > self.max_args
        ):
            if self.max_args is None:
                expected = f"at least {self.min_args}"
            elif self.max_args == self.min_args:
                expected = str(self.min_args)
            else:
                expected = f"{self.min_args} to {self.max_args}"
            raise InvalidExpression(
                f"{self.name} expects {expected} argument(s), got {count}"
            )


FORMULA_FUNCTIONS: dict[str, FormulaFunction] = {}


def formula_fn(
    *,
    name: Optional[str] = None,
    min_args: int = 1,
    max_args: int | None = None,
    lazy: bool = False,
) -> Callable[[Callable[..., float]], Callable[..., float]]:
    """Decorator to register a function under its (upper-case) formula name."""

    def decorator(fn: Callable[..., float]) -> Callable[..., float]:
        reg_name = (name or fn.__name__).upper()
        FORMULA_FUNCTIONS[reg_name] = FormulaFunction(
            reg_name, fn, min_args, max_args, lazy
        )
        return fn

    return decorator


def lookup_function(name: str) -> FormulaFunction | None:
    return FORMULA_FUNCTIONS.get(name.upper())


@formula_fn(name="SUM")
def SUM(*args: float) -> float:
    return sum(args)


@formula_fn(name="AVERAGE")
def AVERAGE(*args: float) -> float:
    return sum(args) / len(args)


@formula_fn(name="MAX")
def MAX(*args: float) -> float:
    return max(args)


@formula_fn(name="MIN")
def MIN(*args: float) -> float:
    return min(args)


@formula_fn(name="IF", min_args=2, max_args=3, lazy=True)
def IF(
    condition: Callable[[], float],
    true_value: Callable[[], float],
    false_value: Callable[[], float] | None = None,
) -> float:
    """Return true_value if condition is non-zero, false_value otherwise.

    Only the selected branch is evaluated. A missing false_value yields 0
    (FALSE).
    """
    if condition() != 0:
        return true_value()
    if false_value is None:
        return 0.0
    return false_value()
