"""
Bisection Method backend

Features:
 - Immutable Configuration (tolerance, max_iterations, min_interval) with a
   named DEFAULT_CONFIG
 - Closed set of outcomes: Success, InvalidBounds, MaxIterationsReached,
   NumericalError; find() always returns exactly one of them
 - Precondition checks, in order:
     * finite bounds, a < b
     * finite function values at the bounds
     * bound already a root (|f| < tolerance)
     * strict sign change at the bounds
 - Bracket-narrowing loop with min_interval / non-finite detection
 - Iteration observer for tables and white-box checks
 - A-priori iteration estimate:
     N = ceil(log2((b-a) / tol)), N >= 0
 - Pole check after convergence: |f| must shrink as the bracket closes
 - solve_expression(): parse user input, reject discontinuities, run find()
"""

from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Union
import logging
import math

from expression import find_discontinuities, make_function, parse_processed, preprocess_expression

logger = logging.getLogger(__name__)


# ---------------- CONFIGURATION ----------------
@dataclass(frozen=True)
class Configuration:
    tolerance: float = 1e-10
    max_iterations: int = 1000
    min_interval: float = 1e-15

    def __post_init__(self):
        if not (math.isfinite(self.tolerance) and self.tolerance > 0):
            raise ValueError(f"tolerance must be a positive number, got {self.tolerance!r}")
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, int) or self.max_iterations <= 0:
            raise ValueError(f"max_iterations must be a positive integer, got {self.max_iterations!r}")
        if not (math.isfinite(self.min_interval) and self.min_interval > 0):
            raise ValueError(f"min_interval must be a positive number, got {self.min_interval!r}")

    @classmethod
    def from_digits(cls, d: int, **overrides) -> "Configuration":
        """Configuration whose tolerance is 10^-d ("correct to d digits")."""
        if isinstance(d, bool) or not isinstance(d, int) or d < 0:
            raise ValueError("d must be a non-negative integer")
        if "tolerance" in overrides:
            raise ValueError("tolerance is derived from d and cannot be overridden")
        return cls(tolerance=10.0 ** (-d), **overrides)


DEFAULT_CONFIG = Configuration()


def with_overrides(config: Configuration, **changes) -> Configuration:
    """Copy of config with the given fields replaced (validated again)."""
    return replace(config, **changes)


# ---------------- OUTCOMES ----------------
@dataclass(frozen=True)
class Success:
    root: float
    iterations: int

    def __str__(self) -> str:
        return f"Root found: {self.root} (after {self.iterations} iterations)"


@dataclass(frozen=True)
class InvalidBounds:
    reason: str

    def __str__(self) -> str:
        return f"Invalid bounds: {self.reason}"


@dataclass(frozen=True)
class MaxIterationsReached:
    best_approx: float
    iterations: int

    def __str__(self) -> str:
        return (f"Max iterations reached: best approximation {self.best_approx} "
                f"(after {self.iterations} iterations)")


@dataclass(frozen=True)
class NumericalError:
    reason: str

    def __str__(self) -> str:
        return f"Numerical error: {self.reason}"


Outcome = Union[Success, InvalidBounds, MaxIterationsReached, NumericalError]


@dataclass(frozen=True)
class IterationRecord:
    """One pass of the loop: the bracket it was entered with and its midpoint."""
    n: int
    left: float
    right: float
    midpoint: float
    fmid: float


# ---------------- HELPERS ----------------
def opposite_signs(u: float, v: float) -> bool:
    """Strict test: zero is neither positive nor negative."""
    return (u > 0 and v < 0) or (u < 0 and v > 0)


def _evaluate(f: Callable[[float], float], x: float) -> float:
    """
    Call f at x. Arithmetic and domain failures, and complex results, come
    back as NaN so they are classified with the other non-finite values.
    """
    try:
        raw = f(x)
        if isinstance(raw, complex):
            return float("nan")
        return float(raw)
    except (ArithmeticError, ValueError) as exc:
        logger.debug("f(%r) raised %s: %s", x, type(exc).__name__, exc)
        return float("nan")


def required_iterations(a: float, b: float, tolerance: float) -> int:
    """
    Number of halvings needed for the bracket [a, b] to shrink below tolerance:
      N = ceil(log2((b - a) / tolerance)), N >= 0
    """
    if b <= a:
        raise ValueError("b must be > a")
    if tolerance <= 0:
        raise ValueError("tolerance must be > 0")
    # halved bounds keep the width finite near the float limits
    log_width = math.log2(b / 2 - a / 2) + 1
    return max(math.ceil(log_width - math.log2(tolerance)), 0)


# ---------------- BISECTION (core) ----------------
def find(
    f: Callable[[float], float],
    a: float,
    b: float,
    config: Configuration = DEFAULT_CONFIG,
    *,
    observer: Optional[Callable[[IterationRecord], None]] = None,
) -> Outcome:
    """
    Find a root of f in [a, b] by bisection.

    Never raises for numerical conditions: every failure is returned as an
    InvalidBounds, NumericalError or MaxIterationsReached outcome. observer,
    when given, receives an IterationRecord for each iteration whose
    midpoint value is finite.
    """
    if not (math.isfinite(a) and math.isfinite(b)):
        return InvalidBounds("bounds must be finite numbers")
    if not a < b:
        return InvalidBounds("left bound must be less than right bound")

    fa = _evaluate(f, a)
    fb = _evaluate(f, b)
    if not (math.isfinite(fa) and math.isfinite(fb)):
        return NumericalError("Function values at bounds are not finite")

    # endpoint roots are accepted before the sign test
    if abs(fa) < config.tolerance:
        return Success(a, 0)
    if abs(fb) < config.tolerance:
        return Success(b, 0)

    if not opposite_signs(fa, fb):
        return InvalidBounds("Function must have opposite signs at bounds")

    left, right = a, b
    iteration = 0
    while True:
        if iteration >= config.max_iterations:
            logger.debug("iteration budget of %d exhausted", config.max_iterations)
            return MaxIterationsReached((left + right) / 2, iteration)
        if right - left < config.min_interval:
            return NumericalError("interval too small for float precision")

        mid = (left + right) / 2
        if not math.isfinite(mid):
            return NumericalError("midpoint exceeded acceptable limit")

        fmid = _evaluate(f, mid)
        if not math.isfinite(fmid):
            return NumericalError(f"Function value at {mid} is not finite")

        if observer is not None:
            observer(IterationRecord(iteration + 1, left, right, mid, fmid))

        if abs(fmid) < config.tolerance:
            return Success(mid, iteration + 1)
        if right - left < config.tolerance:
            logger.debug("bracket narrower than tolerance at x=%r", mid)
            return Success(mid, iteration + 1)

        # f(left) is re-evaluated rather than carried over from earlier passes
        fleft = _evaluate(f, left)
        if opposite_signs(fleft, fmid):
            right = mid
        else:
            left = mid
        iteration += 1


# ---------------- EXPRESSION SOLVE ----------------
@dataclass
class Report:
    expression: str
    outcome: Outcome
    iterations: List[IterationRecord] = field(default_factory=list)
    analysis: List[str] = field(default_factory=list)


def converged_on_discontinuity(f: Callable[[float], float], left: float, right: float,
                               a: float, b: float, spread: float = 1000.0) -> bool:
    """
    True when |f| on the final bracket [left, right] is no smaller than |f|
    `spread` bracket widths further out (clipped to [a, b]).

    Closing in on a root of a continuous f, |f| shrinks with the bracket;
    closing in on a pole or a jump it does not.
    """
    width = right - left
    near = max(abs(_evaluate(f, left)), abs(_evaluate(f, right)))
    far = max(abs(_evaluate(f, max(a, left - spread * width))),
              abs(_evaluate(f, min(b, right + spread * width))))
    return not far > near


def solve_expression(expr: str, a: float, b: float, config: Configuration = DEFAULT_CONFIG) -> Report:
    """
    Run bisection on a user-entered expression of x.

    Raises ValueError when the expression cannot be parsed. A denominator
    zero inside (a, b) is reported as InvalidBounds without iterating; so is
    a bracket that closed in on a pole or jump instead of a root.
    """
    processed = preprocess_expression(expr)
    sym_expr = parse_processed(processed)
    f = make_function(sym_expr)
    analysis_logs: List[str] = [f"Processed expression: {processed}"]

    if math.isfinite(a) and math.isfinite(b) and a < b:
        poles = find_discontinuities(sym_expr, a, b)
        if poles:
            analysis_logs.append(f"Denominator vanishes at x = {', '.join(repr(p) for p in poles)}")
            outcome = InvalidBounds(f"function is discontinuous at x={poles[0]} inside the interval")
            return Report(expr, outcome, [], analysis_logs)
        analysis_logs.append("No denominator zero inside the interval.")
        n_est = required_iterations(a, b, config.tolerance)
        analysis_logs.append(f"A-priori estimate: {n_est} iterations to shrink the bracket below {config.tolerance}")
        if n_est > config.max_iterations:
            analysis_logs.append(f"Warning: estimate exceeds max_iterations ({config.max_iterations}).")

    records: List[IterationRecord] = []
    outcome = find(f, a, b, config, observer=records.append)
    logger.debug("%s on [%r, %r]: %s", expr, a, b, outcome)

    # a bracket that shrank below tolerance without |f| doing the same
    if isinstance(outcome, Success) and records and abs(records[-1].fmid) >= config.tolerance:
        last = records[-1]
        if converged_on_discontinuity(f, last.left, last.right, a, b):
            analysis_logs.append(f"|f| does not shrink as the bracket closes in on x = {outcome.root!r}")
            outcome = InvalidBounds(f"function is discontinuous at x={outcome.root} inside the interval")

    return Report(expr, outcome, records, analysis_logs)
