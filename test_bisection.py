import dataclasses
import math

import pytest

from bisection import (
    DEFAULT_CONFIG,
    Configuration,
    InvalidBounds,
    MaxIterationsReached,
    NumericalError,
    Success,
    converged_on_discontinuity,
    find,
    opposite_signs,
    required_iterations,
    solve_expression,
)


def square_minus_two(x):
    return x * x - 2


# ---------------- find: convergence ----------------
@pytest.mark.parametrize("f,a,b,expected", [
    (square_minus_two, 1.0, 2.0, 1.41421356),
    (lambda x: x ** 3 - x - 1, 1.0, 2.0, 1.3247179),
    (math.sin, 3.0, 4.0, 3.14159265),
    (lambda x: math.exp(x) - 2, 0.0, 1.0, math.log(2)),
    (lambda x: 1000 * (x - 2), 1.0, 3.0, 2.0),
    (lambda x: x - 500, -1000.0, 1000.0, 500.0),
])
def test_find_converges(f, a, b, expected):
    outcome = find(f, a, b)
    assert isinstance(outcome, Success)
    assert outcome.root == pytest.approx(expected, abs=1e-7)
    assert 0 < outcome.iterations <= DEFAULT_CONFIG.max_iterations


def test_find_root_within_tolerance():
    outcome = find(square_minus_two, 1.0, 2.0)
    assert abs(square_minus_two(outcome.root)) < DEFAULT_CONFIG.tolerance


def test_find_exact_midpoint_counts_one_iteration():
    assert find(lambda x: 3 * x - 6, 1.0, 3.0) == Success(2.0, 1)


def test_find_accepts_bracket_narrower_than_tolerance():
    # step function: |f(mid)| never drops below tolerance
    outcome = find(lambda x: -1.0 if x < 0.3 else 1.0, 0.0, 1.0)
    assert isinstance(outcome, Success)
    assert outcome.root == pytest.approx(0.3, abs=1e-10)
    assert outcome.iterations == 35


# ---------------- find: bounds already roots ----------------
def test_find_left_bound_is_root():
    assert find(lambda x: x - 1, 1.0, 3.0) == Success(1.0, 0)


def test_find_right_bound_is_root():
    assert find(lambda x: x - 3, 0.0, 3.0) == Success(3.0, 0)


def test_find_left_bound_checked_first():
    assert find(lambda x: x * (x - 1), 0.0, 1.0) == Success(0.0, 0)


def test_find_bound_root_beats_missing_sign_change():
    # f(a) within tolerance, f(b) same sign as f(a)
    assert find(lambda x: x * x, 0.0, 1.0) == Success(0.0, 0)


# ---------------- find: invalid bounds ----------------
@pytest.mark.parametrize("a,b", [
    (math.nan, 1.0),
    (0.0, math.nan),
    (-math.inf, 1.0),
    (0.0, math.inf),
])
def test_find_non_finite_bounds(a, b):
    assert find(square_minus_two, a, b) == InvalidBounds("bounds must be finite numbers")


@pytest.mark.parametrize("a,b", [(2.0, 1.0), (1.0, 1.0)])
def test_find_unordered_bounds(a, b):
    def f(x):
        raise AssertionError("f must not be evaluated")
    assert find(f, a, b) == InvalidBounds("left bound must be less than right bound")


def test_find_no_sign_change():
    assert find(lambda x: x + 1, 0.0, 1.0) == InvalidBounds("Function must have opposite signs at bounds")


# ---------------- find: numerical errors ----------------
@pytest.mark.parametrize("f", [
    lambda x: 1 / x,
    lambda x: math.inf if x > 0.5 else -1.0,
    lambda x: math.nan,
    lambda x: math.log(x),
    lambda x: (x - 0.5) ** 0.5,
])
def test_find_non_finite_values_at_bounds(f):
    assert find(f, 0.0, 1.0) == NumericalError("Function values at bounds are not finite")


def test_find_non_finite_value_at_midpoint():
    outcome = find(lambda x: 1 / (x - 0.5), 0.0, 1.0)
    assert outcome == NumericalError("Function value at 0.5 is not finite")


def test_find_midpoint_overflow():
    outcome = find(lambda x: x - 1.5e308, 1e308, 1.7e308)
    assert outcome == NumericalError("midpoint exceeded acceptable limit")


def test_find_interval_below_min_interval():
    config = Configuration(min_interval=0.5)
    outcome = find(square_minus_two, 1.0, 2.0, config)
    assert outcome == NumericalError("interval too small for float precision")


def test_find_int_too_large_for_float():
    outcome = find(lambda x: 10 ** 400 if x > 0.5 else -1, 0.0, 1.0)
    assert outcome == NumericalError("Function values at bounds are not finite")


def test_find_int_too_large_at_midpoint():
    outcome = find(lambda x: 10 ** 400 if x == 0.5 else x - 0.7, 0.0, 1.0)
    assert outcome == NumericalError("Function value at 0.5 is not finite")


def test_find_propagates_programming_errors():
    def f(x):
        raise TypeError("bad call")
    with pytest.raises(TypeError):
        find(f, 0.0, 1.0)


# ---------------- find: iteration budget ----------------
def test_find_single_iteration_budget():
    outcome = find(square_minus_two, 1.0, 2.0, Configuration(max_iterations=1))
    assert outcome == MaxIterationsReached(1.25, 1)


def test_find_budget_returns_midpoint_of_final_bracket():
    outcome = find(square_minus_two, 1.0, 2.0, Configuration(max_iterations=10))
    assert isinstance(outcome, MaxIterationsReached)
    assert outcome.iterations == 10
    assert outcome.best_approx == pytest.approx(math.sqrt(2), abs=2 ** -10)


@pytest.mark.parametrize("f,a,b", [
    (square_minus_two, 0.0, 5.0),
    (lambda x: x ** 5 - 3 * x + 1, 1.0, 2.0),
    (math.cos, 0.0, 3.0),
    (lambda x: math.atan(x - 0.123), -50.0, 50.0),
])
@pytest.mark.parametrize("max_iterations", [1, 5, 20, 1000])
def test_find_terminates_within_budget(f, a, b, max_iterations):
    outcome = find(f, a, b, Configuration(max_iterations=max_iterations))
    assert isinstance(outcome, (Success, MaxIterationsReached))
    assert outcome.iterations <= max_iterations


# ---------------- find: white-box properties ----------------
def test_find_is_idempotent():
    f = lambda x: x ** 3 - x - 1  # noqa: E731
    assert find(f, 1.0, 2.0) == find(f, 1.0, 2.0)


@pytest.mark.parametrize("f,a,b", [
    (square_minus_two, 1.0, 2.0),
    (lambda x: x ** 3 - x - 1, 1.0, 2.0),
    (math.sin, 3.0, 4.0),
    (lambda x: -1.0 if x < 0.3 else 1.0, 0.0, 1.0),
])
def test_bracket_keeps_sign_change(f, a, b):
    records = []
    outcome = find(f, a, b, observer=records.append)
    assert records
    assert outcome.iterations == len(records)
    for n, rec in enumerate(records, start=1):
        assert rec.n == n
        assert a <= rec.left < rec.midpoint < rec.right <= b
        assert opposite_signs(f(rec.left), f(rec.right))


def test_bracket_halves_every_iteration():
    records = []
    find(square_minus_two, 1.0, 2.0, observer=records.append)
    for prev, cur in zip(records, records[1:]):
        assert cur.right - cur.left == pytest.approx((prev.right - prev.left) / 2)


def test_observer_not_called_when_decided_at_bounds():
    records = []
    find(lambda x: x - 1, 1.0, 3.0, observer=records.append)
    assert records == []


def test_left_bound_reevaluated_each_iteration():
    calls = []

    def f(x):
        calls.append(x)
        return square_minus_two(x)

    outcome = find(f, 1.0, 2.0, Configuration(max_iterations=3))
    # two bound evaluations, then midpoint + left bound per iteration
    assert len(calls) == 2 + 2 * outcome.iterations


# ---------------- helpers ----------------
@pytest.mark.parametrize("u,v,expected", [
    (1.0, -1.0, True),
    (-2.0, 3.0, True),
    (1.0, 2.0, False),
    (-1.0, -2.0, False),
    (0.0, 1.0, False),
    (-1.0, 0.0, False),
    (0.0, 0.0, False),
])
def test_opposite_signs(u, v, expected):
    assert opposite_signs(u, v) is expected


def test_outcome_rendering():
    assert str(Success(1.5, 3)) == "Root found: 1.5 (after 3 iterations)"
    assert str(InvalidBounds("bad")) == "Invalid bounds: bad"
    assert str(MaxIterationsReached(1.25, 1)) == \
        "Max iterations reached: best approximation 1.25 (after 1 iterations)"
    assert str(NumericalError("oops")) == "Numerical error: oops"


def test_default_configuration():
    assert DEFAULT_CONFIG == Configuration(tolerance=1e-10, max_iterations=1000, min_interval=1e-15)
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_CONFIG.tolerance = 1.0


@pytest.mark.parametrize("kwargs", [
    {"tolerance": 0.0},
    {"tolerance": -1e-3},
    {"tolerance": math.nan},
    {"max_iterations": 0},
    {"max_iterations": 2.5},
    {"max_iterations": True},
    {"min_interval": 0.0},
    {"min_interval": math.inf},
])
def test_configuration_rejects_bad_values(kwargs):
    with pytest.raises(ValueError):
        Configuration(**kwargs)


def test_configuration_from_digits():
    config = Configuration.from_digits(6, max_iterations=50)
    assert config.tolerance == pytest.approx(1e-6)
    assert config.max_iterations == 50
    assert config.min_interval == DEFAULT_CONFIG.min_interval
    with pytest.raises(ValueError):
        Configuration.from_digits(-1)
    with pytest.raises(ValueError, match="tolerance"):
        Configuration.from_digits(6, tolerance=1e-3)


@pytest.mark.parametrize("a,b,tol,expected", [
    (1.0, 2.0, 1e-10, 34),
    (0.0, 1.0, 0.25, 2),
    (0.0, 1.0, 2.0, 0),
    (1.0, 2.0, 1e-6, 20),
    (-1e300, 1e300, 1e-10, 1031),
    (-1.7e308, 1.7e308, 1e-10, 1059),
])
def test_required_iterations(a, b, tol, expected):
    assert required_iterations(a, b, tol) == expected


def test_required_iterations_rejects_bad_input():
    with pytest.raises(ValueError):
        required_iterations(2.0, 1.0, 1e-6)
    with pytest.raises(ValueError):
        required_iterations(1.0, 2.0, 0.0)


# ---------------- solve_expression ----------------
CASES = [
    # id, expression, a, b, expected outcome type, expected root (or None)
    ("C1_poly",        "x**3 - x - 2",  1.0, 2.0,    Success,       1.5213797068),
    ("C2_endpointL",   "x - 1",         1.0, 3.0,    Success,       1.0),
    ("C3_endpointR",   "x - 3",         0.0, 3.0,    Success,       3.0),
    ("C4_no_sign",     "x**2 + 1",      -1.0, 1.0,   InvalidBounds, None),
    ("C5_pole",        "1/(x-2)",       1.0, 7.0,    InvalidBounds, None),
    ("C6_pole_end",    "1/(x-2)",       2.0, 4.0,    NumericalError, None),
    ("C7_sqrt_neg",    "sqrt(x)",       -1.0, 2.0,   NumericalError, None),
    ("C8_log",         "ln(x)",         -1.0, 2.0,   NumericalError, None),
    ("C9_xsinx",       "xsinx-1",       0.0, 2.0,    Success,       1.1141571409),
    ("C10_sinx",       "sinx-0.5",      0.0, 2.0,    Success,       0.5235987756),
    ("C11_3x",         "3x - 6",        1.0, 3.0,    Success,       2.0),
    ("C12_paren_mul",  "(x+1)(x-1)",    -2.0, 2.0,   InvalidBounds, None),
    ("C13_sqrt_shift", "sqrt(x-3)",     0.0, 2.0,    NumericalError, None),
    ("C14_flat",       "x^3",           -0.01, 0.01, Success,       0.0),
    ("C15_transc_pole", "1/sin(x)",     1.0, 4.0,    InvalidBounds, None),
    ("C16_small_width", "x - 1.0001",   1.0, 1.0002, Success,       1.0001),
    ("C17_reversed",   "x - 1",         2.0, 0.0,    InvalidBounds, None),
    ("C18_exp",        "e^x - 3",       0.0, 2.0,    Success,       1.0986122887),
    ("C19_tan_pole",   "tan(x)",        1.0, 2.0,    InvalidBounds, None),
    ("C20_steep",      "1e6(x-0.3)",    0.0, 1.0,    Success,       0.3),
    ("C21_wide",       "x",             -1e300, 1e300, Success,     0.0),
]


@pytest.mark.parametrize("cid,expr,a,b,kind,root", CASES, ids=[c[0] for c in CASES])
def test_solve_expression_cases(cid, expr, a, b, kind, root):
    report = solve_expression(expr, a, b)
    assert isinstance(report.outcome, kind), str(report.outcome)
    if root is not None:
        assert report.outcome.root == pytest.approx(root, abs=1e-8)
        assert len(report.iterations) == report.outcome.iterations


def test_solve_expression_reports_discontinuity():
    report = solve_expression("1/(x-2)", 1.0, 7.0)
    assert report.outcome == InvalidBounds("function is discontinuous at x=2.0 inside the interval")
    assert report.iterations == []


def test_solve_expression_analysis():
    report = solve_expression("xsinx-1", 0.0, 2.0, Configuration.from_digits(6))
    assert report.analysis[0] == "Processed expression: x*sin(x)-1"
    assert any("A-priori estimate: 21 iterations" in line for line in report.analysis)


def test_solve_expression_warns_when_budget_too_small():
    report = solve_expression("x^2 - 2", 1.0, 2.0, Configuration(max_iterations=5))
    assert isinstance(report.outcome, MaxIterationsReached)
    assert any(line.startswith("Warning: estimate exceeds") for line in report.analysis)


def test_solve_expression_rejects_unparsable_input():
    with pytest.raises(ValueError):
        solve_expression("y + 1", 0.0, 1.0)


def test_solve_expression_wide_interval():
    report = solve_expression("x", -1e300, 1e300)
    assert report.outcome == Success(0.0, 1)
    assert any("A-priori estimate: 1031 iterations" in line for line in report.analysis)
    assert any(line.startswith("Warning: estimate exceeds") for line in report.analysis)


def test_solve_expression_rejects_tan_pole():
    report = solve_expression("tan(x)", 1.0, 2.0)
    assert isinstance(report.outcome, InvalidBounds)
    assert report.outcome.reason.startswith("function is discontinuous at x=1.5707963")
    assert report.iterations
    assert any("does not shrink" in line for line in report.analysis)


@pytest.mark.parametrize("f,left,right,expected", [
    (math.tan, math.pi / 2 - 1e-11, math.pi / 2 + 1e-11, True),
    (lambda x: -1.0 if x < 1.3 else 1.0, 1.3 - 1e-11, 1.3 + 1e-11, True),
    (lambda x: 1e6 * (x - 1.3), 1.3 - 1e-11, 1.3 + 1e-11, False),
    (lambda x: (x - 1.5) ** 3, 1.5 - 1e-11, 1.5 + 1e-11, False),
])
def test_converged_on_discontinuity(f, left, right, expected):
    assert converged_on_discontinuity(f, left, right, 1.0, 2.0) is expected
