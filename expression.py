"""
Expression front-end for the bisection solver.

Features:
 - Tokenizing preprocessor that turns user input into a valid expression
   (implicit multiplication, function shorthand, ^ for powers, ln)
 - SymPy parsing into a real-valued expression of x
 - Callable construction through sympy.lambdify on the math module
 - Discontinuity detection: denominator zeros inside (a, b)
 - Parsed expressions can be passed back in, so input is parsed once
"""

from typing import Any, Callable, Dict, List, Union
import logging
import math
import re
import sympy as sp

logger = logging.getLogger(__name__)

X = sp.symbols("x", real=True)

# known functions (longer names first so asinh wins over asin and sin)
FUNCTIONS = sorted(
    [
        "asin", "acos", "atan", "asinh", "acosh", "atanh",
        "sinh", "cosh", "tanh",
        "sin", "cos", "tan",
        "log", "ln", "exp", "sqrt", "abs",
    ],
    key=len,
    reverse=True,
)
CONSTANTS = ["pi", "e"]

_TOKEN_RE = re.compile(
    r"(?P<number>\d+(?:\.\d*)?(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)"
    r"|(?P<name>" + "|".join(FUNCTIONS + CONSTANTS + ["x"]) + r")"
    r"|(?P<op>\*\*|[-+*/()])"
)


# ---------------- SYMPY NAMESPACE ----------------
def _sympy_locals() -> Dict[str, Any]:
    """Map the names accepted by preprocess_expression onto SymPy objects."""
    return {
        "sin": sp.sin, "cos": sp.cos, "tan": sp.tan,
        "asin": sp.asin, "acos": sp.acos, "atan": sp.atan,
        "sinh": sp.sinh, "cosh": sp.cosh, "tanh": sp.tanh,
        "asinh": sp.asinh, "acosh": sp.acosh, "atanh": sp.atanh,
        "exp": sp.exp, "log": sp.log, "ln": sp.log, "sqrt": sp.sqrt,
        "abs": sp.Abs,
        "pi": sp.pi, "e": sp.E, "E": sp.E,
        "x": X,
    }


# ---------------- EXPRESSION PREPROCESSOR ----------------
def _tokenize(text: str) -> List[str]:
    tokens: List[str] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise ValueError(f"Unrecognized input at position {pos}: {text[pos:]!r}")
        tokens.append(m.group(0))
        pos = m.end()
    return tokens


def _is_operand(token: str) -> bool:
    return token == "x" or token in CONSTANTS or token[0].isdigit() or token[0] == "."


def preprocess_expression(expr: str) -> str:
    """
    Convert user-friendly input into a valid Python expression.
    Handles cases like:
      xsinx   -> x*sin(x)
      sinx    -> sin(x)
      3x      -> 3*x
      4(x+1)  -> 4*(x+1)
      x(x+1)  -> x*(x+1)
      e^x     -> e**x
    Raises ValueError on names it does not know.
    """
    s = expr.replace("^", "**")
    s = re.sub(r"\s+", "", s)
    if not s:
        raise ValueError("Empty expression")

    tokens = _tokenize(s)

    # function shorthand: sinx -> sin(x), sin2 -> sin(2)
    wrapped: List[str] = []
    i = 0
    while i < len(tokens):
        tok = tokens[i]
        if tok in FUNCTIONS and i + 1 < len(tokens) and _is_operand(tokens[i + 1]):
            wrapped.append(f"{tok}({tokens[i + 1]})")
            i += 2
            continue
        wrapped.append(tok)
        i += 1

    # implicit multiplication between adjacent operands
    out: List[str] = []
    for tok in wrapped:
        if out:
            prev = out[-1]
            ends_operand = prev == ")" or prev.endswith(")") or _is_operand(prev)
            starts_operand = tok == "(" or _is_operand(tok) or tok in FUNCTIONS or tok.split("(")[0] in FUNCTIONS
            if ends_operand and starts_operand:
                out.append("*")
        out.append(tok)
    return "".join(out)


# ---------------- PARSING ----------------
def parse_processed(processed: str) -> sp.Expr:
    """
    Parse an already preprocessed expression into a SymPy expression of the
    real symbol x. Raises ValueError if it cannot be parsed.
    """
    try:
        sym_expr = sp.sympify(processed, locals=_sympy_locals())
    except (sp.SympifyError, SyntaxError, TypeError) as exc:
        raise ValueError(f"Failed to parse expression. Preprocessed: {processed!r}. Error: {exc}") from exc
    extra = sym_expr.free_symbols - {X}
    if extra:
        names = ", ".join(sorted(str(s) for s in extra))
        raise ValueError(f"Expression may only depend on x, found: {names}")
    logger.debug("parsed %r as %s", processed, sym_expr)
    return sym_expr


def parse_expression(expr: str) -> sp.Expr:
    """Preprocess and parse user input."""
    return parse_processed(preprocess_expression(expr))


def _as_sympy(expr: Union[str, sp.Expr]) -> sp.Expr:
    return parse_expression(expr) if isinstance(expr, str) else expr


# ---------------- MAKE FUNCTION ----------------
def make_function(expr: Union[str, sp.Expr]) -> Callable[[float], float]:
    """
    Build a callable f(x) from user input or a parsed expression.

    Points where f is undefined raise (ZeroDivisionError, ValueError for
    math domain errors) or yield a complex number; the solver reads both
    as non-finite values.
    """
    return sp.lambdify(X, _as_sympy(expr), modules="math")


# ---------------- DISCONTINUITY DETECTION ----------------
def find_discontinuities(expr: Union[str, sp.Expr], a: float, b: float, samples: int = 800) -> List[float]:
    """
    Return the points in the open interval (a, b) where the denominator of
    expr becomes zero.

    Strategy:
      1. together() + as_numer_denom() to extract the denominator
      2. denominator free of x -> no discontinuity
      3. solveset over the reals:
         - FiniteSet: keep the roots strictly inside (a, b)
         - EmptySet: none
         - anything else (ImageSet, ConditionSet): numeric scan of the
           lambdified denominator, reporting zeros and sign changes
    """
    if not a < b:
        raise ValueError("left bound must be less than right bound")

    _, denom = sp.together(_as_sympy(expr)).as_numer_denom()
    if X not in denom.free_symbols:
        return []

    denom = sp.factor(denom)
    try:
        sol = sp.solveset(sp.Eq(denom, 0), X, domain=sp.S.Reals)
    except NotImplementedError:
        sol = None

    if isinstance(sol, sp.FiniteSet):
        poles = sorted(float(sp.N(root)) for root in sol)
        return [p for p in poles if a < p < b]
    if sol == sp.S.EmptySet:
        return []

    logger.debug("denominator %s not solvable symbolically, scanning numerically", denom)
    g = sp.lambdify(X, denom, modules="math")
    poles: List[float] = []
    prev_x = None
    prev_val = None
    for i in range(samples):
        # weighted form stays finite for bounds near the float limits
        t = i / (samples - 1)
        xv = a * (1 - t) + b * t
        try:
            dv = float(g(xv))
        except (ArithmeticError, ValueError, TypeError):
            poles.append(xv)
            prev_val = None
            continue
        if not math.isfinite(dv) or dv == 0.0:
            poles.append(xv)
            prev_val = None
            continue
        if prev_val is not None and prev_val * dv < 0:
            poles.append(0.5 * prev_x + 0.5 * xv)
        prev_x, prev_val = xv, dv
    return [p for p in poles if a < p < b]
