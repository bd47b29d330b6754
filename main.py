"""
Command-line interface for the Bisection Project.
"""
import logging
import os

from bisection import DEFAULT_CONFIG, Configuration, Success, solve_expression, with_overrides
from utils import iteration_rows, summary_lines


def print_iterations_table(iter_list):
    if not iter_list:
        print("\n(No iterations - the outcome was decided at the bounds.)")
        return

    # table header
    print("\n" + "=" * 80)
    print(f"{'n':<5} {'a':<15} {'b':<15} {'p':<15} {'f(p)':<15} {'error':<15}")
    print("-" * 80)

    for row in iter_list:
        err = row['error']
        err_str = f"{err:.8e}" if err is not None else "----"
        print(f"{row['n']:<5} {row['a']:<15.8f} {row['b']:<15.8f} {row['p']:<15.8f} "
              f"{row['f(p)']:<15.8e} {err_str:<15}")

    print("=" * 80)


def read_config() -> Configuration:
    """Prompt for digits and iteration budget; blank input keeps the default."""
    d = input(f"Enter d (digits, blank for tol={DEFAULT_CONFIG.tolerance}): ").strip()
    config = Configuration.from_digits(int(d)) if d else DEFAULT_CONFIG
    n = input(f"Enter max iterations (blank for {DEFAULT_CONFIG.max_iterations}): ").strip()
    if n:
        config = with_overrides(config, max_iterations=int(n))
    return config


def main():
    """Interactive entry point"""
    logging.basicConfig(level=os.environ.get("BISECTION_LOG_LEVEL", "WARNING").upper())

    print("Bisection Method - Numerical Project")
    func = input("Enter f(x): ")
    try:
        a = float(input("Enter a: "))
        b = float(input("Enter b: "))
        config = read_config()
        report = solve_expression(func, a, b, config)
    except ValueError as exc:
        print(f"\n❌ Error: {exc}\n")
        return 1

    lines = summary_lines(report)
    marker = "✅" if isinstance(report.outcome, Success) else "❌"
    print(f"\n{marker} {lines[1]}")
    for line in lines[2:]:
        print(line)

    print_iterations_table(iteration_rows(report.iterations))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
