"""Example script: total genotype frequency of the selection models.

Integrates the original and the modified three-genotype models with every
method and precision and reports when the original model leaves the simplex.

Run with
    python examples/genetics_divergence.py
"""

import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

import numpy as np

from genode import (IntegrationError, available_methods, integrate,
                    system3_modified, system3_original, total_mass)


def _onset(sol, threshold=1e-3):
    dev = np.array([abs(float(m) - 1.0) for m in total_mass(sol.states)])
    idx = np.nonzero(dev > threshold)[0]
    return float(sol.times[idx[0]]) if idx.size else None


def main() -> None:
    """Print the divergence onset of the original model per method and precision."""
    q0 = [0.5, 0.25, 0.25]
    settings = [("narrow", "1e-7"), ("standard", "1e-8"), ("extended", "1e-14")]

    for method in available_methods():
        for precision, tol in settings:
            try:
                sol = integrate(system3_original, q0, 0, 50, method=method,
                                atol=tol, rtol=tol, precision=precision)
            except IntegrationError as exc:
                sol = exc.solution
            onset = _onset(sol)
            print(f"{method:>6} {precision:>9}: {len(sol)} nodes, "
                  f"onset {'none' if onset is None else f't = {onset:.2f}'}")

        sol = integrate(system3_modified, q0, 0, 50, method=method)
        drift = np.max(np.abs(total_mass(sol.states) - 1.0))
        print(f"{method:>6}  modified: max drift {drift:.2e}")


if __name__ == "__main__":
    main()
