"""Example script: linear stability along the Hardy-Weinberg manifold.

Run with
    python examples/stability_sweep.py
"""

import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

import numpy as np

from genode import (classify_equilibrium, system3_modified, system3_original,
                    system3_original_steady_state)


def main() -> None:
    """Classify the origin and a grid of manifold equilibria."""
    print("origin:", classify_equilibrium(system3_original, [0, 0, 0]))

    for r in np.linspace(0.0, 1.0, 11)[1:-1]:
        y0 = system3_original_steady_state(float(r * r))
        original = classify_equilibrium(system3_original, y0)
        modified = classify_equilibrium(system3_modified, y0)
        print(f"q1 = {r * r:.2f}: original {original.label}, modified {modified.label}")


if __name__ == "__main__":
    main()
