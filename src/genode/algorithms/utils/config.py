"""Package-wide numerical defaults."""

# Integration defaults
TOL = 1e-8
DEFAULT_METHOD = "Tsit5"
DEFAULT_PRECISION = "standard"

MAX_REJECTS = 50  # consecutive rejections before giving up
MAX_STEPS = 100_000  # accepted steps per integration
MIN_STEP_FACTOR = 10  # step floor in units of eps * max(|t|, 1)

# Precision control
MPMATH_DPS = 50  # Decimal places for extended precision (float64 ~ 15-17)
NUMPY_DTYPE_NARROW = "float32"
NUMPY_DTYPE_STANDARD = "float64"
