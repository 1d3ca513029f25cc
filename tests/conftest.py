import os

# Default to CPU; export JAX_PLATFORMS to run the suite elsewhere.
os.environ.setdefault("JAX_PLATFORMS", "cpu")

from ellipjax.config import enable_x64  # noqa: E402

# The tolerances in this suite assume float64.
enable_x64()
