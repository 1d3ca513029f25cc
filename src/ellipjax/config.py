import logging

import jax
import jax.numpy as jnp

logger = logging.getLogger(__name__)

_warned = set()


def enable_x64():
    """Switch JAX to float64 by default, same as jax.config.update("jax_enable_x64", True)."""
    jax.config.update("jax_enable_x64", True)
    logger.debug("jax_enable_x64 set to True")


def x64_enabled():
    return jax.dtypes.canonicalize_dtype(jnp.float64) == jnp.float64


def warn_if_x32(name):
    # runs at trace time, warns once per function name
    if x64_enabled() or name in _warned:
        return
    _warned.add(name)
    logger.warning(
        "%s traced with jax_enable_x64 disabled; results are float32-accurate only. "
        "Call ellipjax.config.enable_x64() or set JAX_ENABLE_X64=1.", name)
