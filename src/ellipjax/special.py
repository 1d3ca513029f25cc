import math

import numpy as np
import jax.numpy as jnp
from jax import custom_jvp

from ellipjax import coeffs
from ellipjax.config import warn_if_x32


def _horner(c, t):
    """
    Evaluate sum_k c[..., k] t**k as acc = acc*t + c[..., k], highest degree first.

    Called eagerly, every multiply and add rounds separately, which is the order
    the fits were tuned for. Under an enclosing jax.jit, XLA may contract
    acc*t + c into a fused multiply-add; results then differ by a few ulp.
    """
    acc = c[..., -1]
    for k in range(c.shape[-1] - 2, -1, -1):
        acc = acc * t + c[..., k]
    return acc


def _horner_monic(c, t):
    # same as _horner with an implicit leading coefficient of 1
    acc = t + c[..., -1]
    for k in range(c.shape[-1] - 2, -1, -1):
        acc = acc * t + c[..., k]
    return acc


def _segment_index(mc, bounds):
    """
    Index of the first segment with mc > bound, or len(bounds) if there is none.
    The bounds are strictly decreasing, so the bounds with mc <= bound form a prefix.
    """
    return jnp.sum(mc[..., None] <= bounds, axis=-1)


def _rational_segments(mc, bounds, scale, shift, numerator, denominator):
    n = bounds.shape[0]
    idx = _segment_index(mc, bounds)
    i = jnp.minimum(idx, n - 1)
    t = scale[i] * mc - shift[i]
    value = _horner(numerator[i], t) / _horner_monic(denominator[i], t)
    return idx < n, value


def _log_branch_args(mc, in_table, bounds):
    # keep log() finite on lanes that do not use the branch
    safe = jnp.where(in_table | (mc == 0), bounds[-1], mc)
    return safe


# below this x * 0.0625 is no longer a normal float64
_SPLIT_LOG_BELOW = float(np.finfo(np.float64).tiny) / 0.0625


def _scaled_log(x, log_scale):
    """log(x * log_scale), split into log(x) + log(log_scale) where the product would underflow."""
    small = x < _SPLIT_LOG_BELOW
    split = jnp.log(jnp.where(small, x, 1.0)) + math.log(log_scale)
    return jnp.where(small, split, jnp.log(x * log_scale))


def _ellipk_mc(mc):
    """K as a function of the complementary parameter mc = 1 - m, for mc in [0, 1]."""
    bounds = jnp.asarray(coeffs.K_BOUNDS)
    in_table, value = _rational_segments(
        mc, bounds,
        jnp.asarray(coeffs.K_SCALE), jnp.asarray(coeffs.K_SHIFT),
        jnp.asarray(coeffs.K_NUMERATOR), jnp.asarray(coeffs.K_DENOMINATOR))

    b = coeffs.K_LOG_BRANCH
    x = _log_branch_args(mc, in_table, bounds)
    u = 1.0 - b.scale * x
    lead = -_scaled_log(x, b.log_scale) * _horner(jnp.asarray(b.lead_numerator), u) \
        / _horner(jnp.asarray(b.lead_denominator), u)
    corr = -x * _horner(jnp.asarray(b.corr_numerator), u) \
        / _horner(jnp.asarray(b.corr_denominator), u)

    value = jnp.where(in_table, value, lead + corr)
    value = jnp.where(mc == 0, jnp.inf, value)
    return jnp.where(mc == 1, 0.5 * jnp.pi, value)


def _ellipe_mc(mc):
    """E as a function of the complementary parameter mc = 1 - m, for mc in [0, 1]."""
    bounds = jnp.asarray(coeffs.E_BOUNDS)
    in_table, value = _rational_segments(
        mc, bounds,
        jnp.asarray(coeffs.E_SCALE), jnp.asarray(coeffs.E_SHIFT),
        jnp.asarray(coeffs.E_NUMERATOR), jnp.asarray(coeffs.E_DENOMINATOR))

    b = coeffs.E_LOG_BRANCH
    x = _log_branch_args(mc, in_table, bounds)
    u = 1.0 - b.scale * x
    lead = -x * _scaled_log(x, b.log_scale) * _horner(jnp.asarray(b.lead_numerator), u) \
        / _horner(jnp.asarray(b.lead_denominator), u)
    corr = _horner(jnp.asarray(b.corr_numerator), u) / _horner(jnp.asarray(b.corr_denominator), u)

    value = jnp.where(in_table, value, lead + corr)
    value = jnp.where(mc == 0, 1.0, value)
    return jnp.where(mc == 1, 0.5 * jnp.pi, value)


def _outside_unit_interval(x):
    return (x < 0) | (x > 1) | jnp.isnan(x)


def _as_real(x, name):
    if jnp.iscomplexobj(x):
        raise ValueError(f"`{name}` is only defined for real arguments.")
    warn_if_x32(name)
    return jnp.asarray(x, dtype=float)


# dK/dm and dE/dm about m = 0, in units of +-pi/8; the next terms are O(m**6)
_DK_SERIES = (1.0, 9 / 8, 75 / 64, 1225 / 1024, 19845 / 16384, 160083 / 131072)
_DE_SERIES = (1.0, 3 / 8, 15 / 64, 175 / 1024, 2205 / 16384, 14553 / 131072)
_SERIES_BELOW = 1e-3


def _dk_dm(m, mc, k, e):
    # dK/dm = (E - mc K) / (2 m mc), +inf at m = 1; the numerator cancels as m -> 0
    series = m < _SERIES_BELOW
    direct = ~series & (mc > 0)
    m_s = jnp.where(direct, m, 0.5)
    mc_s = jnp.where(direct, mc, 0.5)
    d = (e - mc_s * k) / (2.0 * m_s * mc_s)
    near_zero = 0.125 * jnp.pi * _horner(jnp.asarray(_DK_SERIES), jnp.where(series, m, 0.0))
    d = jnp.where(series, near_zero, d)
    d = jnp.where(mc == 0, jnp.inf, d)
    return jnp.where(jnp.isnan(k), jnp.nan, d)


def _de_dm(m, k, e):
    # dE/dm = (E - K) / (2 m), -inf at m = 1
    series = m < _SERIES_BELOW
    m_s = jnp.where(series, 1.0, m)
    d = (e - k) / (2.0 * m_s)
    near_zero = -0.125 * jnp.pi * _horner(jnp.asarray(_DE_SERIES), jnp.where(series, m, 0.0))
    d = jnp.where(series, near_zero, d)
    return jnp.where(jnp.isnan(e), jnp.nan, d)


@custom_jvp
def ellipk(m):
    """
    Complete elliptic integral of the first kind, similar to scipy.special.ellipk.

        K(m) = int_0^{pi/2} dtheta / sqrt(1 - m sin^2 theta)

    Piecewise minimax rational approximation in mc = 1 - m with a logarithmic
    branch near m = 1 (Fukushima 2015, doi:10.1016/j.cam.2014.12.038).
    Accurate to a few ulp in float64.

    Arg   : m (real, any shape)
    return: K(m); NaN for m < 0, m > 1 or NaN, pi/2 at m = 0, +inf at m = 1
    """
    m = _as_real(m, "ellipk")
    return jnp.where(_outside_unit_interval(m), jnp.nan, _ellipk_mc(1.0 - m))


@ellipk.defjvp
def _ellipk_jvp(primals, tangents):
    m, = primals
    m_dot, = tangents
    m = _as_real(m, "ellipk")
    k = ellipk(m)
    e = ellipe(m)
    return k, _dk_dm(m, 1.0 - m, k, e) * m_dot


@custom_jvp
def ellipe(m):
    """
    Complete elliptic integral of the second kind, similar to scipy.special.ellipe.

        E(m) = int_0^{pi/2} sqrt(1 - m sin^2 theta) dtheta

    Arg   : m (real, any shape)
    return: E(m); NaN for m < 0, m > 1 or NaN, pi/2 at m = 0, 1 at m = 1
    """
    m = _as_real(m, "ellipe")
    return jnp.where(_outside_unit_interval(m), jnp.nan, _ellipe_mc(1.0 - m))


@ellipe.defjvp
def _ellipe_jvp(primals, tangents):
    m, = primals
    m_dot, = tangents
    m = _as_real(m, "ellipe")
    k = ellipk(m)
    e = ellipe(m)
    return e, _de_dm(m, k, e) * m_dot


@custom_jvp
def ellipkm1(p):
    """
    K(1 - p), similar to scipy.special.ellipkm1.

    p is used directly as the complementary parameter, so no precision is
    lost to the subtraction 1 - m when m is close to 1. Full precision holds
    for p = 0 and for normal p (p >= 2.2e-308). Subnormal p is outside that
    range; a backend that flushes subnormals to zero returns +inf there.

    Arg   : p (real, any shape)
    return: K(1 - p); NaN for p < 0, p > 1 or NaN, +inf at p = 0
    """
    p = _as_real(p, "ellipkm1")
    return jnp.where(_outside_unit_interval(p), jnp.nan, _ellipk_mc(p))


@ellipkm1.defjvp
def _ellipkm1_jvp(primals, tangents):
    p, = primals
    p_dot, = tangents
    p = _as_real(p, "ellipkm1")
    k = ellipkm1(p)
    e = ellipem1(p)
    return k, -_dk_dm(1.0 - p, p, k, e) * p_dot


@custom_jvp
def ellipem1(p):
    """
    E(1 - p), evaluated directly on the complementary parameter p.

    Arg   : p (real, any shape)
    return: E(1 - p); NaN for p < 0, p > 1 or NaN, 1 at p = 0
    """
    p = _as_real(p, "ellipem1")
    return jnp.where(_outside_unit_interval(p), jnp.nan, _ellipe_mc(p))


@ellipem1.defjvp
def _ellipem1_jvp(primals, tangents):
    p, = primals
    p_dot, = tangents
    p = _as_real(p, "ellipem1")
    k = ellipkm1(p)
    e = ellipem1(p)
    return e, -_de_dm(1.0 - p, k, e) * p_dot
