import math

import numpy as np
import jax.numpy as jnp
from jax import jit, vmap, grad
from jax.test_util import check_grads

from ellipjax.special import ellipk, ellipe, ellipkm1, ellipem1


def ellipk_sum(x):
    return jnp.sum(jit(vmap(ellipk))(x))

def ellipe_sum(x):
    return jnp.sum(jit(vmap(ellipe))(x))

def ellipkm1_sum(x):
    return jnp.sum(ellipkm1(x))

def ellipem1_sum(x):
    return jnp.sum(ellipem1(x))


test = jnp.linspace(0.05, 0.95, 100)


def test_check_grads():
    for f in (ellipk_sum, ellipe_sum, ellipkm1_sum, ellipem1_sum):
        check_grads(f, (test,), order=1, modes=("fwd", "rev"), eps=1e-6, rtol=1e-5)


def test_grad_against_finite_difference():
    m = np.linspace(0.01, 0.99, 50)
    h = 1e-6
    dk = vmap(grad(ellipk))(jnp.asarray(m))
    de = vmap(grad(ellipe))(jnp.asarray(m))
    fd_k = (np.asarray(ellipk(m + h)) - np.asarray(ellipk(m - h))) / (2 * h)
    fd_e = (np.asarray(ellipe(m + h)) - np.asarray(ellipe(m - h))) / (2 * h)
    np.testing.assert_allclose(dk, fd_k, rtol=1e-6)
    np.testing.assert_allclose(de, fd_e, rtol=1e-6)


def test_grad_endpoints():
    np.testing.assert_allclose(float(grad(ellipk)(0.0)), np.pi / 8, rtol=1e-15)
    np.testing.assert_allclose(float(grad(ellipe)(0.0)), -np.pi / 8, rtol=1e-15)
    assert float(grad(ellipk)(1.0)) == np.inf
    assert float(grad(ellipe)(1.0)) == -np.inf
    assert float(grad(ellipkm1)(0.0)) == -np.inf
    assert float(grad(ellipem1)(0.0)) == np.inf


def _a(n):
    # coefficients of K(m) = pi/2 * sum_n a_n m**n
    return (math.comb(2 * n, n) / 4.0 ** n) ** 2


def dk_series(m):
    return 0.5 * np.pi * sum(n * _a(n) * m ** (n - 1) for n in range(1, 40))


def de_series(m):
    return -0.5 * np.pi * sum(n * _a(n) / (2 * n - 1) * m ** (n - 1) for n in range(1, 40))


def test_grad_near_zero():
    m = 10.0 ** -np.linspace(14, 3.01, 40)
    dk = np.asarray(vmap(grad(ellipk))(jnp.asarray(m)))
    de = np.asarray(vmap(grad(ellipe))(jnp.asarray(m)))
    np.testing.assert_allclose(dk, [dk_series(x) for x in m], rtol=1e-14)
    np.testing.assert_allclose(de, [de_series(x) for x in m], rtol=1e-14)


def test_grad_small_m_direct_formula():
    m = 10.0 ** -np.linspace(3, 1, 20)
    dk = np.asarray(vmap(grad(ellipk))(jnp.asarray(m)))
    de = np.asarray(vmap(grad(ellipe))(jnp.asarray(m)))
    np.testing.assert_allclose(dk, [dk_series(x) for x in m], rtol=1e-11)
    np.testing.assert_allclose(de, [de_series(x) for x in m], rtol=1e-11)


def test_grad_continuous_at_series_switch():
    m = jnp.array([1e-3 * (1 - 1e-9), 1e-3, 1e-3 * (1 + 1e-9)])
    dk = np.asarray(vmap(grad(ellipk))(m))
    de = np.asarray(vmap(grad(ellipe))(m))
    np.testing.assert_allclose(dk[0], dk[2], rtol=1e-10)
    np.testing.assert_allclose(de[0], de[2], rtol=1e-10)


def test_grad_complementary_near_one():
    mc = 10.0 ** -np.linspace(14, 4, 11)
    p = 1.0 - mc
    m = 1.0 - p
    dk = np.asarray(vmap(grad(ellipkm1))(jnp.asarray(p)))
    de = np.asarray(vmap(grad(ellipem1))(jnp.asarray(p)))
    np.testing.assert_allclose(dk, [-dk_series(x) for x in m], rtol=1e-14)
    np.testing.assert_allclose(de, [-de_series(x) for x in m], rtol=1e-14)



def test_grad_complementary():
    p = jnp.linspace(0.05, 0.95, 10)
    np.testing.assert_allclose(vmap(grad(ellipkm1))(p), -vmap(grad(ellipk))(1.0 - p), rtol=1e-10)
    np.testing.assert_allclose(vmap(grad(ellipem1))(p), -vmap(grad(ellipe))(1.0 - p), rtol=1e-10)


def test_grad_outside_domain_is_nan():
    assert np.isnan(float(grad(ellipk)(1.5)))
    assert np.isnan(float(grad(ellipe)(-0.5)))
