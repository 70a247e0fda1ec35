"""Tests for the nonlinear circuit example."""

import pytest
import jax.numpy as jnp

from jax_newton import NewtonRaphson, PseudoInverse, CG, NoSolutionInRange
from jax_newton.circuits import (
    incidence_matrix,
    current_sources,
    circuit_residual,
    circuit_jacobian,
    linear_solution,
)
from jax_newton.differentiation import jacobian
from jax_newton.linsolvers import assert_in_range


@pytest.fixture
def circuit():
    """
    6-node / 8-edge network of nonlinear resistors, Y = 1, alpha = 0.5.

    A unit current enters at node 0 and leaves at node 5.
    """
    A = incidence_matrix()
    b = current_sources(A.shape[1], source=0, sink=5)
    Y, alpha = 1.0, 0.5
    f = circuit_residual(A, b, Y=Y, alpha=alpha)
    jac = circuit_jacobian(A, Y=Y, alpha=alpha)
    v0 = linear_solution(A, b, Y=Y)
    return A, b, f, jac, v0


class TestCircuitModel:

    def test_incidence_matrix(self):
        A = incidence_matrix()
        assert A.shape == (8, 6)
        # One tail and one head per edge
        assert jnp.all(jnp.sum(A, axis=1) == 0)
        assert jnp.all(jnp.sum(jnp.abs(A), axis=1) == 2)

    def test_current_sources_sum_to_zero(self):
        b = current_sources(6, source=1, sink=4, current=2.5)
        assert b[1] == 2.5 and b[4] == -2.5
        assert jnp.sum(b) == 0.0

    def test_linear_solution(self, circuit):
        A, b, _, _, v0 = circuit
        assert jnp.allclose(A.T @ A @ v0, b, atol=1e-12)

    def test_jacobian_matches_autodiff(self, circuit):
        _, _, f, jac, v0 = circuit
        v = v0 + jnp.linspace(-0.3, 0.4, 6)
        assert jnp.allclose(jacobian(f)(v), jac(v), atol=1e-13)

    def test_jacobian_is_singular(self, circuit):
        _, _, _, jac, v0 = circuit
        J = jac(v0)
        assert jnp.allclose(J @ jnp.ones(6), 0.0, atol=1e-13)
        assert jnp.linalg.matrix_rank(J) == 5

    def test_residual_in_jacobian_range(self, circuit):
        _, _, f, jac, v0 = circuit
        assert_in_range(jac(v0), f(v0))

    def test_unbalanced_sources_have_no_step(self, circuit):
        A, _, _, jac, v0 = circuit
        b = jnp.zeros(6).at[0].set(1.0)  # current enters but never leaves
        f = circuit_residual(A, b)
        with pytest.raises(NoSolutionInRange):
            assert_in_range(jac(v0), f(v0))


class TestCircuitNewton:

    def test_pseudo_inverse_newton_converges(self, circuit):
        _, _, f, jac, v0 = circuit
        method = NewtonRaphson(linsolver=PseudoInverse())
        _, fnorm = method.iterate(f, v0, 10, jac_fn=jac)

        assert fnorm[0] > 1e-3
        assert fnorm[-1] < 1e-14

        # Quadratic convergence: more than a factor 10 per step near the root
        checked = 0
        for k in range(len(fnorm) - 1):
            if 1e-10 < fnorm[k] < 1e-3:
                assert fnorm[k + 1] < 0.1 * fnorm[k]
                checked += 1
        assert checked >= 1

    def test_autodiff_jacobian(self, circuit):
        _, _, f, jac, v0 = circuit
        method = NewtonRaphson(linsolver=PseudoInverse())
        v_hand, _ = method.iterate(f, v0, 8, jac_fn=jac)
        v_auto, _ = method.iterate(f, v0, 8)
        assert jnp.allclose(v_hand[-1], v_auto[-1], atol=1e-12)

    def test_potential_shift_is_preserved(self, circuit):
        """Minimum-norm steps never move the mean potential."""
        _, _, f, jac, v0 = circuit
        v, _ = NewtonRaphson(linsolver=PseudoInverse()).iterate(f, v0, 6, jac_fn=jac)
        assert jnp.allclose(jnp.mean(v, axis=1), jnp.mean(v0), atol=1e-12)

    def test_matrix_free_cg(self, circuit):
        _, _, f, jac, v0 = circuit
        v_pinv = NewtonRaphson(tol=1e-12, linsolver=PseudoInverse())(f, v0, jac_fn=jac)
        v_cg = NewtonRaphson(tol=1e-12, linsolver=CG())(f, v0)
        assert jnp.linalg.norm(f(v_cg)) < 1e-10
        assert jnp.allclose(v_cg, v_pinv, atol=1e-8)
