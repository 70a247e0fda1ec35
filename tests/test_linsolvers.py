"""Unit tests for the linear solvers."""

import logging

import pytest
import jax
import jax.numpy as jnp

from jax_newton import NoSolutionInRange
from jax_newton.linsolvers import (
    LinearSolverProtocol,
    DirectDense,
    PseudoInverse,
    GMRES,
    CG,
    range_residual,
    assert_in_range,
)


@pytest.fixture
def spd_system():
    """Symmetric positive-definite 3x3 system with a known solution."""
    A = jnp.array([
        [4.0, 1.0, 0.0],
        [1.0, 3.0, 1.0],
        [0.0, 1.0, 2.0],
    ])
    x = jnp.array([1.0, -2.0, 0.5])
    return A, A @ x, x


@pytest.fixture
def singular_system():
    """
    Path-graph Laplacian: singular with constant vectors in its null space.

    b sums to zero, so it lies in the range of A.
    """
    A = jnp.array([
        [ 1.0, -1.0,  0.0],
        [-1.0,  2.0, -1.0],
        [ 0.0, -1.0,  1.0],
    ])
    b = jnp.array([1.0, 0.0, -1.0])
    return A, b


class TestLinearSolvers:

    @pytest.mark.parametrize("solver", [DirectDense(), PseudoInverse(), GMRES(), CG()])
    def test_protocol(self, solver):
        assert isinstance(solver, LinearSolverProtocol)

    @pytest.mark.parametrize("solver", [DirectDense(), PseudoInverse(), GMRES(), CG()])
    def test_regular_system(self, spd_system, solver):
        A, b, expected = spd_system
        assert jnp.allclose(solver(A, b), expected, atol=1e-10)

    @pytest.mark.parametrize("solver", [GMRES(), CG()])
    def test_linear_operator(self, spd_system, solver):
        A, b, expected = spd_system
        x = solver(lambda v: A @ v, b)
        assert jnp.allclose(x, expected, atol=1e-10)

    @pytest.mark.parametrize("solver", [DirectDense(), PseudoInverse()])
    def test_dense_solvers_reject_operators(self, spd_system, solver):
        A, b, _ = spd_system
        with pytest.raises(TypeError):
            solver(lambda v: A @ v, b)

    def test_matrix_free_flags(self):
        assert not DirectDense.matrix_free
        assert not PseudoInverse.matrix_free
        assert GMRES.matrix_free
        assert CG.matrix_free


class TestPseudoInverse:

    def test_minimum_norm_solution(self, singular_system):
        A, b = singular_system
        x = PseudoInverse()(A, b)
        assert jnp.allclose(A @ x, b, atol=1e-12)
        # No component along the null space (constant vectors)
        assert jnp.abs(jnp.sum(x)) < 1e-12

    def test_cg_matches_minimum_norm(self, singular_system):
        A, b = singular_system
        assert jnp.allclose(CG()(A, b), PseudoInverse()(A, b), atol=1e-10)

    def test_rectangular_system(self):
        """Underdetermined x1 + x2 = 2 has minimum-norm solution (1, 1)."""
        A = jnp.array([[1.0, 1.0]])
        x = PseudoInverse()(A, jnp.array([2.0]))
        assert jnp.allclose(x, jnp.array([1.0, 1.0]))

    def test_check_range_warns(self, singular_system, caplog):
        A, _ = singular_system
        b = jnp.array([1.0, 1.0, 1.0])
        with caplog.at_level(logging.WARNING, logger="jax_newton"):
            x = PseudoInverse(check_range=True)(A, b)
            x.block_until_ready()
            jax.effects_barrier()
        assert "not in the range" in caplog.text

    def test_check_range_silent_when_consistent(self, singular_system, caplog):
        A, b = singular_system
        with caplog.at_level(logging.WARNING, logger="jax_newton"):
            x = PseudoInverse(check_range=True)(A, b)
            x.block_until_ready()
            jax.effects_barrier()
        assert "not in the range" not in caplog.text


class TestRangeChecks:

    def test_range_residual_consistent(self, singular_system):
        A, b = singular_system
        assert range_residual(A, b) < 1e-12

    def test_range_residual_inconsistent(self, singular_system):
        A, _ = singular_system
        b = jnp.array([1.0, 1.0, 1.0])
        # b lies entirely in the null space of the symmetric A
        assert jnp.isclose(range_residual(A, b), 1.0)

    def test_range_residual_zero_rhs(self, singular_system):
        A, _ = singular_system
        assert range_residual(A, jnp.zeros(3)) == 0.0

    def test_assert_in_range(self, singular_system):
        A, b = singular_system
        assert_in_range(A, b)

    def test_assert_in_range_raises(self, singular_system):
        A, b = singular_system
        with pytest.raises(NoSolutionInRange):
            assert_in_range(A, b + 0.1)

    def test_no_solution_is_value_error(self, singular_system):
        A, _ = singular_system
        with pytest.raises(ValueError):
            assert_in_range(A, jnp.ones(3))
