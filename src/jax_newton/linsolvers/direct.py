"""Direct linear solvers."""

import logging
from typing import Union, Optional

from flax import nnx
import jax
from jax import Array
import jax.numpy as jnp

from ..custom_types import LinearMap
from ..exceptions import NoSolutionInRange

logger = logging.getLogger(__name__)


def _require_matrix(A: Union[LinearMap, Array], name: str) -> None:
    if callable(A):
        raise TypeError(
            f"{name} requires a dense matrix, not a linear operator. "
            "Please provide the Jacobian as a dense matrix (jac_fn), "
            "or use a matrix-free solver (GMRES, CG)."
        )


class DirectDense(nnx.Module):
    """
    Direct solver for dense linear systems.

    Dispatches to `jax.numpy.linalg.solve`.
    Only suitable for small, square and non-singular systems where the
    Jacobian is provided explicitly.
    """

    matrix_free = False

    def __call__(
        self,
        A: Union[LinearMap, Array],
        b: Array,
        x0: Optional[Array] = None
    ) -> Array:
        """
        Solve A*x = b.

        Args:
            A: Dense square matrix
            b: Right-hand side vector
            x0: Ignored (kept for interface compatibility). Can be None.

        Returns:
            Solution x

        Raises:
            TypeError: If A is a callable (linear operator) instead of a matrix
        """
        _require_matrix(A, "DirectDense")
        return jnp.linalg.solve(A, b)


class PseudoInverse(nnx.Module):
    """
    Minimum-norm solver for singular or rectangular systems.

    Computes $x = A^+ b$ with `jax.numpy.linalg.pinv`. When b lies in the
    range of A this is the particular solution of smallest norm; otherwise
    it is the least-squares solution and A*x != b.

    Singular Jacobians with a consistent right-hand side appear when the
    residual is invariant under a shift of x, e.g. node potentials of a
    circuit, which are only defined up to a constant.

    Attributes:
        rtol: Cutoff for small singular values, relative to the largest one.
            None uses the JAX default.
        check_range: Log a warning whenever b has a component outside the
            range of A larger than `range_tol` (relative to ||b||).
        range_tol: Threshold for `check_range`.
    """

    matrix_free = False

    def __init__(
        self,
        rtol: Optional[float] = None,
        check_range: bool = False,
        range_tol: float = 1e-8,
    ):
        self.rtol = rtol
        self.check_range = check_range
        self.range_tol = range_tol

    def __call__(
        self,
        A: Union[LinearMap, Array],
        b: Array,
        x0: Optional[Array] = None
    ) -> Array:
        """
        Solve A*x = b in the minimum-norm sense.

        Args:
            A: Dense matrix, possibly singular or rectangular
            b: Right-hand side vector
            x0: Ignored (kept for interface compatibility). Can be None.

        Returns:
            Solution x = pinv(A) b

        Raises:
            TypeError: If A is a callable (linear operator) instead of a matrix
        """
        _require_matrix(A, "PseudoInverse")

        A_pinv = jnp.linalg.pinv(A, rtol=self.rtol)
        x = A_pinv @ b

        if self.check_range:
            jax.debug.callback(
                _warn_out_of_range,
                _relative_norm(A @ x - b, b),
                self.range_tol,
            )

        return x


def _relative_norm(r: Array, b: Array) -> Array:
    b_norm = jnp.linalg.norm(b)
    r_norm = jnp.linalg.norm(r)
    return jnp.where(b_norm > 0, r_norm / jnp.where(b_norm > 0, b_norm, 1.0), r_norm)


def _warn_out_of_range(rel_residual, range_tol):
    if rel_residual > range_tol:
        logger.warning(
            "Right-hand side is not in the range of the matrix "
            f"(relative residual {float(rel_residual):.2e}). "
            "Returning the least-squares step."
        )


def range_residual(A: Array, b: Array) -> Array:
    """
    Relative size of the component of b outside the range of A.

    Computes $\\|A A^+ b - b\\| / \\|b\\|$ (or the absolute norm if b = 0).
    Zero means A*x = b has a solution.

    Args:
        A: Dense matrix
        b: Right-hand side vector

    Returns:
        0-dimensional array
    """
    return _relative_norm(A @ (jnp.linalg.pinv(A) @ b) - b, b)


def assert_in_range(A: Array, b: Array, rtol: float = 1e-8) -> None:
    """
    Check that the singular system A*x = b has a solution.

    This is the precondition of a pseudo-inverse Newton step. The check is
    eager and must be called outside of jit-compiled code.

    Args:
        A: Dense matrix
        b: Right-hand side vector
        rtol: Largest relative out-of-range component that is accepted

    Raises:
        NoSolutionInRange: If b is not in the range of A
    """
    residual = float(range_residual(A, b))
    if residual > rtol:
        raise NoSolutionInRange(
            f"Right-hand side is not in the range of the matrix: "
            f"relative residual {residual:.2e} exceeds {rtol:.2e}."
        )
