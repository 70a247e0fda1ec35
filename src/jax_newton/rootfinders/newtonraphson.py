"""Newton-Raphson method for systems of nonlinear equations."""

import logging
from typing import Callable, Optional, Tuple

from flax import nnx
import jax
from jax import Array
import jax.numpy as jnp

from ..custom_types import VectorFunction, JVPConstructor, JacobianConstructor
from ..differentiation import jacobian, jvp_operator
from ..linsolvers import LinearSolverProtocol, DirectDense

logger = logging.getLogger(__name__)


def _warn_not_converged(iters, maxiter, residual_norm, tol):
    if iters >= maxiter and residual_norm > tol:
        logger.warning(
            f"Newton-Raphson did not converge within {int(maxiter)} iterations. "
            f"Final residual norm: {float(residual_norm):.2e}."
        )


def _as_one_dimensional(residual_fn, jvp_fn, jac_fn):
    """Wrap scalar callables so a 0-d problem is solved as the n=1 system."""
    residual_1d = lambda y: jnp.reshape(residual_fn(y[0]), (1,))
    jvp_1d = None if jvp_fn is None else (
        lambda y, v: jnp.reshape(jvp_fn(y[0], v[0]), (1,))
    )
    jac_1d = None if jac_fn is None else (
        lambda y: jnp.reshape(jac_fn(y[0]), (1, 1))
    )
    return residual_1d, jvp_1d, jac_1d


class NewtonRaphson(nnx.Module):
    """
    Newton-Raphson root-finding algorithm.

    Iterative update: $y \\leftarrow y - J^{-1}(y) R(y)$,
    computed as $y \\leftarrow y + \\delta$ with $J(y) \\delta = -R(y)$.

    Convergence is quadratic near a simple root. It is not guaranteed from
    a poor initial guess: the iterates may diverge or oscillate, in which
    case the solver stops after `maxiter` iterations and logs a warning.

    Implements: RootFinderProtocol

    Attributes:
        tol: Convergence tolerance for the residual norm
        maxiter: Maximum number of Newton-Raphson iterations
        linsolver: Linear solver for the Newton step (default: DirectDense).
            Use PseudoInverse for singular Jacobians whose range contains
            the residual.
    """

    def __init__(
        self,
        tol: float = 1e-10,
        maxiter: int = 50,
        linsolver: Optional[LinearSolverProtocol] = None,
    ):
        self.tol = tol
        self.maxiter = maxiter
        self.linsolver = DirectDense() if linsolver is None else linsolver

    def make_step(
        self,
        residual_fn: VectorFunction,
        jvp_fn: Optional[JVPConstructor] = None,
        jac_fn: Optional[JacobianConstructor] = None,
    ) -> Callable[[Array, Array], Array]:
        """
        Build the Newton update (y, R(y)) -> y + delta.

        If neither `jvp_fn` nor `jac_fn` is given, the Jacobian is obtained by
        forward-mode automatic differentiation of `residual_fn`: a dense
        Jacobian for direct solvers, a Jacobian-vector product for
        matrix-free solvers.

        Args:
            residual_fn: Residual function R(y)
            jvp_fn: Matrix-free Jacobian-vector product with
                signature (y, v) -> J(y)*v
            jac_fn: Function returning a dense Jacobian matrix with
                signature y -> J(y)

        Returns:
            A function with signature (y, r) -> y_next, where r = R(y)
        """
        if jac_fn is not None and jvp_fn is not None:
            raise ValueError("Provide either jac_fn OR jvp_fn, not both.")

        if jac_fn is None and jvp_fn is None:
            if getattr(self.linsolver, "matrix_free", False):
                jvp_fn = jvp_operator(residual_fn)
            else:
                jac_fn = jacobian(residual_fn)

        if jac_fn is not None:
            # Dense mode
            def step(y, r):
                J = jac_fn(y)
                delta = self.linsolver(J, -r)
                return y + delta
        else:
            # Matrix-free mode
            def step(y, r):
                jvp = lambda v: jvp_fn(y, v)
                delta = self.linsolver(jvp, -r)
                return y + delta

        return step

    def __call__(
        self,
        residual_fn: VectorFunction,
        y_guess: Array,
        jvp_fn: Optional[JVPConstructor] = None,
        jac_fn: Optional[JacobianConstructor] = None,
    ) -> Array:
        """
        Find the root of residual_fn(y) = 0 using Newton-Raphson method.

        Stops when ||R(y)|| <= tol or after maxiter iterations.

        Args:
            residual_fn: Residual function R(y)
            y_guess: Initial guess
            jvp_fn: Matrix-free Jacobian-vector product with
                signature (y, v) -> J(y)*v
            jac_fn: Function returning a dense Jacobian matrix with
                signature y -> J(y)

        Returns:
            Solution y
        """
        y_k = jnp.asarray(y_guess, dtype=jnp.result_type(float))

        # A scalar guess is the n=1 case
        scalar = y_k.ndim == 0
        if scalar:
            residual_fn, jvp_fn, jac_fn = _as_one_dimensional(residual_fn, jvp_fn, jac_fn)
            y_k = y_k[None]

        step = self.make_step(residual_fn, jvp_fn=jvp_fn, jac_fn=jac_fn)
        r_k = residual_fn(y_k)
        state0 = (y_k, r_k, 0)

        def body_fun(state):
            y_k, r_k, k = state
            y_kp1 = step(y_k, r_k)
            r_kp1 = residual_fn(y_kp1)
            return (y_kp1, r_kp1, k + 1)

        def cond_fun(state):
            _, r_k, k = state
            return (jnp.linalg.norm(r_k) > self.tol) & (k < self.maxiter)

        y_final, r_final, niters = jax.lax.while_loop(cond_fun, body_fun, state0)

        jax.debug.callback(
            _warn_not_converged,
            niters, self.maxiter,
            jnp.linalg.norm(r_final), self.tol
        )

        return y_final[0] if scalar else y_final

    def iterate(
        self,
        residual_fn: VectorFunction,
        y_guess: Array,
        nsteps: int,
        jvp_fn: Optional[JVPConstructor] = None,
        jac_fn: Optional[JacobianConstructor] = None,
    ) -> Tuple[Array, Array]:
        """
        Apply exactly `nsteps` Newton updates and keep every iterate.

        The tolerance is ignored, so steps taken after convergence are
        applied too. At the machine-precision floor they leave y unchanged
        up to rounding.

        Args:
            residual_fn: Residual function R(y)
            y_guess: Initial guess y_0
            nsteps: Number of Newton updates (static)
            jvp_fn: Matrix-free Jacobian-vector product (y, v) -> J(y)*v
            jac_fn: Dense Jacobian y -> J(y)

        Returns:
            iterates: Array of shape (nsteps + 1, *y_guess.shape), y_0 first
            residual_norms: Array of shape (nsteps + 1,) with ||R(y_k)||
        """
        y_0 = jnp.asarray(y_guess, dtype=jnp.result_type(float))

        scalar = y_0.ndim == 0
        if scalar:
            residual_fn, jvp_fn, jac_fn = _as_one_dimensional(residual_fn, jvp_fn, jac_fn)
            y_0 = y_0[None]

        step = self.make_step(residual_fn, jvp_fn=jvp_fn, jac_fn=jac_fn)
        r_0 = residual_fn(y_0)

        def scan_fun(carry, _):
            y_k, r_k = carry
            y_kp1 = step(y_k, r_k)
            r_kp1 = residual_fn(y_kp1)
            return (y_kp1, r_kp1), (y_kp1, jnp.linalg.norm(r_kp1))

        _, (ys, norms) = jax.lax.scan(scan_fun, (y_0, r_0), None, length=nsteps)

        iterates = jnp.concatenate([y_0[None], ys], axis=0)
        residual_norms = jnp.concatenate([jnp.linalg.norm(r_0)[None], norms])
        if scalar:
            iterates = iterates[:, 0]
        return iterates, residual_norms
