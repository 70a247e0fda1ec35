"""Newton's method for scalar equations f(x) = 0."""

from typing import Callable, Optional, Tuple

from flax import nnx
import jax
from jax import Array
import jax.numpy as jnp

from ..differentiation import derivative
from .newtonraphson import _warn_not_converged


class ScalarNewton(nnx.Module):
    """
    Newton's method in one dimension.

    Iterative update: $x \\leftarrow x - f(x) / f'(x)$

    The derivative defaults to `jax.grad(f)`, so f must be written with
    `jax.numpy` operations unless `df` is given.

    Attributes:
        tol: Convergence tolerance for |f(x)|
        maxiter: Maximum number of iterations
    """

    def __init__(self, tol: float = 1e-12, maxiter: int = 50):
        self.tol = tol
        self.maxiter = maxiter

    def __call__(
        self,
        f: Callable[[Array], Array],
        x0: float,
        df: Optional[Callable[[Array], Array]] = None,
    ) -> Array:
        """
        Find a root of f.

        Args:
            f: Scalar function x -> f(x)
            x0: Initial guess
            df: Optional derivative x -> f'(x)

        Returns:
            Root estimate as a 0-dimensional array
        """
        df = derivative(f) if df is None else df

        x = jnp.asarray(x0, dtype=jnp.result_type(float))
        state0 = (x, f(x), 0)

        def body_fun(state):
            x, fx, k = state
            x_new = x - fx / df(x)
            return (x_new, f(x_new), k + 1)

        def cond_fun(state):
            _, fx, k = state
            return (jnp.abs(fx) > self.tol) & (k < self.maxiter)

        x_final, f_final, niters = jax.lax.while_loop(cond_fun, body_fun, state0)

        jax.debug.callback(
            _warn_not_converged,
            niters, self.maxiter, jnp.abs(f_final), self.tol
        )

        return x_final

    def iterate(
        self,
        f: Callable[[Array], Array],
        x0: float,
        nsteps: int,
        df: Optional[Callable[[Array], Array]] = None,
    ) -> Tuple[Array, Array]:
        """
        Apply exactly `nsteps` Newton updates.

        Returns:
            iterates: Array of shape (nsteps + 1,), x_0 first
            residual_norms: Array of shape (nsteps + 1,) with |f(x_k)|
        """
        df = derivative(f) if df is None else df
        x_0 = jnp.asarray(x0, dtype=jnp.result_type(float))

        def scan_fun(x, _):
            x_new = x - f(x) / df(x)
            return x_new, (x_new, jnp.abs(f(x_new)))

        _, (xs, fs) = jax.lax.scan(scan_fun, x_0, None, length=nsteps)

        iterates = jnp.concatenate([x_0[None], xs])
        residual_norms = jnp.concatenate([jnp.abs(f(x_0))[None], fs])
        return iterates, residual_norms
