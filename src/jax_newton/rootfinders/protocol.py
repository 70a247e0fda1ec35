"""Protocol for root-finding algorithms."""

from typing import Optional, Protocol, Tuple, runtime_checkable

from jax import Array

from ..custom_types import VectorFunction, JVPConstructor, JacobianConstructor


@runtime_checkable
class RootFinderProtocol(Protocol):
    """
    Protocol for root-finding algorithms.

    Defines the interface for finding roots of nonlinear systems R(y) = 0,
    either to a tolerance (__call__) or for a fixed number of steps with the
    full history of iterates (iterate).

    `ScalarNewton` has the same two entry points but takes a derivative
    `df` instead of `jvp_fn` / `jac_fn`, so it does not follow this protocol.
    `find_root` and `solve_with_history` accept either.
    """

    def __call__(
        self,
        residual_fn: VectorFunction,
        y_guess: Array,
        jvp_fn: Optional[JVPConstructor] = None,
        jac_fn: Optional[JacobianConstructor] = None,
    ) -> Array:
        """
        Find the root of residual_fn(y) = 0.

        Args:
            residual_fn: Function mapping y -> R(y), where we seek R(y) = 0
            y_guess: Initial guess for the solution
            jvp_fn: Optional Jacobian-vector product function (y, v) -> J*v
            jac_fn: Optional dense Jacobian function y -> J

        Returns:
            Solution y such that residual_fn(y) ≈ 0
        """
        ...

    def iterate(
        self,
        residual_fn: VectorFunction,
        y_guess: Array,
        nsteps: int,
        jvp_fn: Optional[JVPConstructor] = None,
        jac_fn: Optional[JacobianConstructor] = None,
    ) -> Tuple[Array, Array]:
        """
        Take `nsteps` iterations from y_guess.

        Returns:
            iterates: Array of shape (nsteps + 1, *y_guess.shape)
            residual_norms: Array of shape (nsteps + 1,)
        """
        ...
