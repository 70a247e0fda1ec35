import time
from typing import Callable, Optional, Tuple, Union

from jax import Array
import jax.numpy as jnp

from .rootfinders import RootFinderProtocol, NewtonRaphson, ScalarNewton


def _default_method(x0: Array) -> Union[RootFinderProtocol, ScalarNewton]:
    return ScalarNewton() if jnp.ndim(x0) == 0 else NewtonRaphson()


def _bind_args(
    fun: Callable,
    jac: Optional[Callable],
    jvp: Optional[Callable],
    args: tuple,
):
    """Close over the extra arguments so the root finder sees x -> f(x)."""
    if not args:
        return fun, jac, jvp

    fun_x = lambda x: fun(x, *args)
    jac_x = None if jac is None else (lambda x: jac(x, *args))
    jvp_x = None if jvp is None else (lambda x, v: jvp(x, v, *args))
    return fun_x, jac_x, jvp_x


def _call_method(method, fun, x0, jac, jvp, nsteps=None):
    if isinstance(method, ScalarNewton):
        if jvp is not None:
            raise ValueError("ScalarNewton accepts a derivative (jac), not a jvp.")
        if nsteps is None:
            return method(fun, x0, df=jac)
        return method.iterate(fun, x0, nsteps, df=jac)

    if nsteps is None:
        return method(fun, x0, jvp_fn=jvp, jac_fn=jac)
    return method.iterate(fun, x0, nsteps, jvp_fn=jvp, jac_fn=jac)


def find_root(
    fun: Callable,
    x0: Array,
    method: Optional[Union[RootFinderProtocol, ScalarNewton]] = None,
    jac: Optional[Callable] = None,
    jvp: Optional[Callable] = None,
    args: tuple = (),
) -> Array:
    """
    Solve fun(x, *args) = 0 starting from x0.

    Args:
        fun: Function with signature (x, *args) -> f(x)
        x0: Initial guess. A 0-dimensional x0 selects ScalarNewton by default.
        method: Root finder instance (default: NewtonRaphson() or ScalarNewton())
        jac: Optional dense Jacobian (x, *args) -> J(x). For scalar problems,
            the derivative (x, *args) -> f'(x).
        jvp: Optional Jacobian-vector product (x, v, *args) -> J(x)*v
        args: Additional arguments to pass to fun (and jac/jvp if provided)

    Returns:
        Root estimate with the shape of x0

    Example usage:
    ```python
    import jax.numpy as jnp
    from jax_newton import find_root

    def fun(x, c):
        return jnp.array([jnp.sin(x[0] * x[1]) - c, x[0]**2 - x[1]**2])

    x = find_root(fun, jnp.array([0.5, 0.8]), args=(0.5,))
    ```

    Example usage with a singular Jacobian:
    ```python
    from jax_newton import find_root, NewtonRaphson, PseudoInverse

    method = NewtonRaphson(tol=1e-12, linsolver=PseudoInverse())
    v = find_root(circuit_fn, v0, method=method)
    ```
    """
    x0 = jnp.asarray(x0)
    method = _default_method(x0) if method is None else method
    fun, jac, jvp = _bind_args(fun, jac, jvp, args)
    return _call_method(method, fun, x0, jac, jvp)


def solve_with_history(
    fun: Callable,
    x0: Array,
    method: Optional[Union[RootFinderProtocol, ScalarNewton]] = None,
    nsteps: int = 10,
    jac: Optional[Callable] = None,
    jvp: Optional[Callable] = None,
    args: tuple = (),
    verbose: bool = False,
) -> Tuple[Array, Array]:
    """
    Take a fixed number of Newton steps and return every iterate.

    This is the diagnostic entry point: the iterates and residual norms are
    what convergence plots are drawn from. The step count is not reduced when
    the tolerance is reached. It is meant to be called eagerly, not under
    JAX transformations.

    Args:
        fun: Function with signature (x, *args) -> f(x)
        x0: Initial guess
        method: Root finder instance (default: NewtonRaphson() or ScalarNewton())
        nsteps: Number of Newton steps to take
        jac: Optional dense Jacobian (x, *args) -> J(x)
        jvp: Optional Jacobian-vector product (x, v, *args) -> J(x)*v
        args: Additional arguments to pass to fun (and jac/jvp if provided)
        verbose: Print one line per iterate and the elapsed time

    Returns:
        iterates: Array of shape (nsteps + 1, *x0.shape), x0 first
        residual_norms: Array of shape (nsteps + 1,) with ||f(x_k)||

    Example usage:
    ```python
    import jax.numpy as jnp
    from jax_newton import solve_with_history

    x, fnorm = solve_with_history(lambda x: x**2 - 2, 1.0, nsteps=6)
    ```
    """
    x0 = jnp.asarray(x0)
    method = _default_method(x0) if method is None else method
    fun, jac, jvp = _bind_args(fun, jac, jvp, args)

    if verbose:
        print(f"Solving with {type(method).__name__}, {nsteps} steps")

    start_wallclock = time.time()

    iterates, residual_norms = _call_method(method, fun, x0, jac, jvp, nsteps=nsteps)

    elapsed_wallclock = time.time() - start_wallclock

    if verbose:
        for k in range(nsteps + 1):
            print(f"  k={k:3d}  ||f(x)|| = {float(residual_norms[k]):.3e}  x = {iterates[k]}")
        print(f"Completed in {elapsed_wallclock:.3f}s")

    return iterates, residual_norms
