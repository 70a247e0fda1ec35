"""
Forward-mode automatic differentiation helpers.

Each helper turns a function into the derivative object a root finder needs.
All of them propagate tangents forward through the code that evaluates the
function (dual-number style), so the derivatives are exact up to rounding.
"""

import jax
from jax import Array

from .custom_types import VectorFunction, JacobianConstructor, JVPConstructor


def jacobian(fun: VectorFunction) -> JacobianConstructor:
    """
    Dense Jacobian of a vector function.

    Args:
        fun: Function with signature x -> f(x), x of shape (n,), f of shape (m,)

    Returns:
        A function with signature x -> J(x), where J has shape (m, n)

    Example:
        ```python
        import jax.numpy as jnp
        from jax_newton.differentiation import jacobian

        f = lambda x: jnp.array([jnp.sin(x[0] * x[1]) - 0.5, x[0]**2 - x[1]**2])
        J = jacobian(f)(jnp.array([2.0, 3.0]))
        ```
    """
    return jax.jacfwd(fun)


def jvp_operator(fun: VectorFunction) -> JVPConstructor:
    """
    Matrix-free Jacobian-vector product of a vector function.

    Args:
        fun: Function with signature x -> f(x)

    Returns:
        A function with signature (x, v) -> J(x)*v
    """
    def jvp_fn(x: Array, v: Array) -> Array:
        """Compute J(x)*v without forming J."""
        return jax.jvp(fun, (x,), (v,))[1]

    return jvp_fn


def derivative(fun):
    """Derivative x -> f'(x) of a scalar function f: R -> R."""
    return jax.grad(fun)
