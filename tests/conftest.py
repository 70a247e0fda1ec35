"""Shared test configuration and problems."""

import jax
import jax.numpy as jnp
import pytest

# Convergence targets below 1e-8 need double precision
jax.config.update("jax_enable_x64", True)


@pytest.fixture
def trig_system():
    """
    Non-linear system: f(x) = (sin(x1*x2) - 1/2, x1^2 - x2^2)

    The root with x1 = x2 > 0 is x1 = x2 = sqrt(pi/6).

    Initial guess: (0.5, 0.8)
    """
    f = lambda x: jnp.array([jnp.sin(x[0] * x[1]) - 0.5, x[0]**2 - x[1]**2])
    jac = lambda x: jnp.array([
        [x[1] * jnp.cos(x[0] * x[1]), x[0] * jnp.cos(x[0] * x[1])],
        [2.0 * x[0], -2.0 * x[1]],
    ])
    x0 = jnp.array([0.5, 0.8])
    soln = jnp.full(2, jnp.sqrt(jnp.pi / 6))
    return f, jac, x0, soln
