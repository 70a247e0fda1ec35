import jax
import jax.numpy as jnp
from matplotlib import pyplot as plt

from jax_newton import solve_with_history, jacobian, NewtonRaphson

jax.config.update("jax_enable_x64", True)


def f(x):
    """f(x) = (sin(x1*x2) - 1/2, x1^2 - x2^2)"""
    return jnp.array([jnp.sin(x[0] * x[1]) - 0.5, x[0]**2 - x[1]**2])


def f_jacobian(x):
    """Hand-derived Jacobian of f."""
    c = jnp.cos(x[0] * x[1])
    return jnp.array([
        [x[1] * c, x[0] * c],
        [2 * x[0], -2 * x[1]],
    ])


def main(x0=(0.5, 0.8), nsteps=10):
    """
    Solve f(x) = 0 for the two-dimensional system above and compare the
    iterates with the exact root x1 = x2 = sqrt(pi/6).

    Arguments:
        x0 - Initial guess (default (0.5, 0.8))
        nsteps - Number of Newton steps (default 10)
    """
    x0 = jnp.array(x0)

    # Automatic differentiation gives the same Jacobian as the hand-derived one
    x_test = jnp.array([2.0, 3.0])
    diff = jacobian(f)(x_test) - f_jacobian(x_test)
    print(f"max |J_autodiff - J_exact| at {x_test}: {float(jnp.max(jnp.abs(diff))):.2e}")

    method = NewtonRaphson()
    x, fnorm = solve_with_history(f, x0, method=method, nsteps=nsteps, verbose=True)

    exact = jnp.sqrt(jnp.pi / 6)
    error = jnp.abs(x - exact)

    fig, ax = plt.subplots()
    ax.semilogy(jnp.arange(len(x)), jnp.maximum(error[:, 0], 1e-17), 'o-', label='$x_1$')
    ax.semilogy(jnp.arange(len(x)), jnp.maximum(error[:, 1], 1e-17), 's--', label='$x_2$')
    ax.semilogy(jnp.arange(len(x)), jnp.maximum(fnorm, 1e-17), ':', label=r'$\|f(x)\|$')
    ax.legend()
    ax.set_xlabel('Newton iteration')
    ax.set_ylabel(r'$|x_k - \sqrt{\pi/6}|$')
    plt.show()


if __name__ == "__main__":
    main()
