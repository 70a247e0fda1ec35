import jax
import jax.numpy as jnp
from matplotlib import pyplot as plt

from jax_newton import solve_with_history

jax.config.update("jax_enable_x64", True)


def main(x0=1.0, nsteps=6):
    """
    Compute sqrt(2) as the root of f(x) = x^2 - 2 with Newton's method
    and plot the error against the iteration number.

    Arguments:
        x0 - Initial guess (default 1.0)
        nsteps - Number of Newton steps (default 6)
    """
    f = lambda x: x**2 - 2.0

    x, _ = solve_with_history(f, x0, nsteps=nsteps, verbose=True)

    # Number of correct digits roughly doubles at every step
    error = jnp.abs(x - jnp.sqrt(2.0))
    for k in range(len(x)):
        print(f"x_{k} = {float(x[k]):.16f}   error = {float(error[k]):.2e}")

    fig, ax = plt.subplots()
    ax.semilogy(jnp.arange(len(x)), jnp.maximum(error, 1e-17), 'o-')
    ax.set_xlabel('Newton iteration')
    ax.set_ylabel(r'$|x_k - \sqrt{2}|$')
    ax.set_title(r'Newton iteration for $x^2 = 2$')
    plt.show()


if __name__ == "__main__":
    main()
