import logging

import jax
import jax.numpy as jnp
from matplotlib import pyplot as plt

from jax_newton import solve_with_history, NewtonRaphson, PseudoInverse, setup_logging
from jax_newton.circuits import (
    incidence_matrix,
    current_sources,
    circuit_residual,
    circuit_jacobian,
    linear_solution,
)
from jax_newton.linsolvers import assert_in_range

jax.config.update("jax_enable_x64", True)


def main(Y=1.0, alpha=0.5, nsteps=10):
    """
    Solve for the node potentials of a network of nonlinear resistors,
    i = Y dv + alpha dv^3, driven by a unit current from node 0 to node 5.

    The Jacobian A^T diag(Y + 3 alpha (Av)^2) A is singular (potentials are
    defined up to a constant), so each Newton step uses the pseudo-inverse.

    Arguments:
        Y - Linear conductance (default 1.0)
        alpha - Cubic coefficient (default 0.5)
        nsteps - Number of Newton steps (default 10)
    """
    setup_logging(logging.INFO)

    A = incidence_matrix()
    b = current_sources(A.shape[1], source=0, sink=5)

    f = circuit_residual(A, b, Y=Y, alpha=alpha)
    jac = circuit_jacobian(A, Y=Y, alpha=alpha)

    # Start from the solution of the linear (alpha = 0) circuit
    v0 = linear_solution(A, b, Y=Y)
    print(f"Linear solution: {v0}")

    # A Newton step exists only if f(v) is in the range of J(v)
    assert_in_range(jac(v0), f(v0))

    method = NewtonRaphson(linsolver=PseudoInverse(check_range=True))
    v, fnorm = solve_with_history(f, v0, method=method, nsteps=nsteps, jac=jac, verbose=True)

    print(f"Nonlinear solution: {v[-1]}")

    fig, ax = plt.subplots()
    ax.semilogy(jnp.arange(len(fnorm)), jnp.maximum(fnorm, 1e-17), 'o-')
    ax.set_xlabel('Newton iteration')
    ax.set_ylabel(r'$\|f(v)\|$')
    ax.set_title('Nonlinear circuit: Newton convergence')
    plt.show()


if __name__ == "__main__":
    main()
