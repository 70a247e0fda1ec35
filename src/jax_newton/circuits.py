"""
Nonlinear resistor networks.

A circuit is a graph with n nodes and m edges, described by its m x n
edge-node incidence matrix A. Row e of A has -1 at the tail node and +1 at
the head node of edge e, so A*v gives the voltage across each edge for node
potentials v, and A^T*i sums the edge currents i at each node.

Every edge is a nonlinear resistor with current-voltage law

$$ i = Y \\Delta v + \\alpha \\Delta v^3 $$

and current sources b inject current at the nodes. Kirchhoff's current law
gives the nonlinear system

$$ f(v) = A^T \\left( Y A v + \\alpha (A v)^3 \\right) - b = 0 $$

whose Jacobian $J(v) = A^T \\operatorname{diag}(Y + 3 \\alpha (A v)^2) A$ is
singular: adding a constant to every potential changes nothing. Newton steps
are therefore taken with a minimum-norm (pseudo-inverse) solve, which needs
the right-hand side to sum to zero across nodes.
"""

from typing import Callable

from jax import Array
import jax.numpy as jnp


def incidence_matrix() -> Array:
    """
    Incidence matrix of the example circuit: 6 nodes, 8 edges.

    Edges (tail -> head): 0->1, 0->2, 1->2, 1->3, 2->4, 3->4, 3->5, 4->5.

    Returns:
        Array of shape (8, 6)
    """
    return jnp.array([
        [-1,  1,  0,  0,  0,  0],
        [-1,  0,  1,  0,  0,  0],
        [ 0, -1,  1,  0,  0,  0],
        [ 0, -1,  0,  1,  0,  0],
        [ 0,  0, -1,  0,  1,  0],
        [ 0,  0,  0, -1,  1,  0],
        [ 0,  0,  0, -1,  0,  1],
        [ 0,  0,  0,  0, -1,  1],
    ], dtype=jnp.result_type(float))


def current_sources(
    n_nodes: int, source: int = 0, sink: int = -1, current: float = 1.0
) -> Array:
    """
    Node current injections for one current source.

    Current enters the network at `source` and leaves at `sink`, so the
    entries sum to zero and the circuit equations have a solution.

    Args:
        n_nodes: Number of nodes
        source: Node where current is injected
        sink: Node where current is extracted
        current: Source current

    Returns:
        Array of shape (n_nodes,)
    """
    b = jnp.zeros(n_nodes, dtype=jnp.result_type(float))
    return b.at[source].add(current).at[sink].add(-current)


def circuit_residual(
    A: Array, b: Array, Y: float = 1.0, alpha: float = 0.5
) -> Callable[[Array], Array]:
    """
    Residual of Kirchhoff's current law for a nonlinear resistor network.

    Residual: $f(v) = A^T (Y A v + \\alpha (A v)^3) - b$

    Args:
        A: Edge-node incidence matrix, shape (m, n)
        b: Node current injections, shape (n,)
        Y: Linear conductance of every edge
        alpha: Cubic coefficient of every edge

    Returns:
        A function with signature v -> f(v)
    """
    def residual(v: Array) -> Array:
        dv = A @ v
        return A.T @ (Y * dv + alpha * dv**3) - b

    return residual


def circuit_jacobian(
    A: Array, Y: float = 1.0, alpha: float = 0.5
) -> Callable[[Array], Array]:
    """
    Hand-derived Jacobian of `circuit_residual`.

    Jacobian: $J(v) = A^T \\operatorname{diag}(Y + 3 \\alpha (A v)^2) A$

    Returns:
        A function with signature v -> J(v), J of shape (n, n)
    """
    def jac(v: Array) -> Array:
        dv = A @ v
        return A.T @ ((Y + 3.0 * alpha * dv**2)[:, None] * A)

    return jac


def linear_solution(A: Array, b: Array, Y: float = 1.0) -> Array:
    """
    Minimum-norm solution of the linear circuit $Y A^T A v = b$.

    This is the alpha = 0 problem and a good starting point for Newton's
    method on the nonlinear one.
    """
    return jnp.linalg.pinv(Y * (A.T @ A)) @ b
