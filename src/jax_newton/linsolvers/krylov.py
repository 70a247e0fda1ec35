"""Matrix-free linear solvers based on Krylov subspaces."""

from typing import Union, Optional
from flax import nnx
from jax import Array
import jax.scipy.sparse.linalg as jax_sparse

from ..custom_types import LinearMap


class GMRES(nnx.Module):
    """
    Generalised Minimal Residual (GMRES).

    Dispatches to `jax.scipy.sparse.linalg.gmres`.
    Suitable for general non-symmetric Jacobians. Only the action of the
    Jacobian is needed, so Newton-Raphson pairs it with a Jacobian-vector
    product instead of a dense matrix.

    The inner tolerance bounds the accuracy of each Newton step. It must be
    well below the Newton tolerance, otherwise the outer iteration converges
    only linearly and stalls near `tol`. The Krylov space is restarted every
    min(20, n) iterations; `maxiter` counts restarts.

    Attributes:
        tol: Relative residual tolerance of each inner solve
        maxiter: Maximum number of restarts
    """

    matrix_free = True

    def __init__(self, tol: float = 1e-12, maxiter: int = 100):
        self.tol = tol
        self.maxiter = maxiter

    def __call__(
        self,
        A: Union[LinearMap, Array],
        b: Array,
        x0: Optional[Array] = None
    ) -> Array:
        """
        Solve A*x = b using GMRES.

        Args:
            A: Dense matrix or linear operator with signature x -> A*x
            b: Right-hand side vector
            x0: Initial guess vector

        Returns:
            Approximate solution x
        """
        solution, _ = jax_sparse.gmres(
            A, b, x0=x0, tol=self.tol, maxiter=self.maxiter
        )
        return solution


class CG(nnx.Module):
    """
    Conjugate Gradients (CG).

    Dispatches to `jax.scipy.sparse.linalg.cg`.
    Only suitable for symmetric positive (semi-)definite Jacobians. These arise
    when the residual is the gradient of a convex energy, as for the node
    potentials of a resistor network. Started from zero on a consistent
    singular system, the iterates stay in the range of A, so CG returns the
    minimum-norm solution like `PseudoInverse`.

    Attributes:
        tol: Relative residual tolerance of each inner solve
        maxiter: Maximum number of CG iterations per Newton step
    """

    matrix_free = True

    def __init__(self, tol: float = 1e-12, maxiter: int = 100):
        self.tol = tol
        self.maxiter = maxiter

    def __call__(
        self,
        A: Union[LinearMap, Array],
        b: Array,
        x0: Optional[Array] = None
    ) -> Array:
        """
        Solve A*x = b with conjugate gradients.

        Args:
            A: Dense matrix or linear operator with signature x -> A*x
            b: Right-hand side vector
            x0: Initial guess vector

        Returns:
            Approximate solution x
        """
        solution, _ = jax_sparse.cg(
            A, b, x0=x0, tol=self.tol, maxiter=self.maxiter
        )
        return solution
