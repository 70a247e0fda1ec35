"""Linear solvers used in Newton iterations."""

from .protocol import LinearSolverProtocol
from .direct import DirectDense, PseudoInverse, range_residual, assert_in_range
from .krylov import GMRES, CG


__all__ = [
    # Protocol
    "LinearSolverProtocol",

    # Direct solvers
    "DirectDense",
    "PseudoInverse",

    # Krylov methods
    "GMRES",
    "CG",

    # Range checks for singular systems
    "range_residual",
    "assert_in_range",
]
