"""
JAX Newton

Newton's method for nonlinear root-finding written in JAX, in one and many
dimensions, with Jacobians from automatic differentiation.

Main components:
- rootfinders: Newton iterations (NewtonRaphson, ScalarNewton)
- linsolvers: Linear solvers for the Newton step, incl. pseudo-inverse
- differentiation: Forward-mode Jacobians and Jacobian-vector products
- circuits: Nonlinear resistor network example
"""

# Solver interfaces
from .solve import find_root, solve_with_history

# Root-finding algorithms
from .rootfinders import RootFinderProtocol, NewtonRaphson, ScalarNewton

# Linear solvers
from .linsolvers import (
    LinearSolverProtocol,
    DirectDense,
    PseudoInverse,
    GMRES,
    CG,
    range_residual,
    assert_in_range,
)

# Automatic differentiation
from .differentiation import jacobian, jvp_operator, derivative

from .exceptions import NoSolutionInRange
from .logging_config import setup_logging

__all__ = [
    # Solver interfaces
    "find_root",
    "solve_with_history",

    # Root-finding algorithms
    "RootFinderProtocol",
    "NewtonRaphson",
    "ScalarNewton",

    # Linear solvers
    "LinearSolverProtocol",
    "DirectDense",
    "PseudoInverse",
    "GMRES",
    "CG",
    "range_residual",
    "assert_in_range",

    # Automatic differentiation
    "jacobian",
    "jvp_operator",
    "derivative",

    # Errors and logging
    "NoSolutionInRange",
    "setup_logging",
]
