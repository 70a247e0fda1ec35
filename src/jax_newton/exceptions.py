"""Exceptions raised by the Newton solvers."""


class NoSolutionInRange(ValueError):
    """
    Raised when the right-hand side of a singular linear system is not in
    the range (column space) of the matrix, so no Newton step exists.
    """
