"""Root-finding algorithms for nonlinear equations."""

from .protocol import RootFinderProtocol
from .newtonraphson import NewtonRaphson
from .scalar import ScalarNewton


__all__ = [
    "RootFinderProtocol",
    "NewtonRaphson",
    "ScalarNewton",
]
